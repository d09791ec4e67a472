"""
ECIES Context

Immutable configuration for ECIES encryption and decryption: the
recipient key pair, the cipher suite, and the sizes derived from them.

The key pair is borrowed. The context keeps references to the caller's key
objects and never copies or serializes the private key.

Derived sizes:
    cipher_key_length          symmetric key size (bytes)
    cipher_block_size          cipher output granularity (bytes)
    mac_length                 MAC digest size (bytes)
    kdf_output_length          KDF digest size = envelope key size (bytes)
    ephemeral_key_octet_length compressed point size on the recipient curve

Usage:
    ctx = EciesContext.for_recipient(recipient_public_key)          # encrypt only
    ctx = EciesContext.from_private_key(recipient_private_key)      # encrypt + decrypt
    ctx384 = ctx.reconfigure(cipher="aes-256-cbc", kdf_digest="sha512")
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)

from ..config import ECIES_CONSTANTS, ECIES_DEFAULTS
from ..core.errors import InvalidArgumentError
from ..core.provider import DEFAULT_PROVIDER, CryptoProvider
from ..core.types import (
    CipherSpec,
    compressed_point_length,
    get_cipher_spec,
    get_digest,
)


@dataclass(frozen=True)
class EciesContext:
    """
    ECIES configuration bundle.

    Attributes:
        public_key: Recipient public key (required)
        private_key: Recipient private key (required for decryption only)
        cipher: Symmetric cipher name (e.g. "aes-128-cbc")
        mac_digest: HMAC digest name (e.g. "sha256")
        kdf_digest: KDF2 digest name (e.g. "sha256")
        kdf_shared_info: Optional SharedInfo bytes mixed into KDF2
        provider: Primitives provider
    """

    public_key: EllipticCurvePublicKey
    private_key: Optional[EllipticCurvePrivateKey] = field(default=None, repr=False)
    cipher: str = ECIES_DEFAULTS.CIPHER
    mac_digest: str = ECIES_DEFAULTS.MAC_DIGEST
    kdf_digest: str = ECIES_DEFAULTS.KDF_DIGEST
    kdf_shared_info: bytes = field(default=b"", repr=False)
    provider: CryptoProvider = field(default=DEFAULT_PROVIDER, repr=False, compare=False)

    # Derived (recomputed by __post_init__, including after reconfigure())
    curve: ec.EllipticCurve = field(init=False, repr=False, compare=False)
    cipher_spec: CipherSpec = field(init=False, repr=False, compare=False)
    mac_algorithm: hashes.HashAlgorithm = field(init=False, repr=False, compare=False)
    kdf_algorithm: hashes.HashAlgorithm = field(init=False, repr=False, compare=False)
    cipher_key_length: int = field(init=False)
    cipher_block_size: int = field(init=False)
    mac_length: int = field(init=False)
    kdf_output_length: int = field(init=False)
    ephemeral_key_octet_length: int = field(init=False)

    def __post_init__(self):
        if not isinstance(self.public_key, EllipticCurvePublicKey):
            raise InvalidArgumentError(
                f"Recipient public key must be an EC public key, got {type(self.public_key).__name__}",
                operation="EciesContext",
            )

        if self.private_key is not None:
            if not isinstance(self.private_key, EllipticCurvePrivateKey):
                raise InvalidArgumentError(
                    f"Recipient private key must be an EC private key, got {type(self.private_key).__name__}",
                    operation="EciesContext",
                )
            if self.private_key.public_key().public_numbers() != self.public_key.public_numbers():
                raise InvalidArgumentError(
                    "Recipient private key does not match the public key",
                    operation="EciesContext",
                )

        if not isinstance(self.kdf_shared_info, bytes):
            raise InvalidArgumentError("kdf_shared_info must be bytes", operation="EciesContext")

        if not isinstance(self.provider, CryptoProvider):
            raise InvalidArgumentError(
                f"provider must be a CryptoProvider, got {type(self.provider).__name__}",
                operation="EciesContext",
            )

        cipher_spec = get_cipher_spec(self.cipher)
        mac_algorithm = get_digest(self.mac_digest)
        kdf_algorithm = get_digest(self.kdf_digest)
        for label, algorithm in (("MAC", mac_algorithm), ("KDF", kdf_algorithm)):
            if algorithm.digest_size > ECIES_CONSTANTS.MAX_MD_SIZE:
                raise InvalidArgumentError(
                    f"{label} digest size {algorithm.digest_size} exceeds {ECIES_CONSTANTS.MAX_MD_SIZE}",
                    operation="EciesContext",
                )
        curve = self.public_key.curve

        derived = {
            "curve": curve,
            "cipher_spec": cipher_spec,
            "mac_algorithm": mac_algorithm,
            "kdf_algorithm": kdf_algorithm,
            "cipher_key_length": cipher_spec.key_length,
            "cipher_block_size": cipher_spec.block_size,
            "mac_length": mac_algorithm.digest_size,
            "kdf_output_length": kdf_algorithm.digest_size,
            "ephemeral_key_octet_length": compressed_point_length(curve),
        }
        for name, value in derived.items():
            object.__setattr__(self, name, value)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def for_recipient(cls, public_key: EllipticCurvePublicKey, **suite) -> "EciesContext":
        """Encrypt-only context for a recipient public key."""
        return cls(public_key=public_key, **suite)

    @classmethod
    def from_private_key(cls, private_key: EllipticCurvePrivateKey, **suite) -> "EciesContext":
        """Context holding the full recipient key pair (encrypt and decrypt)."""
        if not isinstance(private_key, EllipticCurvePrivateKey):
            raise InvalidArgumentError(
                f"Recipient private key must be an EC private key, got {type(private_key).__name__}",
                operation="EciesContext",
            )
        return cls(public_key=private_key.public_key(), private_key=private_key, **suite)

    def reconfigure(self, **changes) -> "EciesContext":
        """
        Return a new context with `changes` applied and all derived sizes
        recomputed. The original context is left untouched.
        """
        if "private_key" in changes and "public_key" not in changes and changes["private_key"] is not None:
            changes["public_key"] = changes["private_key"].public_key()
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    @property
    def can_decrypt(self) -> bool:
        return self.private_key is not None

    @property
    def has_sufficient_key_material(self) -> bool:
        """The KDF output covers a cipher-key region and a MAC-key region without overlap."""
        return self.cipher_key_length * 2 <= self.kdf_output_length

    @property
    def suite_label(self) -> str:
        return f"{self.curve.name}/{self.cipher_spec.name}/{self.mac_digest.lower()}/{self.kdf_digest.lower()}"

    def body_length_for(self, plaintext_length: int) -> int:
        """Body field size reserved for a plaintext of `plaintext_length` bytes."""
        return self.cipher_spec.ciphertext_length(plaintext_length)

    def cryptogram_length_for(self, plaintext_length: int) -> int:
        """Total serialized cryptogram size for a plaintext of `plaintext_length` bytes."""
        return self.ephemeral_key_octet_length + self.body_length_for(plaintext_length) + self.mac_length
