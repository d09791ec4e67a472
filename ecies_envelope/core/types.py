"""
ECIES Core Types and Suite Registry

Defines the curves, symmetric ciphers and digests an ECIES context can be
configured with, and resolves their names to `cryptography` objects.

Names follow OpenSSL spelling ("secp256r1", "aes-128-cbc", "sha256") and
are matched case-insensitively.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Type

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.decrepit.ciphers import algorithms as decrepit_algorithms
from cryptography.hazmat.primitives.ciphers import algorithms

from .errors import InvalidArgumentError


# ============================================================================
# ELLIPTIC CURVES
# ============================================================================

_CURVES: Dict[str, Type[ec.EllipticCurve]] = {
    "secp224r1": ec.SECP224R1,
    "secp256r1": ec.SECP256R1,
    "prime256v1": ec.SECP256R1,  # X9.62 alias
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
    "secp256k1": ec.SECP256K1,
    "brainpoolp256r1": ec.BrainpoolP256R1,
    "brainpoolp384r1": ec.BrainpoolP384R1,
    "brainpoolp512r1": ec.BrainpoolP512R1,
}


def get_curve(name: str) -> ec.EllipticCurve:
    """
    Resolve a curve name to a `cryptography` curve instance.

    Raises:
        InvalidArgumentError: If the curve is not supported
    """
    try:
        return _CURVES[name.lower()]()
    except (KeyError, AttributeError):
        raise InvalidArgumentError(
            f"Unsupported curve: {name!r} (supported: {', '.join(supported_curves())})"
        )


def supported_curves() -> List[str]:
    return sorted(_CURVES)


def field_size_bytes(curve: ec.EllipticCurve) -> int:
    """Size of one field element (and of the ECDH shared secret) in bytes."""
    return (curve.key_size + 7) // 8


def compressed_point_length(curve: ec.EllipticCurve) -> int:
    """Compressed point size: 1 prefix byte + x-coordinate."""
    return 1 + field_size_bytes(curve)


# ============================================================================
# DIGESTS
# ============================================================================

_DIGESTS: Dict[str, Type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
}


def _digest_key(name: str) -> str:
    # Dashes and underscores are ignored, so "sha_256" resolves to sha256
    return name.lower().replace("-", "").replace("_", "")


_DIGEST_LOOKUP: Dict[str, Type[hashes.HashAlgorithm]] = {
    _digest_key(name): algorithm for name, algorithm in _DIGESTS.items()
}


def get_digest(name: str) -> hashes.HashAlgorithm:
    """
    Resolve a digest name to a `cryptography` hash algorithm instance.

    Raises:
        InvalidArgumentError: If the digest is not supported
    """
    try:
        return _DIGEST_LOOKUP[_digest_key(name)]()
    except (KeyError, AttributeError):
        raise InvalidArgumentError(
            f"Unsupported digest: {name!r} (supported: {', '.join(supported_digests())})"
        )


def supported_digests() -> List[str]:
    return sorted(_DIGESTS)


# ============================================================================
# SYMMETRIC CIPHERS
# ============================================================================


class CipherMode(Enum):
    """Block cipher modes of operation"""

    CBC = "cbc"
    CTR = "ctr"
    CFB = "cfb"
    OFB = "ofb"


@dataclass(frozen=True)
class CipherSpec:
    """
    Symmetric cipher description.

    Attributes:
        name: OpenSSL-style name (e.g. "aes-128-cbc")
        algorithm: `cryptography` block cipher class
        key_length: Key size in bytes
        mode: Mode of operation
        block_size: Output granularity in bytes (1 for stream modes)
        iv_length: IV / nonce size in bytes
    """

    name: str
    algorithm: Type[algorithms.BlockCipherAlgorithm]
    key_length: int
    mode: CipherMode
    block_size: int
    iv_length: int = 16

    @property
    def padded(self) -> bool:
        """CBC output is PKCS#7 padded; stream modes are not."""
        return self.mode is CipherMode.CBC

    def ciphertext_length(self, plaintext_length: int) -> int:
        """
        Exact ciphertext length for a plaintext of `plaintext_length` bytes.

        PKCS#7 always appends 1..block_size bytes, so a block-aligned
        plaintext gains a whole padding block.
        """
        if not self.padded:
            return plaintext_length
        return plaintext_length + self.block_size - (plaintext_length % self.block_size)


def _build_cipher_registry() -> Dict[str, CipherSpec]:
    registry = {}
    families = (
        ("aes", algorithms.AES, (128, 192, 256), tuple(CipherMode)),
        ("camellia", decrepit_algorithms.Camellia, (128, 192, 256), (CipherMode.CBC,)),
    )
    for family, algorithm, key_bits, modes in families:
        for bits in key_bits:
            for mode in modes:
                name = f"{family}-{bits}-{mode.value}"
                registry[name] = CipherSpec(
                    name=name,
                    algorithm=algorithm,
                    key_length=bits // 8,
                    mode=mode,
                    block_size=16 if mode is CipherMode.CBC else 1,
                )
    return registry


_CIPHERS: Dict[str, CipherSpec] = _build_cipher_registry()


def get_cipher_spec(name: str) -> CipherSpec:
    """
    Resolve a cipher name to its CipherSpec.

    Raises:
        InvalidArgumentError: If the cipher is not supported
    """
    try:
        return _CIPHERS[name.lower()]
    except (KeyError, AttributeError):
        raise InvalidArgumentError(
            f"Unsupported cipher: {name!r} (supported: {', '.join(supported_ciphers())})"
        )


def supported_ciphers() -> List[str]:
    return sorted(_CIPHERS)
