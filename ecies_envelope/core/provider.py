"""
Cryptographic Primitives Provider

The ECIES core never calls `cryptography` directly; it goes through a
CryptoProvider. The provider is the seam between the ECIES protocol logic
and the primitives library:

- generate_ephemeral_keypair / compute_shared_secret (ECDH, NIST SP 800-56A)
- derive_key (KDF2)
- symmetric_encrypt / symmetric_decrypt (block cipher + finalize)
- mac_compute / mac_verify (HMAC, RFC 2104)
- encode_public_key / decode_public_key (compressed points)

DefaultCryptoProvider implements it with `cryptography` (OpenSSL).
Each call builds its own cipher/HMAC/hash objects, so a provider instance
is stateless and can be shared between threads.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)
from cryptography.hazmat.decrepit.ciphers import modes as decrepit_modes
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from ..utils.secure_buffer import SecretBuffer
from .errors import DecryptionError, InvariantViolationError, PrimitiveError
from .kdf import kdf2
from .primitives import decode_public_key_compressed, encode_public_key_compressed
from .types import CipherMode, CipherSpec, field_size_bytes

BytesLike = Union[bytes, bytearray, memoryview]


class CryptoProvider(ABC):
    """
    Abstract interface for the primitives the ECIES core depends on.

    Implementations: DefaultCryptoProvider
    """

    @abstractmethod
    def generate_ephemeral_keypair(self, curve: ec.EllipticCurve) -> EllipticCurvePrivateKey:
        """
        Generate a fresh key pair on `curve`.

        Raises:
            PrimitiveError: If key generation fails
        """
        pass

    @abstractmethod
    def compute_shared_secret(
        self, private_key: EllipticCurvePrivateKey, public_key: EllipticCurvePublicKey
    ) -> SecretBuffer:
        """
        ECDH key agreement.

        Returns:
            SecretBuffer holding the x-coordinate of the shared point

        Raises:
            PrimitiveError: If the key agreement fails
        """
        pass

    @abstractmethod
    def derive_key(
        self,
        secret: BytesLike,
        length: int,
        shared_info: BytesLike = b"",
        algorithm: Optional[hashes.HashAlgorithm] = None,
    ) -> SecretBuffer:
        """Stretch `secret` into `length` bytes of key material."""
        pass

    @abstractmethod
    def symmetric_encrypt(
        self, cipher: CipherSpec, key: BytesLike, iv: BytesLike, data: BytesLike
    ) -> bytes:
        """Encrypt and finalize (including padding) `data`."""
        pass

    @abstractmethod
    def symmetric_decrypt(
        self, cipher: CipherSpec, key: BytesLike, iv: BytesLike, data: BytesLike
    ) -> bytes:
        """
        Decrypt and finalize (including unpadding) `data`.

        Raises:
            DecryptionError: If finalization fails (e.g. bad padding)
        """
        pass

    @abstractmethod
    def mac_compute(
        self, algorithm: hashes.HashAlgorithm, key: BytesLike, data: BytesLike
    ) -> bytes:
        """Compute HMAC(key, data)."""
        pass

    @abstractmethod
    def mac_verify(
        self, algorithm: hashes.HashAlgorithm, key: BytesLike, data: BytesLike, tag: BytesLike
    ) -> bool:
        """
        Verify an HMAC tag in constant time.

        Returns:
            True if `tag` matches exactly (same length and bytes), False otherwise
        """
        pass

    def encode_public_key(self, public_key: EllipticCurvePublicKey) -> bytes:
        return encode_public_key_compressed(public_key)

    def decode_public_key(self, curve: ec.EllipticCurve, octets: BytesLike) -> EllipticCurvePublicKey:
        return decode_public_key_compressed(curve, octets)


class DefaultCryptoProvider(CryptoProvider):
    """CryptoProvider backed by the `cryptography` package."""

    def generate_ephemeral_keypair(self, curve: ec.EllipticCurve) -> EllipticCurvePrivateKey:
        try:
            return ec.generate_private_key(curve)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise PrimitiveError(
                "Failed to generate ephemeral key", operation="generate_ephemeral_keypair", cause=e
            ) from e

    def compute_shared_secret(
        self, private_key: EllipticCurvePrivateKey, public_key: EllipticCurvePublicKey
    ) -> SecretBuffer:
        try:
            shared = private_key.exchange(ec.ECDH(), public_key)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise PrimitiveError(
                "An error occurred while computing the ECDH shared secret",
                operation="compute_shared_secret",
                cause=e,
            ) from e

        # `exchange` returns immutable bytes; the SecretBuffer copy is the one we wipe
        secret = SecretBuffer.from_bytes(shared)
        del shared

        expected = field_size_bytes(private_key.curve)
        if len(secret) != expected:
            secret.release()
            raise InvariantViolationError(
                f"ECDH produced {len(secret)} bytes, expected {expected}",
                operation="compute_shared_secret",
            )
        return secret

    def derive_key(
        self,
        secret: BytesLike,
        length: int,
        shared_info: BytesLike = b"",
        algorithm: Optional[hashes.HashAlgorithm] = None,
    ) -> SecretBuffer:
        return kdf2(secret, length, shared_info, algorithm)

    @staticmethod
    def _build_cipher(cipher: CipherSpec, key: BytesLike, iv: BytesLike) -> Cipher:
        mode_classes = {
            CipherMode.CBC: modes.CBC,
            CipherMode.CTR: modes.CTR,
            CipherMode.CFB: decrepit_modes.CFB,
            CipherMode.OFB: decrepit_modes.OFB,
        }
        return Cipher(cipher.algorithm(key), mode_classes[cipher.mode](iv))

    def symmetric_encrypt(
        self, cipher: CipherSpec, key: BytesLike, iv: BytesLike, data: BytesLike
    ) -> bytes:
        try:
            data = bytes(data)
            if cipher.padded:
                padder = padding.PKCS7(cipher.algorithm.block_size).padder()
                data = padder.update(data) + padder.finalize()
            encryptor = self._build_cipher(cipher, key, iv).encryptor()
            return encryptor.update(data) + encryptor.finalize()
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise PrimitiveError(
                "Error while trying to secure the data using the symmetric cipher",
                operation="symmetric_encrypt",
                cause=e,
            ) from e

    def symmetric_decrypt(
        self, cipher: CipherSpec, key: BytesLike, iv: BytesLike, data: BytesLike
    ) -> bytes:
        try:
            decryptor = self._build_cipher(cipher, key, iv).decryptor()
            plaintext = decryptor.update(data) + decryptor.finalize()
            if cipher.padded:
                unpadder = padding.PKCS7(cipher.algorithm.block_size).unpadder()
                plaintext = unpadder.update(plaintext) + unpadder.finalize()
            return plaintext
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise DecryptionError(
                "Unable to decrypt the data using the chosen symmetric cipher",
                operation="symmetric_decrypt",
                cause=e,
            ) from e

    def mac_compute(
        self, algorithm: hashes.HashAlgorithm, key: BytesLike, data: BytesLike
    ) -> bytes:
        try:
            h = hmac.HMAC(key, algorithm)
            h.update(data)
            return h.finalize()
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise PrimitiveError("Unable to generate tag", operation="mac_compute", cause=e) from e

    def mac_verify(
        self, algorithm: hashes.HashAlgorithm, key: BytesLike, data: BytesLike, tag: BytesLike
    ) -> bool:
        try:
            h = hmac.HMAC(key, algorithm)
            h.update(data)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise PrimitiveError("Unable to generate tag", operation="mac_verify", cause=e) from e

        # HMAC.verify compares in constant time and rejects length mismatches
        try:
            h.verify(bytes(tag))
        except InvalidSignature:
            return False
        return True


DEFAULT_PROVIDER = DefaultCryptoProvider()
