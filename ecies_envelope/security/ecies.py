"""
ECIES (Elliptic Curve Integrated Encryption Scheme) Implementation.

Implements ECIES encryption/decryption according to:
- SEC 1 v2.0 Section 5.1 (Elliptic Curve Integrated Encryption Scheme)
- ANSI X9.63 / ISO 18033-2 KDF2 key derivation
- RFC 2104 HMAC, encrypt-then-MAC

Encryption Flow:
    1. Generate ephemeral key pair on the recipient's curve
    2. ECDH with the recipient public key
    3. KDF2 -> envelope key = cipher key || MAC key
    4. Encrypt plaintext with the cipher key (zero IV, PKCS#7 for CBC)
    5. HMAC the ciphertext with the MAC key

Decryption Flow:
    1. Rebuild the ephemeral public key from the cryptogram
    2. ECDH with the recipient private key, KDF2 -> envelope key
    3. Verify the HMAC tag (constant time) -- nothing is decrypted before this
    4. Decrypt the body

Output Format:
    ephemeral_public_key (compressed point) || ciphertext || mac_tag
"""

import time
from typing import Optional, Union

from ..config import ECIES_CONSTANTS
from ..core.errors import AuthenticationError, EciesError, InvalidArgumentError
from ..utils.logger import EciesLogger
from ..utils.metrics import get_metrics_collector
from .cipher_stage import decrypt_body, store_cipher_body
from .context import EciesContext
from .cryptogram import Cryptogram
from .envelope import prepare_envelope_key, restore_envelope_key
from .mac_stage import store_mac_tag, verify_mac

BytesLike = Union[bytes, bytearray, memoryview]

logger = EciesLogger.get_logger(ECIES_CONSTANTS.LOGGER_NAME)


# ============================================================================
# VALIDATION
# ============================================================================


def _check_context(ctx: Optional[EciesContext], operation: str):
    if ctx is None:
        raise InvalidArgumentError("Invalid arguments: context is required", operation=operation)
    if not isinstance(ctx, EciesContext):
        raise InvalidArgumentError(
            f"Invalid arguments: expected EciesContext, got {type(ctx).__name__}",
            operation=operation,
        )


def _check_key_material(ctx: EciesContext, operation: str):
    """The envelope key must hold a cipher key and a MAC key without overlap."""
    if not ctx.has_sufficient_key_material:
        raise InvalidArgumentError(
            "The key derivation method will not produce enough envelope key material "
            f"for the chosen ciphers ({ctx.kdf_digest} yields {ctx.kdf_output_length} bytes, "
            f"{ctx.cipher} needs {2 * ctx.cipher_key_length})",
            operation=operation,
        )


def _check_block_size(ctx: EciesContext, operation: str):
    block_size = ctx.cipher_block_size
    if block_size == 0 or block_size > ECIES_CONSTANTS.MAX_BLOCK_LENGTH:
        raise InvalidArgumentError(f"Derived block size is incorrect: {block_size}", operation=operation)


def _check_plaintext(plaintext, operation: str):
    if plaintext is None:
        raise InvalidArgumentError("Invalid arguments: plaintext is required", operation=operation)
    if isinstance(plaintext, str):
        raise InvalidArgumentError(
            "Invalid arguments: encode text to bytes before encrypting", operation=operation
        )
    if not isinstance(plaintext, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(
            f"Invalid arguments: plaintext must be bytes, got {type(plaintext).__name__}",
            operation=operation,
        )
    if len(plaintext) == 0:
        raise InvalidArgumentError("Invalid arguments: plaintext is empty", operation=operation)
    if len(plaintext) > ECIES_CONSTANTS.MAX_PLAINTEXT_LENGTH:
        raise InvalidArgumentError(
            f"Plaintext too long: {len(plaintext)} bytes (max {ECIES_CONSTANTS.MAX_PLAINTEXT_LENGTH})",
            operation=operation,
        )


def _record(operation: str, ctx, success: bool, payload_bytes: int, started: float,
            error: Optional[EciesError] = None):
    suite = ctx.suite_label if isinstance(ctx, EciesContext) else "unknown"
    get_metrics_collector().record_operation(
        operation=operation,
        suite=suite,
        success=success,
        payload_bytes=payload_bytes,
        latency_ms=(time.perf_counter() - started) * 1000,
        error_kind=error.kind.value if error is not None else None,
    )


def _payload_size(data) -> int:
    if isinstance(data, (bytes, bytearray, memoryview, Cryptogram)):
        return len(data)
    return 0


# ============================================================================
# ENCRYPTION
# ============================================================================


def _encrypt(ctx: EciesContext, plaintext: BytesLike) -> Cryptogram:
    _check_context(ctx, "ecies_encrypt")
    _check_plaintext(plaintext, "ecies_encrypt")
    _check_block_size(ctx, "ecies_encrypt")
    _check_key_material(ctx, "ecies_encrypt")

    cryptogram = Cryptogram.allocate(
        ctx.ephemeral_key_octet_length,
        ctx.mac_length,
        ctx.body_length_for(len(plaintext)),
    )

    try:
        with prepare_envelope_key(ctx, cryptogram) as envelope_key:
            store_cipher_body(ctx, envelope_key, plaintext, cryptogram)
            store_mac_tag(ctx, envelope_key, cryptogram)
    except BaseException:
        cryptogram.release()
        raise

    return cryptogram


def ecies_encrypt(ctx: EciesContext, plaintext: BytesLike) -> Cryptogram:
    """
    Encrypt `plaintext` to the context's recipient.

    Args:
        ctx: EciesContext (public key is enough)
        plaintext: Non-empty data to encrypt

    Returns:
        Cryptogram: ephemeral public key, ciphertext body and MAC tag

    Raises:
        InvalidArgumentError: Missing/empty input or insufficient KDF material
        ResourceExhaustionError: Allocation failure
        PrimitiveError: Key agreement, KDF, cipher or MAC failure
        InvariantViolationError: Internal size check failed

    Example:
        >>> from cryptography.hazmat.primitives.asymmetric import ec
        >>> recipient_key = ec.generate_private_key(ec.SECP256R1())
        >>> ctx = EciesContext.from_private_key(recipient_key)
        >>> cryptogram = ecies_encrypt(ctx, b"hello")
        >>> cryptogram.key_length, cryptogram.body_length, cryptogram.mac_length
        (33, 16, 32)
    """
    started = time.perf_counter()
    try:
        cryptogram = _encrypt(ctx, plaintext)
    except EciesError as e:
        logger.debug("Encryption failed: %s", e)
        _record("encrypt", ctx, False, _payload_size(plaintext), started, e)
        raise

    _record("encrypt", ctx, True, len(plaintext), started)
    logger.debug("Encrypted %d bytes into a %d-byte cryptogram (%s)",
                 len(plaintext), len(cryptogram), ctx.suite_label)
    return cryptogram


def ecies_encrypt_bytes(ctx: EciesContext, plaintext: BytesLike) -> bytes:
    """Encrypt and return the serialized cryptogram."""
    return ecies_encrypt(ctx, plaintext).to_bytes()


# ============================================================================
# DECRYPTION
# ============================================================================


def _decrypt(ctx: EciesContext, cryptogram: Union[Cryptogram, BytesLike]) -> bytes:
    _check_context(ctx, "ecies_decrypt")
    if cryptogram is None:
        raise InvalidArgumentError("Invalid arguments: cryptogram is required", operation="ecies_decrypt")

    _check_key_material(ctx, "ecies_decrypt")

    if not ctx.can_decrypt:
        raise InvalidArgumentError(
            "Decryption requires a context holding the recipient private key",
            operation="ecies_decrypt",
        )

    if not isinstance(cryptogram, Cryptogram):
        cryptogram = Cryptogram.from_bytes(cryptogram, ctx.ephemeral_key_octet_length, ctx.mac_length)

    if cryptogram.key_length != ctx.ephemeral_key_octet_length or cryptogram.mac_length != ctx.mac_length:
        raise InvalidArgumentError(
            f"Cryptogram layout ({cryptogram.key_length}/{cryptogram.mac_length}) does not match "
            f"the context ({ctx.ephemeral_key_octet_length}/{ctx.mac_length})",
            operation="ecies_decrypt",
        )
    if cryptogram.body_length == 0:
        raise InvalidArgumentError("Invalid arguments: cryptogram body is empty", operation="ecies_decrypt")

    with restore_envelope_key(ctx, cryptogram) as envelope_key:
        verified = verify_mac(ctx, envelope_key, cryptogram)
        return decrypt_body(ctx, envelope_key, verified)


def ecies_decrypt(ctx: EciesContext, cryptogram: Union[Cryptogram, BytesLike]) -> bytes:
    """
    Authenticate and decrypt a cryptogram.

    The MAC tag is verified before any part of the body is decrypted; an
    unauthenticated cryptogram never yields plaintext.

    Args:
        ctx: EciesContext holding the recipient private key
        cryptogram: Cryptogram or its serialized bytes

    Returns:
        bytes: Plaintext (its length is the plaintext length)

    Raises:
        InvalidArgumentError: Missing input, no private key, malformed layout
            or insufficient KDF material
        KeyReconstructionError: The ephemeral key field is not a valid point
        AuthenticationError: MAC tag mismatch
        DecryptionError: Cipher finalization failed
    """
    started = time.perf_counter()
    try:
        plaintext = _decrypt(ctx, cryptogram)
    except AuthenticationError as e:
        logger.warning("Cryptogram rejected: %s", e)
        _record("decrypt", ctx, False, _payload_size(cryptogram), started, e)
        raise
    except EciesError as e:
        logger.debug("Decryption failed: %s", e)
        _record("decrypt", ctx, False, _payload_size(cryptogram), started, e)
        raise

    _record("decrypt", ctx, True, _payload_size(cryptogram), started)
    logger.debug("Decrypted %d bytes (%s)", len(plaintext), ctx.suite_label)
    return plaintext


def ecies_decrypt_bytes(ctx: EciesContext, data: BytesLike) -> bytes:
    """Decrypt a serialized cryptogram."""
    return ecies_decrypt(ctx, data)


# ============================================================================
# CLASS INTERFACE
# ============================================================================


class EciesCipher:
    """
    ECIES bound to one context.

    Example:
        >>> from cryptography.hazmat.primitives.asymmetric import ec
        >>> recipient_key = ec.generate_private_key(ec.SECP256R1())
        >>> cipher = EciesCipher(EciesContext.from_private_key(recipient_key))
        >>> cipher.decrypt(cipher.encrypt(b"secret"))
        b'secret'
    """

    def __init__(self, context: EciesContext):
        _check_context(context, "EciesCipher")
        self.context = context

    @classmethod
    def for_recipient(cls, public_key, **suite) -> "EciesCipher":
        return cls(EciesContext.for_recipient(public_key, **suite))

    @classmethod
    def from_private_key(cls, private_key, **suite) -> "EciesCipher":
        return cls(EciesContext.from_private_key(private_key, **suite))

    def encrypt(self, plaintext: BytesLike) -> bytes:
        return ecies_encrypt_bytes(self.context, plaintext)

    def decrypt(self, data: Union[Cryptogram, BytesLike]) -> bytes:
        return ecies_decrypt(self.context, data)

    def parse(self, data: BytesLike) -> Cryptogram:
        """Split serialized bytes into a Cryptogram using this context's field sizes."""
        return Cryptogram.from_bytes(data, self.context.ephemeral_key_octet_length, self.context.mac_length)
