"""
Symmetric Cipher Stage

Encrypts the plaintext into the cryptogram body, and decrypts an
authenticated body back into plaintext.

Key: the cipher-key region of the envelope key.
IV:  all zero bytes. Every message uses a fresh ephemeral key, so each
     envelope key, and with it each (key, IV) pair, is used once.
"""

from ..config import ECIES_CONSTANTS
from ..core.errors import InvalidArgumentError, InvariantViolationError
from ..utils.logger import EciesLogger
from ..utils.secure_buffer import SecretBuffer
from .context import EciesContext
from .cryptogram import Cryptogram
from .mac_stage import VerifiedBody

logger = EciesLogger.get_stage_logger("cipher")


def _zero_iv(ctx: EciesContext) -> bytes:
    iv_length = ctx.cipher_spec.iv_length
    if iv_length > ECIES_CONSTANTS.MAX_IV_LENGTH:
        raise InvariantViolationError(
            f"Cipher IV length {iv_length} exceeds {ECIES_CONSTANTS.MAX_IV_LENGTH}",
            operation="cipher_stage",
        )
    return bytes(iv_length)


def _cipher_key(ctx: EciesContext, envelope_key: SecretBuffer) -> memoryview:
    return envelope_key.view(0, ctx.cipher_key_length)


def store_cipher_body(
    ctx: EciesContext,
    envelope_key: SecretBuffer,
    plaintext: bytes,
    cryptogram: Cryptogram,
) -> int:
    """
    Encrypt `plaintext` (with padding) into the cryptogram body field.

    Returns:
        Number of ciphertext bytes written

    Raises:
        PrimitiveError: If the cipher fails
        InvariantViolationError: If the ciphertext does not exactly fill the
            reserved body capacity. Nothing is written in that case.
    """
    ciphertext = ctx.provider.symmetric_encrypt(
        ctx.cipher_spec, _cipher_key(ctx, envelope_key), _zero_iv(ctx), plaintext
    )

    capacity = cryptogram.body_length
    if len(ciphertext) > capacity:
        raise InvariantViolationError(
            f"The symmetric cipher overflowed: {len(ciphertext)} bytes for a "
            f"{capacity}-byte body",
            operation="store_cipher_body",
        )
    if len(ciphertext) < capacity:
        raise InvariantViolationError(
            f"The symmetric cipher produced {len(ciphertext)} bytes, "
            f"{capacity} bytes were reserved",
            operation="store_cipher_body",
        )

    cryptogram.write_body(ciphertext)
    logger.debug("Body encrypted with %s: %d bytes", ctx.cipher_spec.name, len(ciphertext))
    return len(ciphertext)


def decrypt_body(ctx: EciesContext, envelope_key: SecretBuffer, verified: VerifiedBody) -> bytes:
    """
    Decrypt an authenticated body.

    Only accepts the VerifiedBody returned by mac_stage.verify_mac, so the
    body cannot be decrypted before its tag has been checked.

    Returns:
        Plaintext (shorter than the body when padding was removed)

    Raises:
        InvalidArgumentError: If `verified` is not a VerifiedBody
        DecryptionError: If the cipher cannot finalize (e.g. bad padding)
    """
    if not isinstance(verified, VerifiedBody):
        raise InvalidArgumentError(
            "decrypt_body requires the VerifiedBody returned by verify_mac",
            operation="decrypt_body",
        )

    plaintext = ctx.provider.symmetric_decrypt(
        ctx.cipher_spec, _cipher_key(ctx, envelope_key), _zero_iv(ctx), verified.body
    )
    logger.debug(
        "Body decrypted with %s: %d -> %d bytes",
        ctx.cipher_spec.name,
        len(verified.body),
        len(plaintext),
    )
    return plaintext
