"""
MAC Stage (encrypt-then-MAC)

Computes the HMAC tag over the encrypted body on encryption, and checks
it on decryption before the body is decrypted.

Key: the MAC-key region of the envelope key,
     envelope_key[cipher_key_length : 2 * cipher_key_length].
"""

from ..core.errors import AuthenticationError, InvariantViolationError
from ..utils.logger import EciesLogger
from ..utils.secure_buffer import SecretBuffer
from .context import EciesContext
from .cryptogram import Cryptogram

logger = EciesLogger.get_stage_logger("mac")

_VERIFIED_TOKEN = object()


class VerifiedBody:
    """
    Ciphertext body whose MAC tag has been verified.

    Only verify_mac can create one. It keeps its own copy of the body, so
    changes to the cryptogram after verification cannot reach decryption.
    """

    __slots__ = ("_body",)

    def __init__(self, body: bytes, token: object):
        if token is not _VERIFIED_TOKEN:
            raise TypeError("VerifiedBody can only be created by verify_mac")
        self._body = body

    @property
    def body(self) -> bytes:
        return self._body


def _mac_key(ctx: EciesContext, envelope_key: SecretBuffer) -> memoryview:
    start = ctx.cipher_key_length
    return envelope_key.view(start, start + ctx.cipher_key_length)


def _check_mac_length(ctx: EciesContext, cryptogram: Cryptogram, operation: str):
    if cryptogram.mac_length != ctx.mac_length:
        raise InvariantViolationError(
            f"MAC length expectation does not meet: field is {cryptogram.mac_length} bytes, "
            f"{ctx.mac_digest} produces {ctx.mac_length}",
            operation=operation,
        )


def store_mac_tag(ctx: EciesContext, envelope_key: SecretBuffer, cryptogram: Cryptogram):
    """
    Compute HMAC over the encrypted body and store it in the MAC field.

    Raises:
        PrimitiveError: If the HMAC computation fails
        InvariantViolationError: If the tag length differs from the MAC field size
    """
    _check_mac_length(ctx, cryptogram, "store_mac_tag")

    tag = ctx.provider.mac_compute(ctx.mac_algorithm, _mac_key(ctx, envelope_key), cryptogram.body_data)
    if len(tag) != cryptogram.mac_length:
        raise InvariantViolationError(
            f"MAC length expectation does not meet: got {len(tag)} bytes, "
            f"expected {cryptogram.mac_length}",
            operation="store_mac_tag",
        )

    cryptogram.write_mac(tag)
    logger.debug("MAC tag stored: %d bytes", len(tag))


def verify_mac(ctx: EciesContext, envelope_key: SecretBuffer, cryptogram: Cryptogram) -> VerifiedBody:
    """
    Recompute the HMAC over the stored body and compare it with the stored
    tag in constant time.

    Returns:
        VerifiedBody to pass to cipher_stage.decrypt_body

    Raises:
        AuthenticationError: If the tag does not match
        InvariantViolationError: If the MAC field size differs from the digest size
    """
    _check_mac_length(ctx, cryptogram, "verify_mac")

    body = bytes(cryptogram.body_data)
    if not ctx.provider.mac_verify(
        ctx.mac_algorithm, _mac_key(ctx, envelope_key), body, cryptogram.mac_data
    ):
        raise AuthenticationError("MAC tag verification failed", operation="verify_mac")

    logger.debug("MAC tag verified: %d bytes", cryptogram.mac_length)
    return VerifiedBody(body, _VERIFIED_TOKEN)
