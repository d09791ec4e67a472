"""
Envelope Key Derivation

Produces the per-message envelope key:

    Encrypt: ephemeral key pair (fresh) + recipient public key  -> ECDH -> KDF2
    Decrypt: recipient private key + ephemeral public key (from
             the cryptogram key field)                          -> ECDH -> KDF2

KDF2 SharedInfo is the compressed ephemeral public key followed by the
context's kdf_shared_info (SEC 1 section 5.1). The key field is therefore
bound to the envelope key: a point with the same x-coordinate but a
different encoding (the 0x02/0x03 prefix flip) derives a different MAC key
and fails verification.

Envelope key layout (kdf_output_length bytes):
    [0, cipher_key_length)                      symmetric cipher key
    [cipher_key_length, 2 * cipher_key_length)  MAC key
"""

from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)

from ..core.errors import InvalidArgumentError, InvariantViolationError
from ..utils.logger import EciesLogger
from ..utils.secure_buffer import SecretBuffer
from .context import EciesContext
from .cryptogram import Cryptogram

logger = EciesLogger.get_stage_logger("envelope")


def derive_envelope_key(
    ctx: EciesContext,
    private_key: EllipticCurvePrivateKey,
    public_key: EllipticCurvePublicKey,
    ephemeral_octets: bytes,
) -> SecretBuffer:
    """
    ECDH between `private_key` and `public_key`, stretched with KDF2.

    `ephemeral_octets` is the encoded ephemeral public key exactly as it
    appears in the cryptogram key field.

    The shared secret is wiped before this function returns. The caller
    owns the returned envelope key and must release it.
    """
    shared_info = bytes(ephemeral_octets) + ctx.kdf_shared_info
    with ctx.provider.compute_shared_secret(private_key, public_key) as shared:
        return ctx.provider.derive_key(
            shared.view(),
            ctx.kdf_output_length,
            shared_info,
            ctx.kdf_algorithm,
        )


def prepare_envelope_key(ctx: EciesContext, cryptogram: Cryptogram) -> SecretBuffer:
    """
    Encrypt path: generate the ephemeral key, store its compressed public
    key in the cryptogram key field and derive the envelope key.

    Raises:
        PrimitiveError: If key generation, ECDH or KDF2 fails
        InvariantViolationError: If the encoded ephemeral key has the wrong size
    """
    ephemeral = ctx.provider.generate_ephemeral_keypair(ctx.curve)
    try:
        encoded = ctx.provider.encode_public_key(ephemeral.public_key())
        if len(encoded) != ctx.ephemeral_key_octet_length:
            raise InvariantViolationError(
                f"Written envelope key length ({len(encoded)}) does not match "
                f"with expected ({ctx.ephemeral_key_octet_length})",
                operation="prepare_envelope_key",
            )
        envelope_key = derive_envelope_key(ctx, ephemeral, ctx.public_key, encoded)
        try:
            cryptogram.write_key(encoded)
        except BaseException:
            envelope_key.release()
            raise
    finally:
        # The ephemeral private key is used for exactly one agreement
        del ephemeral

    logger.debug(
        "Envelope key prepared: %d bytes, ephemeral key %d bytes",
        len(envelope_key),
        ctx.ephemeral_key_octet_length,
    )
    return envelope_key


def restore_envelope_key(ctx: EciesContext, cryptogram: Cryptogram) -> SecretBuffer:
    """
    Decrypt path: rebuild the ephemeral public key from the cryptogram key
    field and derive the envelope key with the recipient private key.

    Raises:
        InvalidArgumentError: If the context has no private key
        KeyReconstructionError: If the key field is not a valid curve point
        PrimitiveError: If ECDH or KDF2 fails
    """
    if ctx.private_key is None:
        raise InvalidArgumentError(
            "Decryption requires a context holding the recipient private key",
            operation="restore_envelope_key",
        )

    key_field = bytes(cryptogram.key_data)
    ephemeral_public = ctx.provider.decode_public_key(ctx.curve, key_field)
    envelope_key = derive_envelope_key(ctx, ctx.private_key, ephemeral_public, key_field)

    logger.debug("Envelope key restored: %d bytes", len(envelope_key))
    return envelope_key
