"""
ECIES Encoding Utilities

Compressed point encoding/decoding (SEC 1 v2.0 Section 2.3.3 / 2.3.4) for
any supported curve:

    compressed point = prefix (0x02 if y even, 0x03 if y odd) || x

Decoding validates the result: the octets must have the exact compressed
length for the curve, a valid prefix, and describe a point on the curve.
"""

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey

from .errors import InvariantViolationError, KeyReconstructionError
from .types import compressed_point_length


_COMPRESSED_PREFIXES = (0x02, 0x03)


def encode_public_key_compressed(public_key: EllipticCurvePublicKey) -> bytes:
    """
    Encode an EC public key to compressed point format.

    Args:
        public_key: EllipticCurvePublicKey on any supported curve

    Returns:
        bytes: Compressed point (1 + field size bytes)

    Raises:
        InvariantViolationError: If the encoder returned an unexpected length
    """
    compressed = public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    )

    expected = compressed_point_length(public_key.curve)
    if len(compressed) != expected:
        raise InvariantViolationError(
            f"Compressed point is {len(compressed)} bytes, expected {expected}",
            operation="encode_public_key_compressed",
        )
    return compressed


def decode_public_key_compressed(
    curve: ec.EllipticCurve, compressed_key: bytes
) -> EllipticCurvePublicKey:
    """
    Decode and validate a compressed EC public key.

    The curve equation y^2 = x^3 + ax + b is solved by OpenSSL, which also
    rejects x-coordinates with no matching point.

    Args:
        curve: Curve the point must belong to
        compressed_key: Compressed point octets

    Returns:
        EllipticCurvePublicKey: Validated public key

    Raises:
        KeyReconstructionError: If the octets are not a valid point on `curve`
    """
    expected = compressed_point_length(curve)
    if len(compressed_key) != expected:
        raise KeyReconstructionError(
            f"Invalid compressed key length: {len(compressed_key)} bytes (expected {expected})",
            operation="decode_public_key_compressed",
        )

    prefix = compressed_key[0]
    if prefix not in _COMPRESSED_PREFIXES:
        raise KeyReconstructionError(
            f"Invalid compression prefix: 0x{prefix:02x} (expected 0x02 or 0x03)",
            operation="decode_public_key_compressed",
        )

    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(curve, bytes(compressed_key))
    except ValueError as e:
        raise KeyReconstructionError(
            "Failed to reconstruct public key",
            operation="decode_public_key_compressed",
            cause=e,
        ) from e
