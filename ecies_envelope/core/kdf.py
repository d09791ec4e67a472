"""
KDF2 Key Derivation (ANSI X9.63 / ISO 18033-2 KDF2 / SEC 1 Section 3.6.1)

Stretches a fixed-length shared secret Z into arbitrary-length key material:

    K = H(Z || 00000001 || SharedInfo) || H(Z || 00000002 || SharedInfo) || ...

truncated to the requested length. The counter is a 32-bit big-endian
integer starting at 1.
"""

from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes

from ..config import ECIES_CONSTANTS
from ..utils.secure_buffer import SecretBuffer, secure_zero
from .errors import InvalidArgumentError, PrimitiveError, ResourceExhaustionError

BytesLike = Union[bytes, bytearray, memoryview]


def _check_kdf_arguments(secret: BytesLike, output_length: int, shared_info: BytesLike):
    kdf_max = ECIES_CONSTANTS.KDF_MAX

    if secret is None or len(secret) == 0:
        raise InvalidArgumentError("Shared secret cannot be empty", operation="kdf2")
    if len(secret) > kdf_max:
        raise InvalidArgumentError(
            f"Shared secret too long: {len(secret)} bytes (max {kdf_max})", operation="kdf2"
        )
    if len(shared_info) > kdf_max:
        raise InvalidArgumentError(
            f"Shared info too long: {len(shared_info)} bytes (max {kdf_max})", operation="kdf2"
        )
    if isinstance(output_length, bool) or not isinstance(output_length, int):
        raise InvalidArgumentError(
            f"Output length must be an integer, got {type(output_length).__name__}",
            operation="kdf2",
        )
    if output_length < 1 or output_length > kdf_max:
        raise InvalidArgumentError(
            f"Invalid output length: {output_length} (must be 1-{kdf_max})", operation="kdf2"
        )


def kdf2(
    secret: BytesLike,
    output_length: int,
    shared_info: BytesLike = b"",
    algorithm: Optional[hashes.HashAlgorithm] = None,
) -> SecretBuffer:
    """
    Derive `output_length` bytes of key material from `secret`.

    Args:
        secret: Shared secret Z (e.g. ECDH x-coordinate)
        output_length: Number of bytes to produce
        shared_info: Optional context bytes appended to every hash input
        algorithm: Hash algorithm (default: SHA-256)

    Returns:
        SecretBuffer holding the derived key material. The caller owns it
        and must release it.

    Raises:
        InvalidArgumentError: If an input is empty or exceeds KDF_MAX
        ResourceExhaustionError: If the output buffer cannot be allocated
        PrimitiveError: If the hash algorithm is unavailable

    Example:
        >>> with kdf2(b"\\x01" * 32, 48) as key:
        ...     len(key)
        48
    """
    if algorithm is None:
        algorithm = hashes.SHA256()
    if shared_info is None:
        shared_info = b""

    _check_kdf_arguments(secret, output_length, shared_info)

    try:
        output = SecretBuffer(output_length)
    except MemoryError as e:
        raise ResourceExhaustionError(
            "Failed to allocate memory for derived key", operation="kdf2", cause=e
        ) from e

    offset = 0
    counter = ECIES_CONSTANTS.KDF_COUNTER_START
    try:
        while offset < output_length:
            digest = hashes.Hash(algorithm)
            digest.update(secret)
            digest.update(counter.to_bytes(4, "big"))
            digest.update(shared_info)
            block = bytearray(digest.finalize())

            take = min(len(block), output_length - offset)
            output.write(offset, memoryview(block)[:take])
            secure_zero(block)

            offset += take
            counter += 1
    except UnsupportedAlgorithm as e:
        output.release()
        raise PrimitiveError("Failed to stretch with KDF2", operation="kdf2", cause=e) from e
    except BaseException:
        output.release()
        raise

    return output
