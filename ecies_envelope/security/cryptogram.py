"""
Cryptogram Container

Holds the three ECIES output fields in one contiguous buffer:

    [ ephemeral public key | ciphertext body | MAC tag ]

Field sizes are fixed at allocation. There are no length prefixes: a
serialized cryptogram is parsed using the key and MAC sizes implied by the
ECIES context. Writers must fill a field exactly; a write that does not
match the reserved size raises instead of truncating or overflowing.
"""

import base64
import binascii
from typing import Union

from ..core.errors import (
    InvalidArgumentError,
    InvariantViolationError,
    ResourceExhaustionError,
)
from ..utils.secure_buffer import secure_zero

BytesLike = Union[bytes, bytearray, memoryview]


class Cryptogram:
    """
    Fixed-layout ECIES output buffer.

    Example:
        >>> c = Cryptogram(33, 32, 16)
        >>> len(c), c.key_length, c.body_length, c.mac_length
        (81, 33, 16, 32)
    """

    def __init__(self, key_length: int, mac_length: int, body_length: int):
        for name, value in (("key", key_length), ("mac", mac_length), ("body", body_length)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidArgumentError(
                    f"Invalid {name} field length: {value!r}", operation="cryptogram_alloc"
                )

        self._key_length = key_length
        self._mac_length = mac_length
        self._body_length = body_length

        try:
            self._buf = bytearray(key_length + body_length + mac_length)
        except MemoryError as e:
            raise ResourceExhaustionError(
                "Unable to allocate a cryptogram buffer to hold the encrypted result",
                operation="cryptogram_alloc",
                cause=e,
            ) from e

    @classmethod
    def allocate(cls, key_length: int, mac_length: int, body_length: int) -> "Cryptogram":
        return cls(key_length, mac_length, body_length)

    # ------------------------------------------------------------------
    # Field layout
    # ------------------------------------------------------------------

    @property
    def key_length(self) -> int:
        return self._key_length

    @property
    def body_length(self) -> int:
        return self._body_length

    @property
    def mac_length(self) -> int:
        return self._mac_length

    def __len__(self) -> int:
        return len(self._buf)

    @property
    def _body_offset(self) -> int:
        return self._key_length

    @property
    def _mac_offset(self) -> int:
        return self._key_length + self._body_length

    @property
    def key_data(self) -> memoryview:
        """Read-only view of the ephemeral public key field."""
        return memoryview(self._buf)[:self._key_length].toreadonly()

    @property
    def body_data(self) -> memoryview:
        """Read-only view of the ciphertext body field."""
        return memoryview(self._buf)[self._body_offset:self._mac_offset].toreadonly()

    @property
    def mac_data(self) -> memoryview:
        """Read-only view of the MAC tag field."""
        return memoryview(self._buf)[self._mac_offset:].toreadonly()

    def _write_field(self, name: str, offset: int, length: int, data: BytesLike):
        if len(data) != length:
            raise InvariantViolationError(
                f"{name} field holds {length} bytes, got {len(data)}",
                operation="cryptogram_write",
            )
        self._buf[offset:offset + length] = data

    def write_key(self, data: BytesLike):
        self._write_field("key", 0, self._key_length, data)

    def write_body(self, data: BytesLike):
        self._write_field("body", self._body_offset, self._body_length, data)

    def write_mac(self, data: BytesLike):
        self._write_field("mac", self._mac_offset, self._mac_length, data)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        return bytes(self._buf)

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    @classmethod
    def from_bytes(cls, data: BytesLike, key_length: int, mac_length: int) -> "Cryptogram":
        """
        Parse a serialized cryptogram.

        Args:
            data: Serialized cryptogram
            key_length: Ephemeral key field size (context's ephemeral_key_octet_length)
            mac_length: MAC field size (context's mac_length)

        Raises:
            InvalidArgumentError: If `data` is too short to hold a non-empty body
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidArgumentError(
                f"Cryptogram must be bytes, got {type(data).__name__}", operation="cryptogram_parse"
            )

        body_length = len(data) - key_length - mac_length
        if body_length <= 0:
            raise InvalidArgumentError(
                f"Cryptogram too short: {len(data)} bytes (need more than {key_length + mac_length})",
                operation="cryptogram_parse",
            )

        cryptogram = cls(key_length, mac_length, body_length)
        cryptogram._buf[:] = data
        return cryptogram

    def to_base64(self) -> str:
        return base64.b64encode(self._buf).decode("ascii")

    @classmethod
    def from_base64(cls, text: Union[str, bytes], key_length: int, mac_length: int) -> "Cryptogram":
        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidArgumentError(
                "Cryptogram is not valid base64", operation="cryptogram_parse", cause=e
            ) from e
        return cls.from_bytes(data, key_length, mac_length)

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    def release(self):
        """Wipe the buffer contents."""
        secure_zero(self._buf)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Cryptogram):
            return NotImplemented
        return (
            self._key_length == other._key_length
            and self._mac_length == other._mac_length
            and self._buf == other._buf
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"Cryptogram(key_length={self._key_length}, body_length={self._body_length}, "
            f"mac_length={self._mac_length})"
        )
