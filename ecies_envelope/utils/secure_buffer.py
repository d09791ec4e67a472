"""
Secret Buffers

Owned, fixed-capacity byte buffers for key material. A SecretBuffer is
zeroized exactly once when it is released, either explicitly or by leaving
its `with` block, so every exit path of a call wipes the secrets it owns.

Accessors are bounds-checked: reading or writing outside the capacity
raises IndexError instead of silently truncating.
"""

from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]


def secure_zero(buf: Union[bytearray, memoryview]) -> None:
    """Overwrite a mutable buffer with zero bytes in place."""
    if not isinstance(buf, (bytearray, memoryview)):
        raise TypeError(f"Cannot wipe immutable buffer of type {type(buf).__name__}")
    n = len(buf)
    if n:
        buf[:] = bytes(n)


class SecretBuffer:
    """
    Zeroizing buffer with explicit capacity.

    Example:
        >>> with SecretBuffer(32) as key:
        ...     _ = key.write(0, b"\\x01" * 32)
        ...     len(key.view(0, 16))
        16
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError(f"Invalid buffer capacity: {capacity}")
        self._buf = bytearray(capacity)
        self._released = False

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "SecretBuffer":
        """Copy `data` into a new buffer of the same length."""
        buf = cls(len(data))
        buf.write(0, data)
        return buf

    @property
    def capacity(self) -> int:
        return len(self._buf)

    @property
    def released(self) -> bool:
        return self._released

    def __len__(self) -> int:
        return len(self._buf)

    def _check_alive(self):
        if self._released:
            raise ValueError("SecretBuffer already released")

    def _check_range(self, start: int, end: int):
        if start < 0 or end < start or end > len(self._buf):
            raise IndexError(
                f"Range [{start}, {end}) outside buffer capacity {len(self._buf)}"
            )

    def view(self, start: int = 0, end: Optional[int] = None) -> memoryview:
        """
        Return a writable view of `[start, end)`.

        The view shares memory with the buffer, so it is wiped by release().
        """
        self._check_alive()
        if end is None:
            end = len(self._buf)
        self._check_range(start, end)
        return memoryview(self._buf)[start:end]

    def write(self, offset: int, data: BytesLike) -> int:
        """Copy `data` at `offset`; returns the number of bytes written."""
        self._check_alive()
        length = len(data)
        self._check_range(offset, offset + length)
        self._buf[offset:offset + length] = data
        return length

    def zeroize(self):
        secure_zero(self._buf)

    def release(self):
        """Zeroize the contents; later calls are no-ops."""
        if self._released:
            return
        self.zeroize()
        self._released = True

    def __enter__(self) -> "SecretBuffer":
        self._check_alive()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"SecretBuffer(capacity={len(self._buf)}, {state})"
