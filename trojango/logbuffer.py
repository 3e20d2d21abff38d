"""A growable byte buffer used to assemble log lines."""

from __future__ import annotations

_MAX_INT_DIGITS = 8


class Buffer:
    """Byte buffer with helpers for appending bytes and zero-padded integers."""

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray(data)

    def reset(self) -> None:
        """Empty the buffer."""
        self._data.clear()

    def append(self, data: bytes) -> None:
        """Append a byte string."""
        self._data += data

    def append_byte(self, value: int) -> None:
        """Append a single byte given as an integer."""
        self._data.append(value)

    def append_int(self, val: int, width: int) -> None:
        """Append a non-negative integer in decimal, zero-padded to ``width`` digits."""
        if val < 0:
            raise ValueError("negative values are not supported")
        digits = str(val).rjust(max(width, 1), "0")
        if len(digits) > _MAX_INT_DIGITS:
            raise ValueError(f"integer representation longer than {_MAX_INT_DIGITS} digits")
        self._data += digits.encode("ascii")

    def getvalue(self) -> bytes:
        """Return the buffered bytes."""
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)