from __future__ import annotations

import struct
from typing import Any


class BufferError(Exception):
    pass


class Buffer:
    """Byte cursor over record data - packs/unpacks struct formats

    Reads advance `offset` and fail with `BufferError` rather than
    returning short data, so callers never see a truncated field.

    ```pycon
    >>> b = Buffer()
    >>> b.pack("!HBB", 1, 5, 2)
    >>> b.offset
    4
    >>> b.append(b"\\x01\\x02\\x03")
    >>> b.hex()
    '00010502010203'
    >>> b.since(4)
    b'\\x01\\x02\\x03'
    >>> b.offset = 0
    >>> b.unpack("!HBB")
    (1, 5, 2)
    >>> b.remaining
    3
    >>> b.get(5)
    Traceback (most recent call last):
    ...
    dnssig.buffer.BufferError: Not enough bytes [offset=4,remaining=3,requested=5]
    >>> b.get(-1)
    Traceback (most recent call last):
    ...
    dnssig.buffer.BufferError: Invalid length [offset=4,requested=-1]

    ```
    """

    def __init__(self, data: bytes = b"") -> None:
        """
        Args:
            data: initial data
        """
        self.data = bytearray(data)
        self.offset = 0
        return

    @property
    def remaining(self) -> int:
        """Number of bytes from the current offset until the end of the buffer"""
        return len(self.data) - self.offset

    def get(self, length: int) -> bytes:
        """Get bytes from the buffer starting at the current offset and increment offset

        Args:
            length: number of bytes to get

        Raises:
            BufferError: if length is negative or greater than remaining bytes.
        """
        if length < 0:
            raise BufferError(f"Invalid length [offset={self.offset},requested={length}]")
        if length > self.remaining:
            raise BufferError(
                f"Not enough bytes [offset={self.offset},remaining={self.remaining},requested={length}]"
            )
        start = self.offset
        self.offset += length
        return bytes(self.data[start : self.offset])

    def since(self, start: int) -> bytes:
        """Return the bytes between `start` and the end of the buffer"""
        return bytes(self.data[start:])

    def hex(self) -> str:
        """Return data as hex string"""
        return self.data.hex()

    def pack(self, fmt: str, *args: Any) -> None:
        """Pack a struct and append it to the buffer

        Args:
            fmt: struct format
            args: data to pack into the struct
        """
        self.offset += struct.calcsize(fmt)
        self.data += struct.pack(fmt, *args)
        return

    def append(self, s: bytes) -> None:
        """Append data to end of the buffer and increment offset"""
        self.offset += len(s)
        self.data += s
        return

    def append_with_length(self, length_format: str, s: bytes) -> None:
        """Append length prefixed data (used for name labels)

        Args:
            length_format: struct format of the length
            s: data to append
        """
        self.pack(length_format, len(s))
        self.append(s)
        return

    def unpack(self, fmt: str) -> tuple:
        """Unpack a struct from the current offset and increment offset

        Raises:
            BufferError: if there is not enough data for the struct
        """
        data = self.get(struct.calcsize(fmt))
        try:
            return struct.unpack(fmt, data)
        except struct.error as e:
            raise BufferError(f"Error unpacking struct {fmt!r} <{data.hex()}>: {e}")

    def unpack_one(self, fmt: str) -> Any:
        """Unpack a single value from the current offset and increment offset"""
        unpacked = self.unpack(fmt)
        if len(unpacked) != 1:
            raise BufferError(f"unpacking {fmt!r} returned {unpacked!r} - expected single value")
        return unpacked[0]

    def __len__(self) -> int:
        return len(self.data)


if __name__ == "__main__":
    import doctest, sys

    sys.exit(0 if doctest.testmod(optionflags=doctest.IGNORE_EXCEPTION_DETAIL).failed == 0 else 1)
