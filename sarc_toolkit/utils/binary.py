"""Binary reading utilities for big-endian SARC data."""

import struct
from typing import Optional, Union

Buffer = Union[bytes, bytearray, memoryview]

U32_SIZE = 4

# Bytes copied per step while searching for a string terminator
CSTRING_CHUNK_SIZE = 256


class BinaryReader:
    """Helper for reading big-endian binary data out of an in-memory buffer.

    Reads never copy more than they return, and ``read_view`` hands back a
    ``memoryview`` slice so callers can keep zero-copy references.
    """

    def __init__(self, data: Buffer, offset: int = 0):
        self._view = data if isinstance(data, memoryview) else memoryview(data)
        self._pos = offset

    def tell(self) -> int:
        return self._pos

    def remaining(self) -> int:
        """Return number of bytes remaining in the buffer."""
        return max(0, len(self._view) - self._pos)

    def read_view(self, size: int) -> memoryview:
        if size < 0 or self._pos + size > len(self._view):
            raise EOFError(f"Expected {size} bytes, got {self.remaining()}")
        data = self._view[self._pos : self._pos + size]
        self._pos += size
        return data

    def read_bytes(self, size: int) -> bytes:
        return self.read_view(size).tobytes()

    def read_u32(self) -> int:
        value = read_u32_be(self._view, self._pos)
        self._pos += U32_SIZE
        return value

    def read_cstring_view(self) -> memoryview:
        """Read a null-terminated string, returning the bytes without the terminator."""
        end = find_cstring_end(self._view, self._pos)
        if end is None:
            raise EOFError(f"Unterminated string at offset {self._pos}")
        data = self._view[self._pos : end]
        self._pos = end + 1
        return data


def read_u32_be(data: Buffer, offset: int = 0) -> int:
    """Read a big-endian 32-bit unsigned integer from bytes."""
    if offset < 0 or offset + U32_SIZE > len(data):
        raise EOFError(f"Expected {U32_SIZE} bytes at offset {offset}, buffer is {len(data)} bytes")
    return struct.unpack_from(">I", data, offset)[0]


def find_cstring_end(data: Buffer, offset: int) -> Optional[int]:
    """Return the offset of the null terminator starting the search at ``offset``.

    Returns None when the buffer ends before a terminator is found.
    """
    if offset < 0 or offset >= len(data):
        return None
    # memoryview has no find(); search bounded copies of the tail instead
    view = data if isinstance(data, memoryview) else memoryview(data)
    end = len(view)
    pos = offset
    while pos < end:
        chunk = view[pos : min(pos + CSTRING_CHUNK_SIZE, end)].tobytes()
        found = chunk.find(b"\x00")
        if found >= 0:
            return pos + found
        pos += len(chunk)
    return None
