"""Binary reading utilities for little-endian TRE data."""

import struct
from io import BytesIO
from typing import BinaryIO, Union


class BinaryReader:
    """Helper for reading little-endian binary data (TRE format)."""

    def __init__(self, data: Union[bytes, BinaryIO]):
        if isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(data)
        else:
            self._stream = data

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise EOFError(f"Expected {size} bytes, got {len(data)}")
        return data

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_bytes(4))[0]

    def read_tag(self) -> int:
        """Read a four-character tag stored as a little-endian 32-bit value.

        TRE writes tags such as 'TREE' and '0005' as integers, so the bytes
        on disk appear reversed ('EERT', '5000').
        """
        return self.read_u32()

    def remaining(self) -> int:
        """Return number of bytes remaining in stream."""
        current = self.tell()
        self._stream.seek(0, 2)  # Seek to end
        end = self.tell()
        self._stream.seek(current)
        return end - current


def tag_to_str(tag: int) -> str:
    """Render a 32-bit tag value as its four ASCII characters."""
    return tag.to_bytes(4, byteorder="big").decode("ascii", errors="replace")


def read_cstring_at(data: bytes, offset: int, encoding: str = "ascii") -> str:
    """Read a NUL-terminated string starting at offset.

    A string running to the end of the buffer without a terminator is
    returned as-is rather than reading past it.
    """
    if not 0 <= offset < len(data):
        raise IndexError(f"Offset {offset} outside buffer of {len(data)} bytes")
    end = data.find(b"\x00", offset)
    if end == -1:
        end = len(data)
    return data[offset:end].decode(encoding, errors="replace")
