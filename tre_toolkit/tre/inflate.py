"""Block decompression for TRE archives.

Compressed TRE blocks are deflate streams. Shipped archives wrap them in a
zlib header; bare raw-deflate streams are accepted as well.
"""

import zlib

from ..errors import CorruptStream, SizeMismatch

# Compression level 0 marks a stored (uncompressed) block
STORED = 0


def is_zlib_header(data: bytes) -> bool:
    """Return True if data starts with a valid two-byte zlib header."""
    if len(data) < 2:
        return False
    cmf, flg = data[0], data[1]
    return (cmf & 0x0F) == 8 and (cmf >> 4) <= 7 and ((cmf << 8) | flg) % 31 == 0


def inflate(data: bytes, compression_level: int, expected_size: int) -> bytes:
    """Decompress a block to exactly expected_size bytes.

    Stored blocks are returned unchanged and must already be expected_size
    bytes long.
    """
    if compression_level == STORED:
        if len(data) != expected_size:
            raise SizeMismatch(expected_size, len(data))
        return bytes(data)

    if expected_size == 0:
        return b""

    wbits = zlib.MAX_WBITS if is_zlib_header(data) else -zlib.MAX_WBITS
    decompressor = zlib.decompressobj(wbits)
    try:
        result = decompressor.decompress(data, expected_size)
    except zlib.error as e:
        raise CorruptStream(f"Malformed deflate stream: {e}") from e

    if len(result) != expected_size:
        raise CorruptStream(
            f"Deflate stream produced {len(result)} bytes, expected {expected_size}"
        )
    return result
