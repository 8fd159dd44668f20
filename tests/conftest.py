"""Shared fixtures: build small TRE archives on disk."""

import hashlib
import struct
import zlib
from typing import List, Optional, Tuple

import pytest

TREE = b"EERT"  # 'TREE' as a little-endian int32
V005 = b"5000"


def build_tre(
    files: List[Tuple[str, bytes]],
    compress_files: bool = True,
    compress_blocks: bool = True,
    version: bytes = V005,
    magic: bytes = TREE,
    omit_stored_size: bool = False,
    name_offsets: Optional[List[int]] = None,
) -> bytes:
    """Serialize files into a TRE archive.

    name_offsets overrides the offsets written to the records, for building
    broken archives.
    """
    header_size = 36
    data = bytearray()
    records = bytearray()
    names = bytearray()
    checksums = bytearray()

    for i, (name, content) in enumerate(files):
        offset = header_size + len(data)
        if compress_files:
            payload = zlib.compress(content)
            level, deflated = 2, len(payload)
        else:
            payload = content
            level, deflated = 0, 0 if omit_stored_size else len(content)
        data += payload

        name_offset = len(names) if name_offsets is None else name_offsets[i]
        names += name.encode("ascii") + b"\x00"

        records += struct.pack(
            "<6I", zlib.crc32(content), len(content), offset, level, deflated, name_offset
        )
        checksums += hashlib.md5(content).digest()

    records_block = zlib.compress(bytes(records)) if compress_blocks else bytes(records)
    names_block = zlib.compress(bytes(names)) if compress_blocks else bytes(names)
    block_level = 2 if compress_blocks else 0

    header = magic + version + struct.pack(
        "<7I",
        len(files),
        header_size + len(data),
        block_level,
        len(records_block),
        block_level,
        len(names_block),
        len(names),
    )
    return header + bytes(data) + records_block + names_block + bytes(checksums)


@pytest.fixture
def make_tre(tmp_path):
    """Return a function writing an archive into tmp_path and returning its path."""

    def _make(filename: str, files: List[Tuple[str, bytes]], **kwargs):
        path = tmp_path / filename
        path.write_bytes(build_tre(files, **kwargs))
        return path

    return _make
