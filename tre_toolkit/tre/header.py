"""TRE header and record structures."""

import struct
from dataclasses import dataclass, field
from pathlib import Path

from ..utils.binary import tag_to_str

# 'TREE', '0005' and '0006' stored as little-endian 32-bit integers
TRE_MAGIC = 0x54524545
TRE_VERSION_5 = 0x30303035
TRE_VERSION_6 = 0x30303036
SUPPORTED_VERSIONS = (TRE_VERSION_5, TRE_VERSION_6)

HEADER_SIZE = 36  # 9 x int32
RECORD_SIZE = 24  # 6 x int32
MD5_SIZE = 16

_RECORD_FMT = "<6I"


@dataclass
class TREHeader:
    """TRE archive header (36 bytes)."""

    magic: int
    version: int
    total_records: int
    records_offset: int
    records_compression_level: int
    records_deflated_size: int
    names_compression_level: int
    names_deflated_size: int
    names_inflated_size: int

    @property
    def is_supported(self) -> bool:
        return self.version in SUPPORTED_VERSIONS

    @property
    def version_tag(self) -> str:
        return tag_to_str(self.version)

    @property
    def records_inflated_size(self) -> int:
        return RECORD_SIZE * self.total_records

    @property
    def checksums_size(self) -> int:
        return MD5_SIZE * self.total_records


@dataclass
class TRERecord:
    """A single file entry in a TRE archive (24 bytes on disk)."""

    checksum: int
    inflated_size: int
    data_offset: int
    compression_level: int
    deflated_size: int
    name_offset: int

    # Bound after decode from the names and checksum blocks
    name: str = ""
    md5: bytes = field(default=b"", repr=False)
    archive_path: Path = field(default=Path(), repr=False)

    @property
    def is_compressed(self) -> bool:
        return self.compression_level != 0

    @property
    def data_end(self) -> int:
        return self.data_offset + self.deflated_size

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0, archive_path: Path = Path()) -> "TRERecord":
        """Decode one record.

        Stored records may leave deflated_size at zero since it always equals
        inflated_size; it is filled in here.
        """
        (
            checksum,
            inflated_size,
            data_offset,
            compression_level,
            deflated_size,
            name_offset,
        ) = struct.unpack_from(_RECORD_FMT, data, offset)

        if compression_level == 0 and deflated_size == 0:
            deflated_size = inflated_size

        return cls(
            checksum=checksum,
            inflated_size=inflated_size,
            data_offset=data_offset,
            compression_level=compression_level,
            deflated_size=deflated_size,
            name_offset=name_offset,
            archive_path=Path(archive_path),
        )
