"""TRE archive reader and extractor."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import (
    ArchiveIOError,
    BadMagic,
    DataOutOfBounds,
    InvalidNameOffset,
    TruncatedArchive,
    UnsupportedVersion,
)
from ..utils.binary import BinaryReader, read_cstring_at, tag_to_str
from .header import HEADER_SIZE, MD5_SIZE, RECORD_SIZE, TRE_MAGIC, TREHeader, TRERecord
from .inflate import inflate

logger = logging.getLogger(__name__)


class TREReader:
    """Reader for TRE (Star Wars Galaxies tree) archives.

    Parsing reads the header and the three metadata blocks that follow the
    data region, then binds names and MD5 checksums to every record. Payloads
    are not loaded; each record keeps the offsets needed to fetch its bytes
    later with read_entry_data().
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._header: Optional[TREHeader] = None
        self._entries: List[TRERecord] = []

    def __enter__(self) -> "TREReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # No file handle is held between calls
        pass

    def open(self) -> List[TRERecord]:
        """Parse the archive and return its records in on-disk order.

        Either every record is returned or an error is raised; a failed parse
        leaves no entries behind.
        """
        self._header = None
        self._entries = []

        try:
            with open(self.path, "rb") as f:
                reader = BinaryReader(f)
                file_size = reader.remaining()
                header = self._read_header(reader)
                records_data, names_data, checksum_data = self._read_blocks(reader, header)
        except OSError as e:
            raise ArchiveIOError(self.path, f"cannot read archive ({e.strerror or e})", e) from e

        entries = self._bind_records(header, records_data, names_data, checksum_data, file_size)

        self._header = header
        self._entries = entries
        logger.debug(
            "Parsed %s: version %s, %d records", self.path, header.version_tag, len(entries)
        )
        return entries

    @property
    def header(self) -> TREHeader:
        if not self._header:
            raise RuntimeError("Archive not opened")
        return self._header

    @property
    def entries(self) -> List[TRERecord]:
        return self._entries

    def _read_header(self, reader: BinaryReader) -> TREHeader:
        """Read and validate the 36-byte TRE header."""
        try:
            magic = reader.read_tag()
            if magic != TRE_MAGIC:
                raise BadMagic(magic)

            header = TREHeader(
                magic=magic,
                version=reader.read_tag(),
                total_records=reader.read_u32(),
                records_offset=reader.read_u32(),
                records_compression_level=reader.read_u32(),
                records_deflated_size=reader.read_u32(),
                names_compression_level=reader.read_u32(),
                names_deflated_size=reader.read_u32(),
                names_inflated_size=reader.read_u32(),
            )
        except EOFError as e:
            raise TruncatedArchive(f"{self.path}: header shorter than {HEADER_SIZE} bytes") from e

        if not header.is_supported:
            raise UnsupportedVersion(tag_to_str(header.version))

        return header

    def _read_blocks(self, reader: BinaryReader, header: TREHeader):
        """Read the records, names and checksum blocks.

        The three blocks sit back to back starting at records_offset. Records
        and names may be compressed; the checksum block is always raw.
        """
        reader.seek(header.records_offset)

        records_raw = self._read_block(reader, header.records_deflated_size, "records")
        names_raw = self._read_block(reader, header.names_deflated_size, "names")
        checksum_data = self._read_block(reader, header.checksums_size, "checksum")

        records_data = inflate(
            records_raw, header.records_compression_level, header.records_inflated_size
        )
        names_data = inflate(names_raw, header.names_compression_level, header.names_inflated_size)

        return records_data, names_data, checksum_data

    def _read_block(self, reader: BinaryReader, size: int, label: str) -> bytes:
        start = reader.tell()
        try:
            return reader.read_bytes(size)
        except EOFError as e:
            raise TruncatedArchive(
                f"{self.path}: {label} block at {start} truncated ({e})"
            ) from e

    def _bind_records(
        self,
        header: TREHeader,
        records_data: bytes,
        names_data: bytes,
        checksum_data: bytes,
        file_size: int,
    ) -> List[TRERecord]:
        """Decode every record and attach its name and MD5."""
        entries = []

        for i in range(header.total_records):
            record = TRERecord.from_bytes(records_data, i * RECORD_SIZE, self.path)

            if not 0 <= record.name_offset < header.names_inflated_size:
                raise InvalidNameOffset(i, record.name_offset, header.names_inflated_size)
            if record.data_end > file_size:
                raise DataOutOfBounds(i, record.data_offset, record.deflated_size, file_size)

            record.name = read_cstring_at(names_data, record.name_offset)
            record.md5 = checksum_data[i * MD5_SIZE : (i + 1) * MD5_SIZE]
            entries.append(record)

        return entries

    def extract_file(self, entry: TRERecord) -> bytes:
        """Extract a single file from the archive."""
        return read_entry_data(entry)

    def list_files(self) -> List[str]:
        """List all filenames in the archive."""
        return [e.name for e in self._entries]

    def get_entry_by_name(self, filename: str) -> Optional[TRERecord]:
        """Find an entry by filename."""
        for entry in self._entries:
            if entry.name == filename:
                return entry
        return None


def read_entries(path: Union[str, Path]) -> List[TRERecord]:
    """Parse one archive and return its records."""
    return TREReader(path).open()


def read_entry_data(entry: TRERecord) -> bytes:
    """Read and decompress one entry's payload from its owning archive.

    The archive is opened for this call only, so concurrent calls never share
    a file handle.
    """
    try:
        with open(entry.archive_path, "rb") as f:
            reader = BinaryReader(f)
            reader.seek(entry.data_offset)
            data = reader.read_bytes(entry.deflated_size)
    except EOFError as e:
        raise ArchiveIOError(entry.archive_path, f"{entry.name}: archive truncated ({e})", e) from e
    except OSError as e:
        raise ArchiveIOError(
            entry.archive_path, f"{entry.name}: cannot read archive ({e.strerror or e})", e
        ) from e

    return inflate(data, entry.compression_level, entry.inflated_size)
