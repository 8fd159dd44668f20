"""Exceptions raised while reading TRE archives."""

from typing import Optional


class TREError(Exception):
    """Base class for every error raised by tre_toolkit."""


class FormatError(TREError, ValueError):
    """The archive is structurally invalid and cannot be parsed."""


class BadMagic(FormatError):
    def __init__(self, magic: int):
        self.magic = magic
        super().__init__(f"Invalid TRE magic: 0x{magic:08X}, expected 'TREE'")


class UnsupportedVersion(FormatError):
    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Unsupported TRE version: {tag!r}")


class InvalidNameOffset(FormatError):
    """A record points outside the decompressed names block."""

    def __init__(self, index: int, offset: int, limit: int):
        self.index = index
        self.offset = offset
        self.limit = limit
        super().__init__(
            f"Record {index}: name offset {offset} outside names block of {limit} bytes"
        )


class DataOutOfBounds(FormatError):
    """A record's payload extends past the end of the archive file."""

    def __init__(self, index: int, offset: int, size: int, file_size: int):
        self.index = index
        self.offset = offset
        self.size = size
        self.file_size = file_size
        super().__init__(
            f"Record {index}: data [{offset}, {offset + size}) exceeds file size {file_size}"
        )


class TruncatedArchive(FormatError):
    """The header or a metadata block ends before its declared length."""


class DecompressionError(TREError):
    """A block could not be turned back into its declared bytes."""


class CorruptStream(DecompressionError):
    pass


class SizeMismatch(DecompressionError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Stored block is {actual} bytes, expected {expected}")


class ArchiveIOError(TREError, OSError):
    """The archive file could not be opened or read."""

    def __init__(self, path, message: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {message}")


class ConfigError(TREError):
    """The archive search configuration is malformed."""
