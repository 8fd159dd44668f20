"""Read Star Wars Galaxies TRE archives as one merged file tree."""

__version__ = "0.1.0"

from .errors import (
    ArchiveIOError,
    ConfigError,
    DecompressionError,
    FormatError,
    TREError,
)
from .index import MergeReport, TreeIndex
from .tre import TREReader, TRERecord, read_entries, read_entry_data

__all__ = [
    "ArchiveIOError",
    "ConfigError",
    "DecompressionError",
    "FormatError",
    "MergeReport",
    "TREError",
    "TREReader",
    "TRERecord",
    "TreeIndex",
    "read_entries",
    "read_entry_data",
]
