"""TRE archive format support."""

from .header import TRE_MAGIC, TREHeader, TRERecord
from .inflate import inflate
from .reader import TREReader, read_entries, read_entry_data

__all__ = [
    "TRE_MAGIC",
    "TREHeader",
    "TRERecord",
    "TREReader",
    "inflate",
    "read_entries",
    "read_entry_data",
]
