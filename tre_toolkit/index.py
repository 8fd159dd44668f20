"""Merged view over several TRE archives.

A TreeIndex maps logical paths to the records that own them. When more than
one archive holds the same path, only the first record added is kept, so
archives must be merged from highest to lowest priority.

For example, if patch_01.tre and data_00.tre both contain
datatables/badge/badge_map.iff and patch_01.tre is merged first, lookups
return the patch copy and the one in data_00.tre is ignored.
"""

import logging
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import TREError
from .tre import TRERecord, read_entries

logger = logging.getLogger(__name__)


@dataclass
class MergeReport:
    """Outcome of merging one archive into an index."""

    archive_path: Path
    rank: Optional[int] = None
    decoded: int = 0
    added: int = 0
    error: Optional[TREError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TreeIndex:
    """Name -> record mapping populated from archives in priority order.

    Safe for concurrent population. Adds that carry a rank are resolved by
    rank rather than by arrival order: the lower rank wins, and equal ranks
    from different archives are settled by the lexically smaller archive
    path. Adds without a rank never displace an existing record.
    """

    def __init__(self):
        self._entries: Dict[str, TRERecord] = {}
        self._ranks: Dict[str, Tuple[int, str]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __getitem__(self, name: str) -> TRERecord:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def add(self, entry: TRERecord, rank: Optional[int] = None) -> bool:
        """Insert entry under its name unless a preferred record is already there.

        Returns True if entry is now the record stored for its name.
        """
        name = entry.name
        with self._lock:
            if name not in self._entries:
                self._entries[name] = entry
                if rank is not None:
                    self._ranks[name] = (rank, str(entry.archive_path))
                return True

            if rank is None or name not in self._ranks:
                return False

            key = (rank, str(entry.archive_path))
            if key < self._ranks[name]:
                self._entries[name] = entry
                self._ranks[name] = key
                return True
            return False

    def get(self, name: str) -> Optional[TRERecord]:
        return self._entries.get(name)

    def list_by_prefix(self, prefix: str) -> Iterator[str]:
        """Yield every name starting with prefix.

        Scans a snapshot of the keys, so it is safe to call while the index
        is still being populated.
        """
        for name in list(self._entries):
            if name.startswith(prefix):
                yield name

    def names(self) -> List[str]:
        return sorted(self._entries)

    def add_entries(self, entries: Iterable[TRERecord], rank: Optional[int] = None) -> int:
        """Add records in order; returns how many became visible."""
        return sum(1 for entry in entries if self.add(entry, rank))

    def merge_from(self, path: Union[str, Path], rank: Optional[int] = None) -> MergeReport:
        """Parse one archive and add all of its records.

        A broken archive is logged and reported, not raised, so that the
        remaining archives of a search list can still be merged.
        """
        report = MergeReport(archive_path=Path(path), rank=rank)
        try:
            entries = read_entries(path)
        except TREError as e:
            logger.warning("Skipping archive %s: %s", path, e)
            report.error = e
            return report

        report.decoded = len(entries)
        report.added = self.add_entries(entries, rank)
        logger.debug("Merged %s: %d of %d records added", path, report.added, report.decoded)
        return report

    def merge_all(
        self, paths: Iterable[Union[str, Path]], max_workers: int = 1
    ) -> List[MergeReport]:
        """Merge archives given highest priority first.

        Each archive is ranked by its position in paths, so neither the index
        nor the reports depend on which worker finishes first.
        """
        paths = list(paths)

        if max_workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                reports = list(pool.map(self.merge_from, paths, range(len(paths))))
            self._recount_added(reports)
        else:
            reports = [self.merge_from(path, rank) for rank, path in enumerate(paths)]

        failed = sum(1 for r in reports if not r.ok)
        logger.info(
            "Merged %d archives (%d failed): %d unique files", len(reports), failed, len(self)
        )
        return reports

    def _recount_added(self, reports: List[MergeReport]) -> None:
        # A lower ranked archive may have been displaced after it was counted
        with self._lock:
            visible = Counter(self._ranks.values())
        for report in reports:
            if report.ok:
                report.added = visible[(report.rank, str(report.archive_path))]
