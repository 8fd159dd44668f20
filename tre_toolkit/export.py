"""Write the contents of a merged index to disk."""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Union

from .errors import TREError
from .index import TreeIndex
from .tre import read_entry_data

logger = logging.getLogger(__name__)


@dataclass
class ExportReport:
    written: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.written + self.skipped + self.failed


def output_path_for(destination: Path, name: str) -> Optional[Path]:
    """Map a slash-delimited archive name below destination.

    Returns None for names that would land outside it.
    """
    parts = PurePosixPath(name).parts
    if not parts or PurePosixPath(name).is_absolute() or ".." in parts:
        return None
    return destination.joinpath(*parts)


def export_index(
    index: TreeIndex,
    destination: Union[str, Path],
    name_filter: str = "",
    overwrite: bool = False,
    progress: Optional[Callable[[int, int, str], None]] = None,
) -> ExportReport:
    """Extract every file in index below destination.

    Existing files are left alone unless overwrite is set. A file that fails
    to extract is logged and counted, and the export carries on.
    """
    destination = Path(destination)
    report = ExportReport()

    names = [n for n in index.names() if name_filter in n]
    total = len(names)

    for i, name in enumerate(names, 1):
        if progress:
            progress(i, total, name)

        output_path = output_path_for(destination, name)
        if output_path is None:
            logger.warning("Refusing to write %r outside %s", name, destination)
            report.failed += 1
            continue

        if output_path.exists() and not overwrite:
            report.skipped += 1
            continue

        try:
            data = read_entry_data(index[name])
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
        except (TREError, OSError) as e:
            logger.warning("Failed to extract %s: %s", name, e)
            report.failed += 1
            continue

        report.written += 1
        logger.debug("[%d/%d] Wrote %s", i, total, output_path)

    logger.info(
        "Exported %d files to %s (%d skipped, %d failed)",
        report.written,
        destination,
        report.skipped,
        report.failed,
    )
    return report
