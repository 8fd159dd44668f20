"""TRE Toolkit CLI."""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__

ARCHIVES = click.argument("archives", nargs=-1, type=click.Path(exists=True, path_type=Path))
CONFIG = click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Live config (swg_live.cfg) listing archives by search priority",
)
WORKERS = click.option(
    "-j",
    "--workers",
    type=click.IntRange(min=1),
    default=1,
    envvar="TRE_TOOLKIT_WORKERS",
    show_default=True,
    help="Number of archives to parse in parallel",
)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv)")
def main(verbose: int):
    """TRE Toolkit - Browse and extract Star Wars Galaxies TRE archives.

    Archives are merged into one file tree. When several archives contain
    the same path, the archive listed first wins, so list them from highest
    to lowest priority (patches before base data).
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_index(archives: Tuple[Path, ...], config: Optional[Path], workers: int):
    """Merge the config's archives and the explicit ones into a TreeIndex."""
    from .config import load_search_paths
    from .index import TreeIndex

    paths = list(archives)
    if config is not None:
        paths = load_search_paths(config) + paths

    if not paths:
        raise click.UsageError("No archives given (pass ARCHIVES or --config)")

    index = TreeIndex()
    for report in index.merge_all(paths, max_workers=workers):
        if not report.ok:
            click.echo(f"Warning: skipped {report.archive_path}: {report.error}", err=True)

    return index


@main.command()
@click.argument("archive", type=click.Path(exists=True, path_type=Path))
def info(archive: Path):
    """Show the header of a single TRE archive."""
    from .tre import TREReader

    click.echo(f"Opening: {archive}")

    try:
        reader = TREReader(archive)
        entries = reader.open()
        header = reader.header
        compressed = sum(1 for e in entries if e.is_compressed)

        click.echo(f"Version:      {header.version_tag}")
        click.echo(f"Records:      {header.total_records}")
        click.echo(f"Compressed:   {compressed}")
        click.echo(f"Records at:   0x{header.records_offset:08X}")
        click.echo(f"Records blk:  level {header.records_compression_level}, {header.records_deflated_size} bytes")
        click.echo(f"Names blk:    level {header.names_compression_level}, {header.names_deflated_size} -> {header.names_inflated_size} bytes")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command(name="list")
@ARCHIVES
@CONFIG
@WORKERS
@click.option("-p", "--prefix", default="", help="Only list paths starting with PREFIX")
def list_files(archives: Tuple[Path, ...], config: Optional[Path], workers: int, prefix: str):
    """List the merged file tree of one or more archives."""
    try:
        index = build_index(archives, config, workers)
        for name in sorted(index.list_by_prefix(prefix)):
            click.echo(name)

    except click.UsageError:
        raise
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@ARCHIVES
@CONFIG
@WORKERS
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output directory",
)
@click.option("-f", "--filter", "name_filter", default="", help="Only extract paths containing FILTER")
@click.option("--overwrite", is_flag=True, help="Replace files that already exist")
def extract(
    archives: Tuple[Path, ...],
    config: Optional[Path],
    workers: int,
    output: Path,
    name_filter: str,
    overwrite: bool,
):
    """Extract the merged file tree to a directory.

    Files that already exist in the output directory are skipped unless
    --overwrite is given.
    """
    from .export import export_index

    try:
        index = build_index(archives, config, workers)
        click.echo(f"Files:  {len(index)}")
        click.echo(f"Output: {output}")
        click.echo()

        count = sum(1 for name in index if name_filter in name)
        with click.progressbar(length=count, label="Extracting") as bar:
            report = export_index(
                index,
                output,
                name_filter=name_filter,
                overwrite=overwrite,
                progress=lambda i, total, name: bar.update(1),
            )

        click.echo()
        click.echo(f"Extracted: {report.written} files")
        click.echo(f"Skipped:   {report.skipped} files")
        if report.failed:
            click.echo(f"Failed:    {report.failed} files", err=True)
            sys.exit(1)

    except click.UsageError:
        raise
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("name")
@ARCHIVES
@CONFIG
def cat(name: str, archives: Tuple[Path, ...], config: Optional[Path]):
    """Write one file from the merged tree to stdout."""
    from .tre import read_entry_data

    try:
        index = build_index(archives, config, 1)
        entry = index.get(name)
        if entry is None:
            click.echo(f"Error: {name} not found", err=True)
            sys.exit(1)

        click.get_binary_stream("stdout").write(read_entry_data(entry))

    except click.UsageError:
        raise
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
