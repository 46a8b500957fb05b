"""CLI interface for pymirror."""

import logging
from typing import Any, Optional

import click

from .cli_progress import run_sync_with_progress
from .config import FileAttribute, RecursionMode, SyncConfig
from .exceptions import ConfigError, PyMirrorError
from .output import OutputFormatter
from .sync import SyncEngine, SyncStatistics
from .utils import (
    BANNER_RULE,
    DEFAULT_RETRIES,
    DEFAULT_THREADS,
    DEFAULT_WAIT_TIME,
    format_timestamp,
)

logger = logging.getLogger(__name__)

# Exit code when the run completed but some files could not be copied
EXIT_FILES_FAILED = 2


def print_start_banner(
    out: OutputFormatter,
    source: str,
    destination: str,
    pattern: Optional[str],
    config: SyncConfig,
) -> None:
    """Print the banner shown before a run starts."""
    out.print(BANNER_RULE)
    out.print(f"pymirror - Started: {format_timestamp()}")
    out.print(f"Source: {source}")
    out.print(f"Destination: {destination}")
    out.print(f"Pattern: {pattern or '*.*'}")
    out.print(f"Options: {config.describe_options()}")
    out.print(BANNER_RULE)


def print_summary(
    out: OutputFormatter, source: str, destination: str, stats: SyncStatistics
) -> None:
    """Print the statistics summary at the end of a run."""
    out.print(BANNER_RULE)
    out.print(f"pymirror - Finished: {format_timestamp()}")
    out.print(f"Source: {source}")
    out.print(f"Destination: {destination}")
    out.print("")
    out.print("Statistics:")
    out.print(f"    Directories: {stats.dirs_created}")
    out.print(f"    Files: {stats.files_copied}")
    out.print(
        f"    Bytes: {stats.bytes_copied} ({out.format_size(stats.bytes_copied)})"
    )
    out.print(f"    Directories skipped: {stats.dirs_skipped}")
    out.print(f"    Files skipped: {stats.files_skipped}")
    out.print(f"    Files failed: {stats.files_failed}")
    out.print(f"    Directories removed: {stats.dirs_removed}")
    out.print(f"    Files removed: {stats.files_removed}")
    out.print("")
    out.print(f"Elapsed time: {int(stats.elapsed)} seconds")
    out.print(BANNER_RULE)


@click.command()
@click.argument("source", type=click.Path(file_okay=False))
@click.argument("destination", type=click.Path(file_okay=False))
@click.argument("pattern", required=False)
@click.option(
    "--subdirs", "-s", is_flag=True, help="Copy subdirectories, but not empty ones"
)
@click.option(
    "--empty-dirs",
    "-e",
    is_flag=True,
    help="Copy subdirectories, including empty ones",
)
@click.option(
    "--restartable",
    "-z",
    is_flag=True,
    help="Flush to disk after every chunk (slower but more robust)",
)
@click.option(
    "--backup",
    "-b",
    is_flag=True,
    help="Backup mode: overwrite read-only destination files",
)
@click.option(
    "--purge",
    is_flag=True,
    help="Delete destination files/folders that no longer exist in source",
)
@click.option(
    "--mirror",
    is_flag=True,
    help="Mirror the directory tree (--purge plus --empty-dirs)",
)
@click.option(
    "--move-files", is_flag=True, help="Delete source files after copying"
)
@click.option(
    "--move",
    "move_dirs",
    is_flag=True,
    help="Move files and remove emptied source directories",
)
@click.option(
    "--add-attrs",
    metavar="RASHCN",
    default="",
    help="Attributes to add to copied files",
)
@click.option(
    "--remove-attrs",
    metavar="RASHCN",
    default="",
    help="Attributes to remove from copied files",
)
@click.option(
    "--threads",
    type=int,
    default=DEFAULT_THREADS,
    show_default=True,
    help="Number of parallel file copies per directory",
)
@click.option(
    "--retries",
    "-r",
    type=int,
    default=DEFAULT_RETRIES,
    show_default=True,
    help="Number of attempts for failed copies",
)
@click.option(
    "--wait",
    "-w",
    type=float,
    default=DEFAULT_WAIT_TIME,
    show_default=True,
    help="Seconds to wait between copy attempts",
)
@click.option(
    "--log",
    "log_file",
    type=click.Path(dir_okay=False, writable=True),
    help="Also write output to this file",
)
@click.option(
    "--list-only",
    "--dry-run",
    "-l",
    "list_only",
    is_flag=True,
    help="List only - don't copy, timestamp or delete any files",
)
@click.option(
    "--no-progress", is_flag=True, help="Don't display the copied percentage"
)
@click.option("--no-file-list", is_flag=True, help="Don't log file names")
@click.option(
    "--empty-files", is_flag=True, help="Create empty (zero-byte) copies of files"
)
@click.option(
    "--child-only",
    is_flag=True,
    help="Process each direct child folder of SOURCE separately",
)
@click.option(
    "--shred", is_flag=True, help="Securely overwrite files before deletion"
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pymirror")
@click.pass_context
def main(
    ctx: Any,
    source: str,
    destination: str,
    pattern: Optional[str],
    subdirs: bool,
    empty_dirs: bool,
    restartable: bool,
    backup: bool,
    purge: bool,
    mirror: bool,
    move_files: bool,
    move_dirs: bool,
    add_attrs: str,
    remove_attrs: str,
    threads: int,
    retries: int,
    wait: float,
    log_file: Optional[str],
    list_only: bool,
    no_progress: bool,
    no_file_list: bool,
    empty_files: bool,
    child_only: bool,
    shred: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Synchronize DESTINATION with SOURCE.

    PATTERN optionally restricts the copied files by name: "*.txt",
    "report*", "*draft*" or an exact file name. With --purge or --mirror,
    destination files not matching PATTERN are removed as well.

    Examples:
        pymirror ./photos /backup/photos --empty-dirs
        pymirror ./docs /backup/docs "*.pdf" --mirror -r 3 -w 5
        pymirror ./inbox /archive --move --list-only
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pymirror").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    if empty_dirs:
        recursion = RecursionMode.INCLUDE_EMPTY
    elif subdirs:
        recursion = RecursionMode.NON_EMPTY
    else:
        recursion = RecursionMode.NONE

    try:
        config = SyncConfig(
            recursion=recursion,
            restartable=restartable,
            backup_mode=backup,
            purge=purge,
            mirror=mirror,
            move_files=move_files,
            move_dirs=move_dirs,
            attributes_add=FileAttribute.from_letters(add_attrs),
            attributes_remove=FileAttribute.from_letters(remove_attrs),
            threads=threads,
            retries=retries,
            wait_time=wait,
            log_file=log_file,
            list_only=list_only,
            show_progress=not no_progress,
            log_file_names=not no_file_list,
            empty_files=empty_files,
            child_only=child_only,
            shred_files=shred,
        )
    except ConfigError as e:
        raise click.UsageError(str(e)) from e

    with OutputFormatter(quiet=quiet, log_file=config.log_file) as out:
        print_start_banner(out, source, destination, pattern, config)
        if config.list_only:
            out.info("Dry run: No changes will be made")

        engine = SyncEngine(config)
        try:
            stats = run_sync_with_progress(engine, source, destination, pattern, out)
        except PyMirrorError as e:
            out.error(str(e))
            ctx.exit(1)
            return  # Unreachable, but helps type checker
        except OSError as e:
            logger.debug("Unrecoverable filesystem error", exc_info=True)
            out.error(f"Filesystem error: {e}")
            ctx.exit(1)
            return

        print_summary(out, source, destination, stats)

        if stats.files_failed:
            out.warning(f"{stats.files_failed} file(s) could not be copied")

    if stats.files_failed:
        ctx.exit(EXIT_FILES_FAILED)


if __name__ == "__main__":
    main()
