"""CLI progress display for sync operations.

This module turns the SyncProgressInfo events of the sync engine into
log lines and Rich progress bars.
"""

import os
from typing import Optional

from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TransferSpeedColumn,
)

from .config import SyncConfig
from .output import OutputFormatter
from .sync.comparator import EntryDecision
from .sync.progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .sync.stats import SyncStatistics


class SyncProgressDisplay:
    """Renders sync events as log lines and per-file copy progress bars.

    File name lines (copies, skips, created directories) follow
    ``config.log_file_names``. Removals, retries and failures are always
    reported. Progress bars are shown only with ``config.show_progress``
    outside dry runs and quiet mode.
    """

    def __init__(self, out: OutputFormatter, config: SyncConfig) -> None:
        """Initialize the progress display.

        Args:
            out: Output formatter for log lines
            config: Options of the run being displayed
        """
        self.out = out
        self.config = config
        self._progress: Optional[Progress] = None
        self._tasks: dict[str, TaskID] = {}

    def create_tracker(self) -> SyncProgressTracker:
        """Create a SyncProgressTracker that updates this display.

        Returns:
            A configured SyncProgressTracker
        """
        return SyncProgressTracker(callback=self._handle_event)

    def _file_line(self, message: str) -> None:
        if self.config.log_file_names:
            self.out.info(message)

    def _handle_event(self, info: SyncProgressInfo) -> None:
        """Handle a progress event from the tracker.

        Args:
            info: Progress information
        """
        event = info.event

        if event == SyncProgressEvent.ROOT_CREATE:
            verb = "Would create" if info.dry_run else "Creating"
            self.out.info(f"{verb} destination directory: {info.path}")

        elif event == SyncProgressEvent.CHILD_ROOT:
            self.out.info(f"\nProcessing child directory: {info.path}")

        elif event == SyncProgressEvent.DIR_CREATE:
            verb = "Would create" if info.dry_run else "Creating"
            self.out.info(f"{verb} directory: {info.path}")

        elif event == SyncProgressEvent.DIR_SKIP_EMPTY:
            self._file_line(f"Skipping empty directory: {info.path}")

        elif event == SyncProgressEvent.FILE_SKIP:
            self._file_line(f"Skipping identical file: {info.dest_path}")

        elif event == SyncProgressEvent.FILE_COPY_START:
            self._file_line(f"Copying file: {info.path} -> {info.dest_path}")
            self._start_task(info)

        elif event == SyncProgressEvent.FILE_COPY_PROGRESS:
            task = self._tasks.get(info.dest_path)
            if self._progress is not None and task is not None:
                self._progress.update(task, completed=info.bytes_done)

        elif event == SyncProgressEvent.FILE_COPY_COMPLETE:
            if info.decision == EntryDecision.WOULD_COPY:
                self.out.info(f"Would copy file: {info.path} -> {info.dest_path}")
            self._finish_task(info)

        elif event == SyncProgressEvent.FILE_RETRY:
            self.out.warning(
                f"Retry {info.attempt} of {info.max_attempts}: "
                f"{info.path} -> {info.dest_path}, Error: {info.error}"
            )

        elif event == SyncProgressEvent.FILE_FAILED:
            self._finish_task(info)
            self.out.error(
                f"Failed to copy after {info.attempt} attempt(s): "
                f"{info.path} -> {info.dest_path}, Error: {info.error}"
            )

        elif event == SyncProgressEvent.KIND_CONFLICT:
            self.out.error(
                f"Cannot synchronize {info.path} -> {info.dest_path}: {info.error}"
            )

        elif event == SyncProgressEvent.FILE_REMOVE:
            if info.decision == EntryDecision.WOULD_REMOVE:
                self.out.info(f"Would remove file: {info.path}")
            else:
                self.out.info(f"Removed file: {info.path}")

        elif event == SyncProgressEvent.DIR_REMOVE:
            if info.decision == EntryDecision.WOULD_REMOVE:
                self.out.info(f"Would remove directory: {info.path}")
            else:
                self.out.info(f"Removed directory: {info.path}")

        elif event == SyncProgressEvent.FILE_SHRED:
            self.out.info(f"Securely deleted file: {info.path}")

        elif event == SyncProgressEvent.DIR_SHRED:
            self.out.info(
                f"Removed directory after secure file deletion: {info.path}"
            )

        elif event == SyncProgressEvent.ATTRIBUTES_UNSUPPORTED:
            self.out.warning(
                f"Attributes {info.detail} cannot be applied on this platform "
                "and were skipped"
            )

    def _start_task(self, info: SyncProgressInfo) -> None:
        if self._progress is None or info.bytes_total <= 0:
            return
        self._tasks[info.dest_path] = self._progress.add_task(
            "Copying",
            total=info.bytes_total,
            filename=os.path.basename(info.dest_path),
        )

    def _finish_task(self, info: SyncProgressInfo) -> None:
        task = self._tasks.pop(info.dest_path, None)
        if self._progress is not None and task is not None:
            self._progress.remove_task(task)

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        config = self.config
        if config.show_progress and not config.list_only and not self.out.quiet:
            self._progress = Progress(
                TextColumn("[bold blue]{task.description}"),
                TextColumn("{task.fields[filename]}"),
                BarColumn(),
                TaskProgressColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                console=self.out.console,
                transient=True,
                refresh_per_second=4,
            )
            self._progress.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._tasks.clear()


def run_sync_with_progress(
    engine,
    source: str,
    destination: str,
    pattern: Optional[str],
    out: OutputFormatter,
) -> SyncStatistics:
    """Run a sync with progress lines and bars.

    Args:
        engine: SyncEngine instance (its tracker is replaced)
        source: Source directory
        destination: Destination directory
        pattern: Optional file name pattern
        out: Output formatter

    Returns:
        Statistics of the run
    """
    with SyncProgressDisplay(out, engine.config) as display:
        engine.set_tracker(display.create_tracker())
        return engine.run(source, destination, pattern)
