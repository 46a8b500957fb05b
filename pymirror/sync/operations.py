"""File transfer with retry for sync operations."""

import logging
import os
import threading
import time
from typing import Optional

from ..config import SyncConfig
from ..exceptions import CopyError, MetadataReadError
from .attributes import apply_attributes, make_writable
from .comparator import EntryDecision, FileMeta, needs_copy
from .progress import SyncProgressEvent, SyncProgressTracker
from .shredder import SecureEraser
from .stats import SyncStatistics

logger = logging.getLogger(__name__)


class FileTransfer:
    """Copies single files according to a SyncConfig.

    A copy is attempted up to ``config.max_attempts`` times with a fixed
    wait of ``config.wait_time`` seconds between attempts. Only failures of
    the byte copy itself are retried; metadata errors and secure deletion
    errors of moved sources are raised immediately.
    """

    def __init__(
        self,
        config: SyncConfig,
        stats: SyncStatistics,
        tracker: Optional[SyncProgressTracker] = None,
        eraser: Optional[SecureEraser] = None,
    ):
        """Initialize file transfer.

        Args:
            config: Options of the current run
            stats: Statistics of the current run (updated in place)
            tracker: Receives progress events
            eraser: Secure eraser used for moved files when shredding
        """
        self.config = config
        self.stats = stats
        self.tracker = tracker or SyncProgressTracker()
        self.eraser = eraser or SecureEraser(self.tracker, config.chunk_size)
        self._gap_reported = False
        self._gap_lock = threading.Lock()

    def transfer(self, src: str, dst: str) -> EntryDecision:
        """Bring ``dst`` up to date with ``src``.

        Args:
            src: Source file path
            dst: Destination file path

        Returns:
            COPY, SKIP_IDENTICAL, or WOULD_COPY in list-only mode

        Raises:
            MetadataReadError: If the source cannot be stat-ed
            CopyError: If every copy attempt failed
            SecureEraseError: If a moved source could not be shredded
        """
        try:
            src_stat = os.stat(src)
        except OSError as e:
            raise MetadataReadError(f"Cannot read metadata of {src}: {e}", src) from e
        source_meta = FileMeta.from_stat(src_stat)

        # Links and directories in the destination are replaced, never compared
        try:
            if os.path.islink(dst) or os.path.isdir(dst):
                dest_meta: Optional[FileMeta] = None
            else:
                dest_meta = FileMeta.from_path(dst)
        except (FileNotFoundError, NotADirectoryError):
            dest_meta = None
        except OSError as e:
            raise MetadataReadError(f"Cannot read metadata of {dst}: {e}", dst) from e

        if not needs_copy(source_meta, dest_meta):
            self.stats.increment("files_skipped")
            self.tracker.emit(
                SyncProgressEvent.FILE_SKIP,
                path=src,
                dest_path=dst,
                decision=EntryDecision.SKIP_IDENTICAL,
            )
            return EntryDecision.SKIP_IDENTICAL

        if self.config.list_only:
            self.stats.increment("files_copied")
            self.stats.increment("bytes_copied", source_meta.size)
            self.tracker.emit(
                SyncProgressEvent.FILE_COPY_COMPLETE,
                path=src,
                dest_path=dst,
                decision=EntryDecision.WOULD_COPY,
                dry_run=True,
                bytes_total=source_meta.size,
            )
            return EntryDecision.WOULD_COPY

        self.tracker.emit(
            SyncProgressEvent.FILE_COPY_START,
            path=src,
            dest_path=dst,
            bytes_total=source_meta.size,
        )

        max_attempts = self.config.max_attempts
        attempt = 0
        while True:
            attempt += 1
            try:
                self._copy_bytes(src, dst, source_meta.size)
                break
            except OSError as e:
                if attempt >= max_attempts:
                    self._discard_partial(dst)
                    self.stats.increment("files_failed")
                    self.tracker.emit(
                        SyncProgressEvent.FILE_FAILED,
                        path=src,
                        dest_path=dst,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        error=str(e),
                    )
                    raise CopyError(
                        f"Failed to copy {src} -> {dst} after {attempt} attempt(s): {e}",
                        path=src,
                        attempts=attempt,
                    ) from e

                logger.debug(
                    "Copy attempt %d/%d of %s failed, retrying in %ss: %s",
                    attempt,
                    max_attempts,
                    src,
                    self.config.wait_time,
                    e,
                )
                self.tracker.emit(
                    SyncProgressEvent.FILE_RETRY,
                    path=src,
                    dest_path=dst,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(e),
                )
                time.sleep(self.config.wait_time)

        self._finish_copy(src, dst, src_stat)

        self.stats.increment("files_copied")
        self.stats.increment("bytes_copied", source_meta.size)
        self.tracker.emit(
            SyncProgressEvent.FILE_COPY_COMPLETE,
            path=src,
            dest_path=dst,
            decision=EntryDecision.COPY,
            bytes_done=source_meta.size,
            bytes_total=source_meta.size,
            percent=100,
        )
        return EntryDecision.COPY

    def _copy_bytes(self, src: str, dst: str, total_size: int) -> None:
        """Copy the content of one file, a single attempt."""
        if os.path.islink(dst):
            # Replace the link itself, never its target
            os.remove(dst)
        elif self.config.backup_mode and os.path.lexists(dst):
            if make_writable(dst):
                logger.debug("Backup mode: made %s writable", dst)

        if self.config.empty_files:
            with open(dst, "wb"):
                pass
            return

        chunk_size = self.config.chunk_size
        copied = 0
        last_percent = 0

        with open(src, "rb") as reader, open(dst, "wb") as writer:
            while True:
                chunk = reader.read(chunk_size)
                if not chunk:
                    break
                writer.write(chunk)

                if self.config.restartable:
                    writer.flush()
                    os.fsync(writer.fileno())

                copied += len(chunk)
                if self.config.show_progress and total_size > 0:
                    percent = copied * 100 // total_size
                    if percent > last_percent:
                        last_percent = percent
                        self.tracker.emit(
                            SyncProgressEvent.FILE_COPY_PROGRESS,
                            path=src,
                            dest_path=dst,
                            bytes_done=copied,
                            bytes_total=total_size,
                            percent=percent,
                        )

    def _finish_copy(self, src: str, dst: str, src_stat: os.stat_result) -> None:
        """Fix up timestamps and attributes, then remove the source if moving."""
        try:
            os.utime(dst, ns=(src_stat.st_atime_ns, src_stat.st_mtime_ns))
        except OSError as e:
            logger.warning("Could not preserve modification time of %s: %s", dst, e)

        if self.config.has_attribute_changes:
            try:
                unsupported = apply_attributes(
                    dst, self.config.attributes_add, self.config.attributes_remove
                )
            except OSError as e:
                logger.warning("Could not change attributes of %s: %s", dst, e)
            else:
                if unsupported:
                    self._report_attribute_gap(unsupported.letters)

        if self.config.move_files:
            if self.config.shred_files:
                self.eraser.shred(src)
            else:
                try:
                    os.remove(src)
                except OSError as e:
                    logger.warning("Could not remove moved source %s: %s", src, e)

    def _discard_partial(self, dst: str) -> None:
        """Remove what a failed copy left at ``dst``.

        A truncated file carries a newer mtime than its source and would
        be skipped as identical by every later run. If it cannot be
        removed, its mtime is reset so the next run copies it again.
        """
        if not os.path.isfile(dst) or os.path.islink(dst):
            return
        try:
            os.remove(dst)
            logger.debug("Removed partial copy %s", dst)
        except OSError as e:
            logger.warning("Could not remove partial copy %s: %s", dst, e)
            try:
                os.utime(dst, ns=(0, 0))
            except OSError as e:
                logger.warning("Could not reset mtime of partial copy %s: %s", dst, e)

    def _report_attribute_gap(self, letters: str) -> None:
        with self._gap_lock:
            if self._gap_reported:
                return
            self._gap_reported = True
        logger.warning("Attributes not supported on this platform: %s", letters)
        self.tracker.emit(SyncProgressEvent.ATTRIBUTES_UNSUPPORTED, detail=letters)
