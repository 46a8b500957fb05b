"""Core sync engine reconciling a destination tree with a source tree."""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from ..config import SyncConfig
from ..exceptions import CopyError, PurgeError, SourceNotFoundError
from .comparator import EntryDecision
from .matcher import matches
from .operations import FileTransfer
from .progress import SyncProgressEvent, SyncProgressTracker
from .scanner import DirectoryScanner, SyncEntry
from .shredder import SecureEraser
from .stats import SyncStatistics

logger = logging.getLogger(__name__)


class SyncEngine:
    """Walks a source tree and brings a destination tree in line with it.

    Every directory level goes through the same steps: make sure the
    destination directory exists, handle the files of the level, descend
    into subdirectories, and finally (with purge or mirror) remove
    destination entries that were not seen in the source.

    The engine does not print anything. Progress is reported through the
    SyncProgressTracker and the counters end up in ``stats``.

    Examples:
        >>> engine = SyncEngine(SyncConfig(mirror=True, retries=3, wait_time=1))
        >>> stats = engine.run("/data/photos", "/backup/photos", "*.jpg")
        >>> print(f"Copied {stats.files_copied} file(s)")
    """

    def __init__(
        self,
        config: SyncConfig,
        tracker: Optional[SyncProgressTracker] = None,
        stats: Optional[SyncStatistics] = None,
    ):
        """Initialize sync engine.

        Args:
            config: Options of this run
            tracker: Receives progress events (events are dropped if None)
            stats: Statistics to update (a fresh instance if None)
        """
        self.config = config
        self.tracker = tracker or SyncProgressTracker()
        self.stats = stats or SyncStatistics()
        self.scanner = DirectoryScanner()
        self.eraser = SecureEraser(self.tracker, config.chunk_size)
        self.transfer = FileTransfer(config, self.stats, self.tracker, self.eraser)
        # Directories reported as created during a dry run
        self._planned_dirs: set[str] = set()

    def set_tracker(self, tracker: SyncProgressTracker) -> None:
        """Route the progress events of all components to ``tracker``."""
        self.tracker = tracker
        self.eraser.tracker = tracker
        self.transfer.tracker = tracker

    def run(
        self, source: str, destination: str, pattern: Optional[str] = None
    ) -> SyncStatistics:
        """Synchronize ``destination`` with ``source``.

        Args:
            source: Source directory
            destination: Destination directory (created if missing)
            pattern: Optional file name pattern (see ``matches``)

        Returns:
            Statistics of the run

        Raises:
            SourceNotFoundError: If the source directory does not exist
            PyMirrorError: On unrecoverable errors outside the copy retry loop
            OSError: If a destination directory cannot be created
        """
        source = os.path.abspath(source)
        destination = os.path.abspath(destination)

        if not os.path.isdir(source):
            raise SourceNotFoundError(
                f"Source directory does not exist: {source}", source
            )

        logger.debug(
            "Starting sync %s -> %s (pattern=%s, options=%r)",
            source,
            destination,
            pattern,
            self.config.describe_options(),
        )

        try:
            if not os.path.isdir(destination):
                if self.config.list_only:
                    self._planned_dirs.add(destination)
                else:
                    os.makedirs(destination, exist_ok=True)
                self.tracker.emit(
                    SyncProgressEvent.ROOT_CREATE,
                    path=destination,
                    dry_run=self.config.list_only,
                )

            if self.config.child_only:
                for entry in self.scanner.scan_level(source, destination):
                    if not entry.is_dir:
                        continue
                    self.tracker.emit(SyncProgressEvent.CHILD_ROOT, path=entry.name)
                    if not self._resolve_kind_conflict(entry):
                        continue
                    self.sync_directory(entry.source_path, entry.dest_path, pattern)
            else:
                self.sync_directory(source, destination, pattern)
        finally:
            self.stats.finish()

        logger.debug("Sync finished: %s", self.stats.as_dict())
        return self.stats

    def sync_directory(
        self, source_dir: str, dest_dir: str, pattern: Optional[str] = None
    ) -> None:
        """Reconcile one directory level and recurse into its subdirectories.

        Args:
            source_dir: Source directory of this level
            dest_dir: Destination directory of this level
            pattern: Optional file name pattern
        """
        self._ensure_destination(dest_dir)

        entries = self.scanner.scan_level(source_dir, dest_dir)
        source_names: set[str] = set()
        files: list[SyncEntry] = []
        directories: list[SyncEntry] = []

        for entry in entries:
            if entry.is_dir:
                if self.config.recursion.is_recursive:
                    source_names.add(entry.name)
                    directories.append(entry)
            elif matches(entry.name, pattern):
                source_names.add(entry.name)
                files.append(entry)

        self._transfer_files(
            [entry for entry in files if self._resolve_kind_conflict(entry)]
        )

        for entry in directories:
            self._sync_subdirectory(entry, pattern)

        if self.config.purge or self.config.mirror:
            self._purge_extraneous(dest_dir, source_names)

    def _ensure_destination(self, dest_dir: str) -> None:
        """Create the destination directory of a level if it is missing."""
        if os.path.isdir(dest_dir) or dest_dir in self._planned_dirs:
            return

        if self.config.list_only:
            self._planned_dirs.add(dest_dir)
        else:
            os.makedirs(dest_dir, exist_ok=True)
            logger.debug("Created directory %s", dest_dir)

        self.stats.increment("dirs_created")
        self.tracker.emit(
            SyncProgressEvent.DIR_CREATE, path=dest_dir, dry_run=self.config.list_only
        )

    def _transfer_files(self, files: list[SyncEntry]) -> None:
        """Transfer the files of one level, in parallel if configured.

        All transfers have finished when this returns.
        """
        threads = self.config.threads
        if threads > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=min(threads, len(files))) as executor:
                futures = [executor.submit(self._transfer_file, f) for f in files]
                for future in as_completed(futures):
                    future.result()
        else:
            for entry in files:
                self._transfer_file(entry)

    def _transfer_file(self, entry: SyncEntry) -> None:
        try:
            self.transfer.transfer(entry.source_path, entry.dest_path)
        except CopyError as e:
            # Counted as failed by FileTransfer; siblings continue
            logger.debug("Continuing after failed copy: %s", e)

    def _sync_subdirectory(self, entry: SyncEntry, pattern: Optional[str]) -> None:
        if self.config.recursion.skips_empty and self.scanner.is_empty_dir(
            entry.source_path
        ):
            self.stats.increment("dirs_skipped")
            self.tracker.emit(
                SyncProgressEvent.DIR_SKIP_EMPTY,
                path=entry.source_path,
                decision=EntryDecision.SKIP_EMPTY_DIR,
            )
            return

        if not self._resolve_kind_conflict(entry):
            return

        self.sync_directory(entry.source_path, entry.dest_path, pattern)

        if self.config.move_dirs and not self.config.list_only:
            if self.scanner.is_empty_dir(entry.source_path):
                try:
                    os.rmdir(entry.source_path)
                except OSError as e:
                    # A concurrent change must not fail the whole run
                    logger.debug(
                        "Could not remove moved directory %s: %s", entry.source_path, e
                    )

    def _resolve_kind_conflict(self, entry: SyncEntry) -> bool:
        """Deal with a destination entry of the wrong kind (file vs directory).

        With purge or mirror the destination entry is removed (or reported
        as a removal in a dry run) and the source entry proceeds. Otherwise
        the entry is counted as failed and left out of this run.

        Returns:
            True if the source entry can be synchronized
        """
        dest = entry.dest_path
        if entry.is_dir:
            conflict = os.path.lexists(dest) and not os.path.isdir(dest)
            problem = "destination exists and is not a directory"
        else:
            conflict = os.path.isdir(dest) and not os.path.islink(dest)
            problem = "destination is a directory"
        if not conflict:
            return True

        dest_is_dir = os.path.isdir(dest) and not os.path.islink(dest)

        if not (self.config.purge or self.config.mirror):
            logger.debug("Cannot synchronize %s: %s", entry.source_path, problem)
            self.stats.increment("files_failed")
            self.tracker.emit(
                SyncProgressEvent.KIND_CONFLICT,
                path=entry.source_path,
                dest_path=dest,
                error=problem,
            )
            return False

        if self.config.list_only:
            event = (
                SyncProgressEvent.DIR_REMOVE
                if dest_is_dir
                else SyncProgressEvent.FILE_REMOVE
            )
            self.tracker.emit(
                event,
                path=dest,
                decision=EntryDecision.WOULD_REMOVE,
                dry_run=True,
            )
            return True

        if dest_is_dir:
            self._remove_directory(dest)
            self.stats.increment("dirs_removed")
        else:
            self._remove_file(dest)
            self.stats.increment("files_removed")
        return True

    def _purge_extraneous(self, dest_dir: str, source_names: set[str]) -> None:
        """Remove destination entries whose names were not seen in the source.

        Files left out by the pattern are not in ``source_names`` and are
        therefore removed as well: the pattern limits what is copied, not
        what is kept.
        """
        if not os.path.isdir(dest_dir):
            return

        try:
            with os.scandir(dest_dir) as iterator:
                extraneous = sorted(
                    (item for item in iterator if item.name not in source_names),
                    key=lambda item: item.name,
                )
        except OSError as e:
            raise PurgeError(f"Cannot list directory {dest_dir}: {e}", dest_dir) from e

        for item in extraneous:
            is_dir = item.is_dir(follow_symlinks=False)

            if self.config.list_only:
                event = (
                    SyncProgressEvent.DIR_REMOVE
                    if is_dir
                    else SyncProgressEvent.FILE_REMOVE
                )
                self.tracker.emit(
                    event,
                    path=item.path,
                    decision=EntryDecision.WOULD_REMOVE,
                    dry_run=True,
                )
                continue

            if is_dir:
                self._remove_directory(item.path)
                self.stats.increment("dirs_removed")
            else:
                self._remove_file(item.path)
                self.stats.increment("files_removed")

    def _remove_file(self, path: str) -> None:
        if self.config.shred_files:
            self.eraser.shred(path)
        else:
            try:
                os.remove(path)
            except OSError as e:
                raise PurgeError(f"Cannot remove file {path}: {e}", path) from e
        self.tracker.emit(
            SyncProgressEvent.FILE_REMOVE,
            path=path,
            decision=EntryDecision.REMOVE_EXTRANEOUS,
        )

    def _remove_directory(self, path: str) -> None:
        if self.config.shred_files:
            self.eraser.shred_tree(path)
        else:
            try:
                shutil.rmtree(path)
            except OSError as e:
                raise PurgeError(f"Cannot remove directory {path}: {e}", path) from e
        self.tracker.emit(
            SyncProgressEvent.DIR_REMOVE,
            path=path,
            decision=EntryDecision.REMOVE_EXTRANEOUS,
        )
