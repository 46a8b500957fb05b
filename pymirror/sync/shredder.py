"""Secure deletion by multi-pass overwrite."""

import logging
import os
from typing import Callable, Optional

from ..exceptions import SecureEraseError
from ..utils import DEFAULT_CHUNK_SIZE
from .progress import SyncProgressEvent, SyncProgressTracker

logger = logging.getLogger(__name__)

# Fixed byte patterns written before the final random pass
OVERWRITE_PATTERNS: tuple[int, ...] = (0xFF, 0x00, 0xAA, 0x55, 0xF0, 0x0F)


class SecureEraser:
    """Overwrites files several times before deleting them.

    Every file gets one full-length pass per byte in OVERWRITE_PATTERNS,
    then one pass of random bytes, each flushed to disk, and is unlinked
    afterwards.

    If any step fails a SecureEraseError is raised and the state of the
    file is unknown: it may still exist and may be partially overwritten.

    Examples:
        >>> eraser = SecureEraser()
        >>> eraser.shred("/tmp/secret.txt")
        >>> eraser.shred_tree("/tmp/secret_dir")
    """

    def __init__(
        self,
        tracker: Optional[SyncProgressTracker] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize the eraser.

        Args:
            tracker: Receives FILE_SHRED / DIR_SHRED events
            chunk_size: Size of the blocks written per pass
        """
        self.tracker = tracker or SyncProgressTracker()
        self.chunk_size = chunk_size

    def shred(self, path: str) -> None:
        """Securely overwrite and delete a single file.

        Symbolic links are unlinked without touching their target.

        Args:
            path: File to destroy

        Raises:
            SecureEraseError: If an overwrite pass or the unlink fails
        """
        try:
            if os.path.islink(path):
                os.remove(path)
                logger.debug("Removed symlink without overwriting: %s", path)
                self.tracker.emit(SyncProgressEvent.FILE_SHRED, path=path)
                return

            length = os.path.getsize(path)
            with open(path, "r+b") as handle:
                for pattern in OVERWRITE_PATTERNS:
                    block = bytes([pattern]) * self.chunk_size
                    self._overwrite_pass(handle, length, lambda n, b=block: b[:n])
                self._overwrite_pass(handle, length, os.urandom)
            os.remove(path)
        except OSError as e:
            raise SecureEraseError(
                f"Secure deletion of {path} failed: {e}", path=path
            ) from e

        logger.debug("Securely deleted %s (%d bytes)", path, length)
        self.tracker.emit(SyncProgressEvent.FILE_SHRED, path=path, bytes_total=length)

    def shred_tree(self, directory: str) -> None:
        """Shred every file below a directory, then remove the directories.

        Subdirectories are processed depth first so each directory is
        empty when it is removed.

        Args:
            directory: Directory to destroy

        Raises:
            SecureEraseError: If a file cannot be shredded or a directory removed
        """
        try:
            with os.scandir(directory) as entries:
                children = sorted(entries, key=lambda e: e.name)
        except OSError as e:
            raise SecureEraseError(
                f"Cannot list {directory} for secure deletion: {e}", path=directory
            ) from e

        for entry in children:
            if entry.is_dir(follow_symlinks=False):
                self.shred_tree(entry.path)
            else:
                self.shred(entry.path)

        try:
            os.rmdir(directory)
        except OSError as e:
            raise SecureEraseError(
                f"Cannot remove directory {directory}: {e}", path=directory
            ) from e

        logger.debug("Removed directory after secure deletion: %s", directory)
        self.tracker.emit(SyncProgressEvent.DIR_SHRED, path=directory)

    def _overwrite_pass(
        self, handle, length: int, make_block: Callable[[int], bytes]
    ) -> None:
        """Overwrite ``length`` bytes from offset 0 and flush them to disk.

        Args:
            handle: File opened for binary writing
            length: Number of bytes to overwrite
            make_block: Returns the bytes to write for a given block size
        """
        handle.seek(0)
        remaining = length
        while remaining > 0:
            size = min(remaining, self.chunk_size)
            handle.write(make_block(size))
            remaining -= size
        handle.flush()
        os.fsync(handle.fileno())
