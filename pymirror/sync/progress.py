"""Structured progress events emitted by the sync engine.

The engine never prints. Everything a user could want to see (created
directories, copied and skipped files, retries, removals) is emitted as a
SyncProgressInfo through a SyncProgressTracker. Rendering is up to the
consumer, see ``pymirror.cli_progress``.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .comparator import EntryDecision


class SyncProgressEvent(str, Enum):
    """Kinds of progress events."""

    ROOT_CREATE = "root_create"
    CHILD_ROOT = "child_root"
    DIR_CREATE = "dir_create"
    DIR_SKIP_EMPTY = "dir_skip_empty"
    DIR_REMOVE = "dir_remove"
    DIR_SHRED = "dir_shred"
    FILE_SKIP = "file_skip"
    FILE_COPY_START = "file_copy_start"
    FILE_COPY_PROGRESS = "file_copy_progress"
    FILE_COPY_COMPLETE = "file_copy_complete"
    FILE_RETRY = "file_retry"
    FILE_FAILED = "file_failed"
    FILE_REMOVE = "file_remove"
    FILE_SHRED = "file_shred"
    KIND_CONFLICT = "kind_conflict"
    ATTRIBUTES_UNSUPPORTED = "attributes_unsupported"


@dataclass
class SyncProgressInfo:
    """Payload of a single progress event."""

    event: SyncProgressEvent
    path: str = ""
    """Path the event is about (source side for copies)"""

    dest_path: str = ""
    """Destination path for copies"""

    decision: Optional[EntryDecision] = None
    dry_run: bool = False
    bytes_done: int = 0
    bytes_total: int = 0
    percent: int = 0
    attempt: int = 0
    max_attempts: int = 0
    error: Optional[str] = None
    detail: str = ""


class SyncProgressTracker:
    """Dispatches progress events to a callback.

    Calls are serialized so callbacks never run concurrently, even when
    file transfers run on worker threads.
    """

    def __init__(
        self, callback: Optional[Callable[[SyncProgressInfo], None]] = None
    ) -> None:
        """Initialize the tracker.

        Args:
            callback: Function receiving each SyncProgressInfo (None to drop events)
        """
        self.callback = callback
        self._lock = threading.Lock()

    def emit(self, event: SyncProgressEvent, **fields) -> None:
        """Build a SyncProgressInfo and hand it to the callback."""
        if self.callback is None:
            return
        info = SyncProgressInfo(event=event, **fields)
        with self._lock:
            self.callback(info)
