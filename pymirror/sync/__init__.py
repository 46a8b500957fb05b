"""Sync engine for pymirror - tree reconciliation, copying and secure deletion."""

from .comparator import EntryDecision, FileMeta, needs_copy
from .engine import SyncEngine
from .matcher import matches
from .operations import FileTransfer
from .progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .scanner import DirectoryScanner, EntryKind, SyncEntry
from .shredder import OVERWRITE_PATTERNS, SecureEraser
from .stats import SyncStatistics

__all__ = [
    "SyncEngine",
    "FileTransfer",
    "SecureEraser",
    "OVERWRITE_PATTERNS",
    "DirectoryScanner",
    "SyncEntry",
    "EntryKind",
    "EntryDecision",
    "FileMeta",
    "needs_copy",
    "matches",
    "SyncStatistics",
    "SyncProgressEvent",
    "SyncProgressInfo",
    "SyncProgressTracker",
]
