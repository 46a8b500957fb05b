"""pymirror - reconcile a destination directory tree with a source tree."""

from .config import FileAttribute, RecursionMode, SyncConfig
from .exceptions import (
    ConfigError,
    CopyError,
    MetadataReadError,
    PurgeError,
    PyMirrorError,
    SecureEraseError,
    SourceNotFoundError,
)
from .sync import SyncEngine, SyncStatistics

__version__ = "0.1.0"

__all__ = [
    "SyncConfig",
    "RecursionMode",
    "FileAttribute",
    "SyncEngine",
    "SyncStatistics",
    "PyMirrorError",
    "ConfigError",
    "SourceNotFoundError",
    "MetadataReadError",
    "CopyError",
    "SecureEraseError",
    "PurgeError",
]
