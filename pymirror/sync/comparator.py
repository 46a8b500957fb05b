"""Change detection logic for sync operations."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EntryDecision(str, Enum):
    """Decisions the reconciler takes for a single entry."""

    COPY = "copy"
    """File was copied to the destination"""

    SKIP_IDENTICAL = "skip_identical"
    """Destination file is already up to date"""

    SKIP_EMPTY_DIR = "skip_empty_dir"
    """Empty source directory left out"""

    REMOVE_EXTRANEOUS = "remove_extraneous"
    """Destination entry without source counterpart removed"""

    WOULD_COPY = "would_copy"
    """Dry run: file would be copied"""

    WOULD_REMOVE = "would_remove"
    """Dry run: destination entry would be removed"""


@dataclass(frozen=True)
class FileMeta:
    """The metadata used to decide whether a file must be copied."""

    size: int
    """File size in bytes"""

    mtime_ns: int
    """Last modification time in nanoseconds since the epoch"""

    @classmethod
    def from_stat(cls, stat: os.stat_result) -> "FileMeta":
        """Create FileMeta from an ``os.stat`` result."""
        return cls(size=stat.st_size, mtime_ns=stat.st_mtime_ns)

    @classmethod
    def from_path(cls, path: str) -> "FileMeta":
        """Create FileMeta by stat-ing a path.

        Raises:
            OSError: If the path cannot be stat-ed
        """
        return cls.from_stat(os.stat(path))


def needs_copy(source_meta: FileMeta, dest_meta: Optional[FileMeta]) -> bool:
    """Decide if the source file must be copied over the destination.

    Args:
        source_meta: Metadata of the source file
        dest_meta: Metadata of the destination file, None if it does not exist

    Returns:
        True if the destination is missing, older, or has the same
        timestamp but a different size
    """
    if dest_meta is None:
        return True

    if source_meta.mtime_ns > dest_meta.mtime_ns:
        return True

    # Same timestamp but different size: clock resolution collision
    if source_meta.mtime_ns == dest_meta.mtime_ns:
        return source_meta.size != dest_meta.size

    return False
