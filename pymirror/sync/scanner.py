"""Directory scanning utilities for sync operations."""

import logging
import os
from dataclasses import dataclass
from enum import Enum

from ..exceptions import MetadataReadError

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Kind of a scanned source entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class SyncEntry:
    """A source entry paired with its destination path."""

    name: str
    """Entry name within the current directory level"""

    source_path: str
    """Absolute path in the source tree"""

    dest_path: str
    """Absolute path in the destination tree"""

    kind: EntryKind
    """Whether the entry is a file or a directory"""

    @property
    def is_dir(self) -> bool:
        """Check if the entry is a directory."""
        return self.kind == EntryKind.DIRECTORY


class DirectoryScanner:
    """Lists one directory level at a time.

    Symbolic links in the source are followed, so a link to a file is
    copied as a file and a link to a directory is walked as a directory.
    Entries that are neither (broken links, sockets, FIFOs) are left out.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for entry in scanner.scan_level("/data/src", "/data/dst"):
        ...     print(entry.name, entry.kind.value)
    """

    def scan_level(self, source_dir: str, dest_dir: str) -> list[SyncEntry]:
        """Scan the direct children of a source directory.

        Args:
            source_dir: Directory to list
            dest_dir: Matching destination directory

        Returns:
            Entries sorted by name

        Raises:
            MetadataReadError: If the directory cannot be listed
        """
        entries: list[SyncEntry] = []

        try:
            with os.scandir(source_dir) as iterator:
                for item in iterator:
                    if item.is_dir():
                        kind = EntryKind.DIRECTORY
                    elif item.is_file():
                        kind = EntryKind.FILE
                    else:
                        logger.debug("Ignoring special entry: %s", item.path)
                        continue
                    entries.append(
                        SyncEntry(
                            name=item.name,
                            source_path=item.path,
                            dest_path=os.path.join(dest_dir, item.name),
                            kind=kind,
                        )
                    )
        except OSError as e:
            raise MetadataReadError(
                f"Cannot list directory {source_dir}: {e}", source_dir
            ) from e

        entries.sort(key=lambda entry: entry.name)
        return entries

    @staticmethod
    def is_empty_dir(path: str) -> bool:
        """Check if a directory has no entries at all.

        Raises:
            MetadataReadError: If the directory cannot be listed
        """
        try:
            with os.scandir(path) as iterator:
                return next(iterator, None) is None
        except OSError as e:
            raise MetadataReadError(f"Cannot list directory {path}: {e}", path) from e
