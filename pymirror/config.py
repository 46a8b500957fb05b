"""Configuration for synchronization runs."""

from dataclasses import dataclass
from enum import Enum, Flag
from typing import Optional

from .exceptions import ConfigError
from .utils import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_RETRIES,
    DEFAULT_THREADS,
    DEFAULT_WAIT_TIME,
)


class RecursionMode(str, Enum):
    """How subdirectories of the source are handled."""

    NONE = "none"
    """Only the files of the top directory are synchronized"""

    NON_EMPTY = "nonEmpty"
    """Descend into subdirectories, skipping empty ones"""

    INCLUDE_EMPTY = "includeEmpty"
    """Descend into all subdirectories, empty ones included"""

    @property
    def is_recursive(self) -> bool:
        """Check if this mode descends into subdirectories."""
        return self != RecursionMode.NONE

    @property
    def skips_empty(self) -> bool:
        """Check if empty source directories are left out."""
        return self == RecursionMode.NON_EMPTY


class FileAttribute(Flag):
    """Fixed set of file attribute bits that can be added or removed.

    The values are the Windows ``FILE_ATTRIBUTE_*`` bits so they can be
    applied directly on that platform.
    """

    READ_ONLY = 0x0001
    HIDDEN = 0x0002
    SYSTEM = 0x0004
    ARCHIVE = 0x0020
    NORMAL = 0x0080
    COMPRESSED = 0x0800

    @classmethod
    def from_letters(cls, letters: str) -> "FileAttribute":
        """Parse attribute letters such as ``"RH"``.

        Args:
            letters: Any combination of R, A, S, H, C, N (case-insensitive)

        Returns:
            Combined FileAttribute flags

        Raises:
            ConfigError: If an unknown letter is given
        """
        result = cls(0)
        for letter in letters.upper():
            try:
                result |= _LETTER_TO_ATTRIBUTE[letter]
            except KeyError:
                raise ConfigError(
                    f"Unknown attribute letter '{letter}' (expected R, A, S, H, C, N)"
                ) from None
        return result

    @property
    def letters(self) -> str:
        """Attribute letters in canonical RASHCN order."""
        return "".join(
            letter for letter, attr in _LETTER_TO_ATTRIBUTE.items() if attr in self
        )


_LETTER_TO_ATTRIBUTE: dict[str, FileAttribute] = {
    "R": FileAttribute.READ_ONLY,
    "A": FileAttribute.ARCHIVE,
    "S": FileAttribute.SYSTEM,
    "H": FileAttribute.HIDDEN,
    "C": FileAttribute.COMPRESSED,
    "N": FileAttribute.NORMAL,
}


@dataclass(frozen=True)
class SyncConfig:
    """Options for one synchronization run.

    The combined modes are normalized on creation: ``mirror`` turns on
    ``purge`` and full recursion with empty directories, ``move_dirs``
    turns on ``move_files``.

    Examples:
        >>> config = SyncConfig(mirror=True)
        >>> config.purge, config.recursion
        (True, <RecursionMode.INCLUDE_EMPTY: 'includeEmpty'>)
    """

    recursion: RecursionMode = RecursionMode.NONE
    """Subdirectory handling"""

    restartable: bool = False
    """Flush to disk after every written chunk"""

    backup_mode: bool = False
    """Override read-only destination files when copying over them"""

    purge: bool = False
    """Remove destination entries that do not exist in the source"""

    mirror: bool = False
    """Purge plus recursion including empty directories"""

    move_files: bool = False
    """Delete source files after a successful copy"""

    move_dirs: bool = False
    """Also remove source directories emptied by the move"""

    attributes_add: FileAttribute = FileAttribute(0)
    """Attributes set on every copied file"""

    attributes_remove: FileAttribute = FileAttribute(0)
    """Attributes cleared on every copied file"""

    threads: int = DEFAULT_THREADS
    """Worker threads for file transfers within a directory"""

    retries: int = DEFAULT_RETRIES
    """Maximum copy attempts per file"""

    wait_time: float = DEFAULT_WAIT_TIME
    """Seconds to wait between copy attempts"""

    log_file: Optional[str] = None
    """Path of a file receiving a copy of the console output"""

    list_only: bool = False
    """Dry run: report decisions without touching the filesystem"""

    show_progress: bool = True
    """Report per-file copy percentage"""

    log_file_names: bool = True
    """Report one line per copied or skipped file"""

    empty_files: bool = False
    """Create zero-byte placeholders instead of copying content"""

    child_only: bool = False
    """Synchronize each immediate subdirectory of the source separately"""

    shred_files: bool = False
    """Securely overwrite files before deleting them"""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    """Buffer size for copy and overwrite loops"""

    def __post_init__(self) -> None:
        if self.mirror:
            object.__setattr__(self, "purge", True)
            object.__setattr__(self, "recursion", RecursionMode.INCLUDE_EMPTY)
        if self.move_dirs:
            object.__setattr__(self, "move_files", True)

        if self.threads < 1:
            raise ConfigError("Thread count must be at least 1")
        if self.retries < 0:
            raise ConfigError("Retry count cannot be negative")
        if self.wait_time < 0:
            raise ConfigError("Retry wait time cannot be negative")
        if self.chunk_size < 1:
            raise ConfigError("Chunk size must be at least 1 byte")

    @property
    def max_attempts(self) -> int:
        """Number of copy attempts per file (a zero retry count still copies once)."""
        return max(self.retries, 1)

    @property
    def has_attribute_changes(self) -> bool:
        """Check if any attribute should be added or removed."""
        return bool(self.attributes_add) or bool(self.attributes_remove)

    def describe_options(self) -> str:
        """Render the effective options as a normalized command-line string.

        Only options that differ from their defaults are listed, always in
        the same order.

        Returns:
            Option string (e.g., "--empty-dirs --mirror --retries 3")
        """
        parts: list[str] = []

        if self.recursion == RecursionMode.INCLUDE_EMPTY:
            parts.append("--empty-dirs")
        elif self.recursion == RecursionMode.NON_EMPTY:
            parts.append("--subdirs")
        if self.restartable:
            parts.append("--restartable")
        if self.backup_mode:
            parts.append("--backup")
        if self.mirror:
            parts.append("--mirror")
        elif self.purge:
            parts.append("--purge")
        if self.move_dirs:
            parts.append("--move")
        elif self.move_files:
            parts.append("--move-files")
        if self.attributes_add:
            parts.append(f"--add-attrs {self.attributes_add.letters}")
        if self.attributes_remove:
            parts.append(f"--remove-attrs {self.attributes_remove.letters}")
        if self.threads != DEFAULT_THREADS:
            parts.append(f"--threads {self.threads}")
        if self.retries != DEFAULT_RETRIES:
            parts.append(f"--retries {self.retries}")
        if self.wait_time != DEFAULT_WAIT_TIME:
            parts.append(f"--wait {self.wait_time:g}")
        if self.list_only:
            parts.append("--list-only")
        if not self.show_progress:
            parts.append("--no-progress")
        if not self.log_file_names:
            parts.append("--no-file-list")
        if self.empty_files:
            parts.append("--empty-files")
        if self.child_only:
            parts.append("--child-only")
        if self.shred_files:
            parts.append("--shred")

        return " ".join(parts)
