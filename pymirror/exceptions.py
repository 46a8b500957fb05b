"""Exception classes for pymirror."""

from typing import Optional


class PyMirrorError(Exception):
    """Base exception for all pymirror errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        """Initialize the error.

        Args:
            message: Human-readable error message
            path: Filesystem path the error refers to (if any)
        """
        super().__init__(message)
        self.path = path


class ConfigError(PyMirrorError):
    """Raised when the synchronization configuration is invalid."""


class SourceNotFoundError(PyMirrorError):
    """Raised when the source directory does not exist."""


class MetadataReadError(PyMirrorError):
    """Raised when file metadata cannot be read."""


class CopyError(PyMirrorError):
    """Raised when a file could not be copied within the retry bound."""

    def __init__(self, message: str, path: Optional[str] = None, attempts: int = 0):
        super().__init__(message, path)
        self.attempts = attempts


class SecureEraseError(PyMirrorError):
    """Raised when a secure overwrite or the following unlink fails.

    The deletion state of the file is unknown after this error: it may
    still exist, partially overwritten.
    """


class PurgeError(PyMirrorError):
    """Raised when an extraneous destination entry cannot be removed."""
