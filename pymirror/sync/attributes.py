"""Applying file attribute changes to copied files.

Windows has native attribute bits and gets all of them except COMPRESSED,
which needs a filesystem control call rather than an attribute bit.
Elsewhere READ_ONLY maps to the write permission bits and HIDDEN to the
``UF_HIDDEN`` file flag where the platform has one (macOS, BSD). Requested
attributes that cannot be applied are returned to the caller so the gap
can be reported.
"""

import logging
import os
import stat
import sys

from ..config import FileAttribute

logger = logging.getLogger(__name__)

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH
_INVALID_FILE_ATTRIBUTES = 0xFFFFFFFF


def supported_attributes() -> FileAttribute:
    """Return the attributes this platform can add and remove."""
    if sys.platform == "win32":
        return (
            FileAttribute.READ_ONLY
            | FileAttribute.HIDDEN
            | FileAttribute.SYSTEM
            | FileAttribute.ARCHIVE
            | FileAttribute.NORMAL
        )
    supported = FileAttribute.READ_ONLY
    if hasattr(os, "chflags") and hasattr(stat, "UF_HIDDEN"):
        supported |= FileAttribute.HIDDEN
    return supported


def apply_attributes(
    path: str, add: FileAttribute, remove: FileAttribute
) -> FileAttribute:
    """Add and remove attributes on a file.

    Args:
        path: File to modify
        add: Attributes to set
        remove: Attributes to clear (applied after ``add``)

    Returns:
        The requested attributes that this platform cannot apply

    Raises:
        OSError: If the platform call fails
    """
    supported = supported_attributes()
    unsupported = (add | remove) & ~supported
    add &= supported
    remove &= supported

    if add or remove:
        if sys.platform == "win32":
            _apply_windows(path, add, remove)
        else:
            _apply_posix(path, add, remove)
        logger.debug(
            "Attributes on %s: +%s -%s", path, add.letters or "-", remove.letters or "-"
        )

    return unsupported


def _apply_windows(path: str, add: FileAttribute, remove: FileAttribute) -> None:
    import ctypes

    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    current = kernel32.GetFileAttributesW(path)
    if current == _INVALID_FILE_ATTRIBUTES:
        raise ctypes.WinError()  # type: ignore[attr-defined]
    updated = (current | add.value) & ~remove.value
    if not kernel32.SetFileAttributesW(path, updated):
        raise ctypes.WinError()  # type: ignore[attr-defined]


def _apply_posix(path: str, add: FileAttribute, remove: FileAttribute) -> None:
    if FileAttribute.HIDDEN in add | remove:
        flags = os.stat(path).st_flags
        if FileAttribute.HIDDEN in add:
            flags |= stat.UF_HIDDEN
        if FileAttribute.HIDDEN in remove:
            flags &= ~stat.UF_HIDDEN
        os.chflags(path, flags)

    if FileAttribute.READ_ONLY in add | remove:
        mode = stat.S_IMODE(os.stat(path).st_mode)
        if FileAttribute.READ_ONLY in add:
            mode &= ~_WRITE_BITS
        if FileAttribute.READ_ONLY in remove:
            mode |= stat.S_IWUSR
        os.chmod(path, mode)


def make_writable(path: str) -> bool:
    """Clear the read-only state of an existing file.

    Args:
        path: File to unlock

    Returns:
        True if the file was read-only and has been made writable
    """
    if os.access(path, os.W_OK):
        return False
    if sys.platform == "win32":
        _apply_windows(path, FileAttribute(0), FileAttribute.READ_ONLY)
    else:
        os.chmod(path, stat.S_IMODE(os.stat(path).st_mode) | stat.S_IWUSR)
    return True
