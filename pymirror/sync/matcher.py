"""File name pattern matching for sync operations."""

import os
from typing import Optional

MATCH_ALL_PATTERNS = ("*", "*.*")


def matches(name: str, pattern: Optional[str] = None) -> bool:
    """Check if a file name satisfies a simple wildcard pattern.

    Only a leading and/or trailing ``*`` is understood; anything else is
    compared literally. Matching is case-sensitive and only the leaf name
    is considered, so ``"docs/a.txt"`` is matched as ``"a.txt"``.

    Args:
        name: File name or path
        pattern: Pattern such as ``*.txt``, ``log*``, ``*tmp*`` or
            ``notes.md``; None matches everything

    Returns:
        True if the name matches

    Examples:
        >>> matches("report.txt", "*.txt")
        True
        >>> matches("report.TXT", "*.txt")
        False
        >>> matches("backup-2024.tar", "backup*")
        True
        >>> matches("my_draft_v2.doc", "*draft*")
        True
    """
    if not pattern or pattern in MATCH_ALL_PATTERNS:
        return True

    base_name = os.path.basename(name)

    if len(pattern) >= 2 and pattern.startswith("*") and pattern.endswith("*"):
        return pattern[1:-1] in base_name
    if pattern.startswith("*"):
        return base_name.endswith(pattern[1:])
    if pattern.endswith("*"):
        return base_name.startswith(pattern[:-1])
    return base_name == pattern
