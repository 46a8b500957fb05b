"""Utility functions and defaults for pymirror."""

from datetime import datetime
from typing import Optional

# =============================================================================
# Defaults for synchronization runs
# =============================================================================

# Buffer size for the copy and overwrite loops (64 KB)
DEFAULT_CHUNK_SIZE: int = 64 * 1024

# Worker threads used for file transfers within one directory level
DEFAULT_THREADS: int = 8

# Retry configuration for failed copies
DEFAULT_RETRIES: int = 1_000_000
DEFAULT_WAIT_TIME: int = 30  # seconds

# Separator line used by the start and end banners
BANNER_RULE: str = "-" * 79


# =============================================================================
# Timestamp formatting utilities
# =============================================================================


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a point in time for the start/end banners.

    Args:
        moment: Time to format (defaults to now, local time)

    Returns:
        Timestamp string (e.g., "2025-01-15 10:30:00")
    """
    if moment is None:
        moment = datetime.now()
    return moment.strftime("%Y-%m-%d %H:%M:%S")


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
