"""Run statistics for synchronization passes."""

import threading
import time
from dataclasses import dataclass, field, fields
from typing import Optional


@dataclass
class SyncStatistics:
    """Counters accumulated during one synchronization run.

    Counters only grow. All updates go through ``increment`` so they stay
    consistent when file transfers run on several threads.
    """

    dirs_created: int = 0
    files_copied: int = 0
    bytes_copied: int = 0
    dirs_skipped: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    dirs_removed: int = 0
    files_removed: int = 0

    started_at: float = field(default_factory=time.monotonic, repr=False)
    finished_at: Optional[float] = field(default=None, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def increment(self, counter: str, amount: int = 1) -> None:
        """Add ``amount`` to the named counter.

        Args:
            counter: Counter name (e.g., "files_copied")
            amount: Non-negative increment
        """
        if counter not in _COUNTERS:
            raise ValueError(f"Unknown counter: {counter}")
        if amount < 0:
            raise ValueError("Statistics counters cannot decrease")
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def finish(self) -> None:
        """Mark the run as finished, freezing the elapsed time."""
        if self.finished_at is None:
            self.finished_at = time.monotonic()

    @property
    def elapsed(self) -> float:
        """Seconds between creation and ``finish()`` (or now)."""
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at

    def as_dict(self) -> dict:
        """Return the counters as a plain dictionary."""
        with self._lock:
            return {name: getattr(self, name) for name in _COUNTERS}


_COUNTERS = tuple(
    f.name
    for f in fields(SyncStatistics)
    if f.name not in ("started_at", "finished_at", "_lock")
)
