"""Tests for run statistics."""

import threading

import pytest

from pymirror.sync.stats import SyncStatistics


class TestSyncStatistics:
    """Tests for SyncStatistics."""

    def test_starts_at_zero(self):
        stats = SyncStatistics()
        assert set(stats.as_dict().values()) == {0}
        assert list(stats.as_dict()) == [
            "dirs_created",
            "files_copied",
            "bytes_copied",
            "dirs_skipped",
            "files_skipped",
            "files_failed",
            "dirs_removed",
            "files_removed",
        ]

    def test_increment(self):
        stats = SyncStatistics()
        stats.increment("files_copied")
        stats.increment("bytes_copied", 1024)
        assert stats.files_copied == 1
        assert stats.bytes_copied == 1024

    def test_unknown_counter(self):
        with pytest.raises(ValueError, match="Unknown counter"):
            SyncStatistics().increment("elapsed")

    def test_negative_amount(self):
        """Counters never decrease."""
        with pytest.raises(ValueError):
            SyncStatistics().increment("files_copied", -1)

    def test_concurrent_increments(self):
        """Updates from several threads are not lost."""
        stats = SyncStatistics()

        def work():
            for _ in range(1000):
                stats.increment("files_copied")
                stats.increment("bytes_copied", 3)

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stats.files_copied == 8000
        assert stats.bytes_copied == 24000

    def test_finish_freezes_elapsed(self):
        stats = SyncStatistics()
        stats.finish()
        first = stats.elapsed
        stats.finish()
        assert stats.elapsed == first
        assert first >= 0
