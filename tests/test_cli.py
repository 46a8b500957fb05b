"""Unit tests for the pymirror command line."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pymirror.cli import EXIT_FILES_FAILED, main
from pymirror.sync.operations import FileTransfer


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def source(tmp_path):
    """Source tree with a couple of files and an empty directory."""
    root = tmp_path / "src"
    (root / "docs").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "readme.txt").write_text("hello")
    (root / "notes.log").write_text("log")
    (root / "docs" / "guide.txt").write_text("guide")
    return root


class TestHelp:
    """Tests for help and version output."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "SOURCE" in result.output
        assert "--mirror" in result.output
        assert "--list-only" in result.output
        assert "--shred" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestSyncCommand:
    """Tests for running synchronizations from the command line."""

    def test_basic_copy(self, runner, source, tmp_path):
        dest = tmp_path / "dst"

        result = runner.invoke(main, [str(source), str(dest), "--no-progress"])

        assert result.exit_code == 0, result.output
        assert (dest / "readme.txt").read_text() == "hello"
        assert not (dest / "docs").exists()
        assert "pymirror - Started:" in result.output
        assert f"Source: {source}" in result.output
        assert "Pattern: *.*" in result.output
        assert "Options: --no-progress" in result.output
        assert "Files: 2" in result.output
        assert "pymirror - Finished:" in result.output

    def test_empty_dirs_recursion(self, runner, source, tmp_path):
        dest = tmp_path / "dst"

        result = runner.invoke(main, [str(source), str(dest), "-e", "--no-progress"])

        assert result.exit_code == 0, result.output
        assert (dest / "docs" / "guide.txt").read_text() == "guide"
        assert (dest / "empty").is_dir()
        assert "Directories: 2" in result.output

    def test_pattern_argument(self, runner, source, tmp_path):
        dest = tmp_path / "dst"

        result = runner.invoke(
            main, [str(source), str(dest), "*.txt", "-s", "--no-progress"]
        )

        assert result.exit_code == 0, result.output
        assert "Pattern: *.txt" in result.output
        assert (dest / "readme.txt").exists()
        assert not (dest / "notes.log").exists()
        assert "Skipping empty directory" in result.output

    def test_with_progress_bars(self, runner, source, tmp_path):
        """The default progress display does not break the run."""
        dest = tmp_path / "dst"

        result = runner.invoke(main, [str(source), str(dest)])

        assert result.exit_code == 0, result.output
        assert (dest / "readme.txt").exists()

    def test_dry_run(self, runner, source, tmp_path):
        dest = tmp_path / "dst"

        result = runner.invoke(main, [str(source), str(dest), "--dry-run", "-e"])

        assert result.exit_code == 0, result.output
        assert not dest.exists()
        assert "Dry run: No changes will be made" in result.output
        assert "Would copy file:" in result.output
        assert "Would create directory:" in result.output

    def test_mirror_reports_removals(self, runner, source, tmp_path):
        dest = tmp_path / "dst"
        dest.mkdir()
        (dest / "stale.txt").write_text("old")

        result = runner.invoke(main, [str(source), str(dest), "--mirror", "--no-progress"])

        assert result.exit_code == 0, result.output
        assert not (dest / "stale.txt").exists()
        assert "Removed file:" in result.output
        assert "Files removed: 1" in result.output

    def test_no_file_list(self, runner, source, tmp_path):
        dest = tmp_path / "dst"

        result = runner.invoke(
            main, [str(source), str(dest), "--no-file-list", "--no-progress"]
        )

        assert result.exit_code == 0
        assert "Copying file:" not in result.output

    def test_quiet(self, runner, source, tmp_path):
        dest = tmp_path / "dst"

        result = runner.invoke(main, [str(source), str(dest), "-q"])

        assert result.exit_code == 0
        assert "Statistics:" not in result.output
        assert (dest / "readme.txt").exists()

    def test_log_file(self, runner, source, tmp_path):
        dest = tmp_path / "dst"
        log = tmp_path / "run.log"

        result = runner.invoke(
            main, [str(source), str(dest), "--log", str(log), "--no-progress"]
        )

        assert result.exit_code == 0, result.output
        content = log.read_text()
        assert "pymirror - Started:" in content
        assert "Copying file:" in content
        assert "Statistics:" in content


class TestErrors:
    """Tests for error handling and exit codes."""

    def test_missing_source(self, runner, tmp_path):
        result = runner.invoke(
            main, [str(tmp_path / "missing"), str(tmp_path / "dst")]
        )

        assert result.exit_code == 1
        assert "Source directory does not exist" in result.output
        assert not (tmp_path / "dst").exists()

    def test_invalid_attribute_letters(self, runner, source, tmp_path):
        result = runner.invoke(
            main, [str(source), str(tmp_path / "dst"), "--add-attrs", "Q"]
        )

        assert result.exit_code == 2
        assert "Unknown attribute letter" in result.output

    def test_invalid_thread_count(self, runner, source, tmp_path):
        result = runner.invoke(
            main, [str(source), str(tmp_path / "dst"), "--threads", "0"]
        )

        assert result.exit_code == 2
        assert "Thread count" in result.output

    def test_failed_files_exit_code(self, runner, source, tmp_path):
        """Copies that fail after all retries give a distinct exit code."""
        with patch.object(
            FileTransfer, "_copy_bytes", side_effect=OSError("device not ready")
        ):
            result = runner.invoke(
                main,
                [str(source), str(tmp_path / "dst"), "-r", "2", "-w", "0", "--no-progress"],
            )

        assert result.exit_code == EXIT_FILES_FAILED
        assert "Retry 1 of 2" in result.output
        assert "Failed to copy after 2 attempt(s)" in result.output
        assert "Files failed: 2" in result.output
        assert "2 file(s) could not be copied" in result.output

    def test_file_over_directory_without_purge(self, runner, tmp_path):
        """A file/directory clash is reported and gives the failed-files exit code."""
        src = tmp_path / "src"
        src.mkdir()
        (src / "x").write_text("file")
        dest = tmp_path / "dst"
        (dest / "x").mkdir(parents=True)

        result = runner.invoke(main, [str(src), str(dest), "--no-progress"])

        assert result.exit_code == EXIT_FILES_FAILED
        assert "Cannot synchronize" in result.output
        assert "destination is a directory" in result.output
        assert (dest / "x").is_dir()
