"""Console output for the pymirror command line.

Messages go to a rich Console and, when a log file is configured, are
duplicated to it as plain text.
"""

from typing import IO, Optional

from rich.console import Console
from rich.text import Text

from .utils import format_size


class OutputFormatter:
    """Prints status messages and optionally mirrors them into a log file."""

    def __init__(
        self,
        quiet: bool = False,
        log_file: Optional[str] = None,
        console: Optional[Console] = None,
    ):
        """Initialize the formatter.

        Args:
            quiet: Suppress informational output (warnings and errors still show)
            log_file: Path of a file receiving every message (truncated on open)
            console: Console to print to (a new stdout console if None)
        """
        self.quiet = quiet
        self.console = console or Console(soft_wrap=True, highlight=False)
        self.err_console = Console(stderr=True, soft_wrap=True, highlight=False)
        self.log_path = log_file
        self._log: Optional[IO[str]] = None
        if log_file:
            self._log = open(log_file, "w", encoding="utf-8")

    def close(self) -> None:
        """Close the log file, if any."""
        if self._log is not None:
            self._log.close()
            self._log = None

    def __enter__(self) -> "OutputFormatter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _write_log(self, message: str) -> None:
        if self._log is not None:
            self._log.write(message + "\n")
            self._log.flush()

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        self._write_log(message)
        if not self.quiet:
            self.console.print(Text(message))

    def info(self, message: str) -> None:
        """Print an informational message."""
        self._write_log(message)
        if not self.quiet:
            self.console.print(Text(message))

    def success(self, message: str) -> None:
        """Print a success message."""
        self._write_log(message)
        if not self.quiet:
            self.console.print(Text(message, style="green"))

    def warning(self, message: str) -> None:
        """Print a warning; shown even in quiet mode."""
        self._write_log(f"Warning: {message}")
        self.console.print(Text(f"Warning: {message}", style="yellow"))

    def error(self, message: str) -> None:
        """Print an error to stderr; shown even in quiet mode."""
        self._write_log(f"Error: {message}")
        self.err_console.print(Text(f"Error: {message}", style="bold red"))

    def format_size(self, size_bytes: int) -> str:
        """Format a byte count for display."""
        return format_size(size_bytes)
