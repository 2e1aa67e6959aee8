"""Terminal reporting for ignored-export.

Collected paths are the payload and always reach stdout. Progress and
summaries are chatter that --quiet removes. Warnings and errors go to
stderr regardless.
"""

import os
import sys
from typing import TextIO


class Output:
    """Writes colored messages to a payload stream and an error stream."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"

    def __init__(
        self,
        *,
        no_color: bool = False,
        quiet: bool = False,
        stream: TextIO | None = None,
        err_stream: TextIO | None = None,
    ):
        """Set up the streams and decide on coloring once.

        Args:
            no_color: Never emit ANSI codes
            quiet: Drop progress and summary messages
            stream: Payload stream (default stdout)
            err_stream: Diagnostics stream (default stderr)
        """
        self.stream = stream or sys.stdout
        self.err_stream = err_stream or sys.stderr
        self.quiet = quiet
        self._use_color = not no_color and self._stream_wants_color()

    def _stream_wants_color(self) -> bool:
        # NO_COLOR wins over a terminal
        if os.environ.get("NO_COLOR"):
            return False
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def _colorize(self, text: str, *codes: str) -> str:
        if not self._use_color:
            return text
        return "".join(codes) + text + self.RESET

    def _emit(self, text: str, *, err: bool = False, chatter: bool = False) -> None:
        if chatter and self.quiet:
            return
        print(text, file=self.err_stream if err else self.stream)

    def path(self, path: str) -> str:
        """Return a path highlighted in cyan."""
        return self._colorize(path, self.CYAN)

    def dry_run_prefix(self) -> str:
        return self._colorize("[dry-run]", self.YELLOW)

    # Diagnostics

    def warning(self, message: str) -> None:
        """Report a recoverable problem, such as a dropped ignore rule."""
        self._emit(self._colorize(f"Warning: {message}", self.YELLOW), err=True)

    def error(self, message: str) -> None:
        self._emit(self._colorize(f"Error: {message}", self.RED), err=True)

    # Chatter

    def info(self, message: str) -> None:
        self._emit(message, chatter=True)

    def success(self, message: str) -> None:
        self._emit(self._colorize(message, self.GREEN), chatter=True)

    def header(self, text: str) -> None:
        self._emit(self._colorize(text, self.BOLD), chatter=True)

    def copied(self, path: str) -> None:
        """Report one exported file."""
        self._emit(f"  {self._colorize('+', self.GREEN)} {self.path(path)}", chatter=True)

    def skipped(self, path: str, reason: str) -> None:
        """Report a path left out of the export, dimmed."""
        self._emit(self._colorize(f"  - {path} ({reason})", self.DIM), chatter=True)

    # Payload

    def entry(self, path: str) -> None:
        """Print one collected path; directories end with '/' and are cyan.

        Args:
            path: Project-relative path
        """
        self._emit(self.path(path) if path.endswith("/") else path)


_default_output: Output | None = None


def get_output() -> Output:
    """Return the process-wide output handler, creating it on first use."""
    global _default_output
    if _default_output is None:
        _default_output = Output()
    return _default_output


def set_output(output: Output) -> None:
    """Replace the process-wide output handler.

    Args:
        output: Handler returned by later get_output() calls
    """
    global _default_output
    _default_output = output
