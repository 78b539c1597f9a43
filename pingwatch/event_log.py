"""Append-only event log mirrored to the console."""

import logging
import sys
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)


class EventLogError(OSError):
    """Raised when the event log destination cannot be opened."""


class EventLog:
    """Writes event lines to a log file and echoes them to a console stream.

    The file is opened in append mode so earlier sessions are kept. Every
    line is flushed immediately so the file survives an abrupt exit.
    """

    def __init__(self, path: Path | str, console: TextIO | None = None):
        self.path = Path(path)
        self.console = console if console is not None else sys.stdout
        self._file: TextIO | None = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self) -> "EventLog":
        """Open the log file for appending.

        Raises:
            EventLogError: If the path cannot be opened for writing
        """
        if self._file is not None:
            return self

        try:
            self._file = open(self.path, "a", encoding="utf-8")
        except OSError as e:
            raise EventLogError(f"Cannot open log file '{self.path}': {e.strerror or e}") from e

        logger.debug("Event log opened: %s", self.path)
        return self

    def write(self, line: str) -> None:
        """Append one line to the file and mirror it to the console."""
        if self._file is None:
            raise EventLogError(f"Event log '{self.path}' is not open")

        self._file.write(line + "\n")
        self._file.flush()
        self.echo(line)

    def write_lines(self, lines: list[str]) -> None:
        for line in lines:
            self.write(line)

    def echo(self, line: str) -> None:
        """Print a line to the console only."""
        print(line, file=self.console, flush=True)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug("Event log closed: %s", self.path)

    def __enter__(self) -> "EventLog":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
