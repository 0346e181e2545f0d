from __future__ import annotations

import logging
from typing import BinaryIO, Optional, TextIO

from qdefmake.errors import OutputOpenError

logger = logging.getLogger(__name__)


def summary(count: int) -> str:
    return f"{count} QUAKED definitions found"


class DefWriter:
    """Single output stream for a run: opened once, closed once."""

    def __init__(self, output_path: str, echo: Optional[TextIO] = None) -> None:
        self.output_path = output_path
        self.echo = echo
        self._stream: Optional[BinaryIO] = None
        self.lines_written = 0

    @property
    def closed(self) -> bool:
        return self._stream is None

    def open(self) -> "DefWriter":
        if self._stream is not None:
            raise RuntimeError(f"{self.output_path} is already open")
        try:
            self._stream = open(self.output_path, "wb")
        except OSError as exc:
            raise OutputOpenError(self.output_path, exc.strerror or str(exc)) from exc
        logger.debug("Opened %s for writing", self.output_path)
        return self

    def write_line(self, line: bytes) -> None:
        if self._stream is None:
            raise RuntimeError(f"{self.output_path} is not open")
        self._stream.write(line)
        self.lines_written += 1
        if self.echo is not None:
            self.echo.write(line.decode("utf-8", errors="replace"))

    def close(self) -> None:
        if self._stream is None:
            return
        self._stream.close()
        self._stream = None
        logger.debug("Closed %s after %d lines", self.output_path, self.lines_written)

    def __enter__(self) -> "DefWriter":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
