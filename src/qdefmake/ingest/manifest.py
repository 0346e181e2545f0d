from __future__ import annotations

import logging
from typing import IO, Iterable, Iterator

from qdefmake.errors import ManifestOpenError
from qdefmake.utils.paths import normalize_separators

logger = logging.getLogger(__name__)

COMMENT_MARKER = "//"
DIRECTIVE_MARKER = "#"


def _truncate_at(line: str, marker: str) -> str:
    idx = line.find(marker)
    return line if idx < 0 else line[:idx]


def _truncate_at_whitespace(line: str) -> str:
    for idx, ch in enumerate(line):
        if ch.isspace():
            return line[:idx]
    return line


def clean_line(line: str) -> str:
    """Reduce a manifest line to the path it names, or ``""`` if it names none.

    Comments and directives are cut first, then everything from the first
    whitespace character on. Filenames are assumed to contain no whitespace,
    and a line that starts with whitespace names nothing.
    """
    line = _truncate_at(line, COMMENT_MARKER)
    line = _truncate_at(line, DIRECTIVE_MARKER)
    line = _truncate_at_whitespace(line)
    if not line:
        return ""
    return normalize_separators(line)


def iter_entries(lines: Iterable[str]) -> Iterator[str]:
    """Yield the source files named by a manifest, in order.

    The first meaningful entry is the compiled ``progs.dat`` path and is
    never yielded.
    """
    first = True
    for line in lines:
        entry = clean_line(line)
        if not entry:
            continue
        if first:
            first = False
            logger.debug("Skipping compiled output entry %s", entry)
            continue
        yield entry


def open_manifest(path: str) -> IO[str]:
    try:
        return open(path, "r", encoding="utf-8", errors="surrogateescape")
    except OSError as exc:
        raise ManifestOpenError(path, exc.strerror or str(exc)) from exc
