from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from qdefmake.errors import SourceOpenError
from qdefmake.utils.config import DEFAULT_END_MARKER, DEFAULT_START_MARKER

logger = logging.getLogger(__name__)

EmitFn = Callable[[bytes], None]


@dataclass(frozen=True)
class Markers:
    start: bytes = DEFAULT_START_MARKER.encode("ascii")
    end: bytes = DEFAULT_END_MARKER.encode("ascii")

    @classmethod
    def from_strings(cls, start: str, end: str) -> "Markers":
        return cls(start=start.encode("utf-8"), end=end.encode("utf-8"))


@dataclass
class ScanResult:
    blocks: int = 0
    lines_written: int = 0
    unterminated: bool = False


def extract_blocks(lines: Iterable[bytes], emit: EmitFn, markers: Markers = Markers()) -> ScanResult:
    """Copy every marked block in ``lines`` to ``emit``, marker lines included.

    Scanning starts outside a block. A start marker inside a block has no
    effect; only the end marker closes it.
    """
    result = ScanResult()
    inside = False
    for line in lines:
        if not inside:
            idx = line.find(markers.start)
            if idx < 0:
                continue
            result.blocks += 1
            # single-line block: the end marker follows the start marker
            inside = line.find(markers.end, idx + len(markers.start)) < 0
        elif markers.end in line:
            inside = False
        emit(line)
        result.lines_written += 1
    result.unterminated = inside
    return result


def extract_file(path: str, emit: EmitFn, markers: Markers = Markers()) -> ScanResult:
    try:
        f = open(path, "rb")
    except OSError as exc:
        raise SourceOpenError(path, exc.strerror or str(exc)) from exc
    with f:
        result = extract_blocks(f, emit, markers)
    if result.unterminated:
        logger.warning("%s: block not closed before end of file", path)
    return result
