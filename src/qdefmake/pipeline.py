from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from qdefmake.extract.blocks import Markers, extract_file
from qdefmake.ingest.manifest import iter_entries, open_manifest
from qdefmake.io.writer import DefWriter, summary
from qdefmake.utils.config import RunConfig

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    definitions: int
    files: List[str]
    unterminated: List[str]


@dataclass
class RunContext:
    config: RunConfig
    writer: DefWriter
    markers: Markers
    count: int = 0
    files: List[str] = field(default_factory=list)
    unterminated: List[str] = field(default_factory=list)

    def scan(self, entry: str) -> None:
        path = self.config.source_path(entry)
        result = extract_file(path, self.writer.write_line, self.markers)
        self.count += result.blocks
        self.files.append(path)
        if result.unterminated:
            self.unterminated.append(path)
        logger.debug("%s: %d blocks, %d lines", path, result.blocks, result.lines_written)

    def report(self) -> RunReport:
        return RunReport(definitions=self.count, files=list(self.files), unterminated=list(self.unterminated))


def run(config: RunConfig, out: Optional[TextIO] = None) -> RunReport:
    """Extract every marked block named by the manifest into the output file.

    The manifest is opened before the output so a missing manifest leaves no
    output behind. Source files are scanned as their manifest lines are read.
    """
    out = out if out is not None else sys.stdout
    manifest_path = config.manifest_path
    print(f"Reading from {manifest_path}", file=out)
    manifest = open_manifest(manifest_path)
    with manifest:
        print(f"Writing to {config.output_name}", file=out)
        writer = DefWriter(config.output_name, echo=out if config.verbose else None)
        markers = Markers.from_strings(config.start_marker, config.end_marker)
        with writer:
            ctx = RunContext(config=config, writer=writer, markers=markers)
            for entry in iter_entries(manifest):
                if config.verbose:
                    print(entry, file=out)
                ctx.scan(entry)
    print(summary(ctx.count), file=out)
    return ctx.report()
