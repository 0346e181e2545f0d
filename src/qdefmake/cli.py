from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from qdefmake import __version__
from qdefmake.errors import QdefmakeError
from qdefmake.pipeline import run
from qdefmake.utils.config import RunConfig
from qdefmake.utils.paths import normalize_separators

logger = logging.getLogger(__name__)

HELP_EPILOG = (
    "all parameters are optional\n"
    "example: qdefmake -path c:\\quake\\mod\\source -progs mod.src -output c:\\quake\\mod\\mod.def"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qdefmake",
        description="Read QuakeC sources listed in a progs.src and write their QUAKED blocks to a .def file",
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-path", help="path to your source files, default is the current working directory")
    parser.add_argument("-progs", help="alternative name for your progs.src, default is progs.src")
    parser.add_argument("-output", help="name of the .def file to write, default is output.def")
    parser.add_argument("-verbose", action="store_true", help="print more detailed information")
    parser.add_argument("-config", help="YAML file with defaults for the options above")
    return parser


def wants_help(argv: Sequence[str]) -> bool:
    return any("?" in token for token in argv)


VALUE_FLAGS = ("-path", "-progs", "-output", "-config")
SWITCH_FLAGS = ("-verbose",)


def split_known(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split ``argv`` into exact flag tokens and everything else.

    Flags match only by their full name. The token after a value flag is its
    value whatever it looks like, and is passed on as ``-flag=value`` so a
    leading dash is not read as another option.
    """
    known: List[str] = []
    ignored: List[str] = []
    tokens = list(argv)
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        if token in VALUE_FLAGS:
            if idx + 1 < len(tokens):
                known.append(f"{token}={tokens[idx + 1]}")
                idx += 2
                continue
            # no value; left for argparse to reject
            known.append(token)
        elif token in SWITCH_FLAGS:
            known.append(token)
        else:
            ignored.append(token)
        idx += 1
    return known, ignored


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = build_parser()
    if wants_help(argv):
        parser.print_help(sys.stderr)
        raise SystemExit(0)
    known, ignored = split_known(argv)
    args = parser.parse_args(known)
    args.ignored = ignored
    return args


def resolve_config(args: argparse.Namespace) -> RunConfig:
    overrides: Dict[str, Any] = {}
    if args.path is not None:
        overrides["path"] = normalize_separators(args.path)
    if args.progs is not None:
        overrides["progs"] = args.progs
    if args.output is not None:
        overrides["output"] = normalize_separators(args.output)
    if args.verbose:
        overrides["verbose"] = True
    configs: List[str] = [args.config] if args.config else []
    return RunConfig.from_files(*configs, overrides=overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    print(f"qdefmake {__version__}")
    args = parse_args(argv)
    try:
        config = resolve_config(args)
    except QdefmakeError as exc:
        print(f"qdefmake: {exc}", file=sys.stderr)
        return exc.exit_code
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.ignored:
        logger.debug("Ignoring arguments: %s", " ".join(args.ignored))
    try:
        report = run(config)
    except QdefmakeError as exc:
        print(f"qdefmake: {exc}", file=sys.stderr)
        return exc.exit_code
    if report.unterminated:
        logger.warning("%d file(s) ended inside a block", len(report.unterminated))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
