from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from hackasm.assembler import assemble_program, format_listing
from hackasm.model import AssemblyError


logger = logging.getLogger("hackasm")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hackasm",
        description="Assemble Hack assembly (.asm) into binary text (.hack).",
    )
    parser.add_argument("input", help="Assembly source file")
    parser.add_argument("-o", "--output", help="Output file (default: <input>.hack)")
    parser.add_argument("-l", "--listing", help="Write an address/word/source listing to this file")
    parser.add_argument("--stdout", action="store_true", help="Print words to stdout instead of writing a file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each assembly stage")
    return parser


def _write_lines(path: str, lines: List[str]) -> None:
    with open(path, "w", encoding="utf-8") as handle:
        handle.write("\n".join(lines) + "\n" if lines else "")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        with open(args.input, "r", encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.input, exc)
        return 1

    try:
        result = assemble_program(lines)
    except AssemblyError as exc:
        logger.error("%s: %s", args.input, exc)
        return 1

    try:
        if args.stdout:
            for word in result.words:
                print(word)
        else:
            out_path = args.output or (os.path.splitext(args.input)[0] + ".hack")
            _write_lines(out_path, result.words)
            logger.info("Wrote %d words to %s", len(result.words), out_path)
        if args.listing:
            _write_lines(args.listing, format_listing(result, args.input))
            logger.info("Wrote listing to %s", args.listing)
    except OSError as exc:
        logger.error("Cannot write output: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
