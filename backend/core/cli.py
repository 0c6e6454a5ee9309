"""
Command-line entry point for repairing LLM JSON output.

Reads a model completion from a file (or stdin), runs the repair stages and
prints the recovered JSON to stdout.

Usage:
    llm-json-repair response.txt
    cat response.txt | llm-json-repair --trace
    llm-json-repair response.txt --recommendations
    llm-json-repair response.txt --fields pythonCode sqlCode rCode

Exit codes:
    0: JSON recovered (always 0 with --recommendations)
    1: No stage could recover a JSON object
"""

import argparse
import json
import os
import sys

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.markup import escape

from core.errors import JSONExtractionFailed
from core.parser import parse_with_trace
from core.recommendations import parse_recommendations
from core.stage_defs import STAGES
from core.stage_tracker import ParseTrace, print_trace


def configure_logging(verbose: bool = False) -> None:
    """Send loguru output to stderr at LOG_LEVEL (DEBUG with --verbose)."""
    level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING")
    logger.remove()
    logger.add(sys.stderr, level=level, format="{time:HH:mm:ss} | {level: <8} | {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-json-repair",
        description="Recover a JSON object from raw LLM output",
    )
    parser.add_argument("file", nargs="?", help="File to read (default: stdin)")
    parser.add_argument(
        "--recommendations",
        action="store_true",
        help="Narrow the result into cleaning recommendations",
    )
    parser.add_argument(
        "--fields",
        nargs="+",
        metavar="NAME",
        help="Code field names to empty (default: NEUTRALIZED_FIELDS)",
    )
    parser.add_argument("--trace", action="store_true", help="Print stage attempts")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def read_input(path: str | None) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    text = read_input(args.file)
    console = Console(stderr=True)

    if args.recommendations:
        result = parse_recommendations(text, fields=args.fields)
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 0

    try:
        outcome = parse_with_trace(text, fields=args.fields)
    except JSONExtractionFailed as e:
        if args.trace:
            print_trace(ParseTrace.from_list(e.attempts), STAGES, console)
        console.print(f"[bold red]✗ {escape(str(e))}[/]")
        return 1

    if args.trace:
        print_trace(outcome.trace, STAGES, console)
    print(json.dumps(outcome.data, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
