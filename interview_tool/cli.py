"""Command line entry point: ``interview-form QUESTIONS.json``."""
from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from questionnaire.errors import InterviewError

from .runner import InterviewResult, run_interview


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="interview-form",
        description="Present an interactive form in the browser and print the responses.",
    )
    parser.add_argument("questions", help="Path to the questions JSON file")
    parser.add_argument("--timeout", type=int, default=None, help="Seconds before the form times out (0 disables)")
    parser.add_argument("--verbose", action="store_true", help="Log every request")
    parser.add_argument("--json", action="store_true", dest="as_json", help="Print the result as JSON")
    return parser


async def _run(args: argparse.Namespace) -> InterviewResult:
    abort = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, abort.set)
    except (NotImplementedError, RuntimeError):
        pass  # no loop signal support on this platform; Ctrl+C raises KeyboardInterrupt instead
    try:
        return await run_interview(args.questions, timeout=args.timeout, verbose=args.verbose, cwd=Path.cwd(), abort=abort)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.timeout is not None and args.timeout < 0:
        parser.error("--timeout must be zero or positive")

    try:
        result = asyncio.run(_run(args))
    except InterviewError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.as_json:
        print(json.dumps(result.model_dump(), indent=2))
    else:
        print(result.summary)
    return 0 if result.status == "completed" else 1


if __name__ == "__main__":
    sys.exit(main())
