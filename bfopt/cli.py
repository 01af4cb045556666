from __future__ import annotations

import argparse
import io
import logging
import sys
from typing import Optional

from .byteio import StreamIO
from .executor import TAPE_LENGTH, Executor, StepLimitExceeded, TapeOutOfRange
from .loader import SourceLoadError, load_source
from .ops import disassemble
from .profiler import format_profile, profile
from .translator import TranslationError, translate

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root = logging.getLogger("bfopt")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from exc
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _channel(input_text: Optional[str]) -> StreamIO:
    if input_text is None:
        return StreamIO()
    return StreamIO(stdin=io.BytesIO(input_text.encode("utf-8")))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Optimizing Brainfuck interpreter")
    parser.add_argument("source", help="Path to Brainfuck source file")
    parser.add_argument(
        "--no-optimize",
        action="store_true",
        help="Keep every loop as a plain jump pair",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the translated operations instead of running them",
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="After running, print per-operation dispatch counts to stderr",
    )
    parser.add_argument(
        "--input",
        default=None,
        help="Input string supplied to the program (default: read stdin)",
    )
    parser.add_argument(
        "--max-steps",
        type=_positive_int,
        default=None,
        help="Abort after this many operations",
    )
    parser.add_argument(
        "--tape-length",
        type=_positive_int,
        default=TAPE_LENGTH,
        help=f"Number of tape cells (default: {TAPE_LENGTH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        source = load_source(args.source)
    except SourceLoadError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    try:
        program = translate(source, optimize=not args.no_optimize)
    except TranslationError as exc:
        print(f"Translation error: {exc}", file=sys.stderr)
        return 1

    if args.dump:
        sys.stdout.write(disassemble(program) + "\n")
        return 0

    channel = _channel(args.input)
    try:
        if args.profile:
            result = profile(
                program,
                io=channel,
                max_steps=args.max_steps,
                tape_length=args.tape_length,
            )
            print(format_profile(result), file=sys.stderr)
        else:
            executor = Executor(tape_length=args.tape_length)
            executor.run(program, io=channel, max_steps=args.max_steps)
            logger.debug("exit reason: %s", executor.context.exit_reason.value)
    except (TapeOutOfRange, StepLimitExceeded) as exc:
        print(f"Runtime error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
