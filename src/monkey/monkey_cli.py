"""
Monkey CLI Entrypoint.

This module provides the command-line interface for running Monkey source code.

Features:
    - Read source from `.monkey` files or inline strings.
    - Lex, parse, and evaluate, or stop early to print tokens or the AST.
    - Launch the interactive REPL.
    - Configure logging from `--verbose` or the `MONKEY_LOG_LEVEL` environment variable.

Example usage:
    monkey program.monkey
    monkey -s "let x = 5; x * 2"
    monkey -s "1 + 2 * 3" --ast
    monkey --repl --tokens

Exit status:
    0 on success, 1 when the program has syntax errors or evaluates to a
    runtime error, 2 for unusable input (missing file, unsupported suffix).
"""

import argparse
import logging
import os
import sys

from monkey.monkey_environment import Environment
from monkey.monkey_evaluator import evaluate
from monkey.monkey_lexer import Lexer
from monkey.monkey_object import Object, is_error
from monkey.monkey_parser import ParseError, Parser
from monkey.monkey_repl import MODES, start_repl

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Sets up root logging: DEBUG if `verbose`, else `MONKEY_LOG_LEVEL` (default WARNING)."""
    level_name = "DEBUG" if verbose else os.getenv("MONKEY_LOG_LEVEL", "WARNING")
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def run_monkey(source: str, is_string: bool = False, mode: str = "eval") -> Object | None:
    """
    Run the Monkey pipeline on a file or a raw source string and print the outcome.

    Args:
        source (str): Monkey source code, or a path to a `.monkey` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        mode (str): "eval" prints the inspected result, "tokens" prints the token
            stream, "ast" prints the rendered program.

    Returns:
        The evaluation result in "eval" mode (possibly an `Error` object), else None.

    Raises:
        ValueError: For an unknown mode, or a path that does not end with '.monkey'.
        ParseError: If the source has syntax errors; `errors` lists them.
        OSError: If the file cannot be read.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode!r}")
    if not is_string and not source.endswith(".monkey"):
        raise ValueError("Only .monkey files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    lexer = Lexer.from_source(source)

    if mode == "tokens":
        for tok in lexer:
            if tok.type == "EOF":
                break
            print(tok)
        return None

    program, errors = Parser(lexer).parse()
    if errors:
        raise ParseError(f"{len(errors)} syntax error(s)", errors)

    if mode == "ast":
        print(program)
        return None

    result = evaluate(program, Environment())
    if result is not None:
        print(result.inspect())
    return result


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="monkey")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--tokens",
        dest="mode",
        action="store_const",
        const="tokens",
        help="Print the token stream instead of evaluating",
    )
    output.add_argument(
        "--ast",
        dest="mode",
        action="store_const",
        const="ast",
        help="Print the parsed program instead of evaluating",
    )
    parser.set_defaults(mode="eval")
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of running a program",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the Monkey CLI.

    Launches the REPL when no source is given or `--repl` is passed; otherwise
    runs the program and returns the process exit status.
    """
    args = build_arg_parser().parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.verbose)

    if args.repl or args.source is None:
        start_repl(mode=args.mode)
        return 0

    try:
        result = run_monkey(args.source, is_string=args.string, mode=args.mode)
    except ParseError as e:
        print(f"monkey: {e}", file=sys.stderr)
        for msg in e.errors:
            print(f"\t{msg}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"monkey: {e}", file=sys.stderr)
        return 2
    except RecursionError:
        print("monkey: maximum recursion depth exceeded", file=sys.stderr)
        return 1

    if result is not None and is_error(result):
        logger.debug("program ended with runtime error: %s", result.inspect())
        return 1
    return 0


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    sys.exit(main())
