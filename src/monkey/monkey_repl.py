"""
Interactive read-eval-print loop for the Monkey language.

Each input line gets a fresh lexer; bindings persist across lines in one
`Environment`. Three modes control what is printed for a line:

    eval    evaluate the line and print the inspected result (default)
    tokens  print every token up to end of input
    ast     print the canonical rendering of the parsed program

Typing `:mode <name>` switches modes; `exit` or `quit` leaves the loop.
"""

import getpass

from monkey.monkey_environment import Environment
from monkey.monkey_evaluator import Evaluator
from monkey.monkey_lexer import Lexer
from monkey.monkey_parser import Parser

PROMPT = ">> "
MODES = ("eval", "tokens", "ast")


def greeting() -> str:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "there"
    return (
        f"Hello {user}! This is the Monkey programming language!\n"
        "Feel free to type in commands"
    )


def print_parser_errors(errors: list[str]) -> None:
    print("[error] >>> parser errors:")
    for msg in errors:
        print(f"\t{msg}")


def handle_mode_command(src: str, mode: str) -> str | None:
    """Returns the new mode for a `:mode <name>` line, or None if `src` is not one."""
    if not src.startswith(":mode"):
        return None
    requested = src[len(":mode") :].strip()
    if requested not in MODES:
        print(f"[error] >>> Unknown mode {requested!r}; choose one of {', '.join(MODES)}")
        return mode
    print(f"[mode] >>> {requested}")
    return requested


def run_line(src: str, mode: str, env: Environment, evaluator: Evaluator) -> None:
    lexer = Lexer.from_source(src)

    if mode == "tokens":
        for tok in lexer:
            if tok.type == "EOF":
                break
            print(tok)
        return

    program, errors = Parser(lexer).parse()
    if errors:
        print_parser_errors(errors)
        return

    if mode == "ast":
        print(program)
        return

    try:
        result = evaluator.eval(program, env)
    except RecursionError:
        print("[error] >>> maximum recursion depth exceeded")
        return
    if result is not None:
        print(result.inspect())


def start_repl(mode: str = "eval", env: Environment | None = None, greet: bool = True) -> None:
    if mode not in MODES:
        raise ValueError(f"Unknown REPL mode: {mode!r}")
    if env is None:
        env = Environment()
    evaluator = Evaluator()

    if greet:
        print(greeting())

    while True:
        try:
            line = input(PROMPT)
        except (KeyboardInterrupt, EOFError):
            print("\nExiting Monkey REPL.")
            return

        src = line.strip()
        if not src:
            continue
        if src in ("exit", "quit"):
            print("Exiting Monkey REPL.")
            return
        new_mode = handle_mode_command(src, mode)
        if new_mode is not None:
            mode = new_mode
            continue

        run_line(src, mode, env, evaluator)


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
