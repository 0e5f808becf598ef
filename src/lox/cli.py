"""Command-line entry point for Lox."""
from __future__ import annotations

import argparse
import itertools
import sys
from pathlib import Path
from typing import Iterator, Optional

from .interpreter import Interpreter
from .pipeline import PARSE_ERRORS_MESSAGE, SCAN_ERRORS_MESSAGE, interpret, parse, scan
from .printer import print_stmt
from .reporter import ConsoleReporter

EXIT_DATA_ERROR = 65
EXIT_NO_INPUT = 66


#one REPL session or one script run: the interpreter and id source outlive each chunk of source
class Session:
    def __init__(self, args: argparse.Namespace) -> None:
        self.reporter = ConsoleReporter()
        self.interpreter = Interpreter(self.reporter, trace=args.trace)
        self.ids: Iterator[int] = itertools.count(1)
        self.show_tokens = args.tokens
        self.show_ast = args.ast

    #same stages as `pipeline.run`, with the optional token and tree dumps in between
    def run(self, source: str) -> None:
        tokens = scan(self.reporter, source)
        if self.show_tokens:
            for token in tokens:
                self.reporter.add_message(f"[token]: {token}")
        if self.reporter.has_diagnostics():
            self.reporter.add_message(SCAN_ERRORS_MESSAGE)
            return

        statements = parse(self.reporter, tokens, self.ids)
        if self.show_ast:
            for statement in statements:
                self.reporter.add_message(f"[ast] {print_stmt(statement).rstrip()}")
        if self.reporter.has_diagnostics():
            self.reporter.add_message(PARSE_ERRORS_MESSAGE)
            return

        interpret(self.reporter, statements, self.interpreter)


#reads lines until EOF or a blank line; globals persist across lines
def run_prompt(session: Session) -> int:
    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            break
        line = line.strip()
        if not line:
            break
        session.reporter.reset()
        session.run(line)
    print("done")
    return 0


def run_file(session: Session, path: Path) -> int:
    try:
        source = path.read_text()
    except OSError as error:
        print(f"lox: cannot read {path}: {error.strerror}", file=sys.stderr)
        return EXIT_NO_INPUT
    session.run(source)
    if session.reporter.has_diagnostics():
        return EXIT_DATA_ERROR
    return 0


#configures the CLI surface: an optional script plus debugging switches
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lox", description="Lox language interpreter")
    parser.add_argument("script", nargs="?", help="path to a Lox script; omit for an interactive prompt")
    parser.add_argument("--tokens", action="store_true", help="report every scanned token")
    parser.add_argument("--ast", action="store_true", help="report each parsed statement as an s-expression")
    parser.add_argument("--trace", action="store_true", help="print a trace line before each top-level statement")
    return parser


#entry point used by both console script and module execution
def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    session = Session(args)
    if args.script is None:
        return run_prompt(session)
    return run_file(session, Path(args.script))


if __name__ == "__main__":
    raise SystemExit(main())
