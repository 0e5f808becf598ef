"""Entry points that chain the scanner, parser, resolver and interpreter."""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from . import ast
from .interpreter import Interpreter
from .parser import parse as _parse
from .parser import parse_allow_invalid_call as _parse_allow_invalid_call
from .parser import parse_expression as _parse_expression
from .reporter import Reporter
from .resolver import resolve as _resolve
from .scanner import scan as _scan
from .token import Token

SCAN_ERRORS_MESSAGE = "[parser] not parsing due to scan errors"
PARSE_ERRORS_MESSAGE = "[interpreter] not interpreting due to parsing errors"


def scan(reporter: Reporter, source: str) -> List[Token]:
    return _scan(reporter, source)


def parse(reporter: Reporter, tokens: List[Token], ids: Optional[Iterator[int]] = None) -> List[ast.Stmt]:
    return _parse(reporter, tokens, ids)


def parse_expression(reporter: Reporter, tokens: List[Token], ids: Optional[Iterator[int]] = None) -> Optional[ast.Expr]:
    return _parse_expression(reporter, tokens, ids)


def resolve(reporter: Reporter, statements: List[ast.Stmt]) -> Dict[int, int]:
    return _resolve(reporter, statements)


#resolves then evaluates; resolver diagnostics leave the depth map incomplete but do not stop the run
def interpret(
    reporter: Reporter,
    statements: List[ast.Stmt],
    interpreter: Optional[Interpreter] = None,
) -> Interpreter:
    if interpreter is None:
        interpreter = Interpreter(reporter)
    depths = resolve(reporter, statements)
    interpreter.resolve(depths)
    interpreter.interpret(statements)
    return interpreter


#source text to statements, for tooling that only needs the tree
def build_ast(
    reporter: Reporter,
    source: str,
    ids: Optional[Iterator[int]] = None,
    allow_invalid_call: bool = False,
) -> List[ast.Stmt]:
    tokens = scan(reporter, source)
    if reporter.has_diagnostics():
        reporter.add_message(SCAN_ERRORS_MESSAGE)
        return []
    if allow_invalid_call:
        return _parse_allow_invalid_call(reporter, tokens, ids)
    return parse(reporter, tokens, ids)


#whole pipeline from text; stops after the first stage that reported diagnostics
def run(
    reporter: Reporter,
    source: str,
    interpreter: Optional[Interpreter] = None,
    ids: Optional[Iterator[int]] = None,
) -> Optional[Interpreter]:
    tokens = scan(reporter, source)
    if reporter.has_diagnostics():
        reporter.add_message(SCAN_ERRORS_MESSAGE)
        return interpreter

    statements = parse(reporter, tokens, ids)
    if reporter.has_diagnostics():
        reporter.add_message(PARSE_ERRORS_MESSAGE)
        return interpreter

    return interpret(reporter, statements, interpreter)


__all__ = [
    "PARSE_ERRORS_MESSAGE",
    "SCAN_ERRORS_MESSAGE",
    "build_ast",
    "interpret",
    "parse",
    "parse_expression",
    "resolve",
    "run",
    "scan",
]
