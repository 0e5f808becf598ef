"""Lox: a tree-walking interpreter for the Lox scripting language."""

#makes package exports explicit for downstream imports
from . import ast, interpreter, parser, printer, resolver, scanner, token, tooling
from .pipeline import build_ast, interpret, parse, parse_expression, resolve, run, scan
from .reporter import CollectingReporter, ConsoleReporter, Reporter

__all__ = [
    "CollectingReporter",
    "ConsoleReporter",
    "Reporter",
    "ast",
    "build_ast",
    "interpret",
    "interpreter",
    "parse",
    "parse_expression",
    "parser",
    "printer",
    "resolve",
    "resolver",
    "run",
    "scan",
    "scanner",
    "token",
    "tooling",
]
