"""Token definitions for the Lox language."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Optional, Union

from .errors import SourceLocation, SourceSpan


#enumerates every lexical category produced by the scanner
class TokenType(Enum):
    # Single-character tokens
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character tokens
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals and identifiers
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()


#normalized keyword lookup so the scanner can emit keyword tokens quickly
KEYWORDS: Final[dict[str, TokenType]] = {
    "and": TokenType.AND,
    "class": TokenType.CLASS,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "nil": TokenType.NIL,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}

#keywords that decode to a value; `nil` decodes to None like the runtime nil
KEYWORD_LITERALS: Final[dict[TokenType, Optional[bool]]] = {
    TokenType.TRUE: True,
    TokenType.FALSE: False,
    TokenType.NIL: None,
}

Literal = Union[None, str, float, bool]


#integral values print without a trailing `.0`, so `1 + 1` shows as `2`
def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if value.is_integer():
        return f"{value:.0f}"
    return repr(value)


#encapsulates the lexeme string, token kind, decoded literal, and position
@dataclass(slots=True)
class Token:
    type: TokenType
    lexeme: str
    start: SourceLocation
    end: SourceLocation
    literal: Literal = None

    @property
    def span(self) -> SourceSpan:
        return SourceSpan(start=self.start, end=self.end)

    def __str__(self) -> str:
        return f"{self.type.name} {self.lexeme}"

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Token({self.type}, {self.lexeme!r}, {self.start}-{self.end})"
