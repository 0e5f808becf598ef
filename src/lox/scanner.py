"""Lexical analysis for the Lox language."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import SourceLocation
from .reporter import Reporter
from .token import KEYWORD_LITERALS, KEYWORDS, Literal, Token, TokenType

#characters whose token depends on whether `=` follows
_EQUAL_PAIRS = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}

_SINGLE_CHARACTER = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


#transforms raw characters into a stream of tokens consumed by the parser
@dataclass(slots=True)
class Scanner:
    source: str
    reporter: Reporter
    _length: int = field(init=False)
    _index: int = field(init=False, default=0)
    _start_index: int = field(init=False, default=0)
    _line: int = field(init=False, default=0)
    _column: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self._length = len(self.source)
        self._index = 0
        self._start_index = 0
        self._line = 0
        self._column = 0

    def scan(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            self._skip_whitespace()
            if self._is_at_end():
                break

            self._start_index = self._index
            start_loc = self._current_location()
            char = self._advance()

            token = self._scan_token(char, start_loc)
            if token is not None:
                tokens.append(token)

        eof_loc = self._current_location()
        tokens.append(Token(TokenType.EOF, "", eof_loc, eof_loc))
        return tokens

    #returns None for comments and for characters that only produce a diagnostic
    def _scan_token(self, char: str, start_loc: SourceLocation) -> Optional[Token]:
        if char in _SINGLE_CHARACTER:
            return self._make_token(_SINGLE_CHARACTER[char], start_loc)
        if char in _EQUAL_PAIRS:
            double, single = _EQUAL_PAIRS[char]
            return self._make_token(double if self._match("=") else single, start_loc)

        match char:
            case "/":
                if self._match("/"):
                    self._line_comment()
                    return None
                return self._make_token(TokenType.SLASH, start_loc)
            case '"':
                return self._string(start_loc)

        if _is_digit(char):
            return self._number(start_loc)
        if char.isalpha() or char == "_":
            return self._identifier(start_loc)

        self.reporter.add_diagnostic(start_loc, self._current_location(), "Unexpected character")
        return None

    # Internal helpers -------------------------------------------------

    def _is_at_end(self) -> bool:
        return self._index >= self._length

    def _current_location(self) -> SourceLocation:
        return SourceLocation(line=self._line, column=self._column)

    def _advance(self) -> str:
        char = self.source[self._index]
        self._index += 1
        if char == "\n":
            self._line += 1
            self._column = 0
        else:
            self._column += 1
        return char

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self.source[self._index]

    def _peek_next(self) -> str:
        if self._index + 1 >= self._length:
            return "\0"
        return self.source[self._index + 1]

    def _match(self, expected: str) -> bool:
        if self._is_at_end():
            return False
        if self.source[self._index] != expected:
            return False
        self._advance()
        return True

    def _skip_whitespace(self) -> None:
        while not self._is_at_end():
            char = self._peek()
            if char in " \r\t\n":
                self._advance()
            else:
                break

    def _make_token(self, token_type: TokenType, start: SourceLocation, literal: Literal = None) -> Token:
        lexeme = self.source[self._start_index:self._index]
        return Token(token_type, lexeme, start, self._current_location(), literal)

    #strings may span lines; `_advance` keeps the line/column bookkeeping right
    def _string(self, start: SourceLocation) -> Optional[Token]:
        while not self._is_at_end() and self._peek() != '"':
            self._advance()
        if self._is_at_end():
            self.reporter.add_diagnostic(start, self._current_location(), "Unterminated string")
            return None
        self._advance()  # closing quote
        value = self.source[self._start_index + 1:self._index - 1]
        return self._make_token(TokenType.STRING, start, value)

    #a trailing `.` is only part of the number when a digit follows it
    def _number(self, start: SourceLocation) -> Token:
        while _is_digit(self._peek()):
            self._advance()
        if self._peek() == "." and _is_digit(self._peek_next()):
            self._advance()
            while _is_digit(self._peek()):
                self._advance()
        lexeme = self.source[self._start_index:self._index]
        return self._make_token(TokenType.NUMBER, start, float(lexeme))

    def _identifier(self, start: SourceLocation) -> Token:
        while True:
            char = self._peek()
            if char.isalnum() or char == "_":
                self._advance()
            else:
                break
        lexeme = self.source[self._start_index:self._index]
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        return self._make_token(token_type, start, KEYWORD_LITERALS.get(token_type))

    def _line_comment(self) -> None:
        while not self._is_at_end() and self._peek() != "\n":
            self._advance()


def scan(reporter: Reporter, source: str) -> List[Token]:
    return Scanner(source, reporter).scan()


__all__ = ["Scanner", "scan"]
