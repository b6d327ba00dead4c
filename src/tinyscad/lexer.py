"""Tokenizer for the tinyscad template language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tinyscad.errors import InvalidToken, UnterminatedComment

SYMBOLS: frozenset[str] = frozenset("(){}[],:;=+-*/")

_DIGITS = frozenset("0123456789")
_IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_$")
_IDENT_CHARS = _IDENT_START | _DIGITS


class TokenKind(str, Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    SYMBOL = "symbol"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    """A single lexical token.

    ``value`` holds the parsed float for numbers and the raw text otherwise.
    """

    kind: TokenKind
    text: str
    line: int
    column: int
    value: float | str | None = None


class _Cursor:
    """Tracks the read position and its line/column within the source."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.index = 0
        self.line = 1
        self.column = 1

    def current(self) -> str:
        return self.source[self.index] if self.index < len(self.source) else ""

    def peek(self) -> str:
        nxt = self.index + 1
        return self.source[nxt] if nxt < len(self.source) else ""

    def at_end(self) -> bool:
        return self.index >= len(self.source)

    def advance(self, amount: int = 1) -> None:
        for _ in range(amount):
            if self.source[self.index] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.index += 1


def tokenize(source: str) -> list[Token]:
    """Split ``source`` into tokens, ending with a single EOF sentinel.

    Raises:
        UnterminatedComment: If a ``/*`` comment is never closed.
        InvalidToken: On any character outside the language alphabet.
    """
    tokens: list[Token] = []
    cur = _Cursor(source)

    while not cur.at_end():
        ch = cur.current()

        if ch.isspace():
            cur.advance()
            continue

        if ch == "/" and cur.peek() == "/":
            while not cur.at_end() and cur.current() != "\n":
                cur.advance()
            continue

        if ch == "/" and cur.peek() == "*":
            start_line, start_column = cur.line, cur.column
            cur.advance(2)
            while not cur.at_end() and not (cur.current() == "*" and cur.peek() == "/"):
                cur.advance()
            if cur.at_end():
                raise UnterminatedComment(start_line, start_column)
            cur.advance(2)
            continue

        if ch in _DIGITS or (ch == "." and cur.peek() in _DIGITS):
            tokens.append(_read_number(cur))
            continue

        if ch in _IDENT_START:
            line, column = cur.line, cur.column
            start = cur.index
            while not cur.at_end() and cur.current() in _IDENT_CHARS:
                cur.advance()
            text = source[start : cur.index]
            tokens.append(Token(TokenKind.IDENTIFIER, text, line, column, text))
            continue

        if ch in SYMBOLS:
            tokens.append(Token(TokenKind.SYMBOL, ch, cur.line, cur.column, ch))
            cur.advance()
            continue

        raise InvalidToken(ch, cur.line, cur.column)

    tokens.append(Token(TokenKind.EOF, "<eof>", cur.line, cur.column))
    return tokens


def _read_number(cur: _Cursor) -> Token:
    """Read digits with at most one decimal point. Signs belong to the parser."""
    line, column = cur.line, cur.column
    start = cur.index
    seen_dot = False
    while not cur.at_end():
        ch = cur.current()
        if ch == ".":
            if seen_dot:
                break
            seen_dot = True
        elif ch not in _DIGITS:
            break
        cur.advance()
    text = cur.source[start : cur.index]
    return Token(TokenKind.NUMBER, text, line, column, float(text))
