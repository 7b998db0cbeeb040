"""Tokenizer for dollar expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from nbtmatch.domain.errors import DollarSyntaxError


class TokenKind(StrEnum):
    ROOT = "root"
    RANGE = "range"
    IDENT = "ident"
    NUMBER = "number"
    STRING = "string"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    DOT = "."
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int


OPERATORS = ("==", "!=", "<=", ">=", "&&", "||", "<", ">", "!")

_SINGLE_CHARS = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ".": TokenKind.DOT,
}
_RANGE_CHARS = frozenset("0123456789.+-eE")
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "/": "/",
    "\\": "\\",
    "\"": "\"",
    "'": "'",
}


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class Lexer:
    """Turns expression text into a flat token list ending with EOF."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str, position: int | None = None) -> DollarSyntaxError:
        return DollarSyntaxError(self.text, self.pos if position is None else position, message)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            token = self._next()
            tokens.append(token)
            if token.kind is TokenKind.EOF:
                return tokens

    def _next(self) -> Token:
        while self.peek().isspace():
            self.pos += 1
        start = self.pos
        ch = self.peek()
        if not ch:
            return Token(TokenKind.EOF, "", start)
        if ch == "$":
            return self._dollar()
        if ch in "\"'":
            return self._string()
        if ch.isdigit() or (ch == "-" and self.peek(1).isdigit()):
            return self._number()
        if _is_ident_start(ch):
            while _is_ident_char(self.peek()):
                self.pos += 1
            return Token(TokenKind.IDENT, self.text[start : self.pos], start)
        for op in OPERATORS:
            if self.text.startswith(op, start):
                self.pos += len(op)
                return Token(TokenKind.OPERATOR, op, start)
        if ch in _SINGLE_CHARS:
            self.pos += 1
            return Token(_SINGLE_CHARS[ch], ch, start)
        raise self.error(f"Unexpected character '{ch}'")

    def _starts_range(self) -> bool:
        """Called with ``pos`` just after a ``$``."""
        ch = self.peek()
        if not ch:
            return False
        if ch.isdigit() or ch in "+-(":
            return True
        if ch == ".":
            nxt = self.peek(1)
            return nxt == "." or nxt.isdigit()
        if ch == "[":
            # $[0] and $["a..b"] are accessors, $[0..5) is a bracketed range.
            if self.peek(1) in ("\"", "'"):
                return False
            end = len(self.text)
            for close in "])":
                found = self.text.find(close, self.pos)
                if found != -1:
                    end = min(end, found)
            return ".." in self.text[self.pos : end]
        return False

    def _dollar(self) -> Token:
        start = self.pos
        self.pos += 1
        if not self._starts_range():
            return Token(TokenKind.ROOT, "$", start)

        body_start = self.pos
        bracketed = self.peek() in "[("
        if bracketed:
            self.pos += 1
        # Inside brackets the range may be padded with spaces.
        while self.peek() and (
            self.peek() in _RANGE_CHARS or (bracketed and self.peek().isspace())
        ):
            self.pos += 1
        if bracketed:
            if self.peek() not in ("]", ")"):
                raise self.error("Unclosed range bracket")
            self.pos += 1
        return Token(TokenKind.RANGE, self.text[body_start : self.pos], start)

    def _number(self) -> Token:
        start = self.pos
        if self.peek() == "-":
            self.pos += 1
        while self.peek().isdigit():
            self.pos += 1
        if self.peek() == "." and self.peek(1).isdigit():
            self.pos += 1
            while self.peek().isdigit():
                self.pos += 1
        if self.peek() in ("e", "E") and (self.peek(1).isdigit() or self.peek(1) in ("+", "-")):
            self.pos += 2
            while self.peek().isdigit():
                self.pos += 1
        return Token(TokenKind.NUMBER, self.text[start : self.pos], start)

    def _string(self) -> Token:
        start = self.pos
        quote = self.peek()
        self.pos += 1
        chars: list[str] = []
        while True:
            ch = self.peek()
            if not ch:
                raise self.error("Unterminated string literal", start)
            self.pos += 1
            if ch == quote:
                return Token(TokenKind.STRING, "".join(chars), start)
            if ch == "\\":
                esc = self.peek()
                if esc == "u":
                    digits = self.text[self.pos + 1 : self.pos + 5]
                    if len(digits) != 4 or not all(d in "0123456789abcdefABCDEF" for d in digits):
                        raise self.error("Invalid unicode escape")
                    chars.append(chr(int(digits, 16)))
                    self.pos += 5
                    continue
                if esc not in _ESCAPES:
                    raise self.error(f"Unknown escape '\\{esc}'")
                chars.append(_ESCAPES[esc])
                self.pos += 1
            else:
                chars.append(ch)


def tokenize(text: str) -> list[Token]:
    return Lexer(text).tokenize()
