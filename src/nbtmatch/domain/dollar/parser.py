"""Recursive-descent parser for dollar expressions.

Grammar::

    expression  := or_expr
    or_expr     := and_expr ( "||" and_expr )*
    and_expr    := unary ( "&&" unary )*
    unary       := "!" unary | comparison
    comparison  := operand [ cmp_op operand ]
                 | operand ( "==" | "!=" ) RANGE
    operand     := reference | RANGE | NUMBER | STRING
                 | "true" | "false" | "null" | "(" expression ")"
    reference   := ( "$" | IDENT ) accessor*
    accessor    := "." ( IDENT | STRING ) | "[" ( NUMBER | STRING ) "]"

``RANGE`` is a ``$`` immediately followed by range syntax (``$0..10``,
``$..5``, ``$[1..5)``). On its own it tests the root value; on the right of
``==`` / ``!=`` it tests the left operand.
"""

from __future__ import annotations

from nbtmatch.domain.dollar.lexer import Token, TokenKind, tokenize
from nbtmatch.domain.dollar.parts import (
    EQUALITY_OPERATORS,
    ORDERING_OPERATORS,
    ROOT_REFERENCE,
    BooleanCombinator,
    Comparison,
    DollarPart,
    Literal,
    Negation,
    RangeTest,
    Reference,
)
from nbtmatch.domain.errors import DollarSyntaxError, RangeError
from nbtmatch.domain.ranges import NumberRange, parse_number, parse_range

_KEYWORDS: dict[str, bool | None] = {"true": True, "false": False, "null": None}


class Parser:
    """Single-use parser over the token stream of one expression."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    # -- token helpers -----------------------------------------------------

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.current
        if token.kind is not TokenKind.EOF:
            self.index += 1
        return token

    def at_operator(self, *ops: str) -> bool:
        return self.current.kind is TokenKind.OPERATOR and self.current.text in ops

    def expect(self, kind: TokenKind) -> Token:
        if self.current.kind is not kind:
            raise self.error(f"Expected '{kind}'")
        return self.advance()

    def error(self, message: str, token: Token | None = None) -> DollarSyntaxError:
        token = token or self.current
        found = "end of input" if token.kind is TokenKind.EOF else f"'{token.text}'"
        return DollarSyntaxError(self.text, token.position, f"{message}, found {found}")

    # -- grammar -------------------------------------------------------------

    def parse(self) -> DollarPart:
        if self.current.kind is TokenKind.EOF:
            raise self.error("Empty expression")
        part = self.parse_or()
        if self.current.kind is not TokenKind.EOF:
            raise self.error("Unexpected trailing input")
        return part

    def parse_or(self) -> DollarPart:
        children = [self.parse_and()]
        while self.at_operator("||"):
            self.advance()
            children.append(self.parse_and())
        return children[0] if len(children) == 1 else BooleanCombinator("||", tuple(children))

    def parse_and(self) -> DollarPart:
        children = [self.parse_unary()]
        while self.at_operator("&&"):
            self.advance()
            children.append(self.parse_unary())
        return children[0] if len(children) == 1 else BooleanCombinator("&&", tuple(children))

    def parse_unary(self) -> DollarPart:
        if self.at_operator("!"):
            self.advance()
            return Negation(self.parse_unary())
        return self.parse_comparison()

    def parse_comparison(self) -> DollarPart:
        left = self.parse_operand()
        if not self.at_operator(*EQUALITY_OPERATORS, *ORDERING_OPERATORS):
            return left
        op = self.advance().text
        if self.current.kind is TokenKind.RANGE:
            if op not in EQUALITY_OPERATORS:
                raise self.error(f"Range cannot be used with '{op}'")
            test = RangeTest(left, self.parse_range_token(self.advance()))
            return test if op == "==" else Negation(test)
        right = self.parse_operand()
        if self.at_operator(*EQUALITY_OPERATORS, *ORDERING_OPERATORS):
            raise self.error("Chained comparisons need parentheses")
        return Comparison(op, left, right)

    def parse_operand(self) -> DollarPart:
        token = self.current
        if token.kind is TokenKind.ROOT:
            self.advance()
            return self.parse_accessors(ROOT_REFERENCE)
        if token.kind is TokenKind.RANGE:
            self.advance()
            return RangeTest(Reference(ROOT_REFERENCE), self.parse_range_token(token))
        if token.kind is TokenKind.NUMBER:
            self.advance()
            try:
                return Literal(parse_number(token.text))
            except ValueError as exc:
                raise self.error(str(exc), token) from exc
        if token.kind is TokenKind.STRING:
            self.advance()
            return Literal(token.text)
        if token.kind is TokenKind.IDENT:
            self.advance()
            if token.text in _KEYWORDS:
                return Literal(_KEYWORDS[token.text])
            return self.parse_accessors(token.text)
        if token.kind is TokenKind.LPAREN:
            self.advance()
            inner = self.parse_or()
            self.expect(TokenKind.RPAREN)
            return inner
        raise self.error("Expected a value")

    def parse_accessors(self, name: str) -> Reference:
        path: list[str] = []
        while True:
            if self.current.kind is TokenKind.DOT:
                self.advance()
                key = self.current
                if key.kind not in (TokenKind.IDENT, TokenKind.STRING):
                    raise self.error("Expected a key after '.'")
                path.append(self.advance().text)
            elif self.current.kind is TokenKind.LBRACKET:
                self.advance()
                key = self.current
                if key.kind is TokenKind.NUMBER and key.text.isdigit():
                    path.append(key.text)
                elif key.kind is TokenKind.STRING:
                    path.append(key.text)
                else:
                    raise self.error("Expected a list index or quoted key")
                self.advance()
                self.expect(TokenKind.RBRACKET)
            else:
                return Reference(name, tuple(path))

    def parse_range_token(self, token: Token) -> NumberRange:
        try:
            return parse_range(token.text)
        except RangeError as exc:
            raise DollarSyntaxError(self.text, token.position, str(exc)) from exc


def parse(text: str) -> DollarPart:
    """Parse *text* into an expression tree.

    Raises:
        DollarSyntaxError: The text is not a valid expression.
    """
    return Parser(text).parse()
