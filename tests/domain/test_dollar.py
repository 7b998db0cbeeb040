"""Tests for dollar expressions: lexing, parsing and evaluation."""

from __future__ import annotations

from typing import Any

import pytest

from nbtmatch.domain.dollar import (
    ROOT_REFERENCE,
    BooleanCombinator,
    Comparison,
    Literal,
    Negation,
    RangeTest,
    Reference,
    Resolver,
    as_boolean,
    evaluate,
    parse,
)
from nbtmatch.domain.dollar.lexer import TokenKind, tokenize
from nbtmatch.domain.dollar.values import values_equal
from nbtmatch.domain.errors import (
    DollarEvaluationError,
    DollarSyntaxError,
    UnresolvedReferenceError,
)
from nbtmatch.domain.ranges import NumberRange
from nbtmatch.domain.tags import Compound, Int, Short, String, TagNode, compound_from_json

ROOT = Reference(ROOT_REFERENCE)


def resolver_for(tag: TagNode) -> Resolver:
    def resolve(name: str) -> TagNode:
        if name == ROOT_REFERENCE:
            return tag
        raise UnresolvedReferenceError(name)

    return resolve


def run(text: str, doc: dict[str, Any]) -> Any:
    return evaluate(parse(text), resolver_for(compound_from_json(doc)))


class TestLexer:
    def kinds(self, text: str) -> list[TokenKind]:
        return [t.kind for t in tokenize(text)]

    def test_root_reference(self) -> None:
        assert self.kinds("$.a") == [TokenKind.ROOT, TokenKind.DOT, TokenKind.IDENT, TokenKind.EOF]

    def test_bare_root(self) -> None:
        assert self.kinds("$") == [TokenKind.ROOT, TokenKind.EOF]

    @pytest.mark.parametrize("text", ["$0..10", "$..5", "$3", "$-1..1", "$.5..1", "$[1..5)", "$(0..2]"])
    def test_range_tokens(self, text: str) -> None:
        tokens = tokenize(text)
        assert tokens[0].kind is TokenKind.RANGE
        assert tokens[0].text == text[1:]

    def test_index_accessor_is_not_range(self) -> None:
        assert self.kinds("$[0]")[:4] == [
            TokenKind.ROOT,
            TokenKind.LBRACKET,
            TokenKind.NUMBER,
            TokenKind.RBRACKET,
        ]

    def test_quoted_key_accessor_is_not_range(self) -> None:
        assert self.kinds('$["a..b"]')[:3] == [TokenKind.ROOT, TokenKind.LBRACKET, TokenKind.STRING]

    def test_strings_and_escapes(self) -> None:
        tokens = tokenize(r"'it\'s' " + r'"a\"b\né"')
        assert tokens[0].text == "it's"
        assert tokens[1].text == 'a"b\né'

    def test_negative_number(self) -> None:
        tokens = tokenize("-12.5")
        assert tokens[0].kind is TokenKind.NUMBER
        assert tokens[0].text == "-12.5"

    def test_operators(self) -> None:
        texts = [t.text for t in tokenize("a<=b && !c || d != e")][:-1]
        assert texts == ["a", "<=", "b", "&&", "!", "c", "||", "d", "!=", "e"]

    def test_unterminated_string(self) -> None:
        with pytest.raises(DollarSyntaxError) as exc_info:
            tokenize('"abc')
        assert exc_info.value.position == 0

    def test_unexpected_character(self) -> None:
        with pytest.raises(DollarSyntaxError) as exc_info:
            tokenize("$.a # 1")
        assert exc_info.value.position == 4


class TestParser:
    def test_reference_path(self) -> None:
        assert parse('$.display.Lore[0]["odd key"]') == Reference(
            "$", ("display", "Lore", "0", "odd key")
        )

    def test_named_reference(self) -> None:
        assert parse("other.x") == Reference("other", ("x",))

    def test_keywords(self) -> None:
        assert parse("true") == Literal(True)
        assert parse("null") == Literal(None)

    def test_bare_range_tests_root(self) -> None:
        assert parse("$0..10") == RangeTest(ROOT, NumberRange(0, 10))

    def test_padded_bracketed_range(self) -> None:
        assert parse("$[ 0..5 ]") == RangeTest(ROOT, NumberRange(0, 5))
        assert parse("$.a == $( 1 .. 3 ] && $.b") == BooleanCombinator(
            "&&",
            (
                RangeTest(Reference("$", ("a",)), NumberRange(1, 3, lower_inclusive=False)),
                Reference("$", ("b",)),
            ),
        )

    def test_range_equality(self) -> None:
        target = Reference("$", ("Damage",))
        assert parse("$.Damage == $..5") == RangeTest(target, NumberRange(None, 5))
        assert parse("$.Damage != $..5") == Negation(RangeTest(target, NumberRange(None, 5)))

    def test_precedence(self) -> None:
        part = parse("$.a == 1 || $.b == 2 && !$.c")
        assert isinstance(part, BooleanCombinator)
        assert part.op == "||"
        assert isinstance(part.children[1], BooleanCombinator)
        assert part.children[1].op == "&&"
        assert isinstance(part.children[1].children[1], Negation)

    def test_parentheses(self) -> None:
        part = parse("($.a || $.b) && $.c")
        assert isinstance(part, BooleanCombinator)
        assert part.op == "&&"

    def test_comparison(self) -> None:
        assert parse("$.n >= -2.5") == Comparison(">=", Reference("$", ("n",)), Literal(-2.5))

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            "$.a ==",
            "$.a == 1 == 2",
            "$.a < $0..5",
            "($.a",
            "$.a )",
            "$.",
            "$[x]",
            "$10..1",
            "$[1..2",
            "1 2",
        ],
    )
    def test_syntax_errors(self, text: str) -> None:
        with pytest.raises(DollarSyntaxError) as exc_info:
            parse(text)
        assert exc_info.value.text == text

    @pytest.mark.parametrize(
        "text",
        [
            "$",
            "$.Damage < 10",
            '$.display.Name == "Excalibur"',
            "$.Count == $1..16",
            "!($.a == 1 || $.b == 2)",
            "!($.Damage == $(0..5])",
            '$["a.b"][2] != null',
            "$.x && ($.y || $.z)",
        ],
    )
    def test_canonical_source_reparses(self, text: str) -> None:
        part = parse(text)
        assert parse(part.to_source()) == part


class TestEvaluate:
    def test_root_returns_instance(self) -> None:
        tag = compound_from_json({"a": 1})
        assert evaluate(parse("$"), resolver_for(tag)) is tag

    def test_path_lookup(self) -> None:
        assert run("$.a.b", {"a": {"b": "x"}}) == String("x")

    def test_missing_path_is_none(self) -> None:
        assert run("$.nope.deeper", {"a": 1}) is None
        assert run("$.nope == null", {}) is True

    def test_unresolved_reference(self) -> None:
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            run("other.x", {})
        assert exc_info.value.name == "other"

    def test_numeric_comparison_across_widths(self) -> None:
        tag = Compound({"s": Short(3), "i": Int(3)})
        assert evaluate(parse("$.s == $.i"), resolver_for(tag)) is True
        assert evaluate(parse("$.s < 3.5"), resolver_for(tag)) is True

    def test_string_comparison(self) -> None:
        assert run('$.n == "abc"', {"n": "abc"}) is True
        assert run('$.n < "b"', {"n": "abc"}) is True
        assert run("$.n == 1", {"n": "1"}) is False

    def test_ordering_type_mismatch(self) -> None:
        with pytest.raises(DollarEvaluationError):
            run('$.n < "b"', {"n": 1})

    def test_range_test(self) -> None:
        assert run("$.Damage == $0..10", {"Damage": 10}) is True
        assert run("$.Damage == $[0..10)", {"Damage": 10}) is False
        assert run("$.Damage != $0..10", {"Damage": 11}) is True

    def test_range_needs_number(self) -> None:
        with pytest.raises(DollarEvaluationError):
            run("$.Name == $0..10", {"Name": "x"})
        with pytest.raises(DollarEvaluationError):
            run("$0..10", {})

    def test_boolean_short_circuit(self) -> None:
        # The right side would raise if evaluated.
        assert run("$.a == 1 || other.x", {"a": 1}) is True
        assert run("$.a == 2 && other.x", {"a": 1}) is False

    def test_truthiness(self) -> None:
        assert run("$.flag", {"flag": 1}) is not None
        assert as_boolean(run("$.flag", {"flag": 1})) is True
        assert as_boolean(run("$.flag", {"flag": 0})) is False
        assert as_boolean(run("$.list", {"list": []})) is False
        assert as_boolean(run("$.missing", {})) is False
        assert run("!$.missing", {}) is True

    def test_values_equal_compounds(self) -> None:
        a = compound_from_json({"x": 1})
        assert values_equal(a, compound_from_json({"x": 1}))
        assert not values_equal(a, 1)
