"""Tests for ConditionService."""

from __future__ import annotations

import pytest

from nbtmatch.infrastructure.registry import StaticRegistry
from nbtmatch.services.condition import ConditionService

SWORD = {"item": "minecraft:diamond_sword", "tag": {"Damage": 0}}
CURSED = {"item": "minecraft:diamond_sword", "tag": {"Damage": 0, "Cursed": True}}
PLAIN = {"item": "minecraft:stick"}


@pytest.fixture
def svc() -> ConditionService:
    return ConditionService()


class TestCheck:
    def test_counts_matches(self, svc: ConditionService) -> None:
        result = svc.check({"require": {"Damage": 0}, "deny": {"Cursed": True}}, [SWORD, CURSED, PLAIN])
        assert result.ok
        assert result.op == "match"
        assert result.data["count"] == 3
        assert result.data["matched"] == 1
        assert [row["matches"] for row in result.data["results"]] == [True, False, False]
        assert result.data["results"][2]["item"] == "minecraft:stick"

    def test_single_instance_object(self, svc: ConditionService) -> None:
        result = svc.check({}, SWORD)
        assert result.ok
        assert result.data["count"] == 1

    def test_evaluation_warnings_surface(self, svc: ConditionService) -> None:
        result = svc.check({"conditions": ["$.Damage < \"x\""]}, [SWORD])
        assert result.ok
        assert result.data["matched"] == 0
        assert len(result.warnings) == 1
        assert "Failed to evaluate dollar predicate" in result.warnings[0]

    def test_invalid_condition(self, svc: ConditionService) -> None:
        result = svc.check({"require": 1}, [SWORD])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_CONDITION"
        assert result.error.detail == {"field": "require"}

    def test_predicate_syntax_errors(self, svc: ConditionService) -> None:
        result = svc.check({"conditions": ["$.a ==", "$.b"]}, [SWORD])
        assert not result.ok
        assert result.error is not None
        assert result.error.detail["failures"][0]["index"] == 0

    def test_invalid_instance(self, svc: ConditionService) -> None:
        result = svc.check({}, [{"count": 2}])
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_CONDITION"

    def test_instances_must_be_objects(self, svc: ConditionService) -> None:
        assert not svc.check({}, "nope").ok


class TestPreview:
    def test_preview(self, svc: ConditionService) -> None:
        result = svc.preview({"require": {"Damage": "$..3", "Name": "x"}})
        assert result.ok
        assert result.data["preview"] == {"Damage": 3, "Name": "x"}
        assert result.data["snbt"] == '{Damage:3,Name:"x"}'

    def test_unrepresentable_example_is_a_warning(self, svc: ConditionService) -> None:
        result = svc.preview({"require": {"Big": "$99999999999999999999.."}})
        assert result.ok
        assert result.data["preview"] == {"Big": "$99999999999999999999.."}
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Failed to set dollar range value")


class TestNormalize:
    def test_flat_document(self, svc: ConditionService) -> None:
        result = svc.normalize({"Damage": 0})
        assert result.ok
        assert result.data["condition"] == {"require": {"Damage": 0}}
        assert result.data["predicates"] == 0

    def test_potion_resolved(self, svc: ConditionService) -> None:
        result = svc.normalize({"potion": "healing", "conditions": ["$.a"]})
        assert result.data["condition"] == {
            "require": {"Potion": "minecraft:healing"},
            "conditions": ["$.a"],
        }

    def test_custom_registry(self) -> None:
        svc = ConditionService(StaticRegistry(["glow"], "mymod"))
        result = svc.normalize({"potion": "glow"})
        assert result.data["condition"] == {"require": {"Potion": "mymod:glow"}}

    def test_unknown_potion_warning(self, svc: ConditionService) -> None:
        result = svc.normalize({"potion": "flying"})
        assert result.ok
        assert result.data["condition"] == {}
        assert result.warnings == ["Unknown potion 'flying'"]


class TestExpressions:
    def test_parse(self, svc: ConditionService) -> None:
        result = svc.parse_expression("$.Count==$1..16")
        assert result.ok
        assert result.data["canonical"] == "$.Count == $1..16"
        assert result.data["ast"]["kind"] == "range"

    def test_parse_error(self, svc: ConditionService) -> None:
        result = svc.parse_expression("$.a ==")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_EXPRESSION"
        assert result.error.detail["text"] == "$.a =="

    def test_evaluate(self, svc: ConditionService) -> None:
        result = svc.evaluate_expression("$.display", {"display": {"Name": "x"}})
        assert result.ok
        assert result.data["value"] == {"Name": "x"}
        assert result.data["result"] is True

    def test_evaluate_falsy(self, svc: ConditionService) -> None:
        result = svc.evaluate_expression("$.missing", {})
        assert result.data["value"] is None
        assert result.data["result"] is False

    def test_evaluation_failure(self, svc: ConditionService) -> None:
        result = svc.evaluate_expression("$.a < 1", {"a": "x"})
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "EVALUATION_FAILED"

    def test_tag_must_be_object(self, svc: ConditionService) -> None:
        assert not svc.evaluate_expression("$", [1]).ok


class TestWire:
    def test_encode_decode(self, svc: ConditionService) -> None:
        doc = {"require": {"Damage": 0}, "deny": {"Cursed": 1}}
        encoded = svc.encode(doc)
        assert encoded.ok
        assert encoded.data["size"] == len(bytes.fromhex(encoded.data["hex"]))
        decoded = svc.decode(encoded.data["hex"])
        assert decoded.ok
        assert decoded.data["condition"] == doc

    def test_encode_warns_about_predicates(self, svc: ConditionService) -> None:
        result = svc.encode({"conditions": ["$.a", "$.b"]})
        assert result.data["dropped_predicates"] == 2
        assert len(result.warnings) == 1

    def test_decode_bad_hex(self, svc: ConditionService) -> None:
        result = svc.decode("zz")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_WIRE"

    def test_decode_truncated(self, svc: ConditionService) -> None:
        assert not svc.decode("0a00").ok
