"""Tests for service payload contracts."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from nbtmatch.services.contracts import MatchResultData, WireData, dump_validated


class TestDumpValidated:
    def test_normalizes_payload(self) -> None:
        data = dump_validated(
            MatchResultData,
            {"count": 1, "matched": 1, "results": [{"index": 0, "item": "x", "matches": True}]},
        )
        assert data["results"][0] == {"index": 0, "item": "x", "matches": True}

    def test_extra_row_fields_kept(self) -> None:
        data = dump_validated(
            MatchResultData,
            {"count": 1, "matched": 0, "results": [{"index": 0, "item": "x", "matches": False, "why": "deny"}]},
        )
        assert data["results"][0]["why"] == "deny"

    def test_missing_key_fails_fast(self) -> None:
        with pytest.raises(ValidationError):
            dump_validated(WireData, {"hex": "00", "size": 1})
