"""Item stacks — the instances conditions are matched against."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from nbtmatch.domain.errors import ConditionFormatError, TagError
from nbtmatch.domain.tags import Compound, compound_from_json, tag_to_json


@dataclass(frozen=True)
class ItemStack:
    """An item id, a count and optional tag data.

    A stack whose ``tag`` is None carries no tag data at all; an empty
    compound still counts as having tag data.
    """

    item: str
    count: int = 1
    tag: Compound | None = None

    def has_tag(self) -> bool:
        return self.tag is not None

    def get_tag(self) -> Compound:
        if self.tag is None:
            raise TagError(f"Item stack '{self.item}' has no tag data")
        return self.tag

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> ItemStack:
        """Build a stack from ``{"item": ..., "count": ..., "tag": {...}}``."""
        if not isinstance(data, Mapping):
            raise ConditionFormatError("", "item stack must be an object")
        item = data.get("item")
        if not isinstance(item, str) or not item:
            raise ConditionFormatError("item", "must be a non-empty string")
        count = data.get("count", 1)
        if isinstance(count, bool) or not isinstance(count, int):
            raise ConditionFormatError("count", "must be an integer")
        raw_tag = data.get("tag")
        tag: Compound | None = None
        if raw_tag is not None:
            if not isinstance(raw_tag, Mapping):
                raise ConditionFormatError("tag", "must be an object")
            tag = compound_from_json(raw_tag)
        return cls(item=item, count=count, tag=tag)

    def to_config(self) -> dict[str, Any]:
        data: dict[str, Any] = {"item": self.item, "count": self.count}
        if self.tag is not None:
            data["tag"] = tag_to_json(self.tag)
        return data
