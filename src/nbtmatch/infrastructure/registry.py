"""Static identifier registry used to validate the ``potion`` shorthand."""

from __future__ import annotations

from collections.abc import Iterable

from nbtmatch.domain.identifiers import DEFAULT_NAMESPACE, normalize_identifier

VANILLA_POTIONS: tuple[str, ...] = (
    "empty",
    "water",
    "mundane",
    "thick",
    "awkward",
    "night_vision",
    "long_night_vision",
    "invisibility",
    "long_invisibility",
    "leaping",
    "long_leaping",
    "strong_leaping",
    "fire_resistance",
    "long_fire_resistance",
    "swiftness",
    "long_swiftness",
    "strong_swiftness",
    "slowness",
    "long_slowness",
    "strong_slowness",
    "turtle_master",
    "long_turtle_master",
    "strong_turtle_master",
    "water_breathing",
    "long_water_breathing",
    "healing",
    "strong_healing",
    "harming",
    "strong_harming",
    "poison",
    "long_poison",
    "strong_poison",
    "regeneration",
    "long_regeneration",
    "strong_regeneration",
    "strength",
    "long_strength",
    "strong_strength",
    "weakness",
    "long_weakness",
    "luck",
    "slow_falling",
    "long_slow_falling",
)


class StaticRegistry:
    """A fixed set of namespaced identifiers.

    Entries without a namespace get *default_namespace*.
    """

    def __init__(self, identifiers: Iterable[str], default_namespace: str = DEFAULT_NAMESPACE) -> None:
        self._default_namespace = default_namespace
        self._identifiers = frozenset(
            normalize_identifier(identifier, default_namespace) for identifier in identifiers
        )

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.resolve(identifier) is not None

    def __len__(self) -> int:
        return len(self._identifiers)

    def resolve(self, identifier: str) -> str | None:
        try:
            normalized = normalize_identifier(identifier, self._default_namespace)
        except ValueError:
            return None
        return normalized if normalized in self._identifiers else None


def potion_registry(
    potions: Iterable[str] = VANILLA_POTIONS, default_namespace: str = DEFAULT_NAMESPACE
) -> StaticRegistry:
    return StaticRegistry(potions, default_namespace)
