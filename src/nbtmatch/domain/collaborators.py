"""Structural interfaces for the host-side collaborators of a condition.

The engine never looks items up, reads sockets or owns a registry; it talks
to whatever the host passes in through these protocols.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from nbtmatch.domain.tags import Compound


@runtime_checkable
class TagHolder(Protocol):
    """Something that may carry tag data, such as an item stack."""

    def has_tag(self) -> bool: ...

    def get_tag(self) -> Compound: ...


class Registry(Protocol):
    """Resolves namespaced identifiers (e.g. potion ids)."""

    def resolve(self, identifier: str) -> str | None:
        """Return the canonical identifier, or None when it is unknown."""
        ...


class TagBuffer(Protocol):
    """Sequential reader/writer of opaque tag blobs."""

    def write_tag(self, tag: Compound | None) -> None: ...

    def read_tag(self) -> Compound: ...
