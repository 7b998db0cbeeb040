"""Namespaced identifiers (``namespace:path``).

A bare path gets the default namespace: ``swiftness`` becomes
``minecraft:swiftness``.
"""

from __future__ import annotations

import re

DEFAULT_NAMESPACE = "minecraft"

NAMESPACE_PATTERN = re.compile(r"^[a-z0-9_.-]+$")
PATH_PATTERN = re.compile(r"^[a-z0-9_./-]+$")


def normalize_identifier(text: str, default_namespace: str = DEFAULT_NAMESPACE) -> str:
    """Return ``namespace:path`` for *text*.

    Raises:
        ValueError: Either part contains characters outside the allowed set.
    """
    namespace, sep, path = text.partition(":")
    if not sep:
        namespace, path = default_namespace, text
    if not NAMESPACE_PATTERN.match(namespace):
        raise ValueError(f"Non [a-z0-9_.-] character in namespace of identifier '{text}'")
    if not PATH_PATTERN.match(path):
        raise ValueError(f"Non [a-z0-9/._-] character in path of identifier '{text}'")
    return f"{namespace}:{path}"


def validate_identifier(text: str) -> bool:
    try:
        normalize_identifier(text)
    except ValueError:
        return False
    return True
