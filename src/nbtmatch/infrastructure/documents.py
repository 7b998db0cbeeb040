"""Loading condition and instance documents from JSON or YAML.

JSON is a subset of YAML, so a single safe ruamel.yaml loader reads both
and hands back plain dicts, lists and scalars.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from nbtmatch.domain.errors import DocumentError


def _new_yaml() -> YAML:
    """Create a fresh safe loader (YAML objects are stateful)."""
    return YAML(typ="safe", pure=True)


def parse_document(text: str, *, source: str = "<string>") -> Any:
    """Parse JSON/YAML *text*.

    Raises:
        DocumentError: The text is not valid JSON/YAML or is empty.
    """
    try:
        data = _new_yaml().load(text)
    except YAMLError as exc:
        raise DocumentError(f"Invalid document in {source}: {exc}") from exc
    if data is None:
        raise DocumentError(f"Document {source} is empty")
    return data


def load_document(path: Path) -> Any:
    """Read and parse the document at *path*."""
    if not path.is_file():
        raise DocumentError(f"No such file: {path}")
    return parse_document(path.read_text(encoding="utf-8"), source=str(path))


def read_document_arg(value: str) -> Any:
    """Interpret a CLI argument as inline JSON/YAML or a file path.

    Arguments starting with ``{`` or ``[`` are parsed inline; anything else
    is treated as a path.
    """
    stripped = value.lstrip()
    if stripped.startswith(("{", "[")):
        return parse_document(value, source="argument")
    return load_document(Path(value))
