"""
normalize.common
----------------
Low-level helpers shared by the record normalizers and the merge engine.
All helpers are pure (no I/O) and never mutate their inputs.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

_MISSING = object()


def squash_spaces(s: str | None) -> str | None:
    """Collapse extra spaces/newlines and trim. Returns None if empty."""
    if not s:
        return None
    out = " ".join(str(s).split())
    return out or None


def is_empty(value: Any) -> bool:
    """A value counts as absent when it is None or an empty string."""
    return value is None or value == ""


def get_path(record: Mapping[str, Any] | None, path: str, default: Any = None) -> Any:
    """
    Read a dotted path ("vacation.total") from nested mappings.
    Returns `default` as soon as any segment is missing or not a mapping.
    """
    node: Any = record
    for part in path.split("."):
        if not isinstance(node, Mapping):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return node


def set_path(doc: Dict[str, Any], path: str, value: Any) -> None:
    """Write `value` at a dotted path, creating intermediate dicts."""
    parts = path.split(".")
    node = doc
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def to_id(value: Any) -> str | None:
    """Coerce an identifier-like value to a trimmed string; blank -> None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    return squash_spaces(str(value))
