"""
consolidate.merge_engine
------------------------
Builds one canonical document from a primary record and its resolved
secondary records using hard source priority rules (see consolidate.rules).

Usage:
    doc = build_canonical("user", {"user": u, "employee": e, ...},
                          USER_PRIORITY, USER_DEFAULTS, ctx)
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from normalize.common import _MISSING, is_empty, set_path
from normalize.records import SourceRecord

from .store import SERVER_TIMESTAMP

Sources = Mapping[str, Optional[SourceRecord]]
Priority = Mapping[str, Sequence[Tuple[str, str]]]


@dataclass(frozen=True)
class MergeContext:
    """Run-wide inputs for defaults that depend on the clock."""
    now: datetime


def pick(sources: Sources, candidates: Sequence[Tuple[str, str]]) -> Any:
    """First present, non-empty candidate value, or _MISSING."""
    for src, path in candidates:
        rec = sources.get(src)
        if rec is None:
            continue
        value = rec.get(path)
        if not is_empty(value):
            return value
    return _MISSING


def resolve_default(default: Any, sources: Sources, ctx: MergeContext) -> Any:
    if callable(default):
        return default(sources, ctx)
    return default


def merge_by_priority(sources: Sources, priority: Priority,
                      defaults: Mapping[str, Any], ctx: MergeContext) -> Dict[str, Any]:
    """
    Apply hard source priority for each canonical field. Dotted fields are
    written leaf by leaf, so nested objects never inherit another source's
    whole sub-object.
    """
    final: Dict[str, Any] = {}

    for field, candidates in priority.items():
        value = pick(sources, candidates)
        if value is _MISSING:
            value = resolve_default(defaults.get(field), sources, ctx)
        set_path(final, field, copy.deepcopy(value))

    # defaults for fields no source ever provides
    for field, default in defaults.items():
        if field not in priority:
            set_path(final, field, copy.deepcopy(resolve_default(default, sources, ctx)))

    return final


def build_canonical(primary: str, sources: Sources, priority: Priority,
                    defaults: Mapping[str, Any], ctx: MergeContext) -> Dict[str, Any]:
    """
    Entry point: merge and key the document by the primary record's id.
    """
    rec = sources[primary]
    if rec is None:
        raise ValueError(f"primary source '{primary}' is missing")
    doc: Dict[str, Any] = {"id": rec.id}
    doc.update(merge_by_priority(sources, priority, defaults, ctx))
    doc["id"] = rec.id
    return doc


def strip_server_timestamps(doc: Any) -> Any:
    """Copy of doc without SERVER_TIMESTAMP leaves (for comparisons)."""
    if isinstance(doc, dict):
        return {k: strip_server_timestamps(v) for k, v in doc.items() if v is not SERVER_TIMESTAMP}
    if isinstance(doc, list):
        return [strip_server_timestamps(v) for v in doc if v is not SERVER_TIMESTAMP]
    return doc
