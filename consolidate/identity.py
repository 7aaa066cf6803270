"""
consolidate.identity
--------------------
Find which record of a secondary collection describes the same entity as a
primary record.

Keys are tried in priority order. For each key the primary value is compared
(plain equality) with the secondary fields listed for that key in the set's
key map, e.g. {"id": ["userId", "employeeId"], "email": ["email"]}.
Resolution stops at the first key that matches anything; within a key the
first record in input order wins. There is no match scoring, so results only
depend on the order records were read in.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from normalize.common import is_empty
from normalize.records import SourceRecord

KeyMap = Dict[str, Sequence[str]]
SecondarySet = Tuple[Sequence[SourceRecord], KeyMap]


def match_in_set(primary: SourceRecord, records: Sequence[SourceRecord],
                 key_map: KeyMap, key_priority: Sequence[str]) -> Optional[SourceRecord]:
    for key in key_priority:
        wanted = primary.get(key)
        fields = key_map.get(key)
        if is_empty(wanted) or not fields:
            continue
        for rec in records:
            if any(rec.get(f) == wanted for f in fields):
                return rec
    return None


def resolve(primary: SourceRecord, secondary_sets: Sequence[SecondarySet],
            key_priority: Sequence[str]) -> List[Optional[SourceRecord]]:
    """One optional match per secondary set, in input order."""
    return [match_in_set(primary, records, key_map, key_priority)
            for records, key_map in secondary_sets]


def has_match(primary: SourceRecord, records: Sequence[SourceRecord],
              key_map: KeyMap, key_priority: Sequence[str]) -> bool:
    return match_in_set(primary, records, key_map, key_priority) is not None
