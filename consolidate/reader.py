"""
consolidate.reader
------------------
CollectionReader: fetch every document of one collection and hand back
validated SourceRecords, or an explicit NotFound when there is nothing to
read. Callers branch on the result type instead of catching exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from google.api_core.exceptions import NotFound as StoreNotFound

from normalize.records import Origin, SourceRecord, to_source_record

from .store import DocumentStore


@dataclass(frozen=True)
class Found:
    collection: str
    records: List[SourceRecord] = field(default_factory=list)


@dataclass(frozen=True)
class NotFound:
    collection: str
    reason: str = "empty or missing"


ReadResult = Union[Found, NotFound]


class CollectionReader:
    def __init__(self, store: DocumentStore):
        self._store = store

    def read(self, collection: str, origin: Origin) -> ReadResult:
        try:
            raw = self._store.read_all(collection)
        except StoreNotFound as exc:
            return NotFound(collection, str(exc))
        if not raw:
            return NotFound(collection)
        return Found(collection, [to_source_record(origin, collection, doc_id, body)
                                  for doc_id, body in raw])

    def records(self, collection: str, origin: Origin) -> List[SourceRecord]:
        """Like read(), but a NotFound becomes [] plus a printed warning."""
        result = self.read(collection, origin)
        if isinstance(result, NotFound):
            print(f"   ⚠️ Collection {collection} not found or empty ({result.reason})")
            return []
        return result.records
