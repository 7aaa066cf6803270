"""
consolidate.store
-----------------
The store boundary the engine depends on. Any backend offering these three
primitives can be migrated: read a whole collection, upsert one document by
id, and commit a bounded batch of upserts atomically.

`SERVER_TIMESTAMP` is a store-agnostic placeholder; adapters replace it with
their own server-side timestamp when writing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, Sequence, Tuple

# Observed Firestore limit on operations in one batch
STORE_BATCH_LIMIT = 500


class _ServerTimestamp:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"

    def __deepcopy__(self, memo):
        return self

    def __copy__(self):
        return self


SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentStore(Protocol):
    def read_all(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        """All (doc_id, body) pairs of a collection, in store order."""
        ...

    def upsert(self, collection: str, doc_id: str, body: Dict[str, Any]) -> None:
        """Create or overwrite one document."""
        ...

    def commit_batch(self, collection: str, docs: Sequence[Tuple[str, Dict[str, Any]]]) -> None:
        """Upsert all docs atomically; raise if the batch is rejected."""
        ...
