"""
consolidate.batch_writer
------------------------
Writes canonical documents in bounded, ordered, atomic batches.

Each chunk is one store batch: all of its upserts land or none do. Chunks
are committed one after another and the first failure stops the write.
Chunks committed before the failure are NOT rolled back; callers must treat
a BatchCommitError as "partially written" and recover by re-running the
whole migration (upserts by id make that safe).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List

from .errors import BatchCommitError
from .store import STORE_BATCH_LIMIT, DocumentStore


def chunks(documents: Iterable[Any], max_size: int) -> Iterator[List[Any]]:
    """Yield consecutive lists of at most max_size items, preserving order."""
    if max_size < 1:
        raise ValueError("max_size must be at least 1")
    it = iter(documents)
    while True:
        chunk = list(islice(it, max_size))
        if not chunk:
            return
        yield chunk


@dataclass
class CommitReport:
    collection: str
    chunk_sizes: List[int] = field(default_factory=list)
    running_totals: List[int] = field(default_factory=list)
    dry_run: bool = False

    @property
    def total(self) -> int:
        return self.running_totals[-1] if self.running_totals else 0


class BatchWriter:
    def __init__(self, store: DocumentStore, dry_run: bool = False):
        self._store = store
        self.dry_run = dry_run

    def write(self, documents: Iterable[Dict[str, Any]], target_collection: str,
              max_ops_per_batch: int = STORE_BATCH_LIMIT) -> CommitReport:
        if not 1 <= max_ops_per_batch <= STORE_BATCH_LIMIT:
            raise ValueError(
                f"max_ops_per_batch must be between 1 and {STORE_BATCH_LIMIT}, got {max_ops_per_batch}"
            )

        report = CommitReport(collection=target_collection, dry_run=self.dry_run)
        committed = 0
        for index, chunk in enumerate(chunks(documents, max_ops_per_batch)):
            ops = [(doc["id"], doc) for doc in chunk]
            if not self.dry_run:
                try:
                    self._store.commit_batch(target_collection, ops)
                except Exception as exc:
                    print(f"   ❌ Batch {index + 1} for {target_collection} failed "
                          f"({committed} documents already committed)")
                    raise BatchCommitError(target_collection, index, committed, exc) from exc
            committed += len(ops)
            report.chunk_sizes.append(len(ops))
            report.running_totals.append(committed)
            verb = "Would commit" if self.dry_run else "Committed"
            print(f"   ⏳ {verb} {committed} documents...")
        return report
