"""
consolidate.errors
------------------
Fatal errors of a migration run. A missing source collection is not an
error: it is reported by the reader as a `NotFound` result.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base class for errors that abort a migration run."""


class BatchCommitError(MigrationError):
    """
    The store rejected one atomic batch. Chunks before `chunk_index` are
    already committed and stay committed; later chunks were never sent.
    """

    def __init__(self, collection: str, chunk_index: int, committed: int, cause: BaseException):
        self.collection = collection
        self.chunk_index = chunk_index
        self.committed = committed
        self.cause = cause
        super().__init__(
            f"batch {chunk_index + 1} for '{collection}' failed after "
            f"{committed} documents were committed: {cause}"
        )


class StepError(MigrationError):
    """A migration step raised; the run stops at this step."""

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"step '{step}' failed: {cause}")
