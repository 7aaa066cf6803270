# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from consolidate.merge_engine import MergeContext
from normalize.records import Origin, to_source_record


class FakeStore:
    """In-memory DocumentStore that records every write."""

    def __init__(self, collections: Dict[str, List[Dict[str, Any]]] = None, fail_on_commit: int = None):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for name, docs in (collections or {}).items():
            self.collections[name] = {d["id"]: {k: v for k, v in d.items() if k != "id"} for d in docs}
        self.fail_on_commit = fail_on_commit
        self.commit_calls: List[List[str]] = []
        self.upserts: List[str] = []
        self.read_errors: Dict[str, Exception] = {}

    def read_all(self, collection):
        if collection in self.read_errors:
            raise self.read_errors[collection]
        return [(i, copy.deepcopy(b)) for i, b in self.collections.get(collection, {}).items()]

    def upsert(self, collection, doc_id, body):
        self.upserts.append(f"{collection}/{doc_id}")
        self.collections.setdefault(collection, {})[doc_id] = copy.deepcopy(body)

    def commit_batch(self, collection, docs):
        self.commit_calls.append([doc_id for doc_id, _ in docs])
        if self.fail_on_commit is not None and len(self.commit_calls) == self.fail_on_commit:
            raise RuntimeError("batch rejected")
        target = self.collections.setdefault(collection, {})
        for doc_id, body in docs:
            target[doc_id] = copy.deepcopy(body)


@pytest.fixture
def fake_store():
    return FakeStore


@pytest.fixture
def ctx():
    return MergeContext(now=datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def rec():
    """Build a SourceRecord: rec(origin, id, **fields)."""
    def _make(origin: Origin, doc_id: str, collection: str = "test", **fields):
        return to_source_record(origin, collection, doc_id, fields)
    return _make
