import pytest

from consolidate.batch_writer import BatchWriter, chunks
from consolidate.errors import BatchCommitError


def _docs(n):
    return [{"id": f"d{i:04d}", "n": i} for i in range(n)]


def test_chunks_preserve_order_and_bound():
    sizes = [len(c) for c in chunks(range(1234), 400)]
    assert sizes == [400, 400, 400, 34]
    assert [x for c in chunks(iter("abcde"), 2) for x in c] == list("abcde")
    assert list(chunks([], 5)) == []
    with pytest.raises(ValueError):
        list(chunks([1], 0))


def test_1234_documents_in_batches_of_400(fake_store):
    store = fake_store()
    report = BatchWriter(store).write(_docs(1234), "leaveRequests", 400)

    assert [len(c) for c in store.commit_calls] == [400, 400, 400, 34]
    assert store.commit_calls[0][0] == "d0000"
    assert store.commit_calls[3][-1] == "d1233"
    assert report.chunk_sizes == [400, 400, 400, 34]
    assert report.running_totals == [400, 800, 1200, 1234]
    assert report.total == 1234
    assert len(store.collections["leaveRequests"]) == 1234


def test_failure_in_chunk_two_keeps_chunk_one_and_stops(fake_store):
    store = fake_store(fail_on_commit=2)
    with pytest.raises(BatchCommitError) as err:
        BatchWriter(store).write(_docs(1234), "users", 400)

    assert len(store.commit_calls) == 2
    assert err.value.chunk_index == 1
    assert err.value.committed == 400
    assert len(store.collections["users"]) == 400
    assert isinstance(err.value.cause, RuntimeError)


def test_batch_size_must_respect_store_limit(fake_store):
    writer = BatchWriter(fake_store())
    for bad in (0, 501):
        with pytest.raises(ValueError):
            writer.write(_docs(3), "users", bad)


def test_dry_run_counts_without_writing(fake_store, capsys):
    store = fake_store()
    report = BatchWriter(store, dry_run=True).write(_docs(5), "users", 2)
    assert store.commit_calls == []
    assert report.total == 5 and report.dry_run
    assert "Would commit 5 documents" in capsys.readouterr().out


def test_rewriting_same_documents_is_an_overwrite(fake_store):
    store = fake_store()
    writer = BatchWriter(store)
    writer.write(_docs(3), "users", 500)
    writer.write(_docs(3), "users", 500)
    assert len(store.collections["users"]) == 3
