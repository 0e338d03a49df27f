import pytest

from propagator.engine.store import FactStore
from propagator.errors import InconsistentUpdateError
from propagator.types import Epoch, Snapshot


def test_apply_delta_adds_and_removes():
    store = FactStore()
    store.apply_delta({("a",): 2, ("b",): 1})
    store.apply_delta({("a",): -1, ("c",): 1})

    assert store.count(("a",)) == 1
    assert store.live_facts() == {("a",), ("b",), ("c",)}
    assert len(store) == 3


def test_zero_multiplicity_is_dropped():
    store = FactStore({("a",): 1})
    store.apply_delta({("a",): -1})

    assert ("a",) not in store
    assert list(store.items()) == []


def test_delta_order_does_not_matter():
    first = FactStore()
    first.apply_delta({("x",): 1})
    first.apply_delta({("y",): 2})
    first.apply_delta({("x",): 1, ("y",): -1})

    second = FactStore()
    second.apply_delta({("y",): 2})
    second.apply_delta({("x",): 1})
    second.apply_delta({("x",): 1, ("y",): -1})

    assert dict(first.items()) == dict(second.items())


def test_negative_result_rejects_whole_batch():
    store = FactStore({("a",): 1, ("b",): 1})

    with pytest.raises(InconsistentUpdateError) as excinfo:
        store.apply_delta({("a",): -1, ("b",): -2})

    assert excinfo.value.offending == {("b",): -1}
    assert store.count(("a",)) == 1
    assert store.count(("b",)) == 1


def test_from_facts_counts_duplicates():
    store = FactStore.from_facts([("a",), ("a",), ("b",)])
    assert store.count(("a",)) == 2
    assert store.count(("b",)) == 1


def test_snapshot_is_read_only_and_detached():
    store = FactStore({("a",): 1}, epoch=Epoch(3, 2))
    snap = store.snapshot()

    store.apply_delta({("b",): 1})

    assert snap.epoch == Epoch(3, 2)
    assert snap.live_facts() == {("a",)}
    with pytest.raises(TypeError):
        snap.counts[("c",)] = 1


def test_snapshot_records_keep_epoch_and_facts():
    snap = Snapshot(Epoch(2, 5), {(1, 0, 0): 1, (2, 0, 1): 3})
    records = snap.to_records()

    assert records["epoch"] == [2, 5]
    assert records["facts"] == [[[1, 0, 0], 1], [[2, 0, 1], 3]]
    assert Snapshot.from_records(records) == snap


def test_epochs_order_outer_then_inner():
    assert Epoch(1, 9) < Epoch(2, 0)
    assert Epoch(2, 0).next_inner() == Epoch(2, 1)
