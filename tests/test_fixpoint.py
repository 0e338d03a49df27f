import random

import pytest

from propagator.engine.fixpoint import FixpointIterator, resolve
from propagator.engine.store import FactStore
from propagator.report.render_result import apply_snapshot_to_grid
from propagator.types import Epoch, ResolutionStatus

from .conftest import EASY_SOLUTION


def run(model, facts, outer=0):
    store = FactStore.from_facts(facts, epoch=Epoch(outer, 0))
    return FixpointIterator(model, store).run()


def test_easy_puzzle_is_solved(model, easy_facts):
    result = run(model, easy_facts)

    assert result.snapshot.resolution.status is ResolutionStatus.SOLVED
    assert len(result.snapshot) == 81
    assert apply_snapshot_to_grid(result.snapshot, 9).tolist() == EASY_SOLUTION


def test_stable_snapshot_has_no_further_retractions(model, sparse_facts):
    result = run(model, sparse_facts)
    iterator = FixpointIterator(model, FactStore(result.snapshot.counts))

    assert iterator.retractions(result.snapshot.live_facts()) == set()


def test_empty_grid_is_already_stable(model, empty_facts):
    result = run(model, empty_facts)

    assert result.rounds == 0
    assert result.live_trace == [729]
    assert result.snapshot.resolution.status is ResolutionStatus.UNDERDETERMINED


def test_inner_epoch_counts_rounds(model, easy_facts):
    result = run(model, easy_facts, outer=4)

    assert result.snapshot.epoch == Epoch(4, result.rounds)


@pytest.mark.parametrize("seed", [1, 2, 3, 4])
def test_terminates_and_shrinks_monotonically(model, empty_facts, seed):
    rng = random.Random(seed)
    facts = [f for f in empty_facts if rng.random() < 0.8]

    result = run(model, facts)

    assert result.rounds <= len(set(facts))
    trace = result.live_trace
    assert all(later < earlier for earlier, later in zip(trace, trace[1:]))
    assert trace[0] - trace[-1] == result.retracted


def test_missing_cell_is_unsatisfiable_not_an_error(model, easy_facts):
    facts = [f for f in easy_facts if (f[1], f[2]) != (0, 2)]

    result = run(model, facts)

    resolution = result.snapshot.resolution
    assert resolution.status is ResolutionStatus.UNSATISFIABLE
    assert (0, 2) in resolution.empty_keys["cell"]


def test_resolve_prefers_unsatisfiable_over_underdetermined(model, empty_facts):
    live = frozenset(f for f in empty_facts if (f[1], f[2]) != (8, 8))
    resolution = resolve(model, live)

    assert resolution.is_unsatisfiable
    assert resolution.ambiguous_keys["cell"]


@pytest.mark.parametrize("fixture_name", ["easy_facts", "sparse_facts", "empty_facts"])
def test_weaker_exclusion_never_removes_more(request, model, weak_model, fixture_name):
    facts = request.getfixturevalue(fixture_name)

    strong = run(model, facts).snapshot.live_facts()
    weak = run(weak_model, facts).snapshot.live_facts()

    assert weak >= strong


def test_missing_cell_exclusion_misses_hidden_single(model, weak_model, empty_facts):
    # value 1 in row 0 can only go to (0, 0)
    facts = [f for f in empty_facts if not (f[0] == 1 and f[1] == 0 and f[2] != 0)]

    strong = run(model, facts).snapshot.live_facts()
    weak = run(weak_model, facts).snapshot.live_facts()

    assert {f for f in strong if f[1:] == (0, 0)} == {(1, 0, 0)}
    assert len({f for f in weak if f[1:] == (0, 0)}) == 9
    assert weak > strong
