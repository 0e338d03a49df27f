import random

from propagator.engine.fixpoint import FixpointIterator
from propagator.engine.rules import IntersectionRule, UniquenessRule, evaluate_round
from propagator.engine.store import FactStore


def determined_universe():
    """(5, 3, 1) is the only candidate of its cell; every other cell has all 9."""
    return frozenset(
        (v, r, c)
        for v in range(1, 10)
        for r in range(9)
        for c in range(9)
        if (r, c) != (3, 1) or v == 5
    )


def test_uniqueness_round_retracts_row_column_and_box(uniqueness_model):
    live = determined_universe()
    retract = evaluate_round(uniqueness_model.rules, live)

    expected = {(5, 3, c) for c in range(9) if c != 1}
    expected |= {(5, r, 1) for r in range(9) if r != 3}
    expected |= {(5, r, c) for r in range(3, 6) for c in range(3) if (r, c) != (3, 1)}

    assert retract == expected
    assert (5, 3, 1) not in retract


def test_uniqueness_alone_is_stable_after_one_round(uniqueness_model):
    store = FactStore.from_facts(determined_universe())
    result = FixpointIterator(uniqueness_model, store).run()

    assert result.rounds == 1
    assert result.retracted == 20
    assert len(result.snapshot) == 729 - 8 - 20


def pointing_pair_live():
    """Value 1 in box 0 is confined to (0, 0) and (0, 1)."""
    return frozenset(
        (v, r, c)
        for v in range(1, 10)
        for r in range(9)
        for c in range(9)
        if not (v == 1 and r < 3 and c < 3 and (r, c) not in ((0, 0), (0, 1)))
    )


def test_intersection_retracts_fact_excluded_by_every_candidate(model):
    live = pointing_pair_live()
    box_rule = IntersectionRule(model.projection("box_value"), model.exclusion)

    retract = box_rule.evaluate(live)

    assert (1, 0, 5) in retract
    assert retract == {(1, 0, c) for c in range(3, 9)}
    assert (1, 0, 0) not in retract
    assert (1, 0, 1) not in retract


def test_uniqueness_does_not_see_pointing_pair(model):
    live = pointing_pair_live()
    box_rule = UniquenessRule(model.projection("box_value"), model.exclusion)

    assert (1, 0, 5) not in box_rule.evaluate(live)


def test_rules_only_report_live_facts(model):
    live = pointing_pair_live()
    retract = evaluate_round(model.rules, live)
    assert retract <= live


def test_rule_order_does_not_change_round_or_fixpoint(model, sparse_facts):
    live = frozenset(sparse_facts)
    baseline = evaluate_round(model.rules, live)
    stable = FixpointIterator(model, FactStore.from_facts(sparse_facts)).run().snapshot

    rng = random.Random(7)
    for _ in range(5):
        rules = list(model.rules)
        rng.shuffle(rules)
        assert evaluate_round(rules, live) == baseline

        store = FactStore.from_facts(sparse_facts)
        shuffled = FixpointIterator(model, store, rules=rules).run().snapshot
        assert shuffled.same_facts(stable)
