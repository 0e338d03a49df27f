# -*- coding: utf-8 -*-
"""
不動点反復（Fixpoint Iterator）を行うモジュールです。

状態は「反復中」と「安定」の 2 つだけです。

1. 現在の Fact Store から生きた事実の集合を凍結して取り出す
2. すべてのルールをその集合に対して評価し、撤回集合の和集合をとる
3. 和集合が空なら「安定」。そうでなければ {f: -多重度} を 1 つの差分として
   ストアに適用し、内側反復番号を 1 進めて 1. に戻る

1 ラウンドの撤回はまとめて適用します（途中で 1 件ずつ適用すると、
ルールの評価順で結果が変わってしまうため）。

停止性:
外側ラウンドの中では事実は減る一方で、空でない反復ごとに生きた事実の数が
少なくとも 1 減ります。したがって反復回数は最初の生きた事実数以下です。
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Set, Tuple

from ..errors import ContractViolationError
from ..logging_utils import get_logger
from ..types import Delta, Fact, FixpointResult, Key, Resolution, ResolutionStatus
from .model import ConstraintModel
from .rules import evaluate_round, group_by_key
from .store import FactStore

logger = get_logger(__name__)


def resolve(model: ConstraintModel, live: FrozenSet[Fact]) -> Resolution:
    """
    生きた事実を必須キー射影で見て、終端条件を判定します。

    - あるキーのグループが空 → UNSATISFIABLE
    - 空はないが 2 件以上残るグループがある → UNDERDETERMINED
    - どのグループもちょうど 1 件 → SOLVED
    """
    empty: Dict[str, Tuple[Key, ...]] = {}
    ambiguous: Dict[str, Tuple[Key, ...]] = {}

    for p in model.projections:
        if not p.required:
            continue
        groups = group_by_key(live, p)
        missing = model.expected_keys[p.name] - groups.keys()
        multi = [k for k, facts in groups.items() if len(facts) > 1]
        if missing:
            empty[p.name] = tuple(sorted(missing, key=repr))
        if multi:
            ambiguous[p.name] = tuple(sorted(multi, key=repr))

    if empty:
        status = ResolutionStatus.UNSATISFIABLE
    elif ambiguous:
        status = ResolutionStatus.UNDERDETERMINED
    else:
        status = ResolutionStatus.SOLVED

    return Resolution(status=status, empty_keys=empty, ambiguous_keys=ambiguous)


class FixpointIterator:
    """
    ConstraintModel のルール群を、与えられた FactStore 上で
    撤回が出なくなるまで繰り返し適用します。

    ストアはその場で書き換えます。呼び出し側（Controller）が、
    書き換えてよいストアを渡す責任を持ちます。
    """

    def __init__(self, model: ConstraintModel, store: FactStore, rules: Iterable = None):
        self.model = model
        self.store = store
        self.rules = list(model.rules if rules is None else rules)

    def retractions(self, live: FrozenSet[Fact]) -> Set[Fact]:
        return evaluate_round(self.rules, live)

    def run(self) -> FixpointResult:
        store = self.store
        initial_live = len(store)
        live_trace = [initial_live]
        rounds = 0
        retracted = 0

        while True:
            live = store.live_facts()
            retract = self.retractions(live)
            if not retract:
                break

            delta: Delta = {fact: -store.count(fact) for fact in retract}
            store.apply_delta(delta)
            store.epoch = store.epoch.next_inner()

            rounds += 1
            retracted += len(retract)
            live_trace.append(len(store))
            logger.debug(
                "epoch=%s retracted=%d live=%d", store.epoch, len(retract), live_trace[-1]
            )

            if rounds > initial_live:
                raise ContractViolationError(
                    f"Fixpoint did not converge within {initial_live} rounds; "
                    "rules must only retract live facts"
                )

        resolution = resolve(self.model, store.live_facts())
        snapshot = store.snapshot().with_resolution(resolution)

        logger.info(
            "Round %d stable after %d iterations: live=%d retracted=%d status=%s",
            store.epoch.outer, rounds, live_trace[-1], retracted, resolution.status.value,
        )

        return FixpointResult(
            snapshot=snapshot,
            rounds=rounds,
            live_trace=live_trace,
            retracted=retracted,
        )
