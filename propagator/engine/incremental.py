# -*- coding: utf-8 -*-
"""
外部からの更新バッチを受け取り、安定スナップショットを更新し続ける
Incremental Update Controller のモジュールです。

ざっくり流れ
------------
1. load() で初期の候補事実（候補全体 + ヒント）を読み込み、外側ラウンド 0 の
   不動点を計算する
2. update() に符号付き差分のバッチが来るたびに、
   - 累積入力（ユーザーが与えた事実の多重度）に対して負にならないか検査する
   - 削除だけのバッチなら、直前の安定スナップショットのストアに差分を当て、
     その「揺らした状態」から不動点反復を再開する（高速経路）
   - 追加を含むバッチは、以前に撤回した事実が復活しうるので、
     累積入力から計算し直す
3. 前後のスナップショットの差分と、グループサイズ分布の増減を返す

どちらの経路でも、結果は「累積入力を最初から不動点反復したもの」と
同じになります（高速経路は純粋に計算量の最適化です）。

高速経路の途中で、ルールが使うキー射影のどれかで空になったグループが
出た場合も、累積入力から計算し直します（required かどうかは問いません）。
空のグループは共通除外ルールを発火させないので、揺らした状態から始めると
撤回しすぎる可能性があるためです。グループが 1 つも空にならなければ、
撤回は入力の減少に対して単調なので、高速経路の結果は再計算と一致します。
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..config import REPORT_PROJECTION
from ..errors import ContractViolationError, EpochOrderError, InconsistentUpdateError
from ..logging_utils import get_logger
from ..report.counts import diff_group_size_counts, group_size_counts
from ..types import Delta, Epoch, Fact, FixpointResult, Key, Snapshot, UpdateResult
from .fixpoint import FixpointIterator
from .model import ConstraintModel, KeyProjection
from .store import FactStore

logger = get_logger(__name__)

FactsInput = Union[Mapping[Fact, int], Iterable[Fact]]


def as_delta(facts: FactsInput) -> Delta:
    """
    事実 -> 多重度 の辞書、または事実の列を差分辞書に変換します。

    事実はタプルに揃えます（JSON から来たリストもそのまま渡せます）。
    多重度 0 のものは落とします。
    """
    delta: Delta = {}
    if isinstance(facts, Mapping):
        for fact, count in facts.items():
            key = tuple(fact)
            delta[key] = delta.get(key, 0) + int(count)
    else:
        for fact in facts:
            key = tuple(fact)
            delta[key] = delta.get(key, 0) + 1
    return {f: c for f, c in delta.items() if c != 0}


def snapshot_diff(previous: Optional[Snapshot], current: Snapshot) -> Delta:
    """current - previous の符号付き多重度差（0 は含めない）を返します。"""
    before = dict(previous.counts) if previous is not None else {}
    after = dict(current.counts)
    diff: Delta = {}
    for fact in before.keys() | after.keys():
        change = after.get(fact, 0) - before.get(fact, 0)
        if change:
            diff[fact] = change
    return diff


def converge(model: ConstraintModel, store: FactStore) -> FixpointResult:
    """ストアをその場で不動点まで縮めます。"""
    return FixpointIterator(model, store).run()


def rule_projections(rules: Iterable) -> Optional[List[KeyProjection]]:
    """
    ルールがグループ化に使うキー射影を重複なしで返します。

    projection 属性を持たないルールが 1 つでもあれば None を返します
    （その場合、高速経路の結果が再計算と一致するか判定できません）。
    """
    projections: List[KeyProjection] = []
    for rule in rules:
        p = getattr(rule, "projection", None)
        if p is None:
            return None
        if all(p.name != q.name for q in projections):
            projections.append(p)
    return projections


def emptied_groups(
    projections: Iterable[KeyProjection],
    before: Iterable[Fact],
    after: Iterable[Fact],
) -> List[Tuple[str, Key]]:
    """before では生きた事実があり、after では空になったグループ (射影名, キー) の一覧。"""
    before = list(before)
    after = list(after)
    emptied: List[Tuple[str, Key]] = []
    for p in projections:
        remaining = {p(f) for f in after}
        for key in sorted({p(f) for f in before} - remaining, key=repr):
            emptied.append((p.name, key))
    return emptied


def replay_from_scratch(
    model: ConstraintModel,
    batches: Iterable[Tuple[int, FactsInput]],
) -> Snapshot:
    """
    空のストアから差分の列をすべて足し込み、1 回だけ不動点反復した
    安定スナップショットを返します。

    Controller の結果が満たすべき「正解」の定義そのものです。
    テストや検証用で、実運用では使いません。
    """
    base = FactStore()
    last_round = 0
    for outer_round, batch in batches:
        base.apply_delta(as_delta(batch), outer_round=outer_round)
        last_round = outer_round
    base.epoch = Epoch(last_round, 0)
    return converge(model, base).snapshot


class IncrementalController:
    """
    安定スナップショットを保持し、更新バッチごとに作り直すクラスです。

    Attributes
    ----------
    model : ConstraintModel
        ルールとキー射影の束。
    snapshot : Snapshot or None
        最新の安定スナップショット。load() 前は None。
    last_result : UpdateResult or None
        直近の load() / update() の結果。
    """

    def __init__(self, model: ConstraintModel, report_projection: Optional[str] = None):
        self.model = model
        name = report_projection or REPORT_PROJECTION
        names = [p.name for p in model.projections]
        self.report_projection: KeyProjection = (
            model.projection(name) if name in names else model.projections[0]
        )

        self._base = FactStore()
        self._store = FactStore()
        self.snapshot: Optional[Snapshot] = None
        self.last_result: Optional[UpdateResult] = None

    # ------------------------------------------------------------------
    # 参照（Query）
    # ------------------------------------------------------------------
    @property
    def outer_round(self) -> int:
        return self.snapshot.epoch.outer if self.snapshot is not None else -1

    def live_facts(self):
        return self._store.live_facts()

    def base_counts(self) -> Dict[Fact, int]:
        """これまでに与えられた入力の累積多重度。"""
        return dict(self._base.items())

    def report(self, projection: Optional[str] = None) -> Dict[int, int]:
        """現在の安定スナップショットのグループサイズ分布（空のグループはサイズ 0）を返します。"""
        if self.snapshot is None:
            return {}
        p = self.model.projection(projection) if projection else self.report_projection
        return group_size_counts(self.snapshot, p, self.model.expected_keys.get(p.name))

    # ------------------------------------------------------------------
    # 読み込み（Load）
    # ------------------------------------------------------------------
    def load(self, facts: FactsInput) -> UpdateResult:
        """
        初期の候補事実を読み込み、外側ラウンド 0 の安定スナップショットを作ります。

        すでに読み込み済みでも、累積入力ごと作り直します。
        """
        delta = as_delta(facts)
        self._check_universe(delta)

        base = FactStore(epoch=Epoch(0, 0))
        base.apply_delta(delta, outer_round=0)

        logger.info("Load: %d base facts (%d distinct)", sum(delta.values()), len(delta))

        store = base.copy()
        result = converge(self.model, store)
        return self._commit(base, store, result, previous=None, recomputed=True)

    # ------------------------------------------------------------------
    # 更新（Update）
    # ------------------------------------------------------------------
    def update(self, batch: FactsInput, outer_round: Optional[int] = None) -> UpdateResult:
        """
        符号付き差分のバッチを 1 つ適用し、次の安定スナップショットを作ります。

        Parameters
        ----------
        batch : mapping or iterable
            事実 -> 符号付き多重度。
        outer_round : int, optional
            このバッチの外側ラウンド番号。省略時は直前 + 1。

        Raises
        ------
        EpochOrderError
            outer_round が直前のラウンド以下の場合。
        InconsistentUpdateError
            累積入力の多重度が負になる場合。バッチは適用されません。
        ContractViolationError
            候補全体に含まれない事実を渡した場合。
        """
        if self.snapshot is None:
            # load() 前の update は、空の入力を読み込んだ状態から始める
            self.load({})

        if outer_round is None:
            outer_round = self.outer_round + 1
        if outer_round <= self.outer_round:
            raise EpochOrderError(
                f"Outer round {outer_round} must be greater than {self.outer_round}"
            )

        delta = as_delta(batch)
        self._check_universe(delta)

        negative = self._base.check_delta(delta)
        if negative:
            logger.warning(
                "Rejected batch for round %d: %d facts would go negative",
                outer_round, len(negative),
            )
            raise InconsistentUpdateError(outer_round, negative)

        previous = self.snapshot
        base = self._base.copy()
        base.apply_delta(delta, outer_round=outer_round)
        base.epoch = Epoch(outer_round, 0)

        result: Optional[FixpointResult] = None
        projections = rule_projections(self.model.rules)
        if projections is not None and all(change < 0 for change in delta.values()):
            # 高速経路: 直前の安定状態に削除を当てて、そこから再開
            store = self._store
            before = store.live_facts()
            store.apply_delta(
                {f: c for f, c in delta.items() if store.count(f) > 0},
                outer_round=outer_round,
            )
            store.epoch = Epoch(outer_round, 0)
            result = converge(self.model, store)

            emptied = emptied_groups(projections, before, store.live_facts())
            if emptied:
                logger.info(
                    "Round %d: fast path emptied %d groups (e.g. %s), recomputing",
                    outer_round, len(emptied), emptied[0],
                )
                result = None
            elif result.snapshot.resolution.is_unsatisfiable:
                logger.info("Round %d: fast path ended unsatisfiable, recomputing", outer_round)
                result = None

        recomputed = result is None
        if recomputed:
            logger.info("Round %d: recomputing from %d base facts", outer_round, len(base))
            store = base.copy()
            result = converge(self.model, store)

        return self._commit(base, store, result, previous=previous, recomputed=recomputed)

    def update_many(self, batches: Iterable[Tuple[int, FactsInput]]) -> List[UpdateResult]:
        """
        (外側ラウンド番号, バッチ) の列を順に適用します。

        途中のバッチで例外が出た場合、それより前のバッチは適用済みのまま残り、
        例外を送出したバッチ以降は適用されません。
        """
        return [self.update(batch, outer_round=r) for r, batch in batches]

    # ------------------------------------------------------------------
    def _check_universe(self, delta: Mapping[Fact, int]) -> None:
        unknown = [f for f in delta if not self.model.contains(f)]
        if unknown:
            raise ContractViolationError(
                f"{len(unknown)} facts are outside the universe of {self.model.name}: "
                f"{sorted(unknown, key=repr)[:5]}"
            )

    def _commit(
        self,
        base: FactStore,
        store: FactStore,
        result: FixpointResult,
        previous: Optional[Snapshot],
        recomputed: bool,
    ) -> UpdateResult:
        self._base = base
        self._store = store
        self.snapshot = result.snapshot

        update = UpdateResult(
            previous=previous,
            snapshot=result.snapshot,
            diff=snapshot_diff(previous, result.snapshot),
            report_delta=diff_group_size_counts(
                previous,
                result.snapshot,
                self.report_projection,
                self.model.expected_keys.get(self.report_projection.name),
            ),
            rounds=result.rounds,
            recomputed=recomputed,
        )
        self.last_result = update
        return update
