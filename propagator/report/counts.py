# -*- coding: utf-8 -*-
"""
スナップショットを集計して、外から確認しやすい形にするモジュールです（Reporter）。

集計の単位は「グループサイズの分布」です。
例えばキー射影 "cell" でグループ化すると、
「候補が 1 つに絞れたマスが 60 個、2 つ残ったマスが 15 個…」
のような表になります。

ここにある関数はスナップショットを読むだけで、Fact Store は一切触りません。
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..engine.model import KeyProjection
from ..engine.rules import group_by_key
from ..logging_utils import get_logger
from ..types import Key, Snapshot

logger = get_logger(__name__)


def group_size_counts(
    snapshot: Optional[Snapshot],
    projection: KeyProjection,
    keys: Optional[Iterable[Key]] = None,
) -> Dict[int, int]:
    """
    生きた事実をキー射影でグループ化し、
    {グループサイズ -> そのサイズのグループ数} を返します。

    keys（通常は ConstraintModel.expected_keys[射影名]）を渡すと、
    生きた事実が 1 件もないキーをサイズ 0 のグループとして数えます。
    """
    if snapshot is None:
        return {}
    groups = group_by_key(snapshot.live_facts(), projection)
    counter = Counter(len(facts) for facts in groups.values())
    if keys is not None:
        empty = sum(1 for key in keys if key not in groups)
        if empty:
            counter[0] = empty
    return dict(sorted(counter.items()))


def diff_group_size_counts(
    previous: Optional[Snapshot],
    current: Snapshot,
    projection: KeyProjection,
    keys: Optional[Iterable[Key]] = None,
) -> Dict[int, int]:
    """
    2 つのスナップショットのグループサイズ分布の符号付き差（current - previous）。

    増減が 0 のサイズは含めません。
    """
    if keys is not None:
        keys = frozenset(keys)
    before = group_size_counts(previous, projection, keys)
    after = group_size_counts(current, projection, keys)
    diff: Dict[int, int] = {}
    for size in sorted(before.keys() | after.keys()):
        change = after.get(size, 0) - before.get(size, 0)
        if change:
            diff[size] = change
    return diff


def counts_to_frame(counts: Dict[int, int]) -> pd.DataFrame:
    """グループサイズ分布を "size", "groups" 列の DataFrame にします。"""
    return pd.DataFrame(
        {"size": list(counts.keys()), "groups": list(counts.values())},
        columns=["size", "groups"],
    )


class Reporter:
    """
    外側ラウンドごとのレポートを受け取って溜めておくシンクです。

    Controller の結果（UpdateResult）を record() に渡すと、
    そのラウンドの分布と増減をログに出し、rows に 1 行ずつ追加します。
    """

    def __init__(
        self,
        projection: KeyProjection,
        log: bool = True,
        keys: Optional[Iterable[Key]] = None,
    ):
        self.projection = projection
        self.log = log
        self.keys = frozenset(keys) if keys is not None else None
        self.rows: List[Dict[str, int]] = []

    @classmethod
    def for_model(cls, model, projection: str, log: bool = True) -> "Reporter":
        """モデルの射影名から、空グループ（サイズ 0）も数える Reporter を作ります。"""
        return cls(model.projection(projection), log=log, keys=model.expected_keys[projection])

    def record(self, result) -> Dict[int, int]:
        snapshot = result.snapshot
        counts = group_size_counts(snapshot, self.projection, self.keys)
        delta = result.report_delta

        for size in sorted(counts.keys() | delta.keys()):
            self.rows.append(
                {
                    "outer": snapshot.epoch.outer,
                    "inner": snapshot.epoch.inner,
                    "size": size,
                    "groups": counts.get(size, 0),
                    "delta": delta.get(size, 0),
                }
            )

        if self.log:
            logger.info(
                "Report round %d [%s]: %s (delta %s)",
                snapshot.epoch.outer, self.projection.name, counts, delta,
            )
        return counts

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=["outer", "inner", "size", "groups", "delta"])
