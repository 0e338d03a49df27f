# -*- coding: utf-8 -*-
"""
撤回ルール（Rule Evaluator）をまとめたモジュールです。

基本となるのは「共通除外（Exclusion-by-intersection）」ルールです。

- 生きた事実をキー射影でグループ化する
- キー k に属する事実が {f1, ..., fk} のとき、
  Exclusion(f1) ∩ ... ∩ Exclusion(fk) に入る事実は、
  どの fi が最終的に成り立っても禁止されるので撤回する

グループが 1 件だけのとき、これは「唯一候補による確定」と全く同じになります。
そのため UniquenessRule は「グループサイズ 1 に限定した共通除外」として
同じ実装を使います。

どのルールも、同じ凍結された live 集合を読むだけで、
結果は撤回集合として返します（ストアは触りません）。
複数ルールの結果は和集合をとるので、ルールの順序は結果に影響しません。

拡張ポイント:
``name`` 属性と ``evaluate(live) -> set`` を持つオブジェクトであれば、
何でもルールとして登録できます（「k 個の候補が k 箇所に閉じ込められる」
型のルールなどを追加する場合もこの形で差し込みます）。
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set

from ..types import Fact, Key
from .model import KeyProjection


def group_by_key(live: Iterable[Fact], projection: KeyProjection) -> Dict[Key, List[Fact]]:
    """生きた事実をキー射影でグループ化します。"""
    groups: Dict[Key, List[Fact]] = {}
    for fact in live:
        groups.setdefault(projection(fact), []).append(fact)
    return groups


class IntersectionRule:
    """
    キー射影 1 つに対する共通除外ルール。

    Parameters
    ----------
    projection : KeyProjection
        グループ化に使うキー射影。
    exclusion : callable
        Fact -> frozenset[Fact]。通常は ConstraintModel.exclusion。
    max_group_size : int, optional
        これより大きいグループは評価しません。1 なら唯一候補ルールになります。
    """

    def __init__(
        self,
        projection: KeyProjection,
        exclusion: Callable[[Fact], FrozenSet[Fact]],
        max_group_size: Optional[int] = None,
    ):
        self.projection = projection
        self.exclusion = exclusion
        self.max_group_size = max_group_size
        self.name = f"intersection[{projection.name}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.projection.name!r})"

    def evaluate(self, live: FrozenSet[Fact]) -> Set[Fact]:
        retract: Set[Fact] = set()

        for key, facts in group_by_key(live, self.projection).items():
            if self.max_group_size is not None and len(facts) > self.max_group_size:
                continue

            # 除外集合の小さいものから積をとると早く空になる
            ordered = sorted((self.exclusion(f) for f in facts), key=len)
            common = set(ordered[0])
            for excluded in ordered[1:]:
                common &= excluded
                if not common:
                    break

            retract |= common

        # すでに死んでいる事実は撤回対象にしない
        return retract & live


class UniquenessRule(IntersectionRule):
    """唯一候補による確定ルール（グループサイズ 1 の共通除外）。"""

    def __init__(self, projection: KeyProjection, exclusion: Callable[[Fact], FrozenSet[Fact]]):
        super().__init__(projection, exclusion, max_group_size=1)
        self.name = f"uniqueness[{projection.name}]"


def evaluate_round(rules: Iterable, live: FrozenSet[Fact]) -> Set[Fact]:
    """
    1 ラウンド分、すべてのルールを同じ live 集合に対して評価し、
    撤回集合の和集合を返します。

    撤回はここでは適用しません。適用は全ルールの評価が終わってから
    FixpointIterator がまとめて行います。
    """
    union: Set[Fact] = set()
    for rule in rules:
        union |= rule.evaluate(live)
    return union
