# -*- coding: utf-8 -*-
"""
propagator で使う主なデータ構造（型）をまとめたモジュールです。

dataclass を使うことで、
「この構造体はどんなフィールドを持っているのか」を
分かりやすく表現しています。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Hashable, List, Mapping, Optional, Tuple

# 候補事実。数独なら (value, row, col) のタプル
Fact = Tuple[Hashable, ...]

# 事実 -> 符号付き多重度 の差分
Delta = Dict[Fact, int]

# キー射影が返すグループキー
Key = Hashable


@dataclass(frozen=True, order=True)
class Epoch:
    """
    2段階の時刻。

    Attributes
    ----------
    outer : int
        外部から与えられた更新バッチの番号（load が 0）。
    inner : int
        その外側ラウンド内での不動点反復の回数。
    """

    outer: int
    inner: int = 0

    def next_inner(self) -> "Epoch":
        return Epoch(self.outer, self.inner + 1)

    def __str__(self) -> str:
        return f"({self.outer}, {self.inner})"


class ResolutionStatus(str, Enum):
    """安定状態に到達したときの終端条件。"""

    SOLVED = "solved"
    UNDERDETERMINED = "underdetermined"
    UNSATISFIABLE = "unsatisfiable"


@dataclass(frozen=True)
class Resolution:
    """
    安定スナップショットを「必須キー射影」で見たときの判定結果です。

    Attributes
    ----------
    status : ResolutionStatus
        UNSATISFIABLE は UNDERDETERMINED より優先されます。
    empty_keys : dict[str, tuple]
        射影名 -> 生きた事実が 0 件になったキーの一覧。
    ambiguous_keys : dict[str, tuple]
        射影名 -> 生きた事実が 2 件以上残っているキーの一覧。
    """

    status: ResolutionStatus
    empty_keys: Mapping[str, Tuple[Key, ...]] = field(default_factory=dict)
    ambiguous_keys: Mapping[str, Tuple[Key, ...]] = field(default_factory=dict)

    @property
    def is_unsatisfiable(self) -> bool:
        return self.status is ResolutionStatus.UNSATISFIABLE

    @property
    def is_underdetermined(self) -> bool:
        return self.status is ResolutionStatus.UNDERDETERMINED


@dataclass(frozen=True, eq=False)
class Snapshot:
    """
    ある時刻の Fact Store の読み取り専用ビュー。

    安定スナップショット（不動点到達後のもの）は resolution を持ちます。
    新しいバッチが来たら、既存のスナップショットは書き換えずに
    新しいものに置き換えます。
    """

    epoch: Epoch
    counts: Mapping[Fact, int]
    resolution: Optional[Resolution] = None

    def __post_init__(self):
        if not isinstance(self.counts, MappingProxyType):
            object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    def live_facts(self) -> FrozenSet[Fact]:
        return frozenset(f for f, c in self.counts.items() if c > 0)

    def __len__(self) -> int:
        return sum(1 for c in self.counts.values() if c > 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self.epoch == other.epoch and dict(self.counts) == dict(other.counts)

    def same_facts(self, other: "Snapshot") -> bool:
        """時刻を無視して、多重度の集合として一致するかを返します。"""
        return dict(self.counts) == dict(other.counts)

    def with_resolution(self, resolution: Resolution) -> "Snapshot":
        return Snapshot(self.epoch, self.counts, resolution)

    def to_records(self) -> Dict[str, Any]:
        """
        永続化用に (fact, multiplicity) の順序付きリストと時刻タグを返します。

        事実は repr の順で並べるので、同じ内容なら常に同じ並びになります。
        """
        pairs = sorted(self.counts.items(), key=lambda kv: repr(kv[0]))
        return {
            "epoch": [self.epoch.outer, self.epoch.inner],
            "facts": [[list(fact), count] for fact, count in pairs],
        }

    @classmethod
    def from_records(cls, records: Mapping[str, Any]) -> "Snapshot":
        outer, inner = records["epoch"]
        counts = {tuple(fact): int(count) for fact, count in records["facts"]}
        return cls(Epoch(int(outer), int(inner)), counts)


@dataclass
class FixpointResult:
    """
    1 回の外側ラウンドで不動点反復を回した結果です。

    Attributes
    ----------
    snapshot : Snapshot
        安定スナップショット（resolution 付き）。
    rounds : int
        空でない撤回を行った内側反復の回数。
    live_trace : list of int
        反復開始時と各反復後の生きた事実の数。単調非増加になります。
    retracted : int
        このラウンドで撤回した事実の総数。
    """

    snapshot: Snapshot
    rounds: int
    live_trace: List[int]
    retracted: int


@dataclass
class UpdateResult:
    """
    Incremental Update Controller が 1 バッチ処理するごとに返す結果です。

    Attributes
    ----------
    previous : Snapshot or None
        直前の外側ラウンドの安定スナップショット（load 時は None）。
    snapshot : Snapshot
        今回の安定スナップショット。
    diff : dict
        事実 -> 符号付き多重度差（snapshot - previous）。0 のものは含めない。
    report_delta : dict[int, int]
        グループサイズ -> そのサイズのグループ数の符号付き増減。
    rounds : int
        今回の内側反復回数。
    recomputed : bool
        累積入力から再計算した（高速経路を使わなかった）かどうか。
    """

    previous: Optional[Snapshot]
    snapshot: Snapshot
    diff: Delta
    report_delta: Dict[int, int]
    rounds: int
    recomputed: bool = False

    @property
    def resolution(self) -> Optional[Resolution]:
        return self.snapshot.resolution
