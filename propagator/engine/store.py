# -*- coding: utf-8 -*-
"""
候補事実の多重集合（Fact Store）を保持するモジュールです。

- 事実ごとに符号付きの整数（多重度）を持ちます。
- 多重度が正のものだけが「生きている」事実です。
- 差分の適用は、差分に出てくる事実だけを触ります（ストア全体は走査しない）。

ルールの評価はここには置きません。ここにあるのは多重度の帳簿付けだけです。
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

from ..errors import InconsistentUpdateError
from ..types import Delta, Epoch, Fact, Snapshot


class FactStore:
    """
    事実 -> 多重度 の辞書を包んだクラス。

    多重度が 0 になった事実は辞書から取り除くので、
    長く更新を続けても死んだエントリが溜まりません。
    """

    def __init__(self, counts: Optional[Mapping[Fact, int]] = None, epoch: Optional[Epoch] = None):
        self._counts: Dict[Fact, int] = {}
        self.epoch: Epoch = epoch or Epoch(0, 0)
        if counts:
            self.apply_delta(counts)

    @classmethod
    def from_facts(cls, facts: Iterable[Fact], epoch: Optional[Epoch] = None) -> "FactStore":
        """事実の列（重複可）から、各出現を多重度 1 として数えたストアを作ります。"""
        delta: Delta = {}
        for fact in facts:
            delta[fact] = delta.get(fact, 0) + 1
        return cls(delta, epoch=epoch)

    # ------------------------------------------------------------------
    # 参照
    # ------------------------------------------------------------------
    def count(self, fact: Fact) -> int:
        return self._counts.get(fact, 0)

    def is_live(self, fact: Fact) -> bool:
        return self._counts.get(fact, 0) > 0

    def live_facts(self) -> FrozenSet[Fact]:
        return frozenset(f for f, c in self._counts.items() if c > 0)

    def items(self) -> Iterator[Tuple[Fact, int]]:
        return iter(self._counts.items())

    def __len__(self) -> int:
        return sum(1 for c in self._counts.values() if c > 0)

    def __contains__(self, fact: object) -> bool:
        return self._counts.get(fact, 0) > 0  # type: ignore[arg-type]

    def snapshot(self) -> Snapshot:
        """現在の時刻タグ付きで、読み取り専用のコピーを返します。"""
        return Snapshot(self.epoch, dict(self._counts))

    def copy(self) -> "FactStore":
        clone = FactStore(epoch=self.epoch)
        clone._counts = dict(self._counts)
        return clone

    # ------------------------------------------------------------------
    # 更新
    # ------------------------------------------------------------------
    def check_delta(self, delta: Mapping[Fact, int]) -> Delta:
        """
        delta を適用したときに多重度が負になる事実を返します。

        Returns
        -------
        dict
            事実 -> 適用後の（負の）多重度。空なら適用して問題ありません。
        """
        negative: Delta = {}
        for fact, change in delta.items():
            after = self._counts.get(fact, 0) + change
            if after < 0:
                negative[fact] = after
        return negative

    def apply_delta(self, delta: Mapping[Fact, int], outer_round: Optional[int] = None) -> None:
        """
        差分をまとめて適用します。

        1 件でも多重度が負になる事実があれば、何も変更せずに
        InconsistentUpdateError を送出します（バッチ単位で原子的）。
        """
        negative = self.check_delta(delta)
        if negative:
            round_no = self.epoch.outer if outer_round is None else outer_round
            raise InconsistentUpdateError(round_no, negative)

        for fact, change in delta.items():
            if change == 0:
                continue
            after = self._counts.get(fact, 0) + change
            if after == 0:
                del self._counts[fact]
            else:
                self._counts[fact] = after
