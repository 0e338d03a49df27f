# -*- coding: utf-8 -*-
"""
propagator で送出する例外をまとめたモジュールです。

「解なし（Unsatisfiable）」と「未確定（Underdetermined）」は例外ではなく、
スナップショットの性質（Resolution.status）として報告します。
ここにあるのは「入力が契約を破っている」ケースだけです。
"""

from __future__ import annotations


class PropagatorError(Exception):
    """propagator が送出する例外の基底クラス。"""


class InconsistentUpdateError(PropagatorError, ValueError):
    """
    更新バッチが、現在の多重度より多くの事実を取り消そうとした。

    バッチは一切適用されず、直前の安定スナップショットがそのまま残ります。
    """

    def __init__(self, outer_round: int, offending: dict):
        self.outer_round = outer_round
        self.offending = offending
        preview = ", ".join(
            f"{fact}: {count}" for fact, count in list(offending.items())[:5]
        )
        super().__init__(
            f"Update for round {outer_round} would make multiplicities negative: {preview}"
        )


class EpochOrderError(PropagatorError, ValueError):
    """外側ラウンド番号が狭義単調増加になっていない。"""


class ContractViolationError(PropagatorError):
    """
    キー射影・除外関数が契約（全域性・非反射性・対称性）を満たしていない。

    ラウンドの途中ではなく、モデル登録時に検出します。
    """
