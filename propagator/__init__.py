# propagator/__init__.py
# -*- coding: utf-8 -*-
"""
propagator パッケージの入口となるモジュールです。

api/web_app.py などから:

    from propagator import solve

と呼び出されることを想定しています。

ここでは、盤面（pandas.DataFrame / 2次元リスト / 文字列）を受け取り、
1. 盤面の正規化
2. 初期候補事実（候補全体 + ヒント）の作成
3. 数独用 ConstraintModel の組み立て
4. IncrementalController への読み込み（外側ラウンド 0 の不動点）
5. 表示用の結果構築
を順番に呼び出します。

エンジン本体だけを使いたい場合は、propagator.engine 以下を直接使ってください。
"""

from __future__ import annotations

from typing import Any, Dict

from .config import BOX_COLS, BOX_ROWS, SUDOKU_SIZE
from .engine.fixpoint import FixpointIterator, resolve
from .engine.incremental import IncrementalController, replay_from_scratch
from .engine.model import ConstraintModel, KeyProjection
from .engine.rules import IntersectionRule, UniquenessRule
from .engine.store import FactStore
from .errors import (
    ContractViolationError,
    EpochOrderError,
    InconsistentUpdateError,
    PropagatorError,
)
from .logging_utils import get_logger
from .report.render_result import build_result
from .sudoku.model import build_sudoku_model
from .sudoku.parser import Board, grid_to_facts, normalize_grid
from .types import Epoch, Resolution, ResolutionStatus, Snapshot, UpdateResult

logger = get_logger()

__all__ = [
    "ConstraintModel",
    "ContractViolationError",
    "Epoch",
    "EpochOrderError",
    "FactStore",
    "FixpointIterator",
    "InconsistentUpdateError",
    "IncrementalController",
    "IntersectionRule",
    "KeyProjection",
    "PropagatorError",
    "Resolution",
    "ResolutionStatus",
    "Snapshot",
    "UniquenessRule",
    "UpdateResult",
    "build_sudoku_model",
    "replay_from_scratch",
    "resolve",
    "solve",
]


def solve(
    board: Board,
    size: int = SUDOKU_SIZE,
    box_rows: int = BOX_ROWS,
    box_cols: int = BOX_COLS,
    rule_kind: str = "intersection",
) -> Dict[str, Any]:
    """
    盤面を読み込み、制約伝播だけで絞り込めるところまで絞り込んだ結果を返します。

    探索（バックトラック）はしません。伝播で解ききれない場合は
    status が "underdetermined" になり、candidates に残り候補が入ります。
    """
    logger.info("=== solve() START ===")

    grid = normalize_grid(board, size)
    facts = grid_to_facts(grid)
    logger.info("Givens: %d, base facts: %d", int((grid > 0).sum()), len(facts))

    model = build_sudoku_model(size, box_rows, box_cols, rule_kind=rule_kind)
    controller = IncrementalController(model)
    result = controller.load(facts)

    out = build_result(result.snapshot, size, report=controller.report())
    logger.info("=== solve() END (status=%s) ===", out.get("status"))
    return out
