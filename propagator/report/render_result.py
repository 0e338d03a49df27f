# -*- coding: utf-8 -*-
"""
安定スナップショットをもとに、API で返す情報を構築するモジュールです。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np

from ..types import Snapshot


def candidates_by_cell(snapshot: Snapshot) -> Dict[tuple, List[int]]:
    """(row, col) -> 残っている値の昇順リスト。"""
    cells: Dict[tuple, List[int]] = {}
    for value, row, col in snapshot.live_facts():
        cells.setdefault((row, col), []).append(value)
    for values in cells.values():
        values.sort()
    return cells


def apply_snapshot_to_grid(snapshot: Snapshot, size: int) -> np.ndarray:
    """
    候補が 1 つに絞れたマスにその値を入れた盤面を作ります。

    候補が 0 個・2 個以上のマスは 0 のままです。
    """
    grid = np.zeros((size, size), dtype=int)
    for (row, col), values in candidates_by_cell(snapshot).items():
        if len(values) == 1:
            grid[row, col] = values[0]
    return grid


def candidate_count_grid(snapshot: Snapshot, size: int) -> np.ndarray:
    """マスごとの残り候補数。"""
    counts = np.zeros((size, size), dtype=int)
    for (row, col), values in candidates_by_cell(snapshot).items():
        counts[row, col] = len(values)
    return counts


def build_candidate_list(snapshot: Snapshot) -> List[Dict[str, Any]]:
    """
    まだ 1 つに絞れていないマスの候補一覧を作ります。
    """
    items: List[Dict[str, Any]] = []
    for (row, col), values in sorted(candidates_by_cell(snapshot).items()):
        if len(values) > 1:
            items.append({"row": row, "col": col, "candidates": values})
    return items


def build_result(
    snapshot: Snapshot,
    size: int,
    report: Optional[Dict[int, int]] = None,
) -> Dict[str, Any]:

    solved_grid = apply_snapshot_to_grid(snapshot, size)
    resolution = snapshot.resolution

    result: Dict[str, Any] = {
        "board": solved_grid.tolist(),  # ★ numpy 配列は返さない
        "candidates": build_candidate_list(snapshot),
        "candidate_counts": candidate_count_grid(snapshot, size).tolist(),
        "live_facts": len(snapshot),
        "epoch": [snapshot.epoch.outer, snapshot.epoch.inner],
        "report": {str(k): v for k, v in (report or {}).items()},
    }

    if resolution is not None:
        result["status"] = resolution.status.value
        result["empty_keys"] = {
            name: [list(k) for k in keys] for name, keys in resolution.empty_keys.items()
        }
        result["ambiguous_groups"] = {
            name: len(keys) for name, keys in resolution.ambiguous_keys.items()
        }
    return result
