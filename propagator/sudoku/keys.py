# -*- coding: utf-8 -*-
"""
数独の事実 (value, row, col) に対するキー射影を定義するモジュールです。

- cell      : (row, col)       … 1 マスに入る値はちょうど 1 つ
- row_value : (value, row)     … 各行に各値はちょうど 1 回
- col_value : (value, col)     … 各列に各値はちょうど 1 回
- box_value : (value, box)     … 各ボックスに各値はちょうど 1 回
"""

from __future__ import annotations

from typing import List

from ..config import BOX_COLS, BOX_ROWS, SUDOKU_SIZE
from ..engine.model import KeyProjection

PROJECTION_NAMES = ("cell", "row_value", "col_value", "box_value")


def box_index(row: int, col: int, box_rows: int = BOX_ROWS, box_cols: int = BOX_COLS,
              size: int = SUDOKU_SIZE) -> int:
    """
    マス (row, col) が属するボックスの番号を返します。

    左上から右へ 0, 1, 2, ... と数えます。
    """
    boxes_per_row = size // box_cols
    return (row // box_rows) * boxes_per_row + col // box_cols


def make_projections(size: int = SUDOKU_SIZE, box_rows: int = BOX_ROWS,
                     box_cols: int = BOX_COLS) -> List[KeyProjection]:
    """4 種類のキー射影をこの順で返します。"""
    return [
        KeyProjection("cell", lambda f: (f[1], f[2])),
        KeyProjection("row_value", lambda f: (f[0], f[1])),
        KeyProjection("col_value", lambda f: (f[0], f[2])),
        KeyProjection(
            "box_value",
            lambda f: (f[0], box_index(f[1], f[2], box_rows, box_cols, size)),
        ),
    ]
