# -*- coding: utf-8 -*-
"""
盤面を内部表現に正規化し、候補事実に変換するモジュールです。

主な役割:
- pandas.DataFrame / 2次元リスト / 文字列 を numpy 配列に変換
- 各セルの値を「空きマス = 0」「ヒント = 1..N の整数」に正規化
- 正規化した盤面から、初期の候補事実 (value, row, col) を作る
"""

from __future__ import annotations

from typing import Any, List, Union

import numpy as np
import pandas as pd

from ..config import BLANK_CHARS, SUDOKU_SIZE
from ..types import Fact

Board = Union[pd.DataFrame, np.ndarray, List[List[Any]], str]


def normalize_cell(x: Any) -> int:
    """
    個々のセルの値を整数に変換します。

    変換ルール（例）
    ----------------
    - None / NaN / 空文字 / "." / "0" / "_": 0（空きマス）
    - "5", 5, 5.0: 5
    - それ以外: ValueError
    """
    if x is None:
        return 0
    if isinstance(x, float) and np.isnan(x):
        return 0

    s = str(x).strip()
    if not s or s in BLANK_CHARS:
        return 0

    # pandas 経由だと 5.0 のような float 文字列になることがある
    if s.endswith(".0"):
        s = s[:-2]
    if s.isdigit():
        return int(s)

    raise ValueError(f"Unrecognized cell value: {x!r}")


def parse_board_string(text: str, size: int = SUDOKU_SIZE) -> np.ndarray:
    """
    "53..7...." のような 1 文字 1 マスの文字列を盤面に変換します。

    改行や空白以外の区切り（"|", "-", "+"）は無視します。
    """
    chars = [ch for ch in text if ch not in " \t\r\n|-+"]
    if len(chars) != size * size:
        raise ValueError(
            f"Board string must have {size * size} cells, got {len(chars)}"
        )
    values = [0 if ch in BLANK_CHARS else normalize_cell(ch) for ch in chars]
    return np.array(values, dtype=int).reshape(size, size)


def normalize_grid(board: Board, size: int = SUDOKU_SIZE) -> np.ndarray:
    """
    盤面を shape = (size, size) の整数 numpy 配列に変換し、
    各セルを :func:`normalize_cell` によって正規化します。

    Raises
    ------
    ValueError
        形が合わない、または 1..size 以外の値がある場合。
    """
    if isinstance(board, str):
        grid = parse_board_string(board, size)
    else:
        df = board if isinstance(board, pd.DataFrame) else pd.DataFrame(board)
        rows, cols = df.shape
        if (rows, cols) != (size, size):
            raise ValueError(f"Board must be {size}x{size}, got {rows}x{cols}")

        grid = np.zeros((rows, cols), dtype=int)
        for i in range(rows):
            for j in range(cols):
                grid[i, j] = normalize_cell(df.iat[i, j])

    if grid.min() < 0 or grid.max() > size:
        raise ValueError(f"Cell values must be between 0 and {size}")
    return grid


def grid_to_facts(grid: np.ndarray) -> List[Fact]:
    """
    正規化済みの盤面から初期の候補事実を作ります。

    - ヒントのあるマス: そのヒント 1 つだけ
    - 空きマス: 1..size のすべての値
    """
    size = grid.shape[0]
    facts: List[Fact] = []
    for row in range(size):
        for col in range(size):
            given = int(grid[row, col])
            if given:
                facts.append((given, row, col))
            else:
                facts.extend((value, row, col) for value in range(1, size + 1))
    return facts
