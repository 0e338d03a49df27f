# -*- coding: utf-8 -*-
"""
数独の除外関数を作るモジュールです。

事実 (value, row, col) が成り立つとき、禁止される事実は次の 4 種類です。

- ROW    : 同じ行・同じ値の他のマス
- COLUMN : 同じ列・同じ値の他のマス
- BOX    : 同じボックス・同じ値の他のマス
- CELL   : 同じマスの他の値

CELL を落としてもエンジンは止まりますが、行・列・ボックスの
「唯一箇所」で確定した値がそのマスの他の候補を消さなくなるので、
より弱い不動点で止まります。
categories 引数はそれを確かめるために残しています。
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, FrozenSet, Iterable, Set

from ..config import BOX_COLS, BOX_ROWS, SUDOKU_SIZE
from ..types import Fact


class Category(str, Enum):
    ROW = "row"
    COLUMN = "column"
    BOX = "box"
    CELL = "cell"


ALL_CATEGORIES: FrozenSet[Category] = frozenset(Category)


def make_exclusion(
    size: int = SUDOKU_SIZE,
    box_rows: int = BOX_ROWS,
    box_cols: int = BOX_COLS,
    categories: Iterable[Category] = ALL_CATEGORIES,
) -> Callable[[Fact], FrozenSet[Fact]]:
    """
    指定したカテゴリだけを列挙する除外関数を返します。

    Parameters
    ----------
    size : int
        盤面の 1 辺（値は 1..size、行・列は 0..size-1）。
    box_rows, box_cols : int
        ボックスの縦・横のマス数。
    categories : iterable of Category
        列挙する除外の種類。既定はすべて。
    """
    cats = frozenset(Category(c) for c in categories)

    def exclusion(fact: Fact) -> FrozenSet[Fact]:
        value, row, col = fact
        out: Set[Fact] = set()

        if Category.ROW in cats:
            out.update((value, row, c) for c in range(size) if c != col)

        if Category.COLUMN in cats:
            out.update((value, r, col) for r in range(size) if r != row)

        if Category.BOX in cats:
            top = row - row % box_rows
            left = col - col % box_cols
            for r in range(top, top + box_rows):
                for c in range(left, left + box_cols):
                    if (r, c) != (row, col):
                        out.add((value, r, c))

        if Category.CELL in cats:
            out.update((v, row, col) for v in range(1, size + 1) if v != value)

        return frozenset(out)

    return exclusion
