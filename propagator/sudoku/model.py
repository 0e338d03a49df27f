# -*- coding: utf-8 -*-
"""
数独用の ConstraintModel を組み立てるモジュールです。
"""

from __future__ import annotations

from typing import Iterable

from ..config import BOX_COLS, BOX_ROWS, SUDOKU_SIZE
from ..engine.model import ConstraintModel
from ..engine.rules import IntersectionRule, UniquenessRule
from .exclusion import ALL_CATEGORIES, Category, make_exclusion
from .keys import make_projections

RULE_KINDS = ("intersection", "uniqueness")


def build_sudoku_model(
    size: int = SUDOKU_SIZE,
    box_rows: int = BOX_ROWS,
    box_cols: int = BOX_COLS,
    categories: Iterable[Category] = ALL_CATEGORIES,
    rule_kind: str = "intersection",
) -> ConstraintModel:
    """
    候補全体 {(v, r, c)}・4 種類のキー射影・除外関数から
    ConstraintModel を作ります。

    Parameters
    ----------
    categories : iterable of Category
        除外関数が列挙するカテゴリ。既定はすべて。
    rule_kind : str
        "intersection"（共通除外）か "uniqueness"（唯一候補のみ）。
    """
    if box_rows * box_cols != size:
        raise ValueError(
            f"Box {box_rows}x{box_cols} does not tile a {size}x{size} board"
        )
    if rule_kind not in RULE_KINDS:
        raise ValueError(f"rule_kind must be one of {RULE_KINDS}, got {rule_kind!r}")

    universe = [
        (value, row, col)
        for value in range(1, size + 1)
        for row in range(size)
        for col in range(size)
    ]
    projections = make_projections(size, box_rows, box_cols)
    exclusion = make_exclusion(size, box_rows, box_cols, categories)

    model = ConstraintModel(
        universe=universe,
        projections=projections,
        exclusion=exclusion,
        name=f"sudoku{size}",
    )
    if rule_kind == "uniqueness":
        model.rules = [UniquenessRule(p, model.exclusion) for p in projections]
    else:
        model.rules = [IntersectionRule(p, model.exclusion) for p in projections]
    return model
