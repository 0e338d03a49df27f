import numpy as np
import pandas as pd
import pytest

from propagator.sudoku.parser import grid_to_facts, normalize_cell, normalize_grid

from .conftest import EASY_PUZZLE


def test_normalize_cell_values():
    assert normalize_cell(None) == 0
    assert normalize_cell(float("nan")) == 0
    assert normalize_cell(".") == 0
    assert normalize_cell(" 7 ") == 7
    assert normalize_cell(3.0) == 3
    with pytest.raises(ValueError):
        normalize_cell("x")


def test_string_and_dataframe_give_same_grid():
    from_text = normalize_grid(EASY_PUZZLE)

    rows = [list(EASY_PUZZLE[i * 9:(i + 1) * 9]) for i in range(9)]
    df = pd.DataFrame(rows).replace(".", np.nan)
    from_frame = normalize_grid(df)

    assert from_text.shape == (9, 9)
    assert (from_text == from_frame).all()
    assert from_text[0, 0] == 5
    assert from_text[0, 2] == 0


def test_board_string_ignores_separators():
    text = "\n".join(
        EASY_PUZZLE[i * 9:i * 9 + 3] + "|" + EASY_PUZZLE[i * 9 + 3:i * 9 + 6] + "|"
        + EASY_PUZZLE[i * 9 + 6:(i + 1) * 9]
        for i in range(9)
    )
    assert (normalize_grid(text) == normalize_grid(EASY_PUZZLE)).all()


def test_wrong_shape_is_rejected():
    with pytest.raises(ValueError):
        normalize_grid([[1, 2], [3, 4]])
    with pytest.raises(ValueError):
        normalize_grid("123")


def test_out_of_range_value_is_rejected():
    rows = [[0] * 9 for _ in range(9)]
    rows[4][4] = 12
    with pytest.raises(ValueError):
        normalize_grid(rows)


def test_grid_to_facts_expands_blanks():
    grid = normalize_grid(EASY_PUZZLE)
    facts = grid_to_facts(grid)

    givens = int((grid > 0).sum())
    assert len(facts) == givens + (81 - givens) * 9
    assert (5, 0, 0) in facts
    assert (1, 0, 0) not in facts
    assert {(v, 0, 2) for v in range(1, 10)} <= set(facts)
