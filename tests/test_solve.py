import pandas as pd

from propagator import solve

from .conftest import EASY_PUZZLE, EASY_SOLUTION


def test_solve_from_string():
    result = solve(EASY_PUZZLE)

    assert result["status"] == "solved"
    assert result["board"] == EASY_SOLUTION
    assert result["candidates"] == []
    assert result["report"] == {"1": 81}


def test_solve_from_dataframe_matches_string():
    rows = [[int(ch) if ch != "." else None for ch in EASY_PUZZLE[i * 9:(i + 1) * 9]] for i in range(9)]
    result = solve(pd.DataFrame(rows))

    assert result["board"] == EASY_SOLUTION


def test_uniqueness_rules_alone_still_solve_singles_puzzle():
    result = solve(EASY_PUZZLE, rule_kind="uniqueness")
    assert result["status"] == "solved"


def test_small_board():
    board = [
        [1, 0, 0, 0],
        [0, 0, 3, 0],
        [0, 4, 0, 0],
        [0, 0, 0, 2],
    ]
    result = solve(board, size=4, box_rows=2, box_cols=2)

    assert result["status"] == "solved"
    assert result["board"] == [
        [1, 3, 2, 4],
        [4, 2, 3, 1],
        [2, 4, 1, 3],
        [3, 1, 4, 2],
    ]
