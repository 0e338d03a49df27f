import pytest

from propagator.sudoku.exclusion import Category
from propagator.sudoku.model import build_sudoku_model
from propagator.sudoku.parser import grid_to_facts, normalize_grid

# Solvable with singles only
EASY_PUZZLE = (
    "53..7...."
    "6..195..."
    ".98....6."
    "8...6...3"
    "4..8.3..1"
    "7...2...6"
    ".6....28."
    "...419..5"
    "....8..79"
)

EASY_SOLUTION = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]

# A few givens; propagation cannot finish it
SPARSE_PUZZLE = (
    "5........"
    "...1....."
    "......3.."
    ".8......."
    "....4...."
    "........2"
    ".6......."
    ".......9."
    "..7......"
)


@pytest.fixture(scope="session")
def model():
    return build_sudoku_model()


@pytest.fixture(scope="session")
def uniqueness_model():
    return build_sudoku_model(rule_kind="uniqueness")


@pytest.fixture(scope="session")
def weak_model():
    return build_sudoku_model(categories=[Category.ROW, Category.COLUMN, Category.BOX])


@pytest.fixture
def easy_facts():
    return grid_to_facts(normalize_grid(EASY_PUZZLE))


@pytest.fixture
def sparse_facts():
    return grid_to_facts(normalize_grid(SPARSE_PUZZLE))


@pytest.fixture
def empty_facts():
    return [(v, r, c) for v in range(1, 10) for r in range(9) for c in range(9)]
