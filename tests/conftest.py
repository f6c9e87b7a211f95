"""
Pytest configuration and shared fixtures.
"""
import random
import sys
from pathlib import Path
from typing import Callable, List

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import (
    Board,
    BoardConfig,
    BoardState,
    Cell,
    GameStatus,
    Grid,
    calculate_adjacent_mines,
    create_empty_grid,
)
from minefield.grid import replace_cells, iter_cells


# ============================================================================
# Grid Builders
# ============================================================================

def build_grid(layout: List[str]) -> Grid:
    """
    Build a grid from strings where '*' is a mine and 'F' a flagged cell.

    Adjacent counts are calculated; every other cell is hidden.
    """
    height, width = len(layout), len(layout[0])
    grid = create_empty_grid(BoardConfig(width, height, 0))
    mines = [
        Cell(row=row, col=col, has_mine=True)
        for row, line in enumerate(layout)
        for col, char in enumerate(line)
        if char == "*"
    ]
    grid = calculate_adjacent_mines(replace_cells(grid, mines))
    flags = [
        cell.toggle_flag()
        for cell in iter_cells(grid)
        if layout[cell.row][cell.col] == "F"
    ]
    return replace_cells(grid, flags)


@pytest.fixture
def grid_factory() -> Callable[[List[str]], Grid]:
    """Factory building grids from string layouts."""
    return build_grid


@pytest.fixture
def state_factory() -> Callable[[List[str]], BoardState]:
    """Factory building in-progress board states from string layouts."""

    def make(layout: List[str]) -> BoardState:
        grid = build_grid(layout)
        mine_count = sum(line.count("*") for line in layout)
        flag_count = sum(line.count("F") for line in layout)
        config = BoardConfig(len(layout[0]), len(layout), mine_count)
        return BoardState(
            config=config,
            grid=grid,
            game_status=GameStatus.IN_PROGRESS,
            is_first_click=False,
            flag_count=flag_count,
        )

    return make


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible placement."""
    return random.Random(1234)


@pytest.fixture
def default_board(rng: random.Random) -> Board:
    """Create a default 9x9 board with 10 mines."""
    return Board(rng=rng)


@pytest.fixture
def small_board(rng: random.Random) -> Board:
    """Create a small 5x5 board with 1 mine."""
    return Board(BoardConfig(5, 5, 1), rng=rng)


@pytest.fixture
def empty_board() -> Board:
    """Create a board with no mines for cascade testing."""
    return Board(BoardConfig(5, 5, 0))


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell(row=0, col=0)


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(row=0, col=0, has_mine=True)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def beginner_config() -> BoardConfig:
    """Beginner difficulty configuration."""
    return BoardConfig(9, 9, 10)
