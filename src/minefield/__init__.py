"""
Minesweeper rules engine.

Provides grid construction, safe first-click mine placement, cascading
reveals, flag bookkeeping and win/loss detection.
"""
from .cell import Cell, CellStatus, Coordinate, GameStatus
from .grid import Grid, create_empty_grid, get_cell, get_neighbors
from .mines import (
    InsufficientSpaceError,
    PlacementPolicy,
    calculate_adjacent_mines,
    distribute_mines,
    measure_opening,
    place_mines_and_calculate,
)
from .reveal import (
    RevealResult,
    reveal_all_mines,
    reveal_cell,
    reveal_cell_with_cascade,
)
from .board import (
    Board,
    BoardConfig,
    BoardState,
    BEGINNER,
    INTERMEDIATE,
    EXPERT,
    DIFFICULTY_PRESETS,
    custom_config,
    new_game,
    reveal,
    toggle_flag,
    tick,
)
from .snapshot import SnapshotError, dumps, loads, state_from_dict, state_to_dict
from .environment import MinesweeperEnv

__all__ = [
    "Cell",
    "CellStatus",
    "Coordinate",
    "GameStatus",
    "Grid",
    "create_empty_grid",
    "get_cell",
    "get_neighbors",
    "InsufficientSpaceError",
    "PlacementPolicy",
    "calculate_adjacent_mines",
    "distribute_mines",
    "measure_opening",
    "place_mines_and_calculate",
    "RevealResult",
    "reveal_all_mines",
    "reveal_cell",
    "reveal_cell_with_cascade",
    "Board",
    "BoardConfig",
    "BoardState",
    "BEGINNER",
    "INTERMEDIATE",
    "EXPERT",
    "DIFFICULTY_PRESETS",
    "custom_config",
    "new_game",
    "reveal",
    "toggle_flag",
    "tick",
    "SnapshotError",
    "dumps",
    "loads",
    "state_from_dict",
    "state_to_dict",
    "MinesweeperEnv",
]
