"""
Board module for the Minesweeper engine.

Ties grid, mine placement and reveal logic into the game state machine.
Transitions are pure functions returning a new `BoardState`; `Board` is a
thin session object that holds the current state for a host application.
"""
import logging
import random
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .cell import Cell, Coordinate, GameStatus
from .grid import Grid, create_empty_grid, get_cell, iter_cells, replace_cells
from .mines import PlacementPolicy, place_mines_and_calculate
from .reveal import reveal_all_mines, reveal_cell_with_cascade

logger = logging.getLogger(__name__)

Position = Union[Coordinate, Tuple[int, int]]


# ============================================================================
# Configuration
# ============================================================================

@dataclass(frozen=True)
class BoardConfig:
    """
    Configuration for a Minesweeper board.

    Only basic bounds are checked here. Mine density is validated by the
    difficulty selection (see `custom_config`); placement itself raises
    `InsufficientSpaceError` when the board is too crowded.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        mine_count: Total mines to place.
    """

    width: int = 9
    height: int = 9
    mine_count: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.width < 1 or self.height < 1:
            raise ValueError("Board dimensions must be positive")
        if self.mine_count < 0:
            raise ValueError("Number of mines cannot be negative")

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    @property
    def safe_cells(self) -> int:
        """Cells that must be revealed to win."""
        return self.total_cells - self.mine_count

    @property
    def max_mines(self) -> int:
        """Most mines that still leave room for a 3x3 safe zone."""
        return max(self.total_cells - 9, 0)


# Preset difficulty levels
BEGINNER = BoardConfig(9, 9, 10)
INTERMEDIATE = BoardConfig(16, 16, 40)
EXPERT = BoardConfig(30, 16, 99)

DIFFICULTY_PRESETS: Dict[str, BoardConfig] = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "expert": EXPERT,
}

MIN_CUSTOM_SIZE = 5
MAX_CUSTOM_SIZE = 50


def custom_config(width: int, height: int, mine_count: int) -> BoardConfig:
    """
    Build a user-defined configuration.

    Raises:
        ValueError: Dimensions outside 5-50, fewer than one mine, or more
            mines than fit around a 3x3 safe zone.
    """
    for name, value in (("Width", width), ("Height", height)):
        if not MIN_CUSTOM_SIZE <= value <= MAX_CUSTOM_SIZE:
            raise ValueError(
                f"{name} must be between {MIN_CUSTOM_SIZE} "
                f"and {MAX_CUSTOM_SIZE}"
            )
    config = BoardConfig(width, height, mine_count)
    if mine_count < 1:
        raise ValueError("At least 1 mine required")
    if mine_count > config.max_mines:
        raise ValueError(
            f"Maximum {config.max_mines} mines for {width}x{height} grid"
        )
    return config


# ============================================================================
# Board State
# ============================================================================

@dataclass(frozen=True)
class BoardState:
    """
    Immutable snapshot of a game.

    Attributes:
        config: Board dimensions and mine count.
        grid: Current cells.
        game_status: Position in the game state machine.
        is_first_click: True until the first reveal places the mines.
        revealed_count: Running total of revealed cells.
        flag_count: Cells currently flagged.
        move_count: Reveals processed so far.
        elapsed_time: Seconds played, advanced by `tick`.
    """

    config: BoardConfig
    grid: Grid = field(repr=False)
    game_status: GameStatus = GameStatus.NOT_STARTED
    is_first_click: bool = True
    revealed_count: int = 0
    flag_count: int = 0
    move_count: int = 0
    elapsed_time: int = 0

    @property
    def mines_remaining(self) -> int:
        """Mine count minus flags placed (can go negative)."""
        return self.config.mine_count - self.flag_count

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at position, or None if invalid."""
        return get_cell(self.grid, row, col)


def new_game(config: BoardConfig) -> BoardState:
    """Create a fresh, unmined board for `config`."""
    return BoardState(config=config, grid=create_empty_grid(config))


# ============================================================================
# Transitions
# ============================================================================

def reveal(
    state: BoardState,
    coordinate: Position,
    policy: Optional[PlacementPolicy] = None,
    rng: Optional[random.Random] = None,
) -> BoardState:
    """
    Reveal a cell.

    The first reveal places the mines around a safe zone and starts the
    game. Revealing every safe cell wins; revealing a mine loses and
    discloses all mines. Reveals after the game ended, on flagged or
    revealed cells, or outside the grid return `state` unchanged.

    Args:
        state: Current board state.
        coordinate: (row, col) to reveal.
        policy: Mine placement policy used on the first reveal.
        rng: Random source used on the first reveal.

    Returns:
        New board state.

    Raises:
        InsufficientSpaceError: The first reveal cannot fit the mines
            outside the safe zone.
    """
    coordinate = Coordinate(*coordinate)
    if state.game_status.is_terminal:
        return state
    cell = state.get_cell(coordinate.row, coordinate.col)
    if cell is None or not cell.is_hidden:
        return state

    grid = state.grid
    status = state.game_status
    if state.is_first_click:
        grid = place_mines_and_calculate(
            grid, state.config.mine_count, coordinate, policy, rng
        )
        status = GameStatus.IN_PROGRESS
        logger.debug("Mines placed, first click at %s", tuple(coordinate))

    result = reveal_cell_with_cascade(grid, coordinate, status)
    revealed_count = state.revealed_count + result.revealed_count

    status = result.game_status
    if (
        status == GameStatus.IN_PROGRESS
        and revealed_count == state.config.safe_cells
    ):
        status = GameStatus.WON

    grid = result.grid
    if status == GameStatus.LOST:
        grid = reveal_all_mines(grid, coordinate)

    if status.is_terminal:
        logger.info(
            "Game %s after %d moves", status.value, state.move_count + 1
        )

    return replace(
        state,
        grid=grid,
        game_status=status,
        is_first_click=False,
        revealed_count=revealed_count,
        move_count=state.move_count + 1,
    )


def toggle_flag(state: BoardState, coordinate: Position) -> BoardState:
    """
    Flag or unflag a hidden cell.

    Allowed before the first reveal. Ignored after the game ended, on
    revealed cells, and outside the grid.
    """
    coordinate = Coordinate(*coordinate)
    if state.game_status.is_terminal:
        return state
    cell = state.get_cell(coordinate.row, coordinate.col)
    if cell is None or cell.is_revealed:
        return state

    toggled = cell.toggle_flag()
    delta = 1 if toggled.is_flagged else -1
    return replace(
        state,
        grid=replace_cells(state.grid, [toggled]),
        flag_count=state.flag_count + delta,
    )


def tick(state: BoardState, seconds: int = 1) -> BoardState:
    """Advance the elapsed time while the game is in progress."""
    if state.game_status != GameStatus.IN_PROGRESS:
        return state
    return replace(state, elapsed_time=state.elapsed_time + seconds)


# ============================================================================
# State Views
# ============================================================================

def get_observation(state: BoardState) -> np.ndarray:
    """
    Get board state as a numpy array.

    Returns:
        2D int8 array where:
            -1 = hidden
            -2 = flagged
            0-8 = revealed with adjacent count
            9 = revealed mine
    """
    obs = np.zeros(
        (state.config.height, state.config.width), dtype=np.int8
    )
    for cell in iter_cells(state.grid):
        obs[cell.row, cell.col] = cell.to_observation()
    return obs


def get_valid_actions(state: BoardState) -> List[Coordinate]:
    """List positions that can still be revealed."""
    if state.game_status.is_terminal:
        return []
    return [cell.coordinate for cell in iter_cells(state.grid) if cell.is_hidden]


# ============================================================================
# Board Session
# ============================================================================

class Board:
    """
    Mutable holder for the current `BoardState`.

    Each action replaces `state` with the value returned by the matching
    transition function, so earlier states stay valid snapshots.
    """

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        policy: Optional[PlacementPolicy] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the board.

        Args:
            config: Board configuration (default: 9x9 with 10 mines).
            policy: Mine placement policy.
            rng: Random source for mine placement.
        """
        self.config = config or BoardConfig()
        self.policy = policy
        self.rng = rng
        self.state = new_game(self.config)

    # ========================================================================
    # Game Actions
    # ========================================================================

    def reveal(self, row: int, col: int) -> bool:
        """
        Reveal a cell at the given position.

        Returns:
            True if the board changed, False otherwise.
        """
        return self._apply(
            reveal(self.state, (row, col), self.policy, self.rng)
        )

    def flag(self, row: int, col: int) -> bool:
        """
        Toggle flag on a cell.

        Returns:
            True if flag was toggled, False otherwise.
        """
        return self._apply(toggle_flag(self.state, (row, col)))

    def tick(self, seconds: int = 1) -> bool:
        """Advance the game clock; True if the game is running."""
        return self._apply(tick(self.state, seconds))

    def restore(self, state: BoardState) -> None:
        """Replace the current state, e.g. with a restored snapshot."""
        self.config = state.config
        self.state = state

    def reset(self, config: Optional[BoardConfig] = None) -> None:
        """Reset board to initial state for new game."""
        if config is not None:
            self.config = config
        self.state = new_game(self.config)

    def _apply(self, new_state: BoardState) -> bool:
        changed = new_state is not self.state
        self.state = new_state
        return changed

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def game_status(self) -> GameStatus:
        """Get current game status."""
        return self.state.game_status

    @property
    def is_playing(self) -> bool:
        """Check if the game still accepts moves."""
        return not self.state.game_status.is_terminal

    @property
    def is_won(self) -> bool:
        """Check if game was won."""
        return self.state.game_status == GameStatus.WON

    @property
    def is_lost(self) -> bool:
        """Check if game was lost."""
        return self.state.game_status == GameStatus.LOST

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at position, or None if invalid."""
        return self.state.get_cell(row, col)

    def get_observation(self) -> np.ndarray:
        return get_observation(self.state)

    def get_valid_actions(self) -> List[Coordinate]:
        return get_valid_actions(self.state)
