"""
Mine placement module for the Minesweeper engine.

Places mines after the first click so that the clicked cell and its
neighbors are always safe, and retries placement a bounded number of
times to avoid tiny initial openings.
"""
import logging
import random
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Set

from .cell import Coordinate
from .grid import (
    Grid,
    cascade_region,
    get_cell,
    get_neighbors,
    grid_dimensions,
    iter_cells,
    replace_cells,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Errors and Policy
# ============================================================================

class InsufficientSpaceError(ValueError):
    """Raised when the grid has fewer mine positions than requested mines."""

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            f"Not enough valid positions for mines "
            f"({available} available, {requested} requested)"
        )
        self.available = available
        self.requested = requested


@dataclass(frozen=True)
class PlacementPolicy:
    """
    Tuning for the opening-size heuristic.

    Attributes:
        max_attempts: Placements tried before keeping the last one.
        min_opening_small: Opening size accepted on small boards.
        min_opening_large: Opening size accepted on large boards.
        large_board_cells: Cell count from which a board counts as large.
        time_limit: Seconds spent retrying before falling back to a
            single unchecked placement.
    """

    max_attempts: int = 10
    min_opening_small: int = 9
    min_opening_large: int = 12
    large_board_cells: int = 100
    time_limit: float = 0.05

    def __post_init__(self) -> None:
        """Validate policy values after initialization."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.time_limit < 0:
            raise ValueError("time_limit cannot be negative")

    def min_opening(self, total_cells: int) -> int:
        """Opening size required for a board of `total_cells` cells."""
        if total_cells >= self.large_board_cells:
            return self.min_opening_large
        return self.min_opening_small


DEFAULT_POLICY = PlacementPolicy()


# ============================================================================
# Placement
# ============================================================================

def _safe_zone(grid: Grid, first_click: Coordinate) -> Set[Coordinate]:
    """First click plus its in-bounds neighbors."""
    zone = {Coordinate(first_click.row, first_click.col)}
    for cell in get_neighbors(grid, first_click.row, first_click.col):
        zone.add(cell.coordinate)
    return zone


def _valid_mine_positions(
    grid: Grid, first_click: Coordinate
) -> List[Coordinate]:
    """All positions outside the safe zone, in row-major order."""
    safe_zone = _safe_zone(grid, first_click)
    return [
        cell.coordinate
        for cell in iter_cells(grid)
        if cell.coordinate not in safe_zone
    ]


def distribute_mines(
    grid: Grid,
    mine_count: int,
    first_click: Coordinate,
    rng: Optional[random.Random] = None,
) -> Grid:
    """
    Place mines randomly outside the first click's safe zone.

    Args:
        grid: Grid to place mines on (not modified).
        mine_count: Number of mines to place.
        first_click: Clicked position; it and its neighbors stay mine-free.
        rng: Random source (defaults to the `random` module).

    Returns:
        New grid with exactly `mine_count` mined cells added.

    Raises:
        InsufficientSpaceError: Too few positions outside the safe zone.
    """
    rng = rng or random
    positions = _valid_mine_positions(grid, first_click)
    if len(positions) < mine_count:
        raise InsufficientSpaceError(len(positions), mine_count)

    rng.shuffle(positions)  # Fisher-Yates

    mined = [
        replace(grid[row][col], has_mine=True)
        for row, col in positions[:mine_count]
    ]
    return replace_cells(grid, mined)


def calculate_adjacent_mines(grid: Grid) -> Grid:
    """
    Set every cell's adjacent mine count.

    Mined cells get 0. Returns a new grid.
    """
    return tuple(
        tuple(
            replace(cell, adjacent_mines=0)
            if cell.has_mine
            else replace(
                cell,
                adjacent_mines=sum(
                    1
                    for neighbor in get_neighbors(grid, cell.row, cell.col)
                    if neighbor.has_mine
                ),
            )
            for cell in row
        )
        for row in grid
    )


def measure_opening(grid: Grid, start: Coordinate) -> int:
    """
    Count the cells a cascading reveal from `start` would uncover.

    Follows the same rules as the reveal engine's cascade without
    changing any cell status.
    """
    origin = get_cell(grid, start.row, start.col)
    if origin is None or not origin.is_hidden or origin.has_mine:
        return 0
    if origin.adjacent_mines > 0:
        return 1

    return 1 + sum(1 for _ in cascade_region(grid, origin))


def place_mines_and_calculate(
    grid: Grid,
    mine_count: int,
    first_click: Coordinate,
    policy: Optional[PlacementPolicy] = None,
    rng: Optional[random.Random] = None,
    clock: Callable[[], float] = time.perf_counter,
) -> Grid:
    """
    Place mines and compute adjacency, retrying for a decent opening.

    Each attempt is accepted if the opening from `first_click` reaches
    the policy threshold. After `max_attempts` the last attempt is kept.
    Once `time_limit` seconds have elapsed the search stops and a single
    unchecked placement is returned.

    Args:
        grid: Empty grid for the new game.
        mine_count: Number of mines to place.
        first_click: Position of the first reveal.
        policy: Retry policy (defaults to `DEFAULT_POLICY`).
        rng: Random source (defaults to the `random` module).
        clock: Monotonic clock in seconds.

    Returns:
        Mined grid with adjacent counts calculated.

    Raises:
        InsufficientSpaceError: Too few positions outside the safe zone.
    """
    policy = policy or DEFAULT_POLICY
    height, width = grid_dimensions(grid)
    total_cells = height * width
    threshold = min(policy.min_opening(total_cells), total_cells - mine_count)

    started = clock()
    candidate = grid
    for attempt in range(1, policy.max_attempts + 1):
        if clock() - started > policy.time_limit:
            logger.warning(
                "Mine placement hit time limit after %d attempts, "
                "using unchecked placement", attempt - 1,
            )
            return calculate_adjacent_mines(
                distribute_mines(grid, mine_count, first_click, rng)
            )

        candidate = calculate_adjacent_mines(
            distribute_mines(grid, mine_count, first_click, rng)
        )
        opening = measure_opening(candidate, first_click)
        logger.debug(
            "Placement attempt %d: opening %d (need %d)",
            attempt, opening, threshold,
        )
        if opening >= threshold:
            return candidate

    logger.warning(
        "No placement reached opening %d in %d attempts, keeping last",
        threshold, policy.max_attempts,
    )
    return candidate
