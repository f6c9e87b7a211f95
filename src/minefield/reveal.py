"""
Reveal module for the Minesweeper engine.

Single-cell reveal, breadth-first cascade through zero-count regions, and
the mine disclosure shown after a loss.
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional

from .cell import CellStatus, Coordinate, GameStatus
from .grid import Grid, cascade_region, get_cell, replace_cells

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevealResult:
    """
    Outcome of a reveal.

    Attributes:
        grid: Grid after the reveal (the input grid if nothing changed).
        game_status: Status after the reveal.
        revealed_count: Number of cells newly revealed.
    """

    grid: Grid
    game_status: GameStatus
    revealed_count: int


# ============================================================================
# Single Cell
# ============================================================================

def reveal_cell(
    grid: Grid, coordinate: Coordinate, game_status: GameStatus
) -> RevealResult:
    """
    Reveal one cell without cascading.

    Does nothing unless the game is in progress and the cell is hidden.
    Revealing a mine marks it as the triggered mine and loses the game.

    Args:
        grid: The game grid.
        coordinate: Cell to reveal.
        game_status: Current game status.

    Returns:
        RevealResult with `revealed_count` of 0 or 1.
    """
    unchanged = RevealResult(grid, game_status, 0)
    if game_status != GameStatus.IN_PROGRESS:
        return unchanged

    cell = get_cell(grid, coordinate.row, coordinate.col)
    if cell is None or not cell.is_hidden:
        return unchanged

    revealed = cell.reveal()
    if revealed.has_mine:
        revealed = replace(revealed, is_triggered_mine=True)
        return RevealResult(
            replace_cells(grid, [revealed]), GameStatus.LOST, 1
        )
    return RevealResult(
        replace_cells(grid, [revealed]), GameStatus.IN_PROGRESS, 1
    )


# ============================================================================
# Cascade
# ============================================================================

def reveal_cell_with_cascade(
    grid: Grid, coordinate: Coordinate, game_status: GameStatus
) -> RevealResult:
    """
    Reveal a cell and flood-fill outward from zero-count cells.

    The traversal is an iterative breadth-first search so that large
    empty regions do not recurse. Numbered cells are revealed but not
    expanded; mines and flagged cells are never touched.

    Args:
        grid: The game grid.
        coordinate: Starting cell.
        game_status: Current game status.

    Returns:
        RevealResult with the total number of cells revealed.
    """
    initial = reveal_cell(grid, coordinate, game_status)
    if initial.game_status != GameStatus.IN_PROGRESS:
        return initial
    if initial.revealed_count == 0:
        return initial

    start = get_cell(initial.grid, coordinate.row, coordinate.col)
    if start.adjacent_mines > 0:
        return initial

    changed = [cell.reveal() for cell in cascade_region(initial.grid, start)]
    revealed_count = initial.revealed_count + len(changed)

    logger.debug(
        "Cascade from (%d, %d) revealed %d cells",
        coordinate.row, coordinate.col, revealed_count,
    )
    return RevealResult(
        replace_cells(initial.grid, changed),
        GameStatus.IN_PROGRESS,
        revealed_count,
    )


# ============================================================================
# Terminal Disclosure
# ============================================================================

def reveal_all_mines(
    grid: Grid, triggered: Optional[Coordinate] = None
) -> Grid:
    """
    Show every mine and mark wrong flags after a loss.

    Hidden or flagged mines become revealed, flagged safe cells get
    `is_incorrect_flag`, and the mine at `triggered` keeps
    `is_triggered_mine`. `has_mine` is never changed and the game status
    is left to the caller.
    """
    changed = []
    for row in grid:
        for cell in row:
            update = cell
            if cell.has_mine:
                if not cell.is_revealed:
                    update = replace(update, status=CellStatus.REVEALED)
                if (
                    triggered is not None
                    and cell.coordinate == (triggered.row, triggered.col)
                ):
                    update = replace(update, is_triggered_mine=True)
            elif cell.is_flagged:
                update = replace(update, is_incorrect_flag=True)
            if update is not cell:
                changed.append(update)
    return replace_cells(grid, changed)
