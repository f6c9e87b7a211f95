"""
Cell module for the Minesweeper engine.

Represents individual grid positions with their visibility status
(hidden/revealed/flagged) and content (mine/number). Cells are immutable;
every transition returns a new cell.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple


# ============================================================================
# Constants
# ============================================================================

class CellStatus(Enum):
    """Possible visual states of a cell."""

    HIDDEN = "hidden"
    REVEALED = "revealed"
    FLAGGED = "flagged"


class GameStatus(Enum):
    """Possible states of the game."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        """Check if no further moves are accepted."""
        return self in (GameStatus.WON, GameStatus.LOST)


class Coordinate(NamedTuple):
    """Zero-indexed grid position."""

    row: int
    col: int


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass(frozen=True)
class Cell:
    """
    Represents a single cell in the Minesweeper grid.

    Attributes:
        row: Row index of the cell.
        col: Column index of the cell.
        has_mine: Whether this cell contains a mine.
        adjacent_mines: Count of mines in neighboring cells (0-8).
        status: Current visual state (hidden, revealed, or flagged).
        is_triggered_mine: Set on the mine hit by the losing reveal.
        is_incorrect_flag: Set on flagged safe cells after a loss.
    """

    row: int
    col: int
    has_mine: bool = False
    adjacent_mines: int = 0
    status: CellStatus = CellStatus.HIDDEN
    is_triggered_mine: bool = False
    is_incorrect_flag: bool = False

    @property
    def coordinate(self) -> Coordinate:
        """Position of this cell."""
        return Coordinate(self.row, self.col)

    def reveal(self) -> "Cell":
        """
        Reveal this cell.

        Returns:
            A revealed copy, or this same cell if it is already revealed
            or flagged.
        """
        if self.status != CellStatus.HIDDEN:
            return self
        return replace(self, status=CellStatus.REVEALED)

    def toggle_flag(self) -> "Cell":
        """
        Toggle flag on this cell.

        Returns:
            A copy with the flag toggled, or this same cell if it is
            revealed.
        """
        if self.status == CellStatus.REVEALED:
            return self
        if self.status == CellStatus.HIDDEN:
            return replace(self, status=CellStatus.FLAGGED)
        return replace(self, status=CellStatus.HIDDEN)

    @property
    def is_hidden(self) -> bool:
        """Check if cell is hidden."""
        return self.status == CellStatus.HIDDEN

    @property
    def is_revealed(self) -> bool:
        """Check if cell is revealed."""
        return self.status == CellStatus.REVEALED

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.status == CellStatus.FLAGGED

    def to_observation(self) -> int:
        """
        Convert cell to a numeric observation value.

        Returns:
            -1: Hidden cell
            -2: Flagged cell
            0-8: Revealed cell with adjacent mine count
            9: Revealed mine (game over state)
        """
        if self.status == CellStatus.HIDDEN:
            return -1
        if self.status == CellStatus.FLAGGED:
            return -2
        if self.has_mine:
            return 9
        return self.adjacent_mines
