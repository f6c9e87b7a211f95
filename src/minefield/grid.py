"""
Grid module for the Minesweeper engine.

A grid is a tuple of row tuples of cells. Updates never patch a grid in
place; `replace_cells` builds a new grid that shares untouched rows with
the old one.
"""
from collections import deque
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Tuple

from .cell import Cell

if TYPE_CHECKING:
    from .board import BoardConfig


Grid = Tuple[Tuple[Cell, ...], ...]

# Fixed scan order: row above, same row, row below.
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


# ============================================================================
# Construction
# ============================================================================

def create_empty_grid(config: "BoardConfig") -> Grid:
    """
    Create a grid of hidden, mine-free cells.

    Args:
        config: Anything with `width` and `height` attributes.

    Returns:
        `height` rows of `width` cells whose coordinates match their
        positions.
    """
    return tuple(
        tuple(Cell(row=row, col=col) for col in range(config.width))
        for row in range(config.height)
    )


def replace_cells(grid: Grid, cells: Iterable[Cell]) -> Grid:
    """Return a new grid with each given cell stored at its own position."""
    rows = list(grid)
    touched = {}
    for cell in cells:
        row = touched.get(cell.row)
        if row is None:
            row = touched[cell.row] = list(grid[cell.row])
        row[cell.col] = cell
    for index, row in touched.items():
        rows[index] = tuple(row)
    return tuple(rows)


# ============================================================================
# Lookup
# ============================================================================

def grid_dimensions(grid: Grid) -> Tuple[int, int]:
    """Return (height, width) of the grid."""
    if not grid:
        return 0, 0
    return len(grid), len(grid[0])


def is_valid_position(grid: Grid, row: int, col: int) -> bool:
    """Check if position is within grid bounds."""
    height, width = grid_dimensions(grid)
    return 0 <= row < height and 0 <= col < width


def get_cell(grid: Grid, row: int, col: int) -> Optional[Cell]:
    """Get cell at position, or None if out of bounds."""
    if not is_valid_position(grid, row, col):
        return None
    return grid[row][col]


def get_neighbors(grid: Grid, row: int, col: int) -> List[Cell]:
    """
    Get the cells surrounding a position.

    Args:
        grid: The game grid.
        row: Row index of center cell.
        col: Column index of center cell.

    Returns:
        Up to 8 neighboring cells in `NEIGHBOR_OFFSETS` order, skipping
        positions outside the grid.
    """
    neighbors = []
    for delta_row, delta_col in NEIGHBOR_OFFSETS:
        cell = get_cell(grid, row + delta_row, col + delta_col)
        if cell is not None:
            neighbors.append(cell)
    return neighbors


def iter_cells(grid: Grid) -> Iterator[Cell]:
    """Iterate cells in row-major order."""
    for row in grid:
        yield from row


def count_mines(grid: Grid) -> int:
    """Count mined cells."""
    return sum(1 for cell in iter_cells(grid) if cell.has_mine)


# ============================================================================
# Flood Fill
# ============================================================================

def cascade_region(grid: Grid, start: Cell) -> Iterator[Cell]:
    """
    Walk the cells a cascading reveal from `start` uncovers.

    Breadth-first from `start`. Only zero-count cells are expanded; a
    neighbor is entered when it is hidden and not mined. Each cell is
    yielded once, as found in `grid`, and `start` itself is not yielded.

    Args:
        grid: The game grid, before the cascade.
        start: Zero-count cell the cascade begins at.
    """
    visited = {start.coordinate}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        if current.adjacent_mines > 0:
            continue
        for neighbor in get_neighbors(grid, current.row, current.col):
            if neighbor.coordinate in visited:
                continue
            if not neighbor.is_hidden or neighbor.has_mine:
                continue
            visited.add(neighbor.coordinate)
            yield neighbor
            queue.append(neighbor)
