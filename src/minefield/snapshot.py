"""
Snapshot module for the Minesweeper engine.

Converts board states to plain dictionaries / JSON and back, so that a
persistence layer can store a game and restore it later.
"""
import json
import logging
import time
from typing import Any, Dict, List

from .board import BoardConfig, BoardState
from .cell import Cell, CellStatus, GameStatus
from .grid import Grid, iter_cells

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"


class SnapshotError(ValueError):
    """Raised when snapshot data cannot be restored."""


# ============================================================================
# Serialization
# ============================================================================

def _cell_to_dict(cell: Cell) -> Dict[str, Any]:
    data = {
        "row": cell.row,
        "col": cell.col,
        "has_mine": cell.has_mine,
        "adjacent_mines": cell.adjacent_mines,
        "status": cell.status.value,
    }
    if cell.is_triggered_mine:
        data["is_triggered_mine"] = True
    if cell.is_incorrect_flag:
        data["is_incorrect_flag"] = True
    return data


def state_to_dict(state: BoardState) -> Dict[str, Any]:
    """
    Convert a board state to a JSON-compatible dictionary.

    Returns:
        Dict with `version`, `timestamp` (seconds since epoch) and
        `state` keys.
    """
    return {
        "version": SNAPSHOT_VERSION,
        "timestamp": time.time(),
        "state": {
            "config": {
                "width": state.config.width,
                "height": state.config.height,
                "mine_count": state.config.mine_count,
            },
            "grid": [[_cell_to_dict(cell) for cell in row] for row in state.grid],
            "game_status": state.game_status.value,
            "is_first_click": state.is_first_click,
            "revealed_count": state.revealed_count,
            "flag_count": state.flag_count,
            "move_count": state.move_count,
            "elapsed_time": state.elapsed_time,
        },
    }


def dumps(state: BoardState) -> str:
    """Serialize a board state to a JSON string."""
    return json.dumps(state_to_dict(state))


# ============================================================================
# Restoration
# ============================================================================

def _require(data: Dict[str, Any], key: str, kind: type) -> Any:
    """Fetch `key` from `data`, checking its type."""
    if not isinstance(data, dict) or key not in data:
        raise SnapshotError(f"Missing field '{key}'")
    value = data[key]
    # bool is an int subclass; keep counts and flags apart
    if kind is int and isinstance(value, bool):
        raise SnapshotError(f"Field '{key}' must be int")
    if not isinstance(value, kind):
        raise SnapshotError(f"Field '{key}' must be {kind.__name__}")
    return value


def _optional_flag(data: Dict[str, Any], key: str) -> bool:
    """Marker fields are only written when set; absent means False."""
    if key not in data:
        return False
    return _require(data, key, bool)


def _cell_from_dict(data: Dict[str, Any], row: int, col: int) -> Cell:
    if _require(data, "row", int) != row or _require(data, "col", int) != col:
        raise SnapshotError(f"Cell at ({row}, {col}) has wrong coordinates")
    try:
        status = CellStatus(_require(data, "status", str))
    except ValueError as exc:
        raise SnapshotError(f"Unknown cell status at ({row}, {col})") from exc
    adjacent = _require(data, "adjacent_mines", int)
    if not 0 <= adjacent <= 8:
        raise SnapshotError(f"Adjacent count out of range at ({row}, {col})")
    return Cell(
        row=row,
        col=col,
        has_mine=_require(data, "has_mine", bool),
        adjacent_mines=adjacent,
        status=status,
        is_triggered_mine=_optional_flag(data, "is_triggered_mine"),
        is_incorrect_flag=_optional_flag(data, "is_incorrect_flag"),
    )


def _grid_from_list(rows: List[Any], config: BoardConfig) -> Grid:
    if len(rows) != config.height:
        raise SnapshotError("Grid height does not match configuration")
    grid = []
    for row_index, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != config.width:
            raise SnapshotError("Grid is not rectangular")
        grid.append(tuple(
            _cell_from_dict(cell, row_index, col_index)
            for col_index, cell in enumerate(row)
        ))
    return tuple(grid)


def _check_counters(state: BoardState) -> None:
    """Running totals must agree with the restored grid."""
    for name in ("revealed_count", "flag_count", "move_count", "elapsed_time"):
        if getattr(state, name) < 0:
            raise SnapshotError(f"Field '{name}' cannot be negative")

    cells = list(iter_cells(state.grid))
    # The losing reveal counts the mine it hit
    expected_revealed = sum(
        1 for cell in cells if cell.is_revealed and not cell.has_mine
    ) + (1 if state.game_status == GameStatus.LOST else 0)
    if state.revealed_count != expected_revealed:
        raise SnapshotError(
            f"revealed_count {state.revealed_count} does not match "
            f"grid ({expected_revealed})"
        )

    flagged = sum(1 for cell in cells if cell.is_flagged)
    # A loss discloses flagged mines, so their flags may no longer show
    disclosed = 0
    if state.game_status == GameStatus.LOST:
        disclosed = sum(
            1 for cell in cells
            if cell.has_mine and cell.is_revealed
            and not cell.is_triggered_mine
        )
    if not flagged <= state.flag_count <= flagged + disclosed:
        raise SnapshotError(
            f"flag_count {state.flag_count} does not match grid ({flagged})"
        )


def state_from_dict(data: Dict[str, Any]) -> BoardState:
    """
    Restore a board state from `state_to_dict` output.

    Raises:
        SnapshotError: Data is malformed or from another version.
    """
    version = _require(data, "version", str)
    if version != SNAPSHOT_VERSION:
        logger.warning(
            "Snapshot version mismatch: expected %s, got %s",
            SNAPSHOT_VERSION, version,
        )
        raise SnapshotError(f"Unsupported snapshot version {version}")

    body = _require(data, "state", dict)
    raw_config = _require(body, "config", dict)
    try:
        config = BoardConfig(
            width=_require(raw_config, "width", int),
            height=_require(raw_config, "height", int),
            mine_count=_require(raw_config, "mine_count", int),
        )
    except ValueError as exc:
        raise SnapshotError(f"Invalid configuration: {exc}") from exc

    try:
        game_status = GameStatus(_require(body, "game_status", str))
    except ValueError as exc:
        raise SnapshotError("Unknown game status") from exc

    state = BoardState(
        config=config,
        grid=_grid_from_list(_require(body, "grid", list), config),
        game_status=game_status,
        is_first_click=_require(body, "is_first_click", bool),
        revealed_count=_require(body, "revealed_count", int),
        flag_count=_require(body, "flag_count", int),
        move_count=_require(body, "move_count", int),
        elapsed_time=_require(body, "elapsed_time", int),
    )
    _check_counters(state)
    return state


def loads(text: str) -> BoardState:
    """
    Restore a board state from a JSON string.

    Raises:
        SnapshotError: Text is not valid JSON or not a valid snapshot.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Snapshot is not valid JSON: %s", exc)
        raise SnapshotError("Snapshot is not valid JSON") from exc
    return state_from_dict(data)
