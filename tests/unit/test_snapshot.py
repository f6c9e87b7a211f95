"""
Unit tests for board state snapshots.
"""
import json
import logging
import random

import pytest
from minefield import (
    BoardConfig,
    SnapshotError,
    dumps,
    loads,
    new_game,
    reveal,
    state_from_dict,
    state_to_dict,
    toggle_flag,
)
from minefield.snapshot import SNAPSHOT_VERSION


@pytest.fixture
def played_state(state_factory):
    """A lost game with a wrong flag, exercising every cell field."""
    state = toggle_flag(state_factory(["*..", "...", "..*"]), (1, 0))
    return reveal(state, (0, 0))


class TestSerialization:
    """Test converting states to plain data."""

    def test_dict_has_version_and_timestamp(self, played_state) -> None:
        """Snapshots are versioned and stamped."""
        data = state_to_dict(played_state)
        assert data["version"] == SNAPSHOT_VERSION
        assert isinstance(data["timestamp"], float)
        assert data["state"]["game_status"] == "lost"

    def test_optional_markers_only_when_set(self, played_state) -> None:
        """Loss markers are written only for the cells carrying them."""
        grid = state_to_dict(played_state)["state"]["grid"]
        assert grid[0][0]["is_triggered_mine"] is True
        assert grid[1][0]["is_incorrect_flag"] is True
        assert "is_triggered_mine" not in grid[2][2]

    def test_restore_equals_original(self, played_state) -> None:
        """JSON text restores an equal state."""
        assert loads(dumps(played_state)) == played_state

    def test_restored_game_continues(self, rng: random.Random) -> None:
        """A restored in-progress game accepts further moves."""
        state = reveal(new_game(BoardConfig(9, 9, 10)), (4, 4), rng=rng)
        restored = loads(dumps(state))
        assert restored.is_first_click is False
        hidden = next(
            cell for row in restored.grid for cell in row
            if cell.is_hidden and not cell.has_mine
        )
        after = reveal(restored, hidden.coordinate)
        assert after.revealed_count > restored.revealed_count


class TestRestoreValidation:
    """Test rejection of bad snapshot data."""

    def test_version_mismatch(
        self, played_state, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Other versions are rejected with a warning."""
        data = state_to_dict(played_state)
        data["version"] = "0.9"
        with caplog.at_level(logging.WARNING, logger="minefield.snapshot"):
            with pytest.raises(SnapshotError, match="version"):
                state_from_dict(data)
        assert "version mismatch" in caplog.text

    def test_invalid_json(self) -> None:
        """Non-JSON text is rejected."""
        with pytest.raises(SnapshotError, match="not valid JSON"):
            loads("{not json")

    def test_missing_field(self, played_state) -> None:
        """Missing fields are reported by name."""
        data = state_to_dict(played_state)
        del data["state"]["flag_count"]
        with pytest.raises(SnapshotError, match="flag_count"):
            state_from_dict(data)

    def test_non_rectangular_grid(self, played_state) -> None:
        """Ragged grids are rejected."""
        data = state_to_dict(played_state)
        data["state"]["grid"][1].pop()
        with pytest.raises(SnapshotError, match="rectangular"):
            state_from_dict(data)

    def test_wrong_cell_coordinates(self, played_state) -> None:
        """Cells must sit at their own coordinates."""
        data = state_to_dict(played_state)
        data["state"]["grid"][0][1]["col"] = 2
        with pytest.raises(SnapshotError, match="wrong coordinates"):
            state_from_dict(data)

    def test_unknown_status(self, played_state) -> None:
        """Unknown enum values are rejected."""
        data = state_to_dict(played_state)
        data["state"]["grid"][0][1]["status"] = "exploded"
        with pytest.raises(SnapshotError, match="Unknown cell status"):
            state_from_dict(data)

    def test_bool_is_not_a_count(self, played_state) -> None:
        """Booleans are not accepted where counts are expected."""
        data = state_to_dict(played_state)
        data["state"]["move_count"] = True
        with pytest.raises(SnapshotError, match="move_count"):
            state_from_dict(data)

    def test_invalid_config(self, played_state) -> None:
        """Configuration bounds are re-checked."""
        data = json.loads(dumps(played_state))
        data["state"]["config"]["width"] = 0
        with pytest.raises(SnapshotError, match="Invalid configuration"):
            state_from_dict(data)

    def test_marker_must_be_bool(self, played_state) -> None:
        """A string marker is rejected instead of read as truthy."""
        data = state_to_dict(played_state)
        data["state"]["grid"][0][0]["is_triggered_mine"] = "false"
        with pytest.raises(SnapshotError, match="is_triggered_mine"):
            state_from_dict(data)

    def test_absent_marker_reads_false(self, played_state) -> None:
        """Markers are optional and default to unset."""
        data = state_to_dict(played_state)
        del data["state"]["grid"][1][0]["is_incorrect_flag"]
        restored = state_from_dict(data)
        assert restored.grid[1][0].is_incorrect_flag is False
        assert restored.grid[1][0].is_flagged

    @pytest.mark.parametrize(
        "field", ["revealed_count", "flag_count", "move_count", "elapsed_time"]
    )
    def test_negative_counter(self, played_state, field: str) -> None:
        """Counters cannot be negative."""
        data = state_to_dict(played_state)
        data["state"][field] = -5
        with pytest.raises(SnapshotError, match=field):
            state_from_dict(data)

    def test_revealed_count_must_match_grid(self, played_state) -> None:
        """revealed_count is checked against the revealed cells."""
        data = state_to_dict(played_state)
        data["state"]["revealed_count"] = 100
        with pytest.raises(SnapshotError, match="revealed_count"):
            state_from_dict(data)

    def test_lost_game_counts_losing_reveal(self, played_state) -> None:
        """A lost game without the losing reveal counted is rejected."""
        data = state_to_dict(played_state)
        data["state"]["revealed_count"] = 0
        with pytest.raises(SnapshotError, match="revealed_count"):
            state_from_dict(data)

    def test_flag_count_must_match_grid(self, played_state) -> None:
        """flag_count is checked against the flagged cells."""
        data = state_to_dict(played_state)
        data["state"]["flag_count"] = 3
        with pytest.raises(SnapshotError, match="flag_count"):
            state_from_dict(data)

    def test_lost_game_keeps_flags_on_disclosed_mines(
        self, state_factory
    ) -> None:
        """A flag on a mine shown by the loss still counts."""
        state = toggle_flag(state_factory(["*..", "...", "..*"]), (2, 2))
        state = reveal(state, (0, 0))
        assert state.flag_count == 1
        assert not state.grid[2][2].is_flagged
        assert loads(dumps(state)) == state

    def test_in_progress_flag_count_is_exact(self, state_factory) -> None:
        """Outside a loss, flag_count must equal the flags on the grid."""
        state = state_factory(["*F.", "...", "..*"])
        data = state_to_dict(state)
        assert state_from_dict(data) == state
        data["state"]["flag_count"] = 2
        with pytest.raises(SnapshotError, match="flag_count"):
            state_from_dict(data)
