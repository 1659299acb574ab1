"""
State Snapshot
==============

Immutable view of a session, packable into fixed-size numpy arrays for
Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING
import numpy as np

from water_sort.sort_core.config_loader import GameConfig, get_config
from water_sort.sort_core.rules import PourRules
from water_sort.sort_core.tube import BoardSnapshot, restore_board

if TYPE_CHECKING:
    from water_sort.sort_core.session import GameSession

# Padding value for empty slots and missing tubes
EMPTY_SLOT = -1


@dataclass(frozen=True, eq=False)
class GameSnapshot:
    """
    Complete session state at one point in time.

    Tubes are bottom-to-top tuples of color IDs.
    """
    tubes: BoardSnapshot
    capacity: int
    level: int
    moves: int
    selected: Optional[int]
    complete: bool
    combo: int
    valid_pours: np.ndarray  # (tube_count, tube_count) bool

    @property
    def tube_count(self) -> int:
        return len(self.tubes)

    def to_obs_dict(self, max_tubes: int) -> Dict[str, np.ndarray]:
        """
        Convert to Gymnasium observation dictionary.

        Arrays are padded to `max_tubes` rows; `tube_mask` marks real tubes.
        """
        n = self.tube_count
        if n > max_tubes:
            raise ValueError(f"Board has {n} tubes, observation holds {max_tubes}")

        tubes = np.full((max_tubes, self.capacity), EMPTY_SLOT, dtype=np.int16)
        fill_levels = np.zeros(max_tubes, dtype=np.int8)
        top_run = np.zeros(max_tubes, dtype=np.int8)
        tube_mask = np.zeros(max_tubes, dtype=bool)
        valid = np.zeros((max_tubes, max_tubes), dtype=bool)

        for i, tube in enumerate(self.tubes):
            tube_mask[i] = True
            fill_levels[i] = len(tube)
            if tube:
                tubes[i, :len(tube)] = tube
                run = 0
                for color in reversed(tube):
                    if color != tube[-1]:
                        break
                    run += 1
                top_run[i] = run
        valid[:n, :n] = self.valid_pours

        return {
            "tubes": tubes,
            "tube_mask": tube_mask,
            "fill_levels": fill_levels,
            "top_run": top_run,
            "valid_pour_mask": valid,
            "tube_count": np.array(n, dtype=np.int32),
            "level": np.array(self.level, dtype=np.int32),
            "moves": np.array(self.moves, dtype=np.int32),
            "selected": np.array(
                self.selected if self.selected is not None else EMPTY_SLOT, dtype=np.int32
            ),
            "complete": np.array(self.complete, dtype=np.int8),
        }


class SnapshotBuilder:
    """Builds GameSnapshot objects from a session."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._config = config

    def build(self, session: "GameSession") -> GameSnapshot:
        """Snapshot the session's current state."""
        tubes = session.tubes
        board = restore_board(tubes, session.capacity)
        rules: PourRules = session.rules
        n = len(board)
        valid = np.zeros((n, n), dtype=bool)
        for i, j in rules.legal_pours(board):
            valid[i, j] = True

        return GameSnapshot(
            tubes=tubes,
            capacity=session.capacity,
            level=session.level,
            moves=session.moves,
            selected=session.selected,
            complete=session.is_complete,
            combo=session.combo,
            valid_pours=valid
        )
