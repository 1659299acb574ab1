"""
Pour Rules
==========

Pour legality, transfer amounts and win detection.

The module-level functions are the policy-free rules. PourRules binds the
configured pour policy:

- clamp: a valid pour moves as much of the top run as fits in the destination.
- whole_run: a pour is legal only when the entire top run fits.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from water_sort.sort_core.config_loader import GameConfig, get_config
from water_sort.sort_core.tube import Board, Tube


def is_valid_pour(src: Tube, dst: Tube) -> bool:
    """
    Check whether any liquid may be poured from `src` into `dst`.

    False if the source is empty or the destination is full; true if the
    destination is empty; otherwise true iff the top colors match.
    """
    if src.is_empty():
        return False
    if dst.is_full():
        return False
    if dst.is_empty():
        return True
    return src.top_color == dst.top_color


def pourable_count(src: Tube) -> int:
    """Number of segments in the top run of `src`."""
    return src.top_run()


def amount_transferred(src: Tube, dst: Tube) -> int:
    """Segments a clamped pour moves: the run, limited by destination room."""
    return min(pourable_count(src), dst.free_space)


def is_solved(tube: Tube) -> bool:
    """Empty, or full with a single color."""
    return tube.is_solved()


def is_board_complete(board: Iterable[Tube]) -> bool:
    """True iff every tube is solved."""
    return all(tube.is_solved() for tube in board)


class PourRules:
    """
    Pour rules bound to a pour policy.
    """

    def __init__(self, config: Optional[GameConfig] = None, policy: Optional[str] = None):
        """
        Initialize pour rules.

        Args:
            config: Game configuration. Uses default if None.
            policy: Overrides config.pour.policy when given.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._policy = policy if policy is not None else config.pour.policy
        if self._policy not in ("clamp", "whole_run"):
            raise ValueError(f"Unknown pour policy: '{self._policy}'")

    @property
    def policy(self) -> str:
        """Active pour policy."""
        return self._policy

    def can_pour(self, src: Tube, dst: Tube) -> bool:
        """Legality under the active policy."""
        if not is_valid_pour(src, dst):
            return False
        if self._policy == "whole_run":
            return pourable_count(src) <= dst.free_space
        return True

    def transfer_count(self, src: Tube, dst: Tube) -> int:
        """Segments a legal pour moves; 0 if the pour is illegal."""
        if not self.can_pour(src, dst):
            return 0
        return amount_transferred(src, dst)

    def apply(self, board: Board, from_index: int, to_index: int) -> int:
        """
        Pour in place from board[from_index] to board[to_index].

        Returns:
            Segments moved (0 when the pour is illegal and nothing changed).
        """
        if from_index == to_index:
            return 0
        src = board[from_index]
        dst = board[to_index]
        count = self.transfer_count(src, dst)
        if count == 0:
            return 0
        color, moved = src.pop_run(count)
        dst.push(color, moved)
        return moved

    def legal_pours(self, board: Board) -> List[Tuple[int, int]]:
        """All legal (from, to) pairs in ascending order."""
        pairs = []
        for i, src in enumerate(board):
            if src.is_empty():
                continue
            for j, dst in enumerate(board):
                if i != j and self.can_pour(src, dst):
                    pairs.append((i, j))
        return pairs
