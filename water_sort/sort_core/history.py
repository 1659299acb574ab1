"""
History Stack
=============

Snapshot-based undo log owned by the game session.
"""

from __future__ import annotations

from typing import List

from water_sort.sort_core.tube import Board, BoardSnapshot, snapshot_board


class HistoryStack:
    """
    LIFO stack of board snapshots taken before each pour.

    Snapshots are immutable tuples, so later board mutations never leak
    into stored history.
    """

    def __init__(self, max_depth: int = 0):
        """
        Initialize history.

        Args:
            max_depth: Maximum snapshots kept; the oldest is dropped beyond
                this. 0 means unlimited.
        """
        self._max_depth = max_depth
        self._stack: List[BoardSnapshot] = []

    def __len__(self) -> int:
        return len(self._stack)

    def __bool__(self) -> bool:
        return bool(self._stack)

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def push(self, board: Board) -> BoardSnapshot:
        """Store a deep snapshot of `board` and return it."""
        snap = snapshot_board(board)
        self._stack.append(snap)
        if self._max_depth and len(self._stack) > self._max_depth:
            del self._stack[0]
        return snap

    def pop(self) -> BoardSnapshot:
        """
        Remove and return the most recent snapshot.

        Raises:
            IndexError: If the history is empty.
        """
        if not self._stack:
            raise IndexError("pop from empty history")
        return self._stack.pop()

    def peek(self) -> BoardSnapshot:
        """Most recent snapshot without removing it."""
        if not self._stack:
            raise IndexError("peek at empty history")
        return self._stack[-1]

    def clear(self) -> None:
        self._stack.clear()
