"""
Tube
====

The core board entity: an ordered stack of color segments with fixed capacity.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

# A color is any hashable identifier; generated levels use palette indices.
Color = Any

# Immutable deep copy of a board, bottom-to-top per tube
BoardSnapshot = Tuple[Tuple[Color, ...], ...]


class Tube:
    """
    Fixed-capacity stack of color segments, stored bottom-to-top.

    Invariant: 0 <= len(tube) <= capacity.
    """

    __slots__ = ("_segments", "_capacity")

    def __init__(self, capacity: int, segments: Optional[Iterable[Color]] = None):
        """
        Initialize tube.

        Args:
            capacity: Maximum number of segments.
            segments: Initial contents, bottom first.

        Raises:
            ValueError: If segments exceed capacity.
        """
        if capacity < 1:
            raise ValueError(f"Tube capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._segments: List[Color] = list(segments) if segments is not None else []
        if len(self._segments) > capacity:
            raise ValueError(
                f"Tube holds {len(self._segments)} segments but capacity is {capacity}"
            )

    # ---------- read state ---------- #

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def segments(self) -> Tuple[Color, ...]:
        """Contents bottom-to-top (read-only copy)."""
        return tuple(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self):
        return iter(self._segments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tube):
            return NotImplemented
        return self._capacity == other._capacity and self._segments == other._segments

    def __repr__(self) -> str:
        return f"Tube({self._segments!r}, capacity={self._capacity})"

    @property
    def top_color(self) -> Optional[Color]:
        """Color of the topmost segment, None when empty."""
        return self._segments[-1] if self._segments else None

    @property
    def free_space(self) -> int:
        return self._capacity - len(self._segments)

    def is_empty(self) -> bool:
        return not self._segments

    def is_full(self) -> bool:
        return len(self._segments) == self._capacity

    def is_uniform(self) -> bool:
        """True if non-empty and every segment has the same color."""
        if not self._segments:
            return False
        first = self._segments[0]
        return all(c == first for c in self._segments)

    def is_solved(self) -> bool:
        """Empty, or full with all segments equal."""
        return self.is_empty() or (self.is_full() and self.is_uniform())

    def top_run(self) -> int:
        """Length of the consecutive same-color run at the top (0 if empty)."""
        if not self._segments:
            return 0
        color = self._segments[-1]
        size = 0
        for segment in reversed(self._segments):
            if segment != color:
                break
            size += 1
        return size

    # ---------- write state ---------- #

    def push(self, color: Color, count: int = 1) -> None:
        """
        Append `count` segments of `color` on top.

        Raises:
            ValueError: If the tube lacks room.
        """
        if count > self.free_space:
            raise ValueError(
                f"Cannot push {count} segments into tube with {self.free_space} free"
            )
        self._segments.extend([color] * count)

    def pop_run(self, count: Optional[int] = None) -> Tuple[Optional[Color], int]:
        """
        Remove up to `count` segments of the top run.

        Args:
            count: Segments to remove. Defaults to the whole top run.

        Returns:
            (color, removed) tuple; (None, 0) for an empty tube.
        """
        run = self.top_run()
        if run == 0:
            return None, 0
        if count is None or count > run:
            count = run
        color = self._segments[-1]
        del self._segments[len(self._segments) - count:]
        return color, count

    def copy(self) -> "Tube":
        return Tube(self._capacity, self._segments)

    def as_tuple(self) -> Tuple[Color, ...]:
        return tuple(self._segments)


Board = List[Tube]


def make_board(tubes: Sequence[Sequence[Color]], capacity: int) -> Board:
    """Build a board from nested sequences (bottom-to-top)."""
    return [Tube(capacity, t) for t in tubes]


def snapshot_board(board: Board) -> BoardSnapshot:
    """Deep, immutable copy of a board."""
    return tuple(t.as_tuple() for t in board)


def restore_board(snapshot: BoardSnapshot, capacity: int) -> Board:
    """Rebuild a mutable board from a snapshot."""
    return [Tube(capacity, t) for t in snapshot]


def color_counts(board: Board) -> Dict[Color, int]:
    """Total segment count per color across the board."""
    counts: Counter = Counter()
    for tube in board:
        counts.update(tube)
    return dict(counts)
