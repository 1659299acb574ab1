"""
Solver
======

Bounded depth-first search for a pour sequence that completes a board.

Used by the level generator to optionally reject unsolvable shuffles.
The search is exhaustive within `node_limit`; hitting the limit reports
the board as unsolved.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from water_sort.sort_core.rules import PourRules, is_board_complete
from water_sort.sort_core.tube import Board, BoardSnapshot, restore_board, snapshot_board

logger = logging.getLogger(__name__)

Move = Tuple[int, int]


def _canonical(snapshot: BoardSnapshot) -> BoardSnapshot:
    """Tube order does not matter for solvability."""
    return tuple(sorted(snapshot))


def _candidate_moves(board: Board, rules: PourRules) -> List[Move]:
    """Legal pours minus the ones that can never help."""
    moves: List[Move] = []
    for i, src in enumerate(board):
        if src.is_empty() or src.is_solved():
            continue
        tried_empty = False
        for j, dst in enumerate(board):
            if i == j or not rules.can_pour(src, dst):
                continue
            if dst.is_empty():
                # All empty tubes are equivalent, and moving a uniform
                # tube into one only swaps positions.
                if tried_empty or src.is_uniform():
                    continue
                tried_empty = True
            moves.append((i, j))
    return moves


def solve(
    board: Board,
    rules: PourRules,
    node_limit: int = 200000
) -> Optional[List[Move]]:
    """
    Search for a pour sequence that completes `board`.

    The board itself is not modified.

    Args:
        board: Starting arrangement.
        rules: Pour rules (policy decides how much each pour moves).
        node_limit: Maximum number of states to expand.

    Returns:
        List of (from, to) pours, [] if already complete, or None when no
        solution was found within the limit.
    """
    if not board:
        return []
    capacity = board[0].capacity
    start = snapshot_board(board)
    if is_board_complete(board):
        return []

    visited: Set[BoardSnapshot] = {_canonical(start)}
    stack: List[Tuple[BoardSnapshot, List[Move]]] = [(start, [])]
    expanded = 0

    while stack:
        snapshot, path = stack.pop()
        expanded += 1
        if expanded > node_limit:
            logger.debug("Solver gave up after %d states", node_limit)
            return None

        current = restore_board(snapshot, capacity)
        # Reversed so the first candidate is explored first
        for move in reversed(_candidate_moves(current, rules)):
            child = restore_board(snapshot, capacity)
            rules.apply(child, move[0], move[1])
            child_snap = snapshot_board(child)
            key = _canonical(child_snap)
            if key in visited:
                continue
            visited.add(key)
            if is_board_complete(child):
                logger.debug("Solved in %d pours after %d states", len(path) + 1, expanded)
                return path + [move]
            stack.append((child_snap, path + [move]))

    return None


def is_solvable(board: Board, rules: PourRules, node_limit: int = 200000) -> bool:
    """True if `solve` finds a solution within `node_limit`."""
    return solve(board, rules, node_limit) is not None
