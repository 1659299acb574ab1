"""
Hint Search
===========

Finds the first legal pour on a board.
"""

from __future__ import annotations

from typing import Optional, Tuple

from water_sort.sort_core.rules import PourRules, is_valid_pour
from water_sort.sort_core.tube import Board


def find_hint(board: Board, rules: Optional[PourRules] = None) -> Optional[Tuple[int, int]]:
    """
    Scan (from, to) pairs in ascending order and return the first legal pour.

    Empty sources are skipped before the inner loop. With `rules` the check
    honors the pour policy; without, the policy-free legality rule is used.

    Args:
        board: Tubes to scan.
        rules: Optional policy-bound rules.

    Returns:
        (from_index, to_index), or None when no legal pour exists.
    """
    check = rules.can_pour if rules is not None else is_valid_pour
    for i, src in enumerate(board):
        if src.is_empty():
            continue
        for j, dst in enumerate(board):
            if i == j:
                continue
            if check(src, dst):
                return (i, j)
    return None
