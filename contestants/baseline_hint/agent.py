"""
Baseline Hint Agent - Greedy pours with state memory.

This is a simple heuristic agent that reads the padded board arrays,
scores every legal pour and plays the best one.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark for teams to compare against

Strategy:
- Only consider pours marked in valid_pour_mask
- Never pour out of a finished tube
- Never move a single-color tube into an empty tube (it only swaps places)
- Prefer pours onto a matching color, and pours that finish a tube
- Avoid pours that lead back to a board already seen this episode
"""

from typing import Dict, Optional, Set, Tuple
import numpy as np

Board = Tuple[Tuple[int, ...], ...]

# Score for pours that can never help
SKIP = -1000.0
# Penalty for returning to a known board
REVISIT_PENALTY = 100.0


def _board_from_obs(obs: Dict[str, np.ndarray]) -> Board:
    tubes = obs["tubes"]
    fills = obs["fill_levels"]
    count = int(obs["tube_count"])
    return tuple(
        tuple(int(c) for c in tubes[i, :int(fills[i])])
        for i in range(count)
    )


def _top_run(tube: Tuple[int, ...]) -> int:
    if not tube:
        return 0
    run = 0
    for color in reversed(tube):
        if color != tube[-1]:
            break
        run += 1
    return run


def _after_pour(board: Board, capacity: int, src: int, dst: int) -> Tuple[Board, int]:
    """
    Board after a pour, and the number of segments moved.

    Only called for pours in valid_pour_mask. Under whole_run such a pour
    always has run <= free space, so the clamped amount equals the whole
    run and one formula covers both policies.
    """
    source = board[src]
    target = board[dst]
    moved = min(_top_run(source), capacity - len(target))
    tubes = list(board)
    tubes[src] = source[:len(source) - moved]
    tubes[dst] = target + (source[-1],) * moved
    return tuple(tubes), moved


def _key(board: Board) -> Board:
    return tuple(sorted(board))


class WaterSortAgent:
    """
    Greedy baseline agent.

    Keeps the boards seen in the current episode and resets that memory
    whenever it observes a fresh level (moves == 0).
    """

    def __init__(self, debug: bool = False):
        """
        Initialize the agent.

        Args:
            debug: If True, print decisions to stdout.
        """
        self.debug = debug
        self._seen: Set[Board] = set()

    def reset(self, seed: Optional[int] = None) -> None:
        """Forget the boards seen so far."""
        self._seen.clear()

    def _score(self, board: Board, capacity: int, src: int, dst: int) -> Tuple[float, Board]:
        source = board[src]
        target = board[dst]
        run = _top_run(source)

        if len(source) == capacity and run == capacity:
            return SKIP, board
        if not target and run == len(source):
            return SKIP, board

        after, moved = _after_pour(board, capacity, src, dst)
        score = float(moved)
        if target:
            score += 10.0
        else:
            score -= 1.0
        new_target = after[dst]
        if len(new_target) == capacity and _top_run(new_target) == capacity:
            score += 20.0
        if moved == run:
            # Reveals the next color or empties the tube
            score += 3.0
        if _key(after) in self._seen:
            score -= REVISIT_PENALTY
        return score, after

    def act(self, observation: Dict[str, np.ndarray], debug: bool = False) -> int:
        """
        Choose the highest scoring legal pour.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            Flat action index.
        """
        if int(observation["moves"]) == 0:
            self.reset()

        mask = np.asarray(observation["valid_pour_mask"], dtype=bool)
        max_tubes = mask.shape[0]
        capacity = observation["tubes"].shape[1]
        board = _board_from_obs(observation)
        self._seen.add(_key(board))

        best: Optional[Tuple[float, int, int, Board]] = None
        for src, dst in zip(*np.nonzero(mask)):
            src, dst = int(src), int(dst)
            score, after = self._score(board, capacity, src, dst)
            if best is None or score > best[0]:
                best = (score, src, dst, after)

        if best is None:
            return 0

        score, src, dst, after = best
        self._seen.add(_key(after))

        if debug or self.debug:
            print(f"[Hint Agent] Pour {src}->{dst}, score={score:.1f}, "
                  f"moves={int(observation['moves'])}")

        return src * max_tubes + dst


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> WaterSortAgent:
    """Factory function to create an agent instance."""
    return WaterSortAgent(**kwargs)
