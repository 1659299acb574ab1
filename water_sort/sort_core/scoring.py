"""
Best Scores
===========

Persistence boundary for per-level best move counts, plus the level
select bookkeeping built on top of it.

The engine treats the store as an opaque key/value map.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from water_sort.sort_core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


class BestScoreStore(Protocol):
    """Level number -> fewest moves ever used to complete it."""

    def load_best_score(self, level: int) -> Optional[int]:
        """Stored best for `level`, or None."""

    def save_best_score(self, level: int, moves: int) -> None:
        """Store `moves` as the best for `level`."""

    def clear(self) -> None:
        """Forget every stored best."""


class InMemoryBestScores:
    """Dict-backed store, used by default and in tests."""

    def __init__(self, scores: Optional[Dict[int, int]] = None):
        self._scores: Dict[int, int] = dict(scores or {})

    def load_best_score(self, level: int) -> Optional[int]:
        return self._scores.get(level)

    def save_best_score(self, level: int, moves: int) -> None:
        self._scores[level] = moves

    def clear(self) -> None:
        self._scores.clear()

    def all_scores(self) -> Dict[int, int]:
        return dict(self._scores)


class JsonBestScoreStore:
    """
    Store backed by a single JSON object mapping level to moves.

    The file is read on construction and rewritten on every save.
    A missing file is an empty map.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._scores: Dict[int, int] = {}
        if self._path.exists():
            with open(self._path, "r") as f:
                raw = json.load(f)
            self._scores = {int(k): int(v) for k, v in raw.items()}
            logger.debug("Loaded %d best scores from %s", len(self._scores), self._path)

    @property
    def path(self) -> Path:
        return self._path

    def load_best_score(self, level: int) -> Optional[int]:
        return self._scores.get(level)

    def save_best_score(self, level: int, moves: int) -> None:
        self._scores[level] = moves
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            json.dump({str(k): v for k, v in sorted(self._scores.items())}, f, indent=2)

    def clear(self) -> None:
        """Drop every best and delete the backing file."""
        self._scores.clear()
        if self._path.exists():
            self._path.unlink()
        logger.info("Best scores cleared: %s", self._path)

    def all_scores(self) -> Dict[int, int]:
        return dict(self._scores)


def record_completion(store: BestScoreStore, level: int, moves: int) -> bool:
    """
    Save `moves` for `level` if there is no previous best or it is lower.

    Returns:
        True if the store was written.
    """
    previous = store.load_best_score(level)
    if previous is not None and moves >= previous:
        return False
    store.save_best_score(level, moves)
    logger.info("New best for level %d: %d moves (was %s)", level, moves, previous)
    return True


class LevelProgress:
    """
    Level select state derived from the best-score store.

    A level is unlocked when it is at most `unlock_ahead` beyond the
    current level; completed levels are those with a stored best.
    """

    def __init__(self, store: BestScoreStore, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._store = store
        self._total = config.difficulty.total_levels
        self._ahead = config.difficulty.unlock_ahead

    @property
    def total_levels(self) -> int:
        return self._total

    def is_unlocked(self, level: int, current_level: int) -> bool:
        return 1 <= level <= min(current_level + self._ahead, self._total)

    def best_for(self, level: int) -> Optional[int]:
        return self._store.load_best_score(level)

    def completed_levels(self) -> List[int]:
        return [
            level for level in range(1, self._total + 1)
            if self._store.load_best_score(level) is not None
        ]

    def best_overall(self) -> Optional[int]:
        """Fewest moves across all completed levels."""
        bests = [self._store.load_best_score(level) for level in self.completed_levels()]
        return min(bests) if bests else None

    def reset_scores(self) -> None:
        """Clear every stored best; completed levels become empty."""
        self._store.clear()
