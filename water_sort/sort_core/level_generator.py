"""
Level Generator
===============

Produces shuffled starting boards and maps level numbers to board sizes.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from water_sort.sort_core.config_loader import GameConfig, get_config
from water_sort.sort_core.palette import Palette, get_palette
from water_sort.sort_core.rules import PourRules, is_board_complete
from water_sort.sort_core.solver import is_solvable
from water_sort.sort_core.tube import Board, Tube

logger = logging.getLogger(__name__)


class DegenerateLevelParams(ValueError):
    """Level parameters that cannot produce an evenly filled board."""


class DifficultyScale:
    """
    Maps a level number to tube and color counts.

    tube_count(L) = min(base_tubes + L // levels_per_extra_tube, max_tubes)
    color_count(L) = tube_count(L) - buffer_tubes
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()
        self._base = config.difficulty.base_tubes
        self._step = config.difficulty.levels_per_extra_tube
        self._max = config.difficulty.max_tubes
        self._buffer = config.tubes.buffer_tubes

    def tube_count(self, level: int) -> int:
        return min(self._base + level // self._step, self._max)

    def color_count(self, level: int) -> int:
        return self.tube_count(level) - self._buffer


class LevelGenerator:
    """
    Random level generator.

    Fills every tube except the trailing buffer tubes with a uniformly
    shuffled multiset of colors. Solvability is only checked when
    generator.ensure_solvable is set.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize level generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._palette: Palette = get_palette(config)
        self._scale = DifficultyScale(config)
        self._capacity = config.tubes.capacity
        self._buffer = config.tubes.buffer_tubes

    @property
    def scale(self) -> DifficultyScale:
        return self._scale

    def reset(self, seed: Optional[int] = None) -> None:
        """Reseed the generator."""
        self._rng = random.Random(seed)

    def _check_params(self, tube_count: int, color_count: int) -> int:
        """Validate parameters and return segments per color."""
        if tube_count < self._buffer + 1:
            raise DegenerateLevelParams(
                f"tube_count ({tube_count}) must be at least {self._buffer + 1}"
            )
        if color_count < 1:
            raise DegenerateLevelParams(f"color_count must be >= 1, got {color_count}")
        if color_count > len(self._palette):
            raise DegenerateLevelParams(
                f"color_count ({color_count}) exceeds palette size ({len(self._palette)})"
            )
        total = (tube_count - self._buffer) * self._capacity
        if total % color_count != 0:
            raise DegenerateLevelParams(
                f"{total} segments cannot be split evenly across {color_count} colors"
            )
        return total // color_count

    def _shuffled_board(self, tube_count: int, color_count: int, per_color: int) -> Board:
        segments: List[int] = []
        for color_id in self._palette.first(color_count):
            segments.extend([color_id] * per_color)
        self._rng.shuffle(segments)

        board: Board = []
        filled = tube_count - self._buffer
        for i in range(filled):
            chunk = segments[i * self._capacity:(i + 1) * self._capacity]
            board.append(Tube(self._capacity, chunk))
        for _ in range(self._buffer):
            board.append(Tube(self._capacity))
        return board

    def generate(self, tube_count: int, color_count: int) -> Board:
        """
        Generate a shuffled board.

        Args:
            tube_count: Total tubes, including the empty buffer tubes.
            color_count: Distinct colors to use (the first N palette colors).

        Returns:
            New board.

        Raises:
            DegenerateLevelParams: If the parameters cannot fill the tubes evenly.
        """
        per_color = self._check_params(tube_count, color_count)

        gen = self._config.generator
        rules = PourRules(self._config)
        board: Board = []
        for attempt in range(1, gen.max_attempts + 1):
            board = self._shuffled_board(tube_count, color_count, per_color)
            # A shuffle that is already sorted is not a level
            if is_board_complete(board):
                continue
            if not gen.ensure_solvable:
                return board
            if is_solvable(board, rules, gen.solver_node_limit):
                logger.debug("Solvable level found on attempt %d", attempt)
                return board
        logger.warning(
            "No playable arrangement for %d tubes / %d colors after %d attempts",
            tube_count, color_count, gen.max_attempts
        )
        return board

    def generate_level(self, level: int) -> Board:
        """Generate the board for a level number using the difficulty scale."""
        return self.generate(self._scale.tube_count(level), self._scale.color_count(level))
