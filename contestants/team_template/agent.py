"""
Team Template Agent
===================

Your agent must provide one of:
1. A `WaterSortAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are flat integers: pour from tube a // max_tubes into
tube a % max_tubes, where max_tubes = obs["valid_pour_mask"].shape[0].

See WaterSortEnv and GameSnapshot.to_obs_dict for the observation layout.
"""

from __future__ import annotations

from typing import Dict, Optional
import numpy as np


def _random_valid_action(obs: Dict[str, np.ndarray], rng: np.random.Generator) -> int:
    mask = np.asarray(obs["valid_pour_mask"], dtype=bool)
    flat = np.flatnonzero(mask.ravel())
    if flat.size == 0:
        return 0
    return int(rng.choice(flat))


class WaterSortAgent:
    """
    Your water sort agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng(seed)

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state.

        Returns:
            action: Flat pour index.
        """
        # Replace with your strategy
        return _random_valid_action(obs, self.rng)

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return _random_valid_action(obs, np.random.default_rng())
