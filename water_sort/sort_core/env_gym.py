"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the water sort game.
Reward is always 0.0 - agents must compute their own from info.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from water_sort.sort_core.config_loader import GameConfig, load_config
from water_sort.sort_core.session import GameSession
from water_sort.sort_core.state_snapshot import GameSnapshot

logger = logging.getLogger(__name__)


class WaterSortEnv(gym.Env):
    """
    Water sort puzzle as a Gymnasium environment.

    Action Space:
        Discrete(max_tubes * max_tubes)
        Action a pours from tube a // max_tubes into tube a % max_tubes.

    Observation Space:
        Dict of padded board arrays (see GameSnapshot.to_obs_dict).

    Reward:
        Always 0.0. Agents compute their own reward from the info dict.

    Termination:
        Board complete ("solved") or no legal pour left ("no_moves").
        Truncated after caps.max_moves steps ("move_cap").
    """

    metadata = {
        "render_modes": ["ansi"],
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        level: int = 1,
        render_mode: Optional[str] = None,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            level: Level played after reset unless options override it.
            render_mode: "ansi" for a text board, None for headless.
            debug: If True, log every step at INFO level.
        """
        super().__init__()

        self._config = load_config(config_path)
        self.render_mode = render_mode
        self._level = level
        self._debug = debug
        self._max_tubes = self._config.max_tubes

        self._session = GameSession(config=self._config, level=level)
        self._terminated_reason = ""
        self._steps = 0

        self.action_space = spaces.Discrete(self._max_tubes * self._max_tubes)
        self.observation_space = self._build_observation_space()

        if self._debug:
            logger.info(
                "WaterSortEnv initialized: max_tubes=%d capacity=%d policy=%s",
                self._max_tubes, self._config.capacity, self._config.pour.policy
            )

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        n = self._max_tubes
        capacity = self._config.capacity
        num_colors = self._config.num_colors

        return spaces.Dict({
            "tubes": spaces.Box(low=-1, high=num_colors - 1, shape=(n, capacity), dtype=np.int16),
            "tube_mask": spaces.MultiBinary(n),
            "fill_levels": spaces.Box(low=0, high=capacity, shape=(n,), dtype=np.int8),
            "top_run": spaces.Box(low=0, high=capacity, shape=(n,), dtype=np.int8),
            "valid_pour_mask": spaces.MultiBinary((n, n)),
            "tube_count": spaces.Box(low=0, high=n, shape=(), dtype=np.int32),
            "level": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "moves": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "selected": spaces.Box(low=-1, high=n - 1, shape=(), dtype=np.int32),
            "complete": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),
        })

    def decode_action(self, action: int) -> Tuple[int, int]:
        """Split a flat action into (from_index, to_index)."""
        return divmod(int(action), self._max_tubes)

    def encode_action(self, from_index: int, to_index: int) -> int:
        """Inverse of decode_action."""
        return from_index * self._max_tubes + to_index

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for level generation.
            options: {"level": int} selects the level to play.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        if options and "level" in options:
            self._level = int(options["level"])
        if seed is not None:
            self._session.generator.reset(seed)

        snapshot = self._session.new_game(self._level)
        self._terminated_reason = ""
        self._steps = 0

        obs = self._snapshot_to_obs(snapshot)
        info = self._get_info()
        info["accepted"] = True
        info["moved"] = 0
        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one pour.

        Args:
            action: Flat action index (see decode_action).

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())

        from_index, to_index = self.decode_action(action)
        result = self._session.pour(from_index, to_index)
        self._steps += 1

        terminated = False
        truncated = False
        if self._session.is_complete:
            terminated = True
            self._terminated_reason = "solved"
        elif not self._session.snapshot().valid_pours.any():
            terminated = True
            self._terminated_reason = "no_moves"
        elif self._steps >= self._config.caps.max_moves:
            truncated = True
            self._terminated_reason = "move_cap"

        obs = self._snapshot_to_obs(self._session.snapshot())
        reward = 0.0

        info = self._get_info()
        info["accepted"] = result.accepted
        info["reason"] = result.reason
        info["moved"] = result.moved

        if self._debug:
            logger.info(
                "Step: %d -> %d %s moved=%d moves=%d",
                from_index, to_index, result.reason, result.moved, self._session.moves
            )
            if terminated or truncated:
                logger.info("Episode end: %s", self._terminated_reason)

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        return snapshot.to_obs_dict(self._max_tubes)

    def _get_info(self) -> Dict[str, Any]:
        info = self._session.get_info()
        info["terminated_reason"] = self._terminated_reason
        info["steps"] = self._steps
        return info

    def render(self) -> Optional[str]:
        """Return a text board in "ansi" mode."""
        if self.render_mode != "ansi":
            return None
        lines = []
        for i, tube in enumerate(self._session.tubes):
            cells = " ".join(str(c) for c in tube)
            lines.append(f"{i:2d} |{cells:<{self._config.capacity * 2}}|")
        lines.append(f"moves: {self._session.moves}")
        return "\n".join(lines)

    def close(self) -> None:
        """Nothing to release; kept for the Gymnasium API."""

    @property
    def session(self) -> GameSession:
        """Access to the underlying session (for debugging/tools)."""
        return self._session

    @property
    def config(self) -> GameConfig:
        return self._config
