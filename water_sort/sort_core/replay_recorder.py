"""
Replay Recorder
===============

A simple wrapper to record Gymnasium environment episodes for replay.

Usage:
    from water_sort.sort_core import WaterSortEnv, ReplayRecorder

    env = WaterSortEnv()
    recorder = ReplayRecorder(env)

    obs, info = recorder.reset(seed=42, options={"level": 3})

    done = False
    while not done:
        action = your_agent(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    recorder.save("my_replay.json")

A replay stores the seed and level, so the starting board can be
regenerated and the recorded pours applied again.
"""

from __future__ import annotations

import json
import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from water_sort.sort_core.config_loader import GameConfig
from water_sort.sort_core.env_gym import WaterSortEnv

logger = logging.getLogger(__name__)


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Generate a timestamped replay filename.

    Format: {agent_name}_{YYYYMMDD_HHMMSS}_s{seed}.json

    Example:
        >>> generate_replay_filename("my_agent", seed=42)
        Path('my_agent_20260119_143052_s42.json')
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if seed is not None:
        filename = f"{agent_name}_{timestamp}_s{seed}.json"
    else:
        filename = f"{agent_name}_{timestamp}.json"

    if directory:
        return Path(directory) / filename
    return Path(filename)


def compute_config_hash(config: GameConfig) -> str:
    """Hash of every parameter that changes how a replay plays back."""
    hash_data = {
        "tubes": {
            "capacity": config.tubes.capacity,
            "buffer_tubes": config.tubes.buffer_tubes,
        },
        "difficulty": {
            "base_tubes": config.difficulty.base_tubes,
            "levels_per_extra_tube": config.difficulty.levels_per_extra_tube,
            "max_tubes": config.difficulty.max_tubes,
        },
        "pour": {"policy": config.pour.policy},
        "generator": {"ensure_solvable": config.generator.ensure_solvable},
        "palette": [c.name for c in config.palette],
    }
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


class ReplayRecorder:
    """
    Wrapper that records environment interactions for replay.

    Attributes:
        env: The wrapped environment.
        recording: Whether currently recording.
    """

    def __init__(
        self,
        env: WaterSortEnv,
        agent_name: str = "unknown",
        auto_save_path: Optional[str] = None
    ):
        """
        Initialize the replay recorder.

        Args:
            env: The environment to wrap.
            agent_name: Name of the agent (stored in replay metadata).
            auto_save_path: If provided, automatically save replay on episode end.
        """
        self.env = env
        self.agent_name = agent_name
        self.auto_save_path = auto_save_path

        self._recording = False
        self._seed: Optional[int] = None
        self._level: int = 0
        self._actions: List[Tuple[int, int]] = []
        self._moves: List[int] = []
        self._solved = False
        self._termination_reason: str = ""
        self._config_hash = compute_config_hash(env.config)

    @property
    def recording(self) -> bool:
        return self._recording

    @property
    def observation_space(self):
        """Forward observation space from wrapped env."""
        return self.env.observation_space

    @property
    def action_space(self):
        """Forward action space from wrapped env."""
        return self.env.action_space

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict] = None
    ) -> Tuple[Any, Dict]:
        """Reset the environment and start recording."""
        self._actions = []
        self._moves = []
        self._solved = False
        self._termination_reason = ""
        self._seed = seed
        self._recording = True

        obs, info = self.env.reset(seed=seed, options=options)
        self._level = int(info["level"])

        return obs, info

    def step(self, action: Union[int, np.ndarray]) -> Tuple[Any, float, bool, bool, Dict]:
        """Take a step and record it."""
        if isinstance(action, np.ndarray):
            action = int(action.item())
        else:
            action = int(action)

        obs, reward, terminated, truncated, info = self.env.step(action)

        if self._recording:
            self._actions.append(self.env.decode_action(action))
            self._moves.append(int(info.get("moves", 0)))
            if terminated or truncated:
                self._solved = bool(info.get("solved", False))
                self._termination_reason = info.get("terminated_reason", "unknown")

        if (terminated or truncated) and self.auto_save_path:
            self.save(self.auto_save_path)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """Current replay data as a dictionary."""
        return {
            "seed": self._seed,
            "level": self._level,
            "agent": self.agent_name,
            "config_hash": self._config_hash,
            "actions": [list(a) for a in self._actions],
            "moves": self._moves.copy(),
            "final_moves": self._moves[-1] if self._moves else 0,
            "total_steps": len(self._actions),
            "solved": self._solved,
            "termination_reason": self._termination_reason,
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Save the replay to a JSON file.

        Args:
            path: Path to save the replay. If None, auto-generates a timestamped name.
            overwrite: If True, overwrite existing file.
            directory: Directory for auto-generated filename (only used if path is None).

        Returns:
            Path where the replay was saved.
        """
        if path is None:
            path = generate_replay_filename(
                agent_name=self.agent_name,
                seed=self._seed,
                directory=directory
            )
        else:
            path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        replay_data = self.get_replay_data()

        with open(path, "w") as f:
            json.dump(replay_data, f, indent=2)

        logger.info(
            "Replay saved: %s (seed=%s, level=%d, steps=%d, solved=%s)",
            path, self._seed, self._level, len(self._actions), self._solved
        )
        return path

    def close(self) -> None:
        self.env.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a replay written by ReplayRecorder.save."""
    with open(path, "r") as f:
        return json.load(f)


def record_episode(
    env: WaterSortEnv,
    agent_fn,
    seed: int,
    level: Optional[int] = None,
    save_path: Optional[str] = None,
    agent_name: str = "unknown"
) -> Dict[str, Any]:
    """
    Convenience function to record a single episode.

    Args:
        env: The environment.
        agent_fn: Function that takes an observation and returns an action.
        seed: Random seed for the episode.
        level: Level to play. Uses the environment default if None.
        save_path: If provided, save replay to this path.
        agent_name: Name of the agent.

    Returns:
        Replay data dictionary.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)

    options = {"level": level} if level is not None else None
    obs, info = recorder.reset(seed=seed, options=options)

    done = False
    while not done:
        action = agent_fn(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    replay_data = recorder.get_replay_data()

    if save_path:
        recorder.save(save_path)

    return replay_data
