"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


POUR_POLICIES = ("clamp", "whole_run")


@dataclass(frozen=True)
class TubeConfig:
    """Tube geometry."""
    capacity: int        # Segments per tube
    buffer_tubes: int    # Empty tubes at the end of a generated level


@dataclass(frozen=True)
class DifficultyConfig:
    """Level-to-size scaling and level select limits."""
    base_tubes: int
    levels_per_extra_tube: int
    max_tubes: int
    total_levels: int
    unlock_ahead: int


@dataclass(frozen=True)
class PourConfig:
    """Pour behavior."""
    policy: str  # "clamp" or "whole_run"


@dataclass(frozen=True)
class SelectionConfig:
    """Tube selection behavior."""
    allow_empty_source: bool


@dataclass(frozen=True)
class GeneratorConfig:
    """Level generator parameters."""
    ensure_solvable: bool
    max_attempts: int
    solver_node_limit: int


@dataclass(frozen=True)
class SessionConfig:
    """Session bookkeeping parameters."""
    combo_threshold: int
    max_undo_depth: int  # 0 = unlimited


@dataclass(frozen=True)
class CapsConfig:
    """Game limits."""
    max_moves: int


@dataclass(frozen=True)
class ColorConfig:
    """A single palette entry."""
    id: int
    name: str
    rgb: Tuple[int, int, int]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    tubes: TubeConfig
    difficulty: DifficultyConfig
    pour: PourConfig
    selection: SelectionConfig
    generator: GeneratorConfig
    session: SessionConfig
    caps: CapsConfig
    palette: Tuple[ColorConfig, ...]

    @property
    def capacity(self) -> int:
        """Segments per tube."""
        return self.tubes.capacity

    @property
    def max_tubes(self) -> int:
        """Largest tube count any level can use."""
        return self.difficulty.max_tubes

    @property
    def num_colors(self) -> int:
        """Number of colors in the palette."""
        return len(self.palette)

    def get_color(self, color_id: int) -> ColorConfig:
        """Get palette entry by ID."""
        if 0 <= color_id < len(self.palette):
            return self.palette[color_id]
        raise ValueError(f"Invalid color ID: {color_id}")


def _parse_rgb(rgb_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(rgb_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {rgb_data}")
    return (int(rgb_data[0]), int(rgb_data[1]), int(rgb_data[2]))


def _parse_color(color_data: dict) -> ColorConfig:
    """Parse a single palette entry from YAML."""
    return ColorConfig(
        id=int(color_data["id"]),
        name=str(color_data["name"]),
        rgb=_parse_rgb(color_data["rgb"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    # Validate color IDs are sequential
    for i, color in enumerate(config.palette):
        if color.id != i:
            raise ValueError(f"Color ID mismatch: expected {i}, got {color.id}")

    names = [c.name for c in config.palette]
    if len(set(names)) != len(names):
        raise ValueError(f"Palette color names must be distinct, got {names}")

    if config.tubes.capacity < 1:
        raise ValueError(f"tubes.capacity must be >= 1, got {config.tubes.capacity}")

    if config.tubes.buffer_tubes < 0:
        raise ValueError(f"tubes.buffer_tubes must be >= 0, got {config.tubes.buffer_tubes}")

    difficulty = config.difficulty
    if difficulty.base_tubes <= config.tubes.buffer_tubes:
        raise ValueError(
            f"difficulty.base_tubes ({difficulty.base_tubes}) must exceed "
            f"tubes.buffer_tubes ({config.tubes.buffer_tubes})"
        )

    if difficulty.max_tubes < difficulty.base_tubes:
        raise ValueError(
            f"difficulty.max_tubes ({difficulty.max_tubes}) must be >= "
            f"difficulty.base_tubes ({difficulty.base_tubes})"
        )

    if difficulty.levels_per_extra_tube < 1:
        raise ValueError(
            f"difficulty.levels_per_extra_tube must be >= 1, got {difficulty.levels_per_extra_tube}"
        )

    # One color per filled tube at the largest level
    needed = difficulty.max_tubes - config.tubes.buffer_tubes
    if len(config.palette) < needed:
        raise ValueError(
            f"Palette has {len(config.palette)} colors but levels with "
            f"{difficulty.max_tubes} tubes need {needed}"
        )

    if config.pour.policy not in POUR_POLICIES:
        raise ValueError(f"pour.policy must be one of {POUR_POLICIES}, got '{config.pour.policy}'")

    if config.generator.max_attempts < 1:
        raise ValueError(f"generator.max_attempts must be >= 1, got {config.generator.max_attempts}")

    if config.session.max_undo_depth < 0:
        raise ValueError(f"session.max_undo_depth must be >= 0, got {config.session.max_undo_depth}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    tubes_data = raw["tubes"]
    tubes = TubeConfig(
        capacity=int(tubes_data.get("capacity", 4)),
        buffer_tubes=int(tubes_data.get("buffer_tubes", 2))
    )

    difficulty_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        base_tubes=int(difficulty_data["base_tubes"]),
        levels_per_extra_tube=int(difficulty_data.get("levels_per_extra_tube", 2)),
        max_tubes=int(difficulty_data["max_tubes"]),
        total_levels=int(difficulty_data.get("total_levels", 30)),
        unlock_ahead=int(difficulty_data.get("unlock_ahead", 2))
    )

    # Parse remaining sections (all optional)
    pour_data = raw.get("pour", {})
    pour = PourConfig(
        policy=str(pour_data.get("policy", "clamp"))
    )

    selection_data = raw.get("selection", {})
    selection = SelectionConfig(
        allow_empty_source=bool(selection_data.get("allow_empty_source", False))
    )

    generator_data = raw.get("generator", {})
    generator = GeneratorConfig(
        ensure_solvable=bool(generator_data.get("ensure_solvable", False)),
        max_attempts=int(generator_data.get("max_attempts", 50)),
        solver_node_limit=int(generator_data.get("solver_node_limit", 200000))
    )

    session_data = raw.get("session", {})
    session = SessionConfig(
        combo_threshold=int(session_data.get("combo_threshold", 3)),
        max_undo_depth=int(session_data.get("max_undo_depth", 0))
    )

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_moves=int(caps_data.get("max_moves", 500))
    )

    palette = tuple(_parse_color(c) for c in raw["palette"])

    config = GameConfig(
        tubes=tubes,
        difficulty=difficulty,
        pour=pour,
        selection=selection,
        generator=generator,
        session=session,
        caps=caps,
        palette=palette
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
