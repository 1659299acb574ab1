"""
Sort Core - The puzzle engine.

This module provides the board model, pour rules, level generation, the
game session state machine and the Gymnasium environment wrapper.

Main exports:
- GameSession: Selection, pours, undo, hints and completion for one level
- PourRules: Pour legality and transfer amounts under the configured policy
- LevelGenerator: Shuffled starting boards from a level number
- WaterSortEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
"""

from water_sort.sort_core.config_loader import GameConfig, load_config, get_config
from water_sort.sort_core.palette import ColorType, Palette, get_palette
from water_sort.sort_core.tube import Tube, make_board
from water_sort.sort_core.rules import (
    PourRules,
    is_valid_pour,
    pourable_count,
    amount_transferred,
    is_solved,
    is_board_complete,
)
from water_sort.sort_core.history import HistoryStack
from water_sort.sort_core.hints import find_hint
from water_sort.sort_core.solver import solve, is_solvable
from water_sort.sort_core.level_generator import (
    DegenerateLevelParams,
    DifficultyScale,
    LevelGenerator,
)
from water_sort.sort_core.scoring import (
    BestScoreStore,
    InMemoryBestScores,
    JsonBestScoreStore,
    LevelProgress,
)
from water_sort.sort_core.session import GameSession, MoveResult
from water_sort.sort_core.state_snapshot import GameSnapshot
from water_sort.sort_core.env_gym import WaterSortEnv
from water_sort.sort_core.replay_recorder import (
    ReplayRecorder,
    record_episode,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "ColorType",
    "Palette",
    "get_palette",
    "Tube",
    "make_board",
    "PourRules",
    "is_valid_pour",
    "pourable_count",
    "amount_transferred",
    "is_solved",
    "is_board_complete",
    "HistoryStack",
    "find_hint",
    "solve",
    "is_solvable",
    "DegenerateLevelParams",
    "DifficultyScale",
    "LevelGenerator",
    "BestScoreStore",
    "InMemoryBestScores",
    "JsonBestScoreStore",
    "LevelProgress",
    "GameSession",
    "MoveResult",
    "GameSnapshot",
    "WaterSortEnv",
    "ReplayRecorder",
    "record_episode",
    "generate_replay_filename",
]
