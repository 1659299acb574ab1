"""
Game Session
============

Main game orchestrator: owns the board, selection, move counter, undo
history and completion state, and turns tube clicks into pours.

States:
    Selecting    - no tube held
    Selected(i)  - tube i held, the next click pours into the clicked tube
    Complete     - terminal, every tube is solved

Rejected operations never change the board; they are reported through
MoveResult.reason.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from water_sort.sort_core.config_loader import GameConfig, get_config
from water_sort.sort_core.events import (
    COMBO,
    HINT,
    LEVEL_COMPLETE,
    NEW_GAME,
    POUR_FINISHED,
    POUR_LANDED,
    POUR_STARTED,
    UNDO,
    SessionEvent,
    SessionListener,
)
from water_sort.sort_core.hints import find_hint
from water_sort.sort_core.history import HistoryStack
from water_sort.sort_core.level_generator import LevelGenerator
from water_sort.sort_core.rules import PourRules, is_board_complete
from water_sort.sort_core.scoring import BestScoreStore, InMemoryBestScores, record_completion
from water_sort.sort_core.state_snapshot import GameSnapshot, SnapshotBuilder
from water_sort.sort_core.tube import (
    Board,
    BoardSnapshot,
    Color,
    color_counts,
    make_board,
    restore_board,
    snapshot_board,
)

logger = logging.getLogger(__name__)

# Rejection reasons
REASON_BUSY = "busy"
REASON_COMPLETE = "complete"
REASON_OUT_OF_RANGE = "out_of_range"
REASON_EMPTY_SOURCE = "empty_source"
REASON_INVALID_POUR = "invalid_pour"
REASON_EMPTY_HISTORY = "empty_history"

# Acceptance reasons
REASON_SELECTED = "selected"
REASON_DESELECTED = "deselected"
REASON_POURED = "poured"
REASON_UNDONE = "undone"


@dataclass
class MoveResult:
    """Outcome of a session operation."""
    accepted: bool
    reason: str
    from_index: Optional[int] = None
    to_index: Optional[int] = None
    moved: int = 0
    completed: bool = False

    @staticmethod
    def rejected(
        reason: str,
        from_index: Optional[int] = None,
        to_index: Optional[int] = None
    ) -> "MoveResult":
        return MoveResult(False, reason, from_index, to_index)

    def __bool__(self) -> bool:
        return self.accepted


class GameSession:
    """
    One level attempt.

    The session exclusively owns its board and history; callers read state
    through properties that return copies.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        level: int = 1,
        seed: Optional[int] = None,
        best_scores: Optional[BestScoreStore] = None,
        listener: Optional[SessionListener] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize session and generate the first board.

        Args:
            config: Game configuration. Uses default if None.
            level: Starting level number.
            seed: Random seed for level generation.
            best_scores: Persistence for best move counts. In-memory if None.
            listener: Optional callback receiving presentation cues.
            clock: Time source in seconds. Defaults to time.monotonic.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._clock = clock if clock is not None else time.monotonic
        self._best_scores: BestScoreStore = (
            best_scores if best_scores is not None else InMemoryBestScores()
        )
        self._listeners: List[SessionListener] = []
        if listener is not None:
            self._listeners.append(listener)

        # Subsystems
        self._rules = PourRules(config)
        self._generator = LevelGenerator(config, seed)
        self._history = HistoryStack(config.session.max_undo_depth)
        self._snapshot_builder = SnapshotBuilder(config)

        # Session state
        self._capacity: int = config.tubes.capacity
        self._board: Board = []
        self._level: int = level
        self._moves: int = 0
        self._selected: Optional[int] = None
        self._complete: bool = False
        self._elapsed_time: Optional[float] = None
        self._start_time: float = 0.0
        self._combo: int = 0
        self._hint: Optional[Tuple[int, int]] = None
        self._busy: bool = False

        self.new_game(level)

    # ------------------------------------------------------------------
    # Outbound state
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def rules(self) -> PourRules:
        return self._rules

    @property
    def generator(self) -> LevelGenerator:
        return self._generator

    @property
    def best_scores(self) -> BestScoreStore:
        return self._best_scores

    @property
    def tubes(self) -> BoardSnapshot:
        """Current board as nested tuples, bottom-to-top."""
        return snapshot_board(self._board)

    @property
    def tube_count(self) -> int:
        return len(self._board)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def level(self) -> int:
        return self._level

    @property
    def moves(self) -> int:
        """Pours plus undos since the level started."""
        return self._moves

    @property
    def selected(self) -> Optional[int]:
        """Index of the held tube, or None."""
        return self._selected

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def elapsed_time(self) -> Optional[float]:
        """Seconds from level start to completion, None until complete."""
        return self._elapsed_time

    @property
    def combo(self) -> int:
        """Consecutive valid, non-winning pours."""
        return self._combo

    @property
    def hint(self) -> Optional[Tuple[int, int]]:
        """Last hint returned by request_hint, cleared by the next pour or undo."""
        return self._hint

    @property
    def busy(self) -> bool:
        """True while a pour animation holds the session."""
        return self._busy

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def best_score(self) -> Optional[int]:
        """Stored best for the current level."""
        return self._best_scores.load_best_score(self._level)

    def color_counts(self) -> Dict[Color, int]:
        """Segments per color across the board."""
        return color_counts(self._board)

    def snapshot(self) -> GameSnapshot:
        return self._snapshot_builder.build(self)

    def get_info(self) -> Dict[str, Any]:
        """Summary dict for tools and the Gymnasium wrapper."""
        return {
            "level": self._level,
            "moves": self._moves,
            "tube_count": len(self._board),
            "selected": self._selected,
            "combo": self._combo,
            "solved": self._complete,
            "elapsed_time": self._elapsed_time,
            "history_depth": len(self._history),
            "best_score": self.best_score,
        }

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        self._listeners.remove(listener)

    def _emit(self, kind: str, **fields: Any) -> None:
        if not self._listeners:
            return
        event = SessionEvent(kind=kind, moves=self._moves, combo=self._combo, **fields)
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Animation lock
    # ------------------------------------------------------------------

    def begin_animation(self) -> None:
        """Hold the session while a pour is being animated."""
        self._busy = True

    def end_animation(self) -> None:
        self._busy = False

    @contextmanager
    def animating(self) -> Iterator["GameSession"]:
        """Context manager form of begin_animation/end_animation."""
        self.begin_animation()
        try:
            yield self
        finally:
            self.end_animation()

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------

    def _reset_state(self, board: Board) -> None:
        self._board = board
        self._history.clear()
        self._moves = 0
        self._selected = None
        self._elapsed_time = None
        self._combo = 0
        self._hint = None
        self._busy = False
        self._start_time = self._clock()
        self._complete = is_board_complete(self._board)
        if self._complete:
            self._elapsed_time = 0.0

    def new_game(self, level: Optional[int] = None) -> GameSnapshot:
        """
        Start a freshly shuffled board.

        Args:
            level: Level number. Keeps the current level if None.

        Returns:
            Snapshot of the new board.
        """
        if level is not None:
            self._level = level
        self._reset_state(self._generator.generate_level(self._level))
        logger.info(
            "Level %d started with %d tubes", self._level, len(self._board)
        )
        self._emit(NEW_GAME)
        return self.snapshot()

    def restart(self) -> GameSnapshot:
        """Replay the current level with a new shuffle."""
        return self.new_game()

    replay = restart

    def next_level(self) -> GameSnapshot:
        return self.new_game(self._level + 1)

    def load_board(
        self,
        tubes: Sequence[Sequence[Color]],
        level: Optional[int] = None
    ) -> GameSnapshot:
        """
        Start the session from an explicit arrangement.

        Raises:
            ValueError: If a tube exceeds the configured capacity.
        """
        board = make_board(tubes, self._capacity)
        if level is not None:
            self._level = level
        self._reset_state(board)
        self._emit(NEW_GAME)
        return self.snapshot()

    # ------------------------------------------------------------------
    # Inbound operations
    # ------------------------------------------------------------------

    def _guard(self) -> Optional[str]:
        if self._busy:
            return REASON_BUSY
        if self._complete:
            return REASON_COMPLETE
        return None

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._board)

    def select_tube(self, index: int) -> MoveResult:
        """
        Handle a click on tube `index`.

        Selects, deselects, or pours from the held tube into `index`.
        """
        blocked = self._guard()
        if blocked is not None:
            logger.debug("select_tube(%d) rejected: %s", index, blocked)
            return MoveResult.rejected(blocked, to_index=index)
        if not self._in_range(index):
            return MoveResult.rejected(REASON_OUT_OF_RANGE, to_index=index)

        if self._selected is None:
            if (self._board[index].is_empty()
                    and not self._config.selection.allow_empty_source):
                logger.debug("select_tube(%d) rejected: tube is empty", index)
                return MoveResult.rejected(REASON_EMPTY_SOURCE, from_index=index)
            self._selected = index
            return MoveResult(True, REASON_SELECTED, from_index=index)

        if self._selected == index:
            self._selected = None
            return MoveResult(True, REASON_DESELECTED, from_index=index)

        return self.pour(self._selected, index)

    def pour(self, from_index: int, to_index: int) -> MoveResult:
        """
        Pour the top run of one tube into another.

        An illegal pour clears the selection and the combo, counts no move
        and records no history.
        """
        blocked = self._guard()
        if blocked is not None:
            logger.debug("pour(%d, %d) rejected: %s", from_index, to_index, blocked)
            return MoveResult.rejected(blocked, from_index, to_index)
        if not (self._in_range(from_index) and self._in_range(to_index)):
            return MoveResult.rejected(REASON_OUT_OF_RANGE, from_index, to_index)

        src = self._board[from_index]
        dst = self._board[to_index]
        count = 0 if from_index == to_index else self._rules.transfer_count(src, dst)
        if count == 0:
            self._selected = None
            self._combo = 0
            logger.debug("Invalid pour %d -> %d", from_index, to_index)
            return MoveResult.rejected(REASON_INVALID_POUR, from_index, to_index)

        color = src.top_color
        self._history.push(self._board)
        moved = self._rules.apply(self._board, from_index, to_index)
        self._moves += 1
        self._selected = None
        self._hint = None

        cue = dict(from_index=from_index, to_index=to_index, color=color, amount=moved)
        self._emit(POUR_STARTED, **cue)
        self._emit(POUR_LANDED, **cue)
        self._emit(POUR_FINISHED, **cue)

        if is_board_complete(self._board):
            self._complete = True
            self._elapsed_time = self._clock() - self._start_time
            record_completion(self._best_scores, self._level, self._moves)
            logger.info(
                "Level %d complete in %d moves (%.1fs)",
                self._level, self._moves, self._elapsed_time
            )
            self._emit(LEVEL_COMPLETE)
        else:
            self._combo += 1
            if self._combo >= self._config.session.combo_threshold:
                self._emit(COMBO)

        return MoveResult(
            True, REASON_POURED, from_index, to_index,
            moved=moved, completed=self._complete
        )

    def undo(self) -> MoveResult:
        """
        Restore the board from before the last pour.

        Counts as a move. No-op when there is nothing to undo.
        """
        blocked = self._guard()
        if blocked is not None:
            logger.debug("undo rejected: %s", blocked)
            return MoveResult.rejected(blocked)
        if not self._history:
            logger.debug("undo rejected: history is empty")
            return MoveResult.rejected(REASON_EMPTY_HISTORY)

        self._board = restore_board(self._history.pop(), self._capacity)
        self._moves += 1
        self._selected = None
        self._hint = None
        self._combo = 0
        self._emit(UNDO)
        return MoveResult(True, REASON_UNDONE)

    def request_hint(self) -> Optional[Tuple[int, int]]:
        """
        Find the first legal pour on the current board.

        Returns None while busy, once complete, or when no pour is legal.
        """
        if self._guard() is not None:
            return None
        self._hint = find_hint(self._board, self._rules)
        if self._hint is not None:
            self._emit(HINT, from_index=self._hint[0], to_index=self._hint[1])
        return self._hint
