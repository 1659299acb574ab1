"""
Session Events
==============

Presentation cues emitted by the game session.

The board is already fully updated when a cue is emitted; a renderer
decides how and when to animate it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

POUR_STARTED = "pour_started"
POUR_LANDED = "pour_landed"
POUR_FINISHED = "pour_finished"
LEVEL_COMPLETE = "level_complete"
COMBO = "combo"
UNDO = "undo"
HINT = "hint"
NEW_GAME = "new_game"


@dataclass(frozen=True)
class SessionEvent:
    """A single presentation cue."""
    kind: str
    moves: int
    from_index: Optional[int] = None
    to_index: Optional[int] = None
    color: Any = None
    amount: int = 0
    combo: int = 0

    def __repr__(self) -> str:
        if self.from_index is not None:
            return f"SessionEvent({self.kind}: {self.from_index}->{self.to_index} x{self.amount})"
        return f"SessionEvent({self.kind}, moves={self.moves})"


SessionListener = Callable[[SessionEvent], None]
