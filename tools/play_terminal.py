"""
Terminal Play Mode
==================

Play water sort interactively in a terminal.

Commands:
    a b  - Pour tube a into tube b
    a    - Click tube a (select, deselect, or pour into it)
    u    - Undo
    h    - Hint
    r    - Restart level with a new shuffle
    n    - Next level
    x    - Reset best scores
    q    - Quit

Usage:
    python -m tools.play_terminal [--seed SEED] [--level LEVEL] [--scores PATH]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from water_sort.logging_config import setup_logging
from water_sort.sort_core.config_loader import load_config, GameConfig
from water_sort.sort_core.events import COMBO, LEVEL_COMPLETE, SessionEvent
from water_sort.sort_core.palette import Palette
from water_sort.sort_core.scoring import JsonBestScoreStore, InMemoryBestScores, LevelProgress
from water_sort.sort_core.session import GameSession


class TerminalPlayer:
    """Reads commands and drives a GameSession, printing the board as text."""

    def __init__(
        self,
        config: GameConfig,
        level: int = 1,
        seed: Optional[int] = None,
        scores_path: Optional[str] = None,
        out=None
    ):
        self._config = config
        self._palette = Palette(config)
        self._out = out if out is not None else sys.stdout
        store = JsonBestScoreStore(scores_path) if scores_path else InMemoryBestScores()
        self.progress = LevelProgress(store, config)
        self.session = GameSession(
            config=config,
            level=level,
            seed=seed,
            best_scores=store,
            listener=self._on_event
        )

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def _on_event(self, event: SessionEvent) -> None:
        if event.kind == COMBO:
            self._print(f"Combo x{event.combo}!")
        elif event.kind == LEVEL_COMPLETE:
            self._print(f"Level complete in {event.moves} moves!")

    def render(self) -> str:
        """Text view of the board, one tube per line."""
        session = self.session
        lines = [f"Level {session.level}  moves {session.moves}  best {session.best_score}"]
        for i, tube in enumerate(session.tubes):
            marker = ">" if session.selected == i else " "
            cells = " ".join(f"{self._palette.name_of(c)[:3]:<3}" for c in tube)
            lines.append(f"{marker}{i:2d} [{cells:<{session.capacity * 4}}]")
        if session.hint is not None:
            lines.append(f"Hint: {session.hint[0]} -> {session.hint[1]}")
        return "\n".join(lines)

    def handle(self, command: str) -> bool:
        """
        Run one command.

        Returns:
            False when the player quits.
        """
        parts = command.strip().lower().split()
        if not parts:
            return True
        head = parts[0]

        if head == "q":
            return False
        if head == "u":
            result = self.session.undo()
            if not result:
                self._print(f"Cannot undo: {result.reason}")
        elif head == "h":
            if self.session.request_hint() is None:
                self._print("No hint available")
        elif head == "r":
            self.session.restart()
        elif head == "n":
            self.session.next_level()
        elif head == "x":
            self.progress.reset_scores()
            self._print("Best scores cleared")
        elif all(p.isdigit() for p in parts) and len(parts) <= 2:
            if len(parts) == 2:
                result = self.session.pour(int(parts[0]), int(parts[1]))
            else:
                result = self.session.select_tube(int(parts[0]))
            if not result:
                self._print(f"Rejected: {result.reason}")
        else:
            self._print(f"Unknown command: {command.strip()}")
        return True

    def run(self) -> int:
        """Interactive loop. Returns the move count of the last level."""
        self._print(__doc__.split("Usage:")[0].strip())
        while True:
            self._print()
            self._print(self.render())
            try:
                command = input("> ")
            except EOFError:
                break
            if not self.handle(command):
                break
        return self.session.moves


def main():
    parser = argparse.ArgumentParser(description="Play water sort in the terminal")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--level", type=int, default=1, help="Starting level (default: 1)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--scores", type=str, default=None, help="JSON file for best scores")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.debug else logging.WARNING)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    player = TerminalPlayer(
        config=config,
        level=args.level,
        seed=args.seed,
        scores_path=args.scores
    )
    moves = player.run()
    print(f"\nMoves: {moves}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
