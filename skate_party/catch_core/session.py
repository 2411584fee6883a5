"""
Session State Machine
=====================

Owns score, combo, lives, elapsed time and the top-level mode:

    START --begin--> PLAYING --end--> GAME_OVER --restart--> START
"""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class SessionMode(Enum):
    """Top-level session mode."""
    START = "start"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class SessionTransitionError(RuntimeError):
    """Raised on a mode transition the state machine does not allow."""


_ALLOWED = {
    SessionMode.START: SessionMode.PLAYING,
    SessionMode.PLAYING: SessionMode.GAME_OVER,
    SessionMode.GAME_OVER: SessionMode.START,
}


class Session:
    """
    Session statistics and mode.

    Counters only change through the methods below, which keep
    0 <= lives <= max_lives, combo >= 0 and a non-decreasing score.
    """

    def __init__(self, max_lives: int):
        """
        Initialize session in START mode.

        Args:
            max_lives: Life cap, also the starting life count.
        """
        if max_lives < 1:
            raise ValueError(f"max_lives must be at least 1, got {max_lives}")
        self._max_lives = max_lives
        self._mode = SessionMode.START
        self._reset_stats()

    def _reset_stats(self) -> None:
        self._score = 0
        self._combo = 0
        self._best_combo = 0
        self._lives = self._max_lives
        self._elapsed = 0.0

    # ---- Read access ----

    @property
    def mode(self) -> SessionMode:
        return self._mode

    @property
    def is_playing(self) -> bool:
        return self._mode is SessionMode.PLAYING

    @property
    def score(self) -> int:
        return self._score

    @property
    def combo(self) -> int:
        return self._combo

    @property
    def best_combo(self) -> int:
        return self._best_combo

    @property
    def lives(self) -> int:
        return self._lives

    @property
    def max_lives(self) -> int:
        return self._max_lives

    @property
    def elapsed(self) -> float:
        return self._elapsed

    # ---- Transitions ----

    def _transition(self, target: SessionMode) -> None:
        if _ALLOWED[self._mode] is not target:
            raise SessionTransitionError(
                f"Cannot go from {self._mode.name} to {target.name}"
            )
        logger.debug("Session %s -> %s", self._mode.name, target.name)
        self._mode = target

    def begin(self) -> None:
        """START -> PLAYING with fresh statistics."""
        self._transition(SessionMode.PLAYING)
        self._reset_stats()

    def end(self) -> None:
        """PLAYING -> GAME_OVER. Final statistics stay readable."""
        self._transition(SessionMode.GAME_OVER)
        logger.info(
            "Game over: score=%d best_combo=%d elapsed=%.1fs",
            self._score, self._best_combo, self._elapsed
        )

    def restart(self) -> None:
        """GAME_OVER -> START, resetting every statistic to its initial value."""
        self._transition(SessionMode.START)
        self._reset_stats()

    # ---- Counters ----

    def advance_clock(self, dt: float) -> None:
        if dt > 0:
            self._elapsed += dt

    def add_points(self, points: int) -> None:
        if points < 0:
            raise ValueError(f"Score cannot decrease (got {points} points)")
        self._score += points

    def extend_combo(self) -> int:
        """Count one more consecutive catch. Returns the new combo."""
        self._combo += 1
        if self._combo > self._best_combo:
            self._best_combo = self._combo
        return self._combo

    def break_combo(self) -> None:
        self._combo = 0

    def lose_life(self) -> int:
        """Remove one life (never below zero). Returns lives left."""
        self._lives = max(0, self._lives - 1)
        return self._lives

    def gain_life(self) -> bool:
        """Restore one life up to the cap. Returns False when already full."""
        if self._lives >= self._max_lives:
            return False
        self._lives += 1
        return True

    def __repr__(self) -> str:
        return (
            f"Session(mode={self._mode.name}, score={self._score}, combo={self._combo}, "
            f"lives={self._lives}/{self._max_lives}, elapsed={self._elapsed:.2f})"
        )
