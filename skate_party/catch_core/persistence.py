"""
High-Score Persistence
======================

Stores behind a two-call contract plus a best-effort boundary that keeps
storage failures from ever interrupting play.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, Union

logger = logging.getLogger(__name__)

# Errors a store may raise that the boundary treats as "storage unavailable"
STORAGE_ERRORS = (OSError, ValueError, TypeError)


class HighScoreStore(Protocol):
    """Persistence contract."""

    def get_high_score(self) -> int: ...

    def set_high_score(self, score: int) -> None: ...


class InMemoryHighScoreStore:
    """Process-local store, useful for tests and headless runs."""

    def __init__(self, initial: int = 0):
        self._value = int(initial)
        self.writes = 0

    def get_high_score(self) -> int:
        return self._value

    def set_high_score(self, score: int) -> None:
        self._value = int(score)
        self.writes += 1


class JsonFileHighScoreStore:
    """
    High score kept in a small JSON document: {"high_score": <int>}.

    A missing file reads as 0. Malformed content raises ValueError.
    """

    KEY = "high_score"

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_high_score(self) -> int:
        if not self._path.exists():
            return 0
        with open(self._path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Malformed high-score file: {self._path}")
        return int(data.get(self.KEY, 0))

    def set_high_score(self, score: int) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump({self.KEY: int(score)}, f)
        tmp_path.replace(self._path)


class BestEffortHighScore:
    """
    Error boundary around a HighScoreStore.

    The in-memory value is authoritative. After a storage failure the
    wrapper is degraded and skips the store until `retry()` is called
    (the game calls it when a new session starts).
    """

    def __init__(self, store: HighScoreStore):
        self._store = store
        self._value = 0
        self._degraded = False

    @property
    def value(self) -> int:
        return self._value

    @property
    def degraded(self) -> bool:
        return self._degraded

    def _fail(self, action: str, exc: Exception) -> None:
        self._degraded = True
        logger.warning("High-score %s failed, keeping session-local value: %s", action, exc)

    def retry(self) -> None:
        """Allow the store to be used again."""
        self._degraded = False

    def load(self) -> int:
        """Refresh from the store. Never lowers the in-memory value."""
        if self._degraded:
            return self._value
        try:
            stored = int(self._store.get_high_score())
        except STORAGE_ERRORS as exc:
            self._fail("read", exc)
            return self._value
        self._value = max(self._value, stored)
        return self._value

    def commit(self, score: int) -> bool:
        """
        Record score if it beats the known high score.

        Returns:
            True if score is a new high score (persisted or not).
        """
        if score <= self._value:
            return False
        self._value = score
        if not self._degraded:
            try:
                self._store.set_high_score(score)
            except STORAGE_ERRORS as exc:
                self._fail("write", exc)
        return True
