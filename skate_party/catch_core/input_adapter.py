"""
Input Adapter Contract
======================

Hosts translate device events into an Intent. The buffer may be written
from an event thread; the simulation drains it once per tick.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Intent:
    """Player intent accumulated since the previous tick."""
    pointer: Optional[Tuple[float, float]] = None   # Absolute target, wins over keys
    keys: Tuple[float, float] = (0.0, 0.0)          # Held direction, each axis in [-1, 1]
    start: bool = False

    @property
    def has_keys(self) -> bool:
        return self.keys != (0.0, 0.0)


class InputBuffer:
    """Lock-protected latest-intent buffer."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pointer: Optional[Tuple[float, float]] = None
        self._keys: Tuple[float, float] = (0.0, 0.0)
        self._start = False

    def set_pointer(self, x: float, y: float) -> None:
        """Pointer or touch position in playfield coordinates."""
        with self._lock:
            self._pointer = (float(x), float(y))

    def set_keys(self, dx: float, dy: float = 0.0) -> None:
        """Currently held direction keys."""
        with self._lock:
            self._keys = (max(-1.0, min(1.0, dx)), max(-1.0, min(1.0, dy)))

    def request_start(self) -> None:
        with self._lock:
            self._start = True

    def drain(self) -> Intent:
        """Take the pending intent. Held keys persist, one-shot signals clear."""
        with self._lock:
            intent = Intent(pointer=self._pointer, keys=self._keys, start=self._start)
            self._pointer = None
            self._start = False
        return intent
