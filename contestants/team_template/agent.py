"""
Team Template Agent
===================

Your agent must provide one of:
1. A `SkatePartyAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are (x, y) pairs in [-1, 1]: the avatar target across the
reachable area, (-1, -1) top-left to (1, 1) bottom-right. A single float
is accepted too and keeps the avatar on its resting row.

Observation keys: avatar, playfield, score, combo, lives, elapsed, mode,
effects, entity_count, ent_type, ent_x, ent_y, ent_speed, ent_mask.
"""

from __future__ import annotations

from typing import Dict
import numpy as np


class SkatePartyAgent:
    """
    Your Skate Party agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> np.ndarray:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state.

        Returns:
            action: (x, y) in [-1, 1].
        """
        return np.array([self.rng.uniform(-1.0, 1.0), 1.0], dtype=np.float32)

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> float:
    """Standalone act function (alternative to class-based agent)."""
    return float(np.random.uniform(-1.0, 1.0))
