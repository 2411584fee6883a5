"""
RNG - Injectable Random Source
==============================

Every random draw in the simulation (flavor, spawn position, speed jitter,
rare interval, power-up kind, cosmetic scatter) goes through a RandomSource,
so a seed fully determines a session.
"""

from __future__ import annotations

import random
from typing import Any, Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """
    Seedable random source.

    Gameplay and cosmetic draws use separate streams so that toggling
    cosmetics never changes gameplay outcomes for a given seed.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize random source.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._seed = seed
        self._rng = random.Random(seed)
        self._cosmetic_rng = random.Random(None if seed is None else seed ^ 0x5EED)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self._rng.random()

    def uniform(self, low: float, high: float) -> float:
        """Uniform float in [low, high]."""
        return self._rng.uniform(low, high)

    def choice(self, options: Sequence[T]) -> T:
        """Uniform choice from a non-empty sequence."""
        return self._rng.choice(options)

    def cosmetic(self) -> float:
        """Uniform float in [0, 1) from the cosmetic stream."""
        return self._cosmetic_rng.random()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reseed both streams.

        Args:
            seed: New random seed. Continues the current streams if None.
        """
        if seed is None:
            return
        self._seed = seed
        self._rng = random.Random(seed)
        self._cosmetic_rng = random.Random(seed ^ 0x5EED)

    def get_state(self) -> Any:
        """Gameplay stream state, for checkpointing."""
        return self._rng.getstate()

    def set_state(self, state: Any) -> None:
        """Restore gameplay stream state."""
        self._rng.setstate(state)
