"""
Power-Up Effect Manager
=======================

Tracks timed effects. Effects are present or absent: catching a kind that
is already running restarts its timer instead of stacking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.entities import PowerUpKind, TIMED_KINDS


@dataclass
class ActiveEffect:
    """A running timed effect."""
    kind: PowerUpKind
    remaining: float
    duration: float

    @property
    def fraction_remaining(self) -> float:
        if self.duration <= 0:
            return 0.0
        return max(0.0, min(1.0, self.remaining / self.duration))


class EffectManager:
    """
    Holds at most one ActiveEffect per timed kind.

    Movement asks about MAGNETISM and SLOWDOWN, scoring asks about
    SCORE_BOOST.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize effect manager.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._effects: Dict[PowerUpKind, ActiveEffect] = {}

    def activate(self, kind: PowerUpKind) -> ActiveEffect:
        """
        Start (or restart) a timed effect.

        Args:
            kind: A timed power-up kind.

        Returns:
            The fresh effect.

        Raises:
            ValueError: If kind is instantaneous (LIFE_GAIN).
        """
        if not kind.is_timed:
            raise ValueError(f"{kind.name} has no timed effect")
        duration = self._config.power_ups.duration(kind)
        effect = ActiveEffect(kind=kind, remaining=duration, duration=duration)
        self._effects[kind] = effect
        return effect

    def tick(self, dt: float) -> List[PowerUpKind]:
        """
        Count every effect down and drop the finished ones.

        Returns:
            Kinds that expired this tick.
        """
        expired = []
        for kind in TIMED_KINDS:
            effect = self._effects.get(kind)
            if effect is None:
                continue
            effect.remaining -= dt
            if effect.remaining <= 0:
                del self._effects[kind]
                expired.append(kind)
        return expired

    def is_active(self, kind: PowerUpKind) -> bool:
        return kind in self._effects

    def remaining(self, kind: PowerUpKind) -> float:
        """Seconds left for a kind, 0.0 when inactive."""
        effect = self._effects.get(kind)
        return effect.remaining if effect is not None else 0.0

    def active(self) -> Tuple[ActiveEffect, ...]:
        """Running effects in a stable kind order."""
        return tuple(self._effects[k] for k in TIMED_KINDS if k in self._effects)

    def clear(self) -> None:
        self._effects.clear()

    def __len__(self) -> int:
        return len(self._effects)
