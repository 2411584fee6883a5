"""
Scoring System
==============

Turns catches and misses into score, combo and life changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.effects import EffectManager
from skate_party.catch_core.entities import Collectible, PowerUpKind
from skate_party.catch_core.session import Session


def combo_multiplier(combo: int, tier: int = 5, cap: int = 5) -> int:
    """
    Tiered combo multiplier: one extra step every `tier` catches, capped.

    combo 0-4 -> 1x, 5-9 -> 2x, ... , 20+ -> 5x with the defaults.
    """
    return min(max(combo, 0) // tier + 1, cap)


@dataclass
class ScoreEvent:
    """Record of a collectible catch."""
    uid: int
    points: int
    combo: int
    multiplier: int
    boosted: bool = False
    rare: bool = False
    milestone: bool = False   # Every Nth combo; purely celebratory

    def __repr__(self) -> str:
        tags = []
        if self.rare:
            tags.append("rare")
        if self.boosted:
            tags.append("boost")
        if self.milestone:
            tags.append("milestone")
        suffix = f", {'+'.join(tags)}" if tags else ""
        return f"ScoreEvent(+{self.points}, combo={self.combo}, x{self.multiplier}{suffix})"


@dataclass
class PowerUpEvent:
    """Record of a power-up catch."""
    uid: int
    kind: PowerUpKind
    life_gained: bool = False


@dataclass
class MissEvent:
    """Record of a collectible that fell past the avatar."""
    uid: int
    lives_left: int
    combo_lost: int

    @property
    def game_over(self) -> bool:
        return self.lives_left <= 0


class ScoreTracker:
    """
    Scoring and combo rules.

    points = base x combo multiplier x boost multiplier x rare multiplier
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scoring = config.scoring
        self._catches: int = 0
        self._misses: int = 0
        self._power_ups: int = 0

    @property
    def catches(self) -> int:
        """Collectibles caught this session."""
        return self._catches

    @property
    def misses(self) -> int:
        """Collectibles missed this session."""
        return self._misses

    @property
    def power_ups(self) -> int:
        """Power-ups caught this session."""
        return self._power_ups

    def multiplier(self, combo: int) -> int:
        return combo_multiplier(combo, self._scoring.combo_tier, self._scoring.max_multiplier)

    def catch_points(self, combo: int, rare: bool = False, boosted: bool = False) -> int:
        """
        Points for a catch at an already incremented combo.

        Args:
            combo: Combo count including this catch.
            rare: True for a golden collectible.
            boosted: True while ScoreBoost is active.
        """
        points = self._scoring.base_points * self.multiplier(combo)
        if boosted:
            points *= self._config.power_ups.score_boost_factor
        if rare:
            points *= self._scoring.rare_multiplier
        return points

    def apply_catch(
        self,
        session: Session,
        collectible: Collectible,
        boosted: bool = False
    ) -> ScoreEvent:
        """
        Apply a collectible catch.

        Args:
            session: Session to update.
            collectible: The caught entity.
            boosted: True while ScoreBoost is active.

        Returns:
            ScoreEvent describing the points awarded.
        """
        combo = session.extend_combo()
        points = self.catch_points(combo, rare=collectible.rare, boosted=boosted)
        session.add_points(points)
        self._catches += 1
        return ScoreEvent(
            uid=collectible.uid,
            points=points,
            combo=combo,
            multiplier=self.multiplier(combo),
            boosted=boosted,
            rare=collectible.rare,
            milestone=combo % self._scoring.milestone_every == 0
        )

    def apply_power_up(
        self,
        session: Session,
        effects: EffectManager,
        kind: PowerUpKind,
        uid: int = -1
    ) -> PowerUpEvent:
        """
        Apply a power-up catch.

        LIFE_GAIN restores a life (never past the cap) and registers no
        effect; every other kind (re)starts its timed effect.
        """
        self._power_ups += 1
        if kind is PowerUpKind.LIFE_GAIN:
            return PowerUpEvent(uid=uid, kind=kind, life_gained=session.gain_life())
        effects.activate(kind)
        return PowerUpEvent(uid=uid, kind=kind)

    def apply_miss(self, session: Session, uid: int = -1) -> MissEvent:
        """Apply a miss: the combo drops to zero and one life is lost."""
        combo_lost = session.combo
        session.break_combo()
        lives_left = session.lose_life()
        self._misses += 1
        return MissEvent(uid=uid, lives_left=lives_left, combo_lost=combo_lost)

    def reset(self) -> None:
        """Reset per-session counters."""
        self._catches = 0
        self._misses = 0
        self._power_ups = 0
