"""
State Snapshot
==============

Read-only, fully settled view of the game after a tick. Renderers and
agents only ever see this; they cannot reach the live collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.cosmetics import CosmeticSystem, ParticleKind
from skate_party.catch_core.effects import EffectManager
from skate_party.catch_core.entities import (
    Avatar,
    Collectible,
    Entity,
    Flavor,
    PowerUp,
    PowerUpKind,
    TIMED_KINDS,
)
from skate_party.catch_core.session import Session, SessionMode

# Entity type codes used in observation arrays
ENTITY_EMPTY = -1
ENTITY_COLLECTIBLE = 0
ENTITY_RARE = 1
POWER_UP_CODES: Dict[PowerUpKind, int] = {kind: 2 + i for i, kind in enumerate(PowerUpKind)}
NUM_ENTITY_CODES = 2 + len(PowerUpKind)

MODE_CODES: Dict[SessionMode, int] = {mode: i for i, mode in enumerate(SessionMode)}


@dataclass(frozen=True)
class AvatarView:
    x: float
    y: float
    target_x: float
    target_y: float
    width: float
    height: float


@dataclass(frozen=True)
class EntityView:
    """One falling entity at its wobble-adjusted position."""
    uid: int
    x: float
    y: float
    speed: float
    rotation: float = 0.0
    flavor: Optional[Flavor] = None
    rare: bool = False
    power_up: Optional[PowerUpKind] = None

    @property
    def is_power_up(self) -> bool:
        return self.power_up is not None

    @property
    def type_code(self) -> int:
        if self.power_up is not None:
            return POWER_UP_CODES[self.power_up]
        return ENTITY_RARE if self.rare else ENTITY_COLLECTIBLE


@dataclass(frozen=True)
class EffectView:
    kind: PowerUpKind
    remaining: float
    duration: float


@dataclass(frozen=True)
class TrailView:
    x: float
    y: float
    life: float


@dataclass(frozen=True)
class ParticleView:
    x: float
    y: float
    life: float
    size: float
    kind: ParticleKind
    flavor: Optional[Flavor] = None
    points: int = 0


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete post-tick game state.

    Every field is immutable; collections are tuples of frozen views.
    """
    mode: SessionMode
    score: int
    combo: int
    best_combo: int
    multiplier: int
    lives: int
    max_lives: int
    elapsed: float
    high_score: int

    playfield_width: float
    playfield_height: float

    avatar: AvatarView
    entities: Tuple[EntityView, ...]
    effects: Tuple[EffectView, ...]
    trail: Tuple[TrailView, ...] = ()
    particles: Tuple[ParticleView, ...] = ()

    milestone: bool = False   # A combo milestone was reached this tick

    @property
    def is_game_over(self) -> bool:
        return self.mode is SessionMode.GAME_OVER

    @property
    def is_new_high_score(self) -> bool:
        return self.score > 0 and self.score >= self.high_score

    def effect_remaining(self, kind: PowerUpKind) -> float:
        for effect in self.effects:
            if effect.kind is kind:
                return effect.remaining
        return 0.0

    def to_obs_dict(self, max_entities: int) -> Dict[str, np.ndarray]:
        """
        Pack into fixed-size numpy arrays for Gymnasium observations.

        Entities are ordered lowest-first (closest to the bottom) and
        truncated to max_entities.
        """
        ordered = sorted(self.entities, key=lambda e: e.y, reverse=True)[:max_entities]
        count = len(ordered)

        ent_type = np.full(max_entities, ENTITY_EMPTY, dtype=np.int16)
        ent_x = np.zeros(max_entities, dtype=np.float32)
        ent_y = np.zeros(max_entities, dtype=np.float32)
        ent_speed = np.zeros(max_entities, dtype=np.float32)
        ent_mask = np.zeros(max_entities, dtype=np.int8)

        for i, entity in enumerate(ordered):
            ent_type[i] = entity.type_code
            ent_x[i] = entity.x
            ent_y[i] = entity.y
            ent_speed[i] = entity.speed
            ent_mask[i] = 1

        effects = np.array(
            [self.effect_remaining(kind) for kind in TIMED_KINDS],
            dtype=np.float32
        )

        return {
            "avatar": np.array(
                [self.avatar.x, self.avatar.y, self.avatar.target_x, self.avatar.target_y],
                dtype=np.float32
            ),
            "playfield": np.array([self.playfield_width, self.playfield_height], dtype=np.float32),
            "score": np.array(self.score, dtype=np.int64),
            "combo": np.array(self.combo, dtype=np.int32),
            "lives": np.array(self.lives, dtype=np.int32),
            "elapsed": np.array(self.elapsed, dtype=np.float32),
            "mode": np.array(MODE_CODES[self.mode], dtype=np.int32),
            "effects": effects,
            "entity_count": np.array(count, dtype=np.int32),
            "ent_type": ent_type,
            "ent_x": ent_x,
            "ent_y": ent_y,
            "ent_speed": ent_speed,
            "ent_mask": ent_mask,
        }


class SnapshotBuilder:
    """Copies live game state into a GameSnapshot."""

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize snapshot builder.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._amplitude = config.entities.wobble_amplitude

    def _entity_view(self, entity: Entity) -> EntityView:
        x, y = entity.effective_position(self._amplitude)
        if isinstance(entity, Collectible):
            return EntityView(
                uid=entity.uid, x=x, y=y, speed=entity.speed,
                rotation=entity.rotation, flavor=entity.flavor, rare=entity.rare
            )
        if isinstance(entity, PowerUp):
            return EntityView(uid=entity.uid, x=x, y=y, speed=entity.speed, power_up=entity.kind)
        raise TypeError(f"Not a falling entity: {entity!r}")

    def build(
        self,
        session: Session,
        avatar: Avatar,
        entities: Sequence[Entity],
        effects: EffectManager,
        multiplier: int,
        high_score: int,
        cosmetics: Optional[CosmeticSystem] = None,
        milestone: bool = False
    ) -> GameSnapshot:
        """Build a snapshot of the current state."""
        trail: Iterable[TrailView] = ()
        particles: Iterable[ParticleView] = ()
        if cosmetics is not None:
            trail = tuple(TrailView(d.x, d.y, d.life) for d in cosmetics.trail)
            particles = tuple(
                ParticleView(p.x, p.y, p.life, p.size, p.kind, p.flavor, p.points)
                for p in cosmetics.particles
            )

        return GameSnapshot(
            mode=session.mode,
            score=session.score,
            combo=session.combo,
            best_combo=session.best_combo,
            multiplier=multiplier,
            lives=session.lives,
            max_lives=session.max_lives,
            elapsed=session.elapsed,
            high_score=high_score,
            playfield_width=self._config.playfield.width,
            playfield_height=self._config.playfield.height,
            avatar=AvatarView(
                avatar.x, avatar.y, avatar.target_x, avatar.target_y,
                avatar.width, avatar.height
            ),
            entities=tuple(self._entity_view(e) for e in entities),
            effects=tuple(
                EffectView(e.kind, e.remaining, e.duration) for e in effects.active()
            ),
            trail=tuple(trail),
            particles=tuple(particles),
            milestone=milestone
        )
