"""
Cosmetic Entities
=================

Trail dots and particles. They follow the same decrement-then-cull
lifecycle as gameplay entities but never touch score, lives or collision.
Collections are bounded; the oldest entries are discarded first.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterable, Optional

from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.entities import Avatar, Collectible, Entity, Flavor
from skate_party.catch_core.rng import RandomSource

BIG_POPUP_POINTS = 20   # Any catch at x2 or better


class ParticleKind(Enum):
    SPARKLE = "sparkle"
    SPLAT = "splat"
    SCORE = "score"
    TRAIL = "trail"


@dataclass
class TrailDot:
    x: float
    y: float
    life: float = 1.0


@dataclass
class Particle:
    x: float
    y: float
    vx: float            # px/frame
    vy: float            # px/frame
    life: float          # 1.0 -> 0.0
    max_life: float      # seconds to fade out
    size: float
    kind: ParticleKind
    flavor: Optional[Flavor] = None
    points: int = 0      # SCORE particles only


class CosmeticSystem:
    """Bounded trail and particle collections."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize cosmetics.

        Args:
            config: Game configuration. Uses default if None.
            rng: Random source; only its cosmetic stream is used.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._cfg = config.cosmetics
        self._rng = rng if rng is not None else RandomSource()
        self._trail: Deque[TrailDot] = deque(maxlen=self._cfg.max_trail)
        self._particles: Deque[Particle] = deque(maxlen=self._cfg.max_particles)

    @property
    def enabled(self) -> bool:
        return self._cfg.enabled

    @property
    def trail(self) -> Deque[TrailDot]:
        return self._trail

    @property
    def particles(self) -> Deque[Particle]:
        return self._particles

    def _rand(self) -> float:
        return self._rng.cosmetic()

    # ---- Emitters ----

    def emit_trail(self, avatar: Avatar) -> None:
        """Drop a trail dot behind the avatar while it lags its target."""
        if not self.enabled:
            return
        if avatar.lag() > self._cfg.trail_threshold:
            self._trail.append(TrailDot(x=avatar.x, y=avatar.y + 20))

    def burst(self, x: float, y: float, flavor: Flavor, kind: ParticleKind) -> None:
        """Radial burst: sparkles on a catch, splats on a miss."""
        if not self.enabled:
            return
        splat = kind is ParticleKind.SPLAT
        count = 12 if splat else 8
        for i in range(count):
            angle = (math.pi * 2 * i) / count + self._rand() * 0.5
            speed = 1 + self._rand() * 3 if splat else 2 + self._rand() * 4
            if splat:
                vy = abs(math.sin(angle)) * -speed * 0.3
                size = 3 + self._rand() * 5
            else:
                vy = math.sin(angle) * speed - 2
                size = 2 + self._rand() * 4
            self._particles.append(Particle(
                x=x,
                y=y,
                vx=math.cos(angle) * speed,
                vy=vy,
                life=1.0,
                max_life=0.5 + self._rand() * 0.5,
                size=size,
                kind=kind,
                flavor=flavor
            ))

    def score_popup(self, x: float, y: float, points: int) -> None:
        """Floating "+points" label."""
        if not self.enabled:
            return
        self._particles.append(Particle(
            x=x, y=y - 20, vx=0.0, vy=-1.5, life=1.0, max_life=1.0,
            size=24 if points >= BIG_POPUP_POINTS else 18, kind=ParticleKind.SCORE, points=points
        ))

    def entity_sparkles(self, entities: Iterable[Entity], amplitude: float) -> None:
        """Occasional glitter behind falling scoops."""
        if not self.enabled:
            return
        for entity in entities:
            if not isinstance(entity, Collectible) or self._rand() <= 0.6:
                continue
            ex, ey = entity.effective_position(amplitude)
            self._particles.append(Particle(
                x=ex + (self._rand() - 0.5) * 20,
                y=ey - 10,
                vx=(self._rand() - 0.5) * 0.5,
                vy=-0.5 - self._rand(),
                life=1.0,
                max_life=0.4,
                size=1.5 + self._rand() * 2,
                kind=ParticleKind.TRAIL,
                flavor=entity.flavor
            ))

    # ---- Lifecycle ----

    def tick(self, dt: float) -> None:
        """Age everything by dt and cull what has faded out."""
        scale = dt * self._config.simulation.reference_fps

        for dot in self._trail:
            dot.life -= dt * self._cfg.trail_decay
        live_dots = [d for d in self._trail if d.life > 0]
        self._trail.clear()
        self._trail.extend(live_dots)

        for p in self._particles:
            p.x += p.vx * scale
            p.y += p.vy * scale
            if p.kind is ParticleKind.SPLAT:
                p.vy += 5 * dt
            p.life -= dt / p.max_life
        live = [p for p in self._particles if p.life > 0]
        self._particles.clear()
        self._particles.extend(live)

    def clear(self) -> None:
        self._trail.clear()
        self._particles.clear()
