"""
Entities
========

Closed kinds and the mutable records the simulation owns: the avatar,
falling collectibles and power-ups.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class Flavor(Enum):
    """The two interchangeable collectible flavors."""
    BLUEBERRY = "blueberry"
    MANGO = "mango"


class PowerUpKind(Enum):
    """Power-up kinds. Every kind except LIFE_GAIN is a timed effect."""
    MAGNETISM = "magnetism"
    SLOWDOWN = "slowdown"
    SCORE_BOOST = "score_boost"
    LIFE_GAIN = "life_gain"

    @property
    def is_timed(self) -> bool:
        return self is not PowerUpKind.LIFE_GAIN


TIMED_KINDS: Tuple[PowerUpKind, ...] = tuple(k for k in PowerUpKind if k.is_timed)


@dataclass
class Avatar:
    """
    Player avatar.

    The input adapter writes the target; the physics step moves the
    position toward it.
    """
    x: float
    y: float
    target_x: float
    target_y: float
    width: float
    height: float

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def target(self) -> Tuple[float, float]:
        return (self.target_x, self.target_y)

    def lag(self) -> float:
        """Distance between the avatar and its target."""
        return math.hypot(self.target_x - self.x, self.target_y - self.y)


@dataclass
class FallingEntity:
    """Common state of everything that falls from the top of the playfield."""
    uid: int
    x: float
    y: float
    speed: float          # px/frame before frame scaling
    wobble_phase: float
    wobble_rate: float    # rad/s

    def wobble_offset(self, amplitude: float) -> float:
        """Horizontal displacement from the wobble sinusoid."""
        return math.sin(self.wobble_phase) * amplitude

    def effective_position(self, amplitude: float) -> Tuple[float, float]:
        """Wobble-adjusted position used for both drawing and collision."""
        return (self.x + self.wobble_offset(amplitude), self.y)


@dataclass
class Collectible(FallingEntity):
    """An ice-cream scoop. Rare scoops are the golden, high-value variant."""
    flavor: Flavor
    rare: bool = False
    rotation: float = 0.0


@dataclass
class PowerUp(FallingEntity):
    """A falling power-up token."""
    kind: PowerUpKind


Entity = Union[Collectible, PowerUp]
