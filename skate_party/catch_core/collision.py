"""
Collision Detector
==================

Classifies every falling entity as caught, missed, discarded or still
in flight.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.entities import Avatar, Collectible, Entity, PowerUp


@dataclass
class CollisionResult:
    """Partition of the entities checked in one tick. Each entity lands in exactly one list."""
    caught_collectibles: List[Collectible] = field(default_factory=list)
    caught_power_ups: List[PowerUp] = field(default_factory=list)
    missed: List[Collectible] = field(default_factory=list)
    discarded: List[PowerUp] = field(default_factory=list)
    in_flight: List[Entity] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return (
            len(self.caught_collectibles) + len(self.caught_power_ups)
            + len(self.missed) + len(self.discarded)
        )


class CollisionDetector:
    """
    Proximity test between the avatar and each entity.

    Power-ups use a slightly larger catch radius than collectibles.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize detector.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._amplitude = config.entities.wobble_amplitude
        self._size = config.entities.size
        self._catch_radius = config.entities.catch_radius
        self._power_up_radius = config.entities.power_up_catch_radius

    def catch_radius(self, entity: Entity) -> float:
        if isinstance(entity, PowerUp):
            return self._power_up_radius
        return self._catch_radius

    def distance(self, entity: Entity, avatar: Avatar) -> float:
        """Distance from the wobble-adjusted entity position to the avatar."""
        ex, ey = entity.effective_position(self._amplitude)
        return math.hypot(ex - avatar.x, ey - avatar.y)

    def is_below_playfield(self, entity: Entity) -> bool:
        return entity.y > self._config.playfield.height + self._size

    def classify(self, entities: Iterable[Entity], avatar: Avatar) -> CollisionResult:
        """
        Classify entities for this tick.

        A catch takes precedence over leaving the playfield.

        Args:
            entities: Entities in flight.
            avatar: The player avatar after movement.

        Returns:
            CollisionResult partitioning the input.
        """
        result = CollisionResult()

        for entity in entities:
            if not isinstance(entity, (Collectible, PowerUp)):
                raise TypeError(f"Not a falling entity: {entity!r}")
            caught = self.distance(entity, avatar) < self.catch_radius(entity)
            if isinstance(entity, Collectible):
                if caught:
                    result.caught_collectibles.append(entity)
                elif self.is_below_playfield(entity):
                    result.missed.append(entity)
                else:
                    result.in_flight.append(entity)
            else:
                if caught:
                    result.caught_power_ups.append(entity)
                elif self.is_below_playfield(entity):
                    result.discarded.append(entity)
                else:
                    result.in_flight.append(entity)

        return result
