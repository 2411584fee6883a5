"""
Entity Spawner
==============

Timer-gated creation of regular collectibles, rare (golden) collectibles
and power-ups.
"""

from __future__ import annotations

import math
from typing import List, Optional

from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.difficulty import Difficulty
from skate_party.catch_core.entities import Collectible, Entity, Flavor, PowerUp
from skate_party.catch_core.rng import RandomSource

FLAVORS = (Flavor.BLUEBERRY, Flavor.MANGO)


class SpawnTimer:
    """Time accumulated since the last spawn of one entity kind."""

    def __init__(self, interval: float = 0.0, enabled: bool = True):
        self.interval = interval
        self.enabled = enabled
        self.since_last = 0.0

    def advance(self, dt: float) -> bool:
        """Advance by dt. Returns True (and restarts) when the interval is exceeded."""
        if not self.enabled:
            return False
        self.since_last += dt
        if self.since_last > self.interval:
            self.since_last = 0.0
            return True
        return False

    def reset(self) -> None:
        self.since_last = 0.0


class EntitySpawner:
    """
    Three independent spawn timers.

    - Regular: interval follows the difficulty schedule
    - Rare: interval re-rolled from a fixed range after each spawn
    - Power-up: fixed interval, kind uniform over the enabled set
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            rng: Random source shared with the rest of the session.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else RandomSource()
        spawning = config.spawning

        self._regular = SpawnTimer()
        self._rare = SpawnTimer(enabled=spawning.rare_enabled)
        self._power_up = SpawnTimer(
            interval=spawning.power_up_interval,
            enabled=config.power_ups_enabled
        )
        self._next_uid = 0
        self.reset()

    def reset(self) -> None:
        """Re-arm every timer and restart entity ids."""
        self._regular.reset()
        self._rare.reset()
        self._power_up.reset()
        if self._rare.enabled:
            self._rare.interval = self._roll_rare_interval()
        self._next_uid = 0

    @property
    def rare_interval(self) -> float:
        """Interval the rare timer is currently waiting for."""
        return self._rare.interval

    def _roll_rare_interval(self) -> float:
        spawning = self._config.spawning
        return self._rng.uniform(spawning.rare_interval_min, spawning.rare_interval_max)

    def _take_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def _spawn_x(self) -> float:
        size = self._config.entities.size
        width = self._config.playfield.width
        return size + self._rng.random() * (width - size * 2)

    def _wobble_rate(self) -> float:
        entities = self._config.entities
        return self._rng.uniform(entities.wobble_rate_min, entities.wobble_rate_max)

    def make_collectible(self, fall_speed: float, rare: bool = False) -> Collectible:
        """Build one collectible above the top edge."""
        entities = self._config.entities
        flavor = self._rng.choice(FLAVORS)
        x = self._spawn_x()
        if rare:
            speed = fall_speed * self._config.spawning.rare_speed_factor
        else:
            speed = fall_speed * self._rng.uniform(entities.speed_jitter_min, entities.speed_jitter_max)
        return Collectible(
            uid=self._take_uid(),
            x=x,
            y=-entities.size,
            speed=speed,
            wobble_phase=0.0,
            wobble_rate=self._wobble_rate(),
            flavor=flavor,
            rare=rare,
            rotation=self._rng.random() * math.pi * 2
        )

    def make_power_up(self, fall_speed: float) -> PowerUp:
        """Build one power-up of a random enabled kind above the top edge."""
        kind = self._rng.choice(self._config.spawning.power_up_kinds)
        return PowerUp(
            uid=self._take_uid(),
            x=self._spawn_x(),
            y=-self._config.entities.size,
            speed=fall_speed * self._config.spawning.power_up_speed_factor,
            wobble_phase=0.0,
            wobble_rate=self._wobble_rate(),
            kind=kind
        )

    def update(self, dt: float, difficulty: Difficulty) -> List[Entity]:
        """
        Advance all timers and create whatever is due.

        Args:
            dt: Tick duration in seconds.
            difficulty: Current spawn cadence and fall speed.

        Returns:
            Newly created entities (zero to three).
        """
        spawned: List[Entity] = []

        self._regular.interval = difficulty.spawn_interval
        if self._regular.advance(dt):
            spawned.append(self.make_collectible(difficulty.fall_speed))

        if self._rare.advance(dt):
            spawned.append(self.make_collectible(difficulty.fall_speed, rare=True))
            self._rare.interval = self._roll_rare_interval()

        if self._power_up.advance(dt):
            spawned.append(self.make_power_up(difficulty.fall_speed))

        return spawned
