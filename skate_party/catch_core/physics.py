"""
Movement & Physics Step
=======================

Per-tick kinematics. Nothing here is physically accurate: the avatar
follows its target by exponential smoothing, entities fall at a constant
scaled speed, and magnetism is a direct position nudge.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.entities import Avatar, Collectible, Entity


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class PhysicsStep:
    """
    Moves the avatar and every falling entity by one tick.

    Frame-rate independence comes from frame_scale = dt * reference_fps,
    so speeds are expressed in px per reference frame.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize physics step.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._avatar_cfg = config.avatar
        self._entity_cfg = config.entities
        self._power_cfg = config.power_ups

    # ---- Avatar ----

    def avatar_bounds(self) -> Tuple[float, float, float, float]:
        """
        Reachable avatar area.

        Returns:
            (min_x, max_x, min_y, max_y). min_y == max_y when vertical
            movement is disabled.
        """
        width = self._config.playfield.width
        height = self._config.playfield.height
        half = self._avatar_cfg.width / 2
        rest_y = height - self._avatar_cfg.bottom_offset
        if self._avatar_cfg.vertical_movement:
            min_y = min(self._avatar_cfg.top_margin, rest_y)
        else:
            min_y = rest_y
        return (half, width - half, min_y, rest_y)

    def clamp_target(self, avatar: Avatar) -> None:
        """Clamp the avatar target into bounds. Out-of-range input is never an error."""
        min_x, max_x, min_y, max_y = self.avatar_bounds()
        avatar.target_x = _clamp(avatar.target_x, min_x, max_x)
        avatar.target_y = _clamp(avatar.target_y, min_y, max_y)

    def move_avatar(self, avatar: Avatar) -> None:
        """Clamp, then close a fixed fraction of the gap to the target."""
        self.clamp_target(avatar)
        smoothing = self._avatar_cfg.smoothing
        avatar.x += (avatar.target_x - avatar.x) * smoothing
        avatar.y += (avatar.target_y - avatar.y) * smoothing

        min_x, max_x, min_y, max_y = self.avatar_bounds()
        avatar.x = _clamp(avatar.x, min_x, max_x)
        avatar.y = _clamp(avatar.y, min_y, max_y)

    # ---- Falling entities ----

    def frame_scale(self, dt: float) -> float:
        return dt * self._config.simulation.reference_fps

    def advance_entities(
        self,
        entities: Iterable[Entity],
        dt: float,
        slowdown_active: bool = False
    ) -> None:
        """
        Fall, wobble and spin every entity.

        Args:
            entities: Entities in flight.
            dt: Tick duration in seconds.
            slowdown_active: True while a Slowdown effect is running.
        """
        scale = self.frame_scale(dt)
        if slowdown_active:
            scale *= self._power_cfg.slowdown_factor
        rotation_step = self._entity_cfg.rotation_rate * dt

        for entity in entities:
            entity.y += entity.speed * scale
            entity.wobble_phase += entity.wobble_rate * dt
            if isinstance(entity, Collectible):
                entity.rotation += rotation_step

    def apply_magnetism(
        self,
        entities: Iterable[Entity],
        avatar: Avatar,
        dt: float
    ) -> int:
        """
        Pull collectibles inside the magnet radius toward the avatar.

        Pull is strongest at the avatar and fades linearly to zero at the
        radius. Power-ups are not pulled.

        Returns:
            Number of entities moved.
        """
        radius = self._power_cfg.magnet_radius
        strength = self._power_cfg.magnet_strength * self.frame_scale(dt)
        amplitude = self._entity_cfg.wobble_amplitude
        pulled = 0

        for entity in entities:
            if not isinstance(entity, Collectible):
                continue
            ex, ey = entity.effective_position(amplitude)
            dx = avatar.x - ex
            dy = avatar.y - ey
            dist = math.hypot(dx, dy)
            if dist >= radius or dist == 0.0:
                continue
            # Never overshoot the avatar
            step = min(strength * (1.0 - dist / radius), dist)
            entity.x += dx / dist * step
            entity.y += dy / dist * step
            pulled += 1

        return pulled
