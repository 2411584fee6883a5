"""
Difficulty Scheduler
====================

Maps elapsed session time to spawn cadence and fall speed.
"""

from __future__ import annotations

from dataclasses import dataclass

from skate_party.catch_core.config_loader import DifficultyConfig


@dataclass(frozen=True)
class Difficulty:
    """Spawn cadence and base fall speed at one instant."""
    spawn_interval: float   # Seconds between regular collectibles
    fall_speed: float       # px/frame


def ramp_progress(elapsed: float, config: DifficultyConfig) -> float:
    """Fraction of the ramp window covered, clamped to [0, 1]."""
    return max(0.0, min(elapsed / config.ramp_seconds, 1.0))


def difficulty_at(elapsed: float, config: DifficultyConfig) -> Difficulty:
    """
    Linearly interpolate difficulty over the ramp window.

    Both values stop at their maximum once the window has passed.

    Args:
        elapsed: Session time in seconds.
        config: Ramp endpoints.

    Returns:
        Difficulty for this instant.
    """
    t = ramp_progress(elapsed, config)
    spawn_interval = config.initial_spawn_interval - t * (
        config.initial_spawn_interval - config.min_spawn_interval
    )
    fall_speed = config.initial_speed + t * (config.max_speed - config.initial_speed)
    return Difficulty(spawn_interval=spawn_interval, fall_speed=fall_speed)
