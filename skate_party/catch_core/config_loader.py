"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml

from skate_party.catch_core.entities import PowerUpKind


_PACKAGE_DIR = os.path.dirname(os.path.dirname(__file__))
DEFAULT_CONFIG_PATH = os.path.join(_PACKAGE_DIR, "game_config.yaml")
CLASSIC_CONFIG_PATH = os.path.join(_PACKAGE_DIR, "classic_config.yaml")


@dataclass(frozen=True)
class PlayfieldConfig:
    """Playfield geometry."""
    width: float
    height: float


@dataclass(frozen=True)
class AvatarConfig:
    """Avatar footprint and movement feel."""
    width: float
    height: float
    smoothing: float          # Fraction of the gap to target closed per tick
    keyboard_speed: float     # Target speed in px/s while a key is held
    bottom_offset: float      # Resting y is playfield height minus this
    top_margin: float         # Highest reachable y with vertical movement
    vertical_movement: bool


@dataclass(frozen=True)
class EntityConfig:
    """Falling entity geometry and motion."""
    size: float
    catch_radius: float
    power_up_catch_radius: float
    wobble_amplitude: float
    wobble_rate_min: float
    wobble_rate_max: float
    rotation_rate: float
    speed_jitter_min: float
    speed_jitter_max: float


@dataclass(frozen=True)
class DifficultyConfig:
    """Linear difficulty ramp endpoints."""
    initial_spawn_interval: float
    min_spawn_interval: float
    initial_speed: float
    max_speed: float
    ramp_seconds: float


@dataclass(frozen=True)
class SpawnConfig:
    """Rare collectible and power-up spawn timers."""
    rare_enabled: bool
    rare_interval_min: float
    rare_interval_max: float
    rare_speed_factor: float
    power_up_enabled: bool
    power_up_interval: float
    power_up_speed_factor: float
    power_up_kinds: Tuple[PowerUpKind, ...]


@dataclass(frozen=True)
class PowerUpConfig:
    """Timed effect durations and strengths."""
    magnetism_duration: float
    slowdown_duration: float
    score_boost_duration: float
    magnet_radius: float
    magnet_strength: float
    slowdown_factor: float
    score_boost_factor: int

    def duration(self, kind: PowerUpKind) -> float:
        """Effect duration for a timed kind."""
        if kind is PowerUpKind.MAGNETISM:
            return self.magnetism_duration
        if kind is PowerUpKind.SLOWDOWN:
            return self.slowdown_duration
        if kind is PowerUpKind.SCORE_BOOST:
            return self.score_boost_duration
        raise ValueError(f"{kind.name} is not a timed effect")


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    base_points: int
    combo_tier: int
    max_multiplier: int
    rare_multiplier: int
    milestone_every: int


@dataclass(frozen=True)
class SessionConfig:
    """Session limits."""
    max_lives: int


@dataclass(frozen=True)
class CosmeticsConfig:
    """Trail and particle limits. No gameplay effect."""
    enabled: bool
    max_particles: int
    max_trail: int
    trail_decay: float       # Life lost per second
    trail_threshold: float   # Minimum avatar lag (px) that emits a trail dot


@dataclass(frozen=True)
class SimulationConfig:
    """Tick timing."""
    reference_fps: float
    max_frame_dt: float
    fixed_dt: float


@dataclass(frozen=True)
class CapsConfig:
    """Episode limits used by the Gymnasium wrapper."""
    max_session_seconds: float


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_entities: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    playfield: PlayfieldConfig
    avatar: AvatarConfig
    entities: EntityConfig
    difficulty: DifficultyConfig
    spawning: SpawnConfig
    power_ups: PowerUpConfig
    scoring: ScoringConfig
    session: SessionConfig
    cosmetics: CosmeticsConfig
    simulation: SimulationConfig
    caps: CapsConfig
    observation: ObservationConfig

    @property
    def power_ups_enabled(self) -> bool:
        return self.spawning.power_up_enabled and len(self.spawning.power_up_kinds) > 0

    def with_playfield(self, width: float, height: float) -> "GameConfig":
        """Copy of this config for a differently sized playfield."""
        config = dataclasses.replace(
            self,
            playfield=PlayfieldConfig(width=float(width), height=float(height))
        )
        _validate_config(config)
        return config


def _parse_kinds(names) -> Tuple[PowerUpKind, ...]:
    """Parse power-up kind names from YAML."""
    kinds = []
    for name in names or ():
        try:
            kinds.append(PowerUpKind(str(name)))
        except ValueError:
            raise ValueError(f"Unknown power-up kind: {name!r}") from None
    return tuple(kinds)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    playfield = config.playfield
    if playfield.width <= 2 * config.entities.size:
        raise ValueError(
            f"playfield.width ({playfield.width}) must exceed twice entities.size "
            f"({config.entities.size})"
        )
    if playfield.width < config.avatar.width:
        raise ValueError(
            f"playfield.width ({playfield.width}) is narrower than the avatar "
            f"({config.avatar.width})"
        )
    if playfield.height <= config.avatar.bottom_offset:
        raise ValueError(
            f"playfield.height ({playfield.height}) must exceed avatar.bottom_offset "
            f"({config.avatar.bottom_offset})"
        )

    if not 0.0 < config.avatar.smoothing <= 1.0:
        raise ValueError(f"avatar.smoothing must be in (0, 1], got {config.avatar.smoothing}")

    difficulty = config.difficulty
    if difficulty.min_spawn_interval <= 0 or difficulty.initial_spawn_interval <= 0:
        raise ValueError("Spawn intervals must be positive")
    if difficulty.ramp_seconds <= 0:
        raise ValueError(f"difficulty.ramp_seconds must be positive, got {difficulty.ramp_seconds}")

    spawning = config.spawning
    if spawning.rare_enabled and not 0 < spawning.rare_interval_min <= spawning.rare_interval_max:
        raise ValueError(
            f"Rare interval range [{spawning.rare_interval_min}, {spawning.rare_interval_max}] "
            f"is invalid"
        )
    if spawning.power_up_enabled and spawning.power_up_interval <= 0:
        raise ValueError(f"spawning.power_up_interval must be positive, got {spawning.power_up_interval}")
    if len(set(spawning.power_up_kinds)) != len(spawning.power_up_kinds):
        raise ValueError("spawning.power_up_kinds contains duplicates")

    if config.session.max_lives < 1:
        raise ValueError(f"session.max_lives must be at least 1, got {config.session.max_lives}")

    scoring = config.scoring
    if scoring.combo_tier < 1 or scoring.max_multiplier < 1 or scoring.milestone_every < 1:
        raise ValueError("Scoring tiers must be at least 1")

    if config.simulation.max_frame_dt <= 0 or config.simulation.fixed_dt <= 0:
        raise ValueError("Simulation time steps must be positive")

    if config.observation.max_entities < 1:
        raise ValueError(f"observation.max_entities must be at least 1, got {config.observation.max_entities}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to a config YAML. If None, uses game_config.yaml.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    playfield_data = raw["playfield"]
    playfield = PlayfieldConfig(
        width=float(playfield_data["width"]),
        height=float(playfield_data["height"])
    )

    avatar_data = raw["avatar"]
    avatar = AvatarConfig(
        width=float(avatar_data["width"]),
        height=float(avatar_data["height"]),
        smoothing=float(avatar_data.get("smoothing", 0.15)),
        keyboard_speed=float(avatar_data.get("keyboard_speed", 500.0)),
        bottom_offset=float(avatar_data.get("bottom_offset", 80)),
        top_margin=float(avatar_data.get("top_margin", 120)),
        vertical_movement=bool(avatar_data.get("vertical_movement", False))
    )

    entity_data = raw["entities"]
    entities = EntityConfig(
        size=float(entity_data["size"]),
        catch_radius=float(entity_data["catch_radius"]),
        power_up_catch_radius=float(
            entity_data.get("power_up_catch_radius", entity_data["catch_radius"])
        ),
        wobble_amplitude=float(entity_data.get("wobble_amplitude", 15.0)),
        wobble_rate_min=float(entity_data.get("wobble_rate_min", 2.0)),
        wobble_rate_max=float(entity_data.get("wobble_rate_max", 5.0)),
        rotation_rate=float(entity_data.get("rotation_rate", 2.0)),
        speed_jitter_min=float(entity_data.get("speed_jitter_min", 0.8)),
        speed_jitter_max=float(entity_data.get("speed_jitter_max", 1.2))
    )

    difficulty_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        initial_spawn_interval=float(difficulty_data["initial_spawn_interval"]),
        min_spawn_interval=float(difficulty_data["min_spawn_interval"]),
        initial_speed=float(difficulty_data["initial_speed"]),
        max_speed=float(difficulty_data["max_speed"]),
        ramp_seconds=float(difficulty_data["ramp_seconds"])
    )

    # Optional sections: a missing section disables the feature
    spawn_data = raw.get("spawning", {})
    spawning = SpawnConfig(
        rare_enabled=bool(spawn_data.get("rare_enabled", False)),
        rare_interval_min=float(spawn_data.get("rare_interval_min", 8.0)),
        rare_interval_max=float(spawn_data.get("rare_interval_max", 15.0)),
        rare_speed_factor=float(spawn_data.get("rare_speed_factor", 1.4)),
        power_up_enabled=bool(spawn_data.get("power_up_enabled", False)),
        power_up_interval=float(spawn_data.get("power_up_interval", 10.0)),
        power_up_speed_factor=float(spawn_data.get("power_up_speed_factor", 0.7)),
        power_up_kinds=_parse_kinds(spawn_data.get("power_up_kinds", []))
    )

    power_data = raw.get("power_ups", {})
    power_ups = PowerUpConfig(
        magnetism_duration=float(power_data.get("magnetism_duration", 6.0)),
        slowdown_duration=float(power_data.get("slowdown_duration", 5.0)),
        score_boost_duration=float(power_data.get("score_boost_duration", 8.0)),
        magnet_radius=float(power_data.get("magnet_radius", 200.0)),
        magnet_strength=float(power_data.get("magnet_strength", 6.0)),
        slowdown_factor=float(power_data.get("slowdown_factor", 0.5)),
        score_boost_factor=int(power_data.get("score_boost_factor", 2))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        base_points=int(scoring_data["base_points"]),
        combo_tier=int(scoring_data.get("combo_tier", 5)),
        max_multiplier=int(scoring_data.get("max_multiplier", 5)),
        rare_multiplier=int(scoring_data.get("rare_multiplier", 10)),
        milestone_every=int(scoring_data.get("milestone_every", 5))
    )

    session = SessionConfig(
        max_lives=int(raw["session"]["max_lives"])
    )

    cosmetics_data = raw.get("cosmetics", {})
    cosmetics = CosmeticsConfig(
        enabled=bool(cosmetics_data.get("enabled", True)),
        max_particles=int(cosmetics_data.get("max_particles", 300)),
        max_trail=int(cosmetics_data.get("max_trail", 60)),
        trail_decay=float(cosmetics_data.get("trail_decay", 3.0)),
        trail_threshold=float(cosmetics_data.get("trail_threshold", 2.0))
    )

    sim_data = raw.get("simulation", {})
    simulation = SimulationConfig(
        reference_fps=float(sim_data.get("reference_fps", 60)),
        max_frame_dt=float(sim_data.get("max_frame_dt", 0.05)),
        fixed_dt=float(sim_data.get("fixed_dt", 1.0 / 60.0))
    )

    caps = CapsConfig(
        max_session_seconds=float(raw.get("caps", {}).get("max_session_seconds", 600.0))
    )

    observation = ObservationConfig(
        max_entities=int(raw.get("observation", {}).get("max_entities", 32))
    )

    config = GameConfig(
        playfield=playfield,
        avatar=avatar,
        entities=entities,
        difficulty=difficulty,
        spawning=spawning,
        power_ups=power_ups,
        scoring=scoring,
        session=session,
        cosmetics=cosmetics,
        simulation=simulation,
        caps=caps,
        observation=observation
    )

    _validate_config(config)
    return config


def load_classic_config() -> GameConfig:
    """Load the reduced five-life rule set."""
    return load_config(CLASSIC_CONFIG_PATH)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
