"""
Core Game
=========

Tick driver combining movement, spawning, collision, scoring, effects
and the session state machine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from skate_party.catch_core.collision import CollisionDetector
from skate_party.catch_core.config_loader import GameConfig, get_config
from skate_party.catch_core.cosmetics import CosmeticSystem, ParticleKind
from skate_party.catch_core.difficulty import Difficulty, difficulty_at
from skate_party.catch_core.effects import EffectManager
from skate_party.catch_core.entities import Avatar, Collectible, Entity, PowerUp, PowerUpKind
from skate_party.catch_core.input_adapter import Intent
from skate_party.catch_core.persistence import (
    BestEffortHighScore,
    HighScoreStore,
    InMemoryHighScoreStore,
)
from skate_party.catch_core.physics import PhysicsStep
from skate_party.catch_core.rng import RandomSource
from skate_party.catch_core.scoring import MissEvent, PowerUpEvent, ScoreEvent, ScoreTracker
from skate_party.catch_core.session import Session, SessionMode
from skate_party.catch_core.spawner import EntitySpawner
from skate_party.catch_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single simulation tick."""
    snapshot: GameSnapshot
    delta_score: int = 0
    catches: List[ScoreEvent] = field(default_factory=list)
    power_ups: List[PowerUpEvent] = field(default_factory=list)
    misses: List[MissEvent] = field(default_factory=list)
    spawned: int = 0
    expired: List[PowerUpKind] = field(default_factory=list)
    game_over: bool = False
    dt: float = 0.0

    @property
    def milestone(self) -> bool:
        return any(event.milestone for event in self.catches)


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Session state machine (START / PLAYING / GAME_OVER)
    - Avatar and entity movement
    - Spawning (RNG)
    - Collision classification
    - Scoring, combo and lives
    - Timed power-up effects
    - High-score persistence
    - State snapshots

    One tick = one display frame. Ticks outside PLAYING change nothing.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        high_score_store: Optional[HighScoreStore] = None
    ):
        """
        Initialize game in START mode.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            high_score_store: Persistence backend. In-memory if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        # Initialize subsystems
        self._rng = RandomSource(seed)
        self._session = Session(config.session.max_lives)
        self._physics = PhysicsStep(config)
        self._spawner = EntitySpawner(config, self._rng)
        self._collision = CollisionDetector(config)
        self._scorer = ScoreTracker(config)
        self._effects = EffectManager(config)
        self._cosmetics = CosmeticSystem(config, self._rng)
        self._snapshot_builder = SnapshotBuilder(config)
        self._high_score = BestEffortHighScore(
            high_score_store if high_score_store is not None else InMemoryHighScoreStore()
        )
        self._high_score.load()

        # Game state
        self._avatar = self._make_avatar()
        self._entities: List[Entity] = []
        self._last_snapshot: GameSnapshot = self._build_snapshot()

    # ---- Read access ----

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def session(self) -> Session:
        return self._session

    @property
    def mode(self) -> SessionMode:
        return self._session.mode

    @property
    def is_playing(self) -> bool:
        return self._session.is_playing

    @property
    def is_over(self) -> bool:
        """True once the session has reached GAME_OVER."""
        return self._session.mode is SessionMode.GAME_OVER

    @property
    def score(self) -> int:
        """Current score."""
        return self._session.score

    @property
    def high_score(self) -> int:
        return self._high_score.value

    @property
    def avatar(self) -> Avatar:
        return self._avatar

    @property
    def entities(self) -> Tuple[Entity, ...]:
        """Entities in flight (read-only view)."""
        return tuple(self._entities)

    @property
    def effects(self) -> EffectManager:
        return self._effects

    @property
    def scorer(self) -> ScoreTracker:
        return self._scorer

    @property
    def difficulty(self) -> Difficulty:
        return difficulty_at(self._session.elapsed, self._config.difficulty)

    def avatar_bounds(self) -> Tuple[float, float, float, float]:
        """Reachable avatar area as (min_x, max_x, min_y, max_y)."""
        return self._physics.avatar_bounds()

    @property
    def snapshot(self) -> GameSnapshot:
        """Most recent settled snapshot."""
        return self._last_snapshot

    # ---- Session control ----

    def _make_avatar(self) -> Avatar:
        min_x, max_x, _, rest_y = self._physics.avatar_bounds()
        center_x = (min_x + max_x) / 2
        return Avatar(
            x=center_x,
            y=rest_y,
            target_x=center_x,
            target_y=rest_y,
            width=self._config.avatar.width,
            height=self._config.avatar.height
        )

    def _clear_world(self) -> None:
        """Drop every entity, effect, cosmetic and timer from the previous session."""
        self._entities = []
        self._effects.clear()
        self._cosmetics.clear()
        self._scorer.reset()
        self._spawner.reset()
        self._avatar = self._make_avatar()

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Hard reset back to an idle START session.

        Args:
            seed: New random seed. Continues the current stream if None.

        Returns:
            Initial game snapshot.
        """
        if seed is not None:
            self._seed = seed
            self._rng.reset(seed)
        self._session = Session(self._config.session.max_lives)
        self._clear_world()
        self._last_snapshot = self._build_snapshot()
        return self._last_snapshot

    def start(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Handle the start/restart signal.

        From GAME_OVER the session first restarts (GAME_OVER -> START),
        then begins. While PLAYING the signal is ignored.

        Args:
            seed: New random seed. Continues the current stream if None.

        Returns:
            Snapshot of the fresh session.
        """
        if self._session.is_playing:
            return self._last_snapshot

        if self._session.mode is SessionMode.GAME_OVER:
            self._session.restart()

        if seed is not None:
            self._seed = seed
            self._rng.reset(seed)

        self._clear_world()
        self._high_score.retry()
        self._high_score.load()
        self._session.begin()
        logger.info("Session started (seed=%s, high score=%d)", self._seed, self.high_score)

        self._last_snapshot = self._build_snapshot()
        return self._last_snapshot

    # ---- Input ----

    def set_target(self, x: float, y: Optional[float] = None) -> None:
        """Absolute target (pointer/touch). y is ignored without vertical movement."""
        self._avatar.target_x = float(x)
        if y is not None and self._config.avatar.vertical_movement:
            self._avatar.target_y = float(y)
        self._physics.clamp_target(self._avatar)

    def nudge_target(self, dx: float, dy: float = 0.0) -> None:
        """Relative target move (keyboard integration)."""
        self.set_target(self._avatar.target_x + dx, self._avatar.target_y + dy)

    def apply_intent(self, intent: Intent, dt: float) -> None:
        """
        Apply a drained input intent before the next tick.

        Args:
            intent: Pending intent from an InputBuffer.
            dt: Frame time used to integrate held keys.
        """
        if intent.start and not self._session.is_playing:
            self.start()
        if not self._session.is_playing:
            return
        if intent.pointer is not None:
            self.set_target(*intent.pointer)
        elif intent.has_keys:
            speed = self._config.avatar.keyboard_speed * self._clamp_dt(dt)
            self.nudge_target(intent.keys[0] * speed, intent.keys[1] * speed)

    def add_entity(self, entity: Entity) -> None:
        """Put a prepared entity in flight (scripted scenarios and debug tools)."""
        if not isinstance(entity, (Collectible, PowerUp)):
            raise TypeError(f"Not a falling entity: {entity!r}")
        self._entities.append(entity)

    # ---- Simulation ----

    def _clamp_dt(self, dt: float) -> float:
        return max(0.0, min(float(dt), self._config.simulation.max_frame_dt))

    def tick(self, dt: Optional[float] = None) -> TickResult:
        """
        Advance the simulation by one frame.

        Order: effects countdown, movement, spawning, collision, then
        catches before misses. A miss that empties the lives commits the
        high score, ends the session and abandons the rest of the tick.

        Args:
            dt: Frame time in seconds (clamped). Uses simulation.fixed_dt if None.

        Returns:
            TickResult with the settled snapshot and the tick's events.
        """
        if not self._session.is_playing:
            return TickResult(snapshot=self._last_snapshot, game_over=self.is_over)

        dt = self._clamp_dt(self._config.simulation.fixed_dt if dt is None else dt)
        score_before = self._session.score
        result = TickResult(snapshot=self._last_snapshot, dt=dt)

        self._session.advance_clock(dt)
        result.expired = self._effects.tick(dt)
        difficulty = difficulty_at(self._session.elapsed, self._config.difficulty)

        # Movement
        self._physics.move_avatar(self._avatar)
        self._cosmetics.emit_trail(self._avatar)
        self._physics.advance_entities(
            self._entities,
            dt,
            slowdown_active=self._effects.is_active(PowerUpKind.SLOWDOWN)
        )
        if self._effects.is_active(PowerUpKind.MAGNETISM):
            self._physics.apply_magnetism(self._entities, self._avatar, dt)

        # Spawning
        spawned = self._spawner.update(dt, difficulty)
        self._entities.extend(spawned)
        result.spawned = len(spawned)

        # Collision
        collisions = self._collision.classify(self._entities, self._avatar)
        self._entities = collisions.in_flight

        boosted = self._effects.is_active(PowerUpKind.SCORE_BOOST)
        amplitude = self._config.entities.wobble_amplitude
        for scoop in collisions.caught_collectibles:
            event = self._scorer.apply_catch(self._session, scoop, boosted=boosted)
            result.catches.append(event)
            x, y = scoop.effective_position(amplitude)
            self._cosmetics.burst(x, y, scoop.flavor, ParticleKind.SPARKLE)
            self._cosmetics.score_popup(x, y, event.points)

        for token in collisions.caught_power_ups:
            result.power_ups.append(
                self._scorer.apply_power_up(self._session, self._effects, token.kind, token.uid)
            )

        floor_y = self._config.playfield.height - 20
        for scoop in collisions.missed:
            miss = self._scorer.apply_miss(self._session, scoop.uid)
            result.misses.append(miss)
            self._cosmetics.burst(scoop.x, floor_y, scoop.flavor, ParticleKind.SPLAT)
            if miss.game_over:
                self._finish()
                result.game_over = True
                break

        if not result.game_over:
            self._cosmetics.entity_sparkles(self._entities, amplitude)
        self._cosmetics.tick(dt)

        result.delta_score = self._session.score - score_before
        self._last_snapshot = self._build_snapshot(milestone=result.milestone)
        result.snapshot = self._last_snapshot
        return result

    def _finish(self) -> None:
        if self._high_score.commit(self._session.score):
            logger.info("New high score: %d", self._session.score)
        self._session.end()

    def run(self, ticks: int, dt: Optional[float] = None) -> TickResult:
        """Run up to `ticks` ticks, stopping early at game over."""
        result = TickResult(snapshot=self._last_snapshot, game_over=self.is_over)
        for _ in range(ticks):
            if not self._session.is_playing:
                break
            result = self.tick(dt)
        return result

    def _build_snapshot(self, milestone: bool = False) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            session=self._session,
            avatar=self._avatar,
            entities=self._entities,
            effects=self._effects,
            multiplier=self._scorer.multiplier(self._session.combo),
            high_score=self.high_score,
            cosmetics=self._cosmetics if self._cosmetics.enabled else None,
            milestone=milestone
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._session.score,
            "combo": self._session.combo,
            "best_combo": self._session.best_combo,
            "lives": self._session.lives,
            "elapsed": self._session.elapsed,
            "mode": self._session.mode.value,
            "catches": self._scorer.catches,
            "misses": self._scorer.misses,
            "power_ups": self._scorer.power_ups,
            "high_score": self.high_score,
            "entity_count": len(self._entities),
            "active_effects": [e.kind.value for e in self._effects.active()],
        }
