"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the catch game.
One environment step is one fixed-length simulation tick.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from skate_party.catch_core.config_loader import GameConfig, load_config
from skate_party.catch_core.entities import TIMED_KINDS
from skate_party.catch_core.game import CoreGame
from skate_party.catch_core.session import SessionMode
from skate_party.catch_core.state_snapshot import ENTITY_EMPTY, NUM_ENTITY_CODES, GameSnapshot


class SkatePartyEnv(gym.Env):
    """
    Ice Cream Skate Party as a Gymnasium environment.

    Action Space:
        Box(low=-1.0, high=1.0, shape=(2,), dtype=float32)
        Avatar target across the reachable area, (-1, -1) top-left to
        (1, 1) bottom-right. The y component is ignored when the rule set
        has no vertical movement.

    Observation Space:
        Dict of numpy arrays built by GameSnapshot.to_obs_dict().

    Reward:
        Points scored during the step.

    Info:
        Contains score, delta_score, combo, lives, misses, etc.
    """

    metadata = {
        "render_modes": [],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to a config YAML. Uses default if None.
            config: Already loaded config; takes precedence over config_path.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self._debug = debug
        self._max_entities = self._config.observation.max_entities
        self.render_mode = None

        self._game = CoreGame(config=self._config)
        self._bounds = self._game.avatar_bounds()

        self.action_space = spaces.Box(
            low=-1.0,
            high=1.0,
            shape=(2,),
            dtype=np.float32
        )
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] SkatePartyEnv initialized")
            print(f"[DEBUG]   Playfield: {self._config.playfield.width}x{self._config.playfield.height}")
            print(f"[DEBUG]   Max lives: {self._config.session.max_lives}")
            print(f"[DEBUG]   Power-ups: {self._config.power_ups_enabled}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_ent = self._max_entities
        playfield = self._config.playfield
        span = max(playfield.width, playfield.height) * 4

        return spaces.Dict({
            "avatar": spaces.Box(low=0, high=span, shape=(4,), dtype=np.float32),
            "playfield": spaces.Box(low=0, high=span, shape=(2,), dtype=np.float32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "combo": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "lives": spaces.Box(low=0, high=self._config.session.max_lives, shape=(), dtype=np.int32),
            "elapsed": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "mode": spaces.Discrete(len(SessionMode)),
            "effects": spaces.Box(low=0, high=np.inf, shape=(len(TIMED_KINDS),), dtype=np.float32),
            "entity_count": spaces.Box(low=0, high=max_ent, shape=(), dtype=np.int32),
            "ent_type": spaces.Box(low=ENTITY_EMPTY, high=NUM_ENTITY_CODES - 1, shape=(max_ent,), dtype=np.int16),
            "ent_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_speed": spaces.Box(low=0, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_mask": spaces.MultiBinary(max_ent),
        })

    def action_to_target(self, action: np.ndarray) -> Tuple[float, float]:
        """Map a normalized action to playfield target coordinates."""
        ax = float(np.clip(action[0], -1.0, 1.0))
        ay = float(np.clip(action[1], -1.0, 1.0))
        min_x, max_x, min_y, max_y = self._bounds
        x = min_x + (ax + 1.0) / 2.0 * (max_x - min_x)
        y = min_y + (ay + 1.0) / 2.0 * (max_y - min_y)
        return x, y

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment and begin a fresh session.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._game.reset(seed=seed)
        snapshot = self._game.start()

        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[np.ndarray, Tuple[float, float]]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one tick.

        Args:
            action: Normalized avatar target (x, y) in [-1, 1].

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        action = np.asarray(action, dtype=np.float32).reshape(-1)
        if action.size == 1:
            action = np.array([action[0], 1.0], dtype=np.float32)

        self._game.set_target(*self.action_to_target(action))
        result = self._game.tick()

        obs = self._snapshot_to_obs(result.snapshot)
        reward = float(result.delta_score)
        terminated = result.snapshot.is_game_over
        truncated = (
            not terminated
            and result.snapshot.elapsed >= self._config.caps.max_session_seconds
        )

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["caught"] = len(result.catches)
        info["missed"] = len(result.misses)
        info["milestone"] = result.milestone

        if self._debug and (result.catches or result.misses or result.power_ups):
            print(f"[DEBUG] t={result.snapshot.elapsed:.2f}: +{result.delta_score}, "
                  f"combo={result.snapshot.combo}, lives={result.snapshot.lives}, "
                  f"power_ups={[e.kind.value for e in result.power_ups]}")
            if terminated:
                print(f"[DEBUG] GAME OVER: score={result.snapshot.score}")

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        return snapshot.to_obs_dict(self._max_entities)

    def render(self) -> None:
        """Rendering is left to external hosts (see tools/play_human.py)."""
        return None

    def close(self) -> None:
        """Nothing to release."""

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
