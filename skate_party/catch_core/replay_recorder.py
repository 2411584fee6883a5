"""
Replay Recorder
===============

Records SkatePartyEnv episodes as JSON: the seed, every normalized action,
and the score and lives after each tick. Every random draw is seeded, so
replay_actions() re-simulates a saved run tick for tick.

    with ReplayRecorder(SkatePartyEnv(), agent_name="chaser") as recorder:
        obs, info = recorder.reset(seed=42)
        ...
        recorder.save("chaser_42.json")
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import gymnasium as gym

from skate_party.catch_core.config_loader import GameConfig, load_config
from skate_party.catch_core.env_gym import SkatePartyEnv

logger = logging.getLogger(__name__)

# Config sections that never change gameplay outcomes
_HASH_EXCLUDED = ("cosmetics", "observation")


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """Timestamped name: {agent}_{YYYYMMDD_HHMMSS}[_s{seed}].json"""
    stem = f"{agent_name}_{datetime.now():%Y%m%d_%H%M%S}"
    if seed is not None:
        stem += f"_s{seed}"
    return Path(directory or ".") / f"{stem}.json"


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Short digest of the gameplay rules a replay depends on."""
    rules = dataclasses.asdict(config or load_config())
    for section in _HASH_EXCLUDED:
        rules.pop(section, None)
    payload = json.dumps(rules, sort_keys=True, default=str).encode()
    return hashlib.md5(payload).hexdigest()[:8]


class ReplayRecorder(gym.Wrapper):
    """Env wrapper that logs each action alongside the session it produced."""

    def __init__(
        self,
        env: gym.Env,
        agent_name: str = "unknown",
        auto_save_path: Optional[str] = None
    ):
        super().__init__(env)
        self.agent_name = agent_name
        self.auto_save_path = auto_save_path
        self._config_hash = compute_config_hash(getattr(env.unwrapped, "config", None))
        self._seed: Optional[int] = None
        self._recording = False
        self._clear()

    def _clear(self) -> None:
        self._actions: List[List[float]] = []
        self._scores: List[int] = []
        self._lives: List[int] = []
        self._last_info: Dict[str, Any] = {}
        self._end_reason = ""

    @property
    def recording(self) -> bool:
        return self._recording

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict] = None):
        self._clear()
        self._seed = seed
        self._recording = True
        return self.env.reset(seed=seed, options=options)

    def step(self, action):
        flat = [float(v) for v in np.asarray(action, dtype=np.float32).reshape(-1)]
        obs, reward, terminated, truncated, info = self.env.step(action)

        if self._recording:
            self._actions.append(flat)
            self._scores.append(int(info["score"]))
            self._lives.append(int(info["lives"]))
            self._last_info = info
            if terminated:
                self._end_reason = "game_over"
            elif truncated:
                self._end_reason = "time_cap"

        if (terminated or truncated) and self.auto_save_path:
            self.save(self.auto_save_path)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        info = self._last_info
        return {
            "seed": self._seed,
            "agent": self.agent_name,
            "config_hash": self._config_hash,
            "actions": [list(a) for a in self._actions],
            "scores": list(self._scores),
            "lives": list(self._lives),
            "final_score": self._scores[-1] if self._scores else 0,
            "best_combo": int(info.get("best_combo", 0)),
            "catches": int(info.get("catches", 0)),
            "misses": int(info.get("misses", 0)),
            "total_steps": len(self._actions),
            "end_reason": self._end_reason,
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Write the replay as JSON.

        Args:
            path: Target file. A timestamped name is generated if None.
            overwrite: Raise FileExistsError instead of replacing a file when False.
            directory: Where the generated name goes (ignored with an explicit path).
        """
        if path is None:
            path = generate_replay_filename(self.agent_name, self._seed, directory)
        path = Path(path)
        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        data = self.get_replay_data()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        logger.info(
            "Replay saved to %s (seed=%s, steps=%d, score=%d, %s)",
            path, self._seed, data["total_steps"], data["final_score"], data["end_reason"] or "unfinished"
        )
        return path


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """Load replay data saved by ReplayRecorder.save()."""
    with open(path, "r") as f:
        data = json.load(f)
    for key in ("seed", "actions"):
        if key not in data:
            raise ValueError(f"Replay file {path} is missing '{key}'")
    return data


def replay_actions(
    actions: Sequence[Sequence[float]],
    seed: Optional[int],
    config: Optional[GameConfig] = None
) -> int:
    """Re-simulate recorded actions and return the final score."""
    env = SkatePartyEnv(config=config)
    env.reset(seed=seed)
    score = 0
    for action in actions:
        _, _, terminated, truncated, info = env.step(np.asarray(action, dtype=np.float32))
        score = int(info["score"])
        if terminated or truncated:
            break
    env.close()
    return score


def verify_replay(data: Dict[str, Any], config: Optional[GameConfig] = None) -> bool:
    """
    True if re-simulating the replay reproduces its recorded final score.

    Raises ValueError when the replay was recorded under different rules.
    """
    config = config or load_config()
    expected = compute_config_hash(config)
    recorded = data.get("config_hash")
    if recorded is not None and recorded != expected:
        raise ValueError(f"Replay config hash {recorded} does not match {expected}")
    return replay_actions(data["actions"], data["seed"], config) == data.get("final_score", 0)


def record_episode(
    env: gym.Env,
    agent_fn: Callable,
    seed: int,
    save_path: Optional[str] = None,
    agent_name: str = "unknown",
    max_steps: Optional[int] = None
) -> Dict[str, Any]:
    """Play one episode with agent_fn, optionally stopping after max_steps ticks."""
    recorder = ReplayRecorder(env, agent_name=agent_name)
    obs, _ = recorder.reset(seed=seed)

    steps = 0
    done = False
    while not done:
        obs, _, terminated, truncated, _ = recorder.step(agent_fn(obs))
        steps += 1
        done = terminated or truncated or (max_steps is not None and steps >= max_steps)

    if save_path:
        recorder.save(save_path)
    return recorder.get_replay_data()
