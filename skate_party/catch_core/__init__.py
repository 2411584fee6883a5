"""
Catch Core - The per-frame simulation of the catch game.

Main exports:
- CoreGame: Tick driver and session state machine owner
- GameSnapshot: Read-only post-tick state for renderers and agents
- SkatePartyEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
- InputBuffer / Intent: Input adapter contract
- High-score stores: InMemoryHighScoreStore, JsonFileHighScoreStore
"""

from skate_party.catch_core.config_loader import (
    GameConfig,
    load_config,
    load_classic_config,
)
from skate_party.catch_core.entities import Avatar, Collectible, Flavor, PowerUp, PowerUpKind
from skate_party.catch_core.session import Session, SessionMode, SessionTransitionError
from skate_party.catch_core.game import CoreGame, TickResult
from skate_party.catch_core.state_snapshot import GameSnapshot
from skate_party.catch_core.input_adapter import InputBuffer, Intent
from skate_party.catch_core.persistence import (
    BestEffortHighScore,
    HighScoreStore,
    InMemoryHighScoreStore,
    JsonFileHighScoreStore,
)
from skate_party.catch_core.env_gym import SkatePartyEnv
from skate_party.catch_core.replay_recorder import (
    ReplayRecorder,
    record_episode,
    replay_actions,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "load_classic_config",
    "Avatar",
    "Collectible",
    "Flavor",
    "PowerUp",
    "PowerUpKind",
    "Session",
    "SessionMode",
    "SessionTransitionError",
    "CoreGame",
    "TickResult",
    "GameSnapshot",
    "InputBuffer",
    "Intent",
    "BestEffortHighScore",
    "HighScoreStore",
    "InMemoryHighScoreStore",
    "JsonFileHighScoreStore",
    "SkatePartyEnv",
    "ReplayRecorder",
    "record_episode",
    "replay_actions",
    "generate_replay_filename",
]
