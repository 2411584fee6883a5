"""
Baseline Chaser Agent - Skates under the scoop that lands first.

This is a simple heuristic agent that reads the fixed-size entity arrays
of the observation, finds the scoop that will reach the avatar's row
soonest, and steers underneath it.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark for teams to compare against
3. A verification that the environment API works correctly

Strategy:
- Ignore empty slots (ent_mask == 0) and anything already below the avatar
- Estimate how long each remaining entity needs to reach the avatar row
- Chase the one landing first; power-ups only win ties
- Stay on the resting row (action y = 1.0)
"""

import numpy as np
from typing import Any, Dict, Optional

from skate_party.catch_core.config_loader import GameConfig, load_config
from skate_party.catch_core.physics import PhysicsStep
from skate_party.catch_core.state_snapshot import ENTITY_RARE

# Frames per second the entity speeds are expressed in
REFERENCE_FPS = 60.0
# Extra seconds charged to a power-up so scoops are preferred
POWER_UP_PENALTY = 0.25


class SkatePartyAgent:
    """
    Greedy agent that always chases the next scoop to land.

    Uses the entity arrays (ent_x, ent_y, ent_speed, ent_type, ent_mask)
    and the avatar row to convert a playfield x into an action.
    """

    def __init__(self, config: Optional[GameConfig] = None, debug: bool = False):
        """
        Initialize the agent.

        Args:
            config: Rule set the agent plays. Uses game_config.yaml if None.
            debug: If True, print decisions to stdout.
        """
        if config is None:
            config = load_config()
        self.debug = debug
        self._min_x, self._max_x, _, self._rest_y = PhysicsStep(config).avatar_bounds()

    def reset(self, seed: Optional[int] = None) -> None:
        """Nothing to reset; the agent keeps no per-episode state."""

    def x_to_action(self, x: float) -> float:
        """Convert a playfield x to an action component in [-1, 1]."""
        span = self._max_x - self._min_x
        if span <= 0:
            return 0.0
        return float(np.clip((x - self._min_x) / span * 2.0 - 1.0, -1.0, 1.0))

    def act(self, observation: Dict[str, Any], debug: bool = False) -> np.ndarray:
        """
        Choose where to skate.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            Action (x, y) in [-1, 1].
        """
        avatar_x = float(observation["avatar"][0])
        mask = observation["ent_mask"].astype(bool)

        ent_x = observation["ent_x"][mask]
        ent_y = observation["ent_y"][mask]
        speed = np.maximum(observation["ent_speed"][mask], 1e-6)
        ent_type = observation["ent_type"][mask]

        target_x = avatar_x
        chosen = -1
        above = ent_y <= self._rest_y
        if np.any(above):
            # Seconds until each entity reaches the avatar row
            eta = (self._rest_y - ent_y) / (speed * REFERENCE_FPS)
            eta = np.where(ent_type > ENTITY_RARE, eta + POWER_UP_PENALTY, eta)
            eta = np.where(above, eta, np.inf)
            chosen = int(np.argmin(eta))
            target_x = float(ent_x[chosen])

        action = np.array([self.x_to_action(target_x), 1.0], dtype=np.float32)

        if debug or self.debug:
            print(f"[Chaser Agent] Entities={int(mask.sum())}, "
                  f"Chosen={chosen}, Target x={target_x:.1f}, "
                  f"Avatar x={avatar_x:.1f}, Action={action[0]:.3f}")

        return action


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> SkatePartyAgent:
    """Factory function to create an agent instance."""
    return SkatePartyAgent(**kwargs)
