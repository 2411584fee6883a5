"""
Test suite for snapshot packing into observation arrays.
"""

import dataclasses

import numpy as np
import pytest

from skate_party.catch_core.config_loader import load_config
from skate_party.catch_core.entities import Collectible, Flavor, PowerUp, PowerUpKind
from skate_party.catch_core.game import CoreGame
from skate_party.catch_core.state_snapshot import (
    ENTITY_COLLECTIBLE,
    ENTITY_EMPTY,
    ENTITY_RARE,
    POWER_UP_CODES,
)


def make_scoop(uid, x, y, rare=False):
    return Collectible(
        uid=uid, x=x, y=y, speed=2.0, wobble_phase=0.0,
        wobble_rate=0.0, flavor=Flavor.MANGO, rare=rare
    )


@pytest.fixture
def snapshot():
    """Three entities in flight at known heights."""
    config = load_config()
    quiet = dataclasses.replace(
        config,
        difficulty=dataclasses.replace(
            config.difficulty, initial_spawn_interval=1e9, min_spawn_interval=1e9
        ),
        spawning=dataclasses.replace(config.spawning, rare_enabled=False, power_up_enabled=False)
    )
    game = CoreGame(config=quiet, seed=42)
    game.start()
    game.add_entity(make_scoop(0, 200.0, 100.0))
    game.add_entity(make_scoop(1, 300.0, 300.0, rare=True))
    game.add_entity(PowerUp(
        uid=2, x=500.0, y=200.0, speed=2.0, wobble_phase=0.0,
        wobble_rate=0.0, kind=PowerUpKind.SLOWDOWN
    ))
    return game.tick().snapshot


class TestObservationPacking:
    """Verify the fixed-size arrays built from a snapshot."""

    def test_entities_ordered_lowest_first(self, snapshot):
        obs = snapshot.to_obs_dict(32)

        assert int(obs["entity_count"]) == 3
        assert list(obs["ent_type"][:3]) == [
            ENTITY_RARE, POWER_UP_CODES[PowerUpKind.SLOWDOWN], ENTITY_COLLECTIBLE
        ]
        assert obs["ent_y"][0] > obs["ent_y"][1] > obs["ent_y"][2]
        assert obs["ent_x"][0] == pytest.approx(300.0)

    def test_padding(self, snapshot):
        obs = snapshot.to_obs_dict(32)

        assert obs["ent_type"].shape == (32,)
        assert np.all(obs["ent_type"][3:] == ENTITY_EMPTY)
        assert list(obs["ent_mask"][:4]) == [1, 1, 1, 0]
        assert obs["ent_mask"].dtype == np.int8

    def test_truncation(self, snapshot):
        obs = snapshot.to_obs_dict(2)

        assert int(obs["entity_count"]) == 2
        assert obs["ent_type"].shape == (2,)
        assert list(obs["ent_type"]) == [ENTITY_RARE, POWER_UP_CODES[PowerUpKind.SLOWDOWN]]

    def test_scalars(self, snapshot):
        obs = snapshot.to_obs_dict(32)

        assert obs["score"].dtype == np.int64
        assert obs["score"].shape == ()
        assert int(obs["lives"]) == 10
        np.testing.assert_allclose(obs["avatar"], [400.0, 520.0, 400.0, 520.0])
        np.testing.assert_allclose(obs["playfield"], [800.0, 600.0])

    def test_effect_timers(self, snapshot):
        obs = snapshot.to_obs_dict(32)
        assert obs["effects"].shape == (3,)
        assert np.all(obs["effects"] == 0.0)

    def test_entity_views(self, snapshot):
        by_uid = {e.uid: e for e in snapshot.entities}

        assert by_uid[1].rare
        assert by_uid[2].is_power_up
        assert by_uid[2].power_up is PowerUpKind.SLOWDOWN
        assert by_uid[0].flavor is Flavor.MANGO
