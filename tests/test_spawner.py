"""
Tests for timer-gated entity spawning.
"""

import pytest

from skate_party.catch_core.config_loader import load_classic_config, load_config
from skate_party.catch_core.difficulty import Difficulty
from skate_party.catch_core.entities import Collectible, Flavor, PowerUp, PowerUpKind
from skate_party.catch_core.rng import RandomSource
from skate_party.catch_core.spawner import EntitySpawner, SpawnTimer


class ScriptedRandom(RandomSource):
    """Predictable draws: midpoints, 0.5 and the first option."""

    def random(self):
        return 0.5

    def uniform(self, low, high):
        return (low + high) / 2

    def choice(self, options):
        return options[0]


EASY = Difficulty(spawn_interval=1.2, fall_speed=2.0)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def spawner(config):
    return EntitySpawner(config, ScriptedRandom(0))


class TestSpawnTimer:
    """Test the countdown primitive."""

    def test_fires_only_after_interval_exceeded(self):
        timer = SpawnTimer(interval=1.0)
        assert not timer.advance(1.0)
        assert timer.advance(0.01)

    def test_restarts_after_firing(self):
        timer = SpawnTimer(interval=1.0)
        assert timer.advance(1.5)
        assert timer.since_last == 0.0
        assert not timer.advance(0.5)

    def test_disabled_never_fires(self):
        timer = SpawnTimer(interval=0.1, enabled=False)
        assert not timer.advance(100.0)


class TestRegularSpawns:
    """Test regular collectibles."""

    def test_nothing_before_interval(self, spawner):
        assert spawner.update(1.0, EASY) == []

    def test_spawn_after_interval(self, spawner, config):
        spawner.update(1.0, EASY)
        spawned = spawner.update(0.3, EASY)

        assert len(spawned) == 1
        scoop = spawned[0]
        assert isinstance(scoop, Collectible)
        assert scoop.flavor is Flavor.BLUEBERRY
        assert not scoop.rare
        assert scoop.x == pytest.approx(400.0)
        assert scoop.y == -config.entities.size
        assert scoop.speed == pytest.approx(2.0)
        assert scoop.wobble_rate == pytest.approx(3.5)

    def test_cadence(self, spawner):
        """With 0.5 s ticks and a 1.2 s interval every third tick spawns."""
        counts = [len(spawner.update(0.5, EASY)) for _ in range(6)]
        assert counts == [0, 0, 1, 0, 0, 1]

    def test_uids_increase(self, spawner):
        uids = [spawner.update(1.3, EASY)[0].uid for _ in range(3)]
        assert uids == [0, 1, 2]

    def test_spawn_x_inside_margins(self, config):
        spawner = EntitySpawner(config, RandomSource(123))
        size = config.entities.size
        for _ in range(200):
            for entity in spawner.update(1.3, EASY):
                assert size <= entity.x <= config.playfield.width - size


class TestRareAndPowerUps:
    """Test the independent rare and power-up timers."""

    def test_rare_interval_rolled(self, spawner):
        assert spawner.rare_interval == pytest.approx(11.5)

    def test_all_three_timers(self, spawner):
        """One long tick fires regular, rare and power-up timers once each."""
        spawned = spawner.update(11.6, EASY)

        assert len(spawned) == 3
        regular, rare, token = spawned
        assert not regular.rare
        assert rare.rare
        assert rare.speed == pytest.approx(2.0 * 1.4)
        assert isinstance(token, PowerUp)
        assert token.kind is PowerUpKind.MAGNETISM
        assert token.speed == pytest.approx(2.0 * 0.7)
        assert [e.uid for e in spawned] == [0, 1, 2]

    def test_classic_spawns_regular_only(self):
        spawner = EntitySpawner(load_classic_config(), ScriptedRandom(0))
        spawned = spawner.update(20.0, EASY)

        assert len(spawned) == 1
        assert isinstance(spawned[0], Collectible)
        assert not spawned[0].rare


class TestResetAndDeterminism:
    """Test reset and seeded reproducibility."""

    def test_reset_rearms_timers(self, spawner):
        spawner.update(1.0, EASY)
        spawner.update(1.3, EASY)
        spawner.reset()

        assert spawner.update(0.5, EASY) == []
        assert spawner.update(0.8, EASY)[0].uid == 0

    def test_same_seed_same_entities(self, config):
        a = EntitySpawner(config, RandomSource(7))
        b = EntitySpawner(config, RandomSource(7))
        for _ in range(50):
            assert a.update(0.7, EASY) == b.update(0.7, EASY)
