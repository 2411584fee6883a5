"""
Tests for the CoreGame tick driver.

Scenario tests use a "quiet" config with spawning pushed out of reach and
place entities by hand with CoreGame.add_entity().
"""

import dataclasses

import pytest

from skate_party.catch_core.config_loader import load_classic_config, load_config
from skate_party.catch_core.entities import Collectible, Flavor, PowerUp, PowerUpKind
from skate_party.catch_core.game import CoreGame
from skate_party.catch_core.input_adapter import Intent
from skate_party.catch_core.persistence import InMemoryHighScoreStore
from skate_party.catch_core.session import SessionMode


def make_scoop(uid, x=400.0, y=518.0, rare=False):
    return Collectible(
        uid=uid, x=x, y=y, speed=2.0, wobble_phase=0.0,
        wobble_rate=0.0, flavor=Flavor.MANGO, rare=rare
    )


def make_falling_scoop(uid):
    """Far from the avatar and one tick away from leaving the playfield."""
    return make_scoop(uid, x=40.0, y=639.0)


def make_token(uid, kind, x=400.0, y=518.0):
    return PowerUp(uid=uid, x=x, y=y, speed=2.0, wobble_phase=0.0, wobble_rate=0.0, kind=kind)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def quiet_config(config):
    return dataclasses.replace(
        config,
        difficulty=dataclasses.replace(
            config.difficulty, initial_spawn_interval=1e9, min_spawn_interval=1e9
        ),
        spawning=dataclasses.replace(
            config.spawning, rare_enabled=False, power_up_enabled=False
        )
    )


@pytest.fixture
def store():
    return InMemoryHighScoreStore()


@pytest.fixture
def game(quiet_config, store):
    game = CoreGame(config=quiet_config, seed=42, high_score_store=store)
    game.start()
    return game


class TestStartMode:
    """Ticks outside PLAYING change nothing."""

    def test_idle_tick_is_noop(self, config):
        game = CoreGame(config=config, seed=1)
        before = game.snapshot

        for _ in range(120):
            result = game.tick()

        assert game.mode is SessionMode.START
        assert result.snapshot is before
        assert game.entities == ()
        assert game.snapshot.elapsed == 0.0

    def test_start(self, config):
        game = CoreGame(config=config, seed=1)
        snapshot = game.start()

        assert snapshot.mode is SessionMode.PLAYING
        assert snapshot.lives == 10
        assert snapshot.score == 0

    def test_start_while_playing_ignored(self, game):
        game.tick()
        elapsed = game.snapshot.elapsed
        game.start()
        assert game.snapshot.elapsed == elapsed


class TestCatchesAndMisses:
    """Scripted catches and misses."""

    def test_catch(self, game):
        game.add_entity(make_scoop(100))
        result = game.tick()

        assert len(result.catches) == 1
        assert result.delta_score == 10
        assert result.snapshot.combo == 1
        assert game.entities == ()

    def test_rare_catch_at_combo_five(self, game):
        for uid in range(4):
            game.add_entity(make_scoop(uid))
            game.tick()
        game.add_entity(make_scoop(4, rare=True))
        result = game.tick()

        assert result.catches[0].points == 200
        assert result.milestone
        assert game.score == 240

    def test_miss_counted_once(self, game):
        game.add_entity(make_falling_scoop(100))
        first = game.tick()
        second = game.tick()

        assert len(first.misses) == 1
        assert second.misses == []
        assert game.session.lives == 9
        assert game.scorer.misses == 1

    def test_catches_before_misses(self, game):
        """A catch and a miss in the same tick: the miss sees the new combo."""
        game.add_entity(make_falling_scoop(1))
        game.add_entity(make_scoop(2))
        result = game.tick()

        assert result.misses[0].combo_lost == 1
        assert result.snapshot.combo == 0
        assert result.snapshot.score == 10

    def test_dt_is_clamped(self, game):
        game.tick(1.0)
        assert game.session.elapsed == pytest.approx(0.05)


class TestGameOver:
    """The last life ends the session exactly once."""

    def test_game_over_once(self, game, store):
        game.add_entity(make_scoop(0))
        game.tick()
        for uid in range(1, 13):
            game.add_entity(make_falling_scoop(uid))
        result = game.tick()

        assert result.game_over
        assert len(result.misses) == 10
        assert game.is_over
        assert game.session.lives == 0
        assert game.high_score == 10
        assert store.writes == 1

    def test_nothing_changes_after_game_over(self, game):
        for uid in range(10):
            game.add_entity(make_falling_scoop(uid))
        game.tick()
        snapshot = game.snapshot

        for _ in range(300):
            result = game.tick()
            assert result.spawned == 0
            assert result.delta_score == 0

        assert game.snapshot is snapshot
        assert game.session.elapsed == snapshot.elapsed

    def test_restart_resets_everything(self, game):
        game.add_entity(make_token(0, PowerUpKind.MAGNETISM))
        game.add_entity(make_scoop(1, y=516.0))
        game.tick()
        for uid in range(2, 12):
            game.add_entity(make_falling_scoop(uid))
        game.add_entity(make_scoop(20, x=600.0, y=100.0))
        game.tick()
        assert game.is_over

        snapshot = game.start()

        assert snapshot.mode is SessionMode.PLAYING
        assert snapshot.score == 0
        assert snapshot.combo == 0
        assert snapshot.lives == 10
        assert snapshot.entities == ()
        assert snapshot.effects == ()
        assert snapshot.high_score == 10
        assert game.scorer.catches == 0

    def test_reset_returns_to_start(self, game):
        game.tick()
        snapshot = game.reset()
        assert snapshot.mode is SessionMode.START
        assert snapshot.elapsed == 0.0


class TestPowerUps:
    """Power-up effects inside the tick."""

    def test_life_gain_at_max(self, game):
        game.add_entity(make_token(0, PowerUpKind.LIFE_GAIN))
        result = game.tick()

        assert not result.power_ups[0].life_gained
        assert game.session.lives == 10
        assert result.snapshot.effects == ()

    def test_magnetism_recatch_resets_timer(self, game):
        game.add_entity(make_token(0, PowerUpKind.MAGNETISM))
        game.tick()
        assert game.effects.remaining(PowerUpKind.MAGNETISM) == pytest.approx(6.0)

        game.run(10)
        assert game.effects.remaining(PowerUpKind.MAGNETISM) < 6.0

        game.add_entity(make_token(1, PowerUpKind.MAGNETISM))
        game.tick()
        assert game.effects.remaining(PowerUpKind.MAGNETISM) == pytest.approx(6.0)
        assert len(game.effects) == 1

    def test_slowdown_halves_fall(self, game):
        game.add_entity(make_token(0, PowerUpKind.SLOWDOWN))
        game.tick()
        game.add_entity(make_scoop(1, x=700.0, y=100.0))
        game.tick()

        assert game.entities[0].y == pytest.approx(101.0, abs=1e-3)

    def test_score_boost(self, game):
        game.add_entity(make_token(0, PowerUpKind.SCORE_BOOST))
        game.tick()
        game.add_entity(make_scoop(1))
        result = game.tick()

        assert result.catches[0].points == 20
        assert result.catches[0].boosted

    def test_effects_expire(self, game):
        game.add_entity(make_token(0, PowerUpKind.SLOWDOWN))
        game.tick()
        result = game.run(400)

        assert not game.effects.is_active(PowerUpKind.SLOWDOWN)
        assert result.snapshot.effect_remaining(PowerUpKind.SLOWDOWN) == 0.0


class TestInput:
    """Target updates from hosts."""

    def test_set_target_clamped(self, game):
        game.set_target(-50.0, 10_000.0)
        assert game.avatar.target == (30.0, 520.0)

    def test_classic_ignores_vertical_target(self):
        game = CoreGame(config=load_classic_config(), seed=3)
        game.start()
        game.set_target(100.0, 200.0)
        assert game.avatar.target == (100.0, 520.0)

    def test_intent_start(self, quiet_config):
        game = CoreGame(config=quiet_config, seed=3)
        game.apply_intent(Intent(start=True), 0.016)
        assert game.is_playing

    def test_intent_pointer(self, game):
        game.apply_intent(Intent(pointer=(250.0, 300.0)), 0.016)
        assert game.avatar.target == (250.0, 300.0)

    def test_intent_pointer_wins_over_keys(self, game):
        """A pointer position overrides held keys in the same intent."""
        game.apply_intent(Intent(pointer=(250.0, 300.0), keys=(1.0, 0.0)), 0.02)
        assert game.avatar.target == (250.0, 300.0)

    def test_intent_keys(self, game):
        start_x = game.avatar.target_x
        game.apply_intent(Intent(keys=(1.0, 0.0)), 0.02)
        assert game.avatar.target_x == pytest.approx(start_x + 10.0)

    def test_intent_ignored_before_start(self, quiet_config):
        game = CoreGame(config=quiet_config, seed=3)
        target = game.avatar.target
        game.apply_intent(Intent(pointer=(100.0, 100.0)), 0.016)
        assert game.avatar.target == target


class TestDeterminism:
    """A seed and an input script fully determine a session."""

    @staticmethod
    def play(config, seed):
        game = CoreGame(config=config, seed=seed)
        game.start()
        for i in range(1500):
            game.set_target(100.0 + (i * 7) % 600, 520.0)
            if game.tick().game_over:
                break
        return game.snapshot

    def test_same_seed_same_session(self, config):
        a = self.play(config, 11)
        b = self.play(config, 11)

        assert a.score == b.score
        assert a.lives == b.lives
        assert [(e.x, e.y) for e in a.entities] == [(e.x, e.y) for e in b.entities]

    def test_cosmetics_do_not_change_outcomes(self, config):
        no_fx = dataclasses.replace(
            config, cosmetics=dataclasses.replace(config.cosmetics, enabled=False)
        )
        a = self.play(config, 5)
        b = self.play(no_fx, 5)

        assert a.score == b.score
        assert a.elapsed == b.elapsed
        assert b.particles == ()


class TestSnapshot:
    """Snapshots are read-only copies."""

    def test_snapshot_is_frozen(self, game):
        snapshot = game.tick().snapshot
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.score = 1000

    def test_snapshot_detached_from_live_state(self, game):
        game.add_entity(make_scoop(0, x=700.0, y=100.0))
        snapshot = game.tick().snapshot
        y = snapshot.entities[0].y
        game.tick()
        assert snapshot.entities[0].y == y

    def test_add_entity_rejects_other_types(self, game):
        with pytest.raises(TypeError):
            game.add_entity("scoop")

    def test_info_keys(self, game):
        info = game.get_info()
        for key in ("score", "combo", "lives", "elapsed", "mode", "high_score", "active_effects"):
            assert key in info
