"""
Tests for high-score stores and the best-effort boundary.
"""

import json
import logging

import pytest

from skate_party.catch_core.config_loader import load_config
from skate_party.catch_core.entities import Collectible, Flavor
from skate_party.catch_core.game import CoreGame
from skate_party.catch_core.persistence import (
    BestEffortHighScore,
    InMemoryHighScoreStore,
    JsonFileHighScoreStore,
)


class FailingStore:
    """Store whose backend is unavailable."""

    def __init__(self):
        self.calls = 0

    def get_high_score(self):
        self.calls += 1
        raise OSError("disk unavailable")

    def set_high_score(self, score):
        self.calls += 1
        raise OSError("disk unavailable")


@pytest.fixture
def json_store(tmp_path):
    return JsonFileHighScoreStore(tmp_path / "scores" / "high.json")


class TestJsonFileStore:
    """Test the JSON document store."""

    def test_missing_file_reads_zero(self, json_store):
        assert json_store.get_high_score() == 0

    def test_write_then_read(self, json_store):
        json_store.set_high_score(420)

        assert json_store.get_high_score() == 420
        with open(json_store.path) as f:
            assert json.load(f) == {"high_score": 420}

    def test_malformed_document(self, json_store):
        json_store.path.parent.mkdir(parents=True)
        json_store.path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            json_store.get_high_score()

    def test_corrupt_file(self, json_store):
        json_store.path.parent.mkdir(parents=True)
        json_store.path.write_text("{not json")
        with pytest.raises(ValueError):
            json_store.get_high_score()


class TestBestEffortHighScore:
    """Test the error boundary."""

    def test_load(self):
        high = BestEffortHighScore(InMemoryHighScoreStore(300))
        assert high.load() == 300

    def test_commit_only_improvements(self):
        store = InMemoryHighScoreStore(100)
        high = BestEffortHighScore(store)
        high.load()

        assert not high.commit(50)
        assert high.commit(150)
        assert store.get_high_score() == 150

    def test_commit_is_idempotent(self):
        store = InMemoryHighScoreStore()
        high = BestEffortHighScore(store)

        assert high.commit(80)
        assert not high.commit(80)
        assert store.writes == 1

    def test_read_failure_degrades(self, caplog):
        store = FailingStore()
        high = BestEffortHighScore(store)

        with caplog.at_level(logging.WARNING, logger="skate_party.catch_core.persistence"):
            assert high.load() == 0

        assert high.degraded
        assert "read failed" in caplog.text

    def test_degraded_skips_store_until_retry(self):
        store = FailingStore()
        high = BestEffortHighScore(store)
        high.load()
        calls = store.calls

        assert high.commit(500)
        assert high.value == 500
        assert store.calls == calls

        high.retry()
        high.load()
        assert store.calls == calls + 1
        assert high.value == 500

    def test_write_failure_keeps_value(self):
        class ReadOnlyStore(InMemoryHighScoreStore):
            def set_high_score(self, score):
                raise PermissionError("read-only")

        high = BestEffortHighScore(ReadOnlyStore(10))
        high.load()

        assert high.commit(90)
        assert high.value == 90
        assert high.degraded


class TestGameWithStores:
    """Storage problems never interrupt play."""

    @staticmethod
    def lose_all_lives(game):
        for uid in range(game.session.lives):
            game.add_entity(Collectible(
                uid=uid, x=40.0, y=639.0, speed=2.0, wobble_phase=0.0,
                wobble_rate=0.0, flavor=Flavor.BLUEBERRY
            ))
        return game.tick()

    @staticmethod
    def catch_one(game):
        avatar = game.avatar
        game.add_entity(Collectible(
            uid=99, x=avatar.x, y=avatar.y - 2.0, speed=2.0, wobble_phase=0.0,
            wobble_rate=0.0, flavor=Flavor.MANGO
        ))
        game.tick()

    def test_failing_store_game_over(self):
        game = CoreGame(config=load_config(), seed=1, high_score_store=FailingStore())
        game.start()
        self.catch_one(game)

        result = self.lose_all_lives(game)

        assert result.game_over
        assert game.high_score == 10

    def test_high_score_survives_sessions(self, json_store):
        game = CoreGame(config=load_config(), seed=1, high_score_store=json_store)
        game.start()
        self.catch_one(game)
        self.lose_all_lives(game)

        assert json_store.get_high_score() == 10

        fresh = CoreGame(config=load_config(), seed=2, high_score_store=json_store)
        assert fresh.high_score == 10
