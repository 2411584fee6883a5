"""
Tests for replay recording and deterministic re-simulation.
"""

import dataclasses

import numpy as np
import pytest

from skate_party.catch_core.config_loader import load_config
from skate_party.catch_core.env_gym import SkatePartyEnv
from skate_party.catch_core.replay_recorder import (
    ReplayRecorder,
    compute_config_hash,
    generate_replay_filename,
    load_replay,
    record_episode,
    replay_actions,
    verify_replay,
)


def sweeping_agent(obs):
    """Sweep left and right across the rink."""
    phase = float(obs["elapsed"]) * 1.5
    return np.array([np.sin(phase), 1.0], dtype=np.float32)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def env(config):
    env = SkatePartyEnv(config=config)
    yield env
    env.close()


class TestRecording:
    """Test the recorder wrapper."""

    def test_records_every_step(self, env):
        recorder = ReplayRecorder(env, agent_name="sweeper")
        obs, _ = recorder.reset(seed=3)
        for _ in range(50):
            obs, _, _, _, _ = recorder.step(sweeping_agent(obs))

        data = recorder.get_replay_data()
        assert data["seed"] == 3
        assert data["agent"] == "sweeper"
        assert data["total_steps"] == 50
        assert len(data["actions"][0]) == 2
        assert len(data["scores"]) == 50

    def test_records_lives_and_tallies(self, env):
        """Lives per tick and the final catch/miss tallies match the env."""
        recorder = ReplayRecorder(env)
        obs, _ = recorder.reset(seed=3)
        info = {}
        for _ in range(400):
            obs, _, terminated, truncated, info = recorder.step(sweeping_agent(obs))
            if terminated or truncated:
                break

        data = recorder.get_replay_data()
        assert len(data["lives"]) == data["total_steps"]
        assert data["lives"][-1] == info["lives"]
        assert data["catches"] == info["catches"]
        assert data["misses"] == info["misses"]
        assert data["best_combo"] == info["best_combo"]

    def test_end_reason(self, config):
        capped = dataclasses.replace(
            config, caps=dataclasses.replace(config.caps, max_session_seconds=0.5)
        )
        data = record_episode(SkatePartyEnv(config=capped), sweeping_agent, seed=1)
        assert data["end_reason"] == "time_cap"

    def test_save_and_load(self, env, tmp_path):
        data = record_episode(env, sweeping_agent, seed=9, max_steps=120)
        recorder = ReplayRecorder(env)
        recorder.reset(seed=9)
        for action in data["actions"]:
            recorder.step(np.asarray(action, dtype=np.float32))

        path = recorder.save(tmp_path / "replays" / "run.json")
        loaded = load_replay(path)

        assert loaded["actions"] == data["actions"]
        assert loaded["final_score"] == data["final_score"]

    def test_no_overwrite(self, env, tmp_path):
        recorder = ReplayRecorder(env)
        recorder.reset(seed=1)
        path = tmp_path / "run.json"
        recorder.save(path)
        with pytest.raises(FileExistsError):
            recorder.save(path, overwrite=False)

    def test_load_rejects_incomplete(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"actions": []}')
        with pytest.raises(ValueError):
            load_replay(path)

    def test_filename(self):
        name = generate_replay_filename("chaser", seed=4)
        assert name.name.startswith("chaser_")
        assert name.name.endswith("_s4.json")


class TestDeterministicReplay:
    """Re-simulating recorded actions reproduces the score."""

    def test_replay_matches(self, env, config):
        data = record_episode(env, sweeping_agent, seed=21, max_steps=1500)
        assert replay_actions(data["actions"], data["seed"], config) == data["final_score"]

    def test_verify_replay(self, env, config):
        data = record_episode(env, sweeping_agent, seed=8, max_steps=600)
        assert verify_replay(data, config)

    def test_tampered_score_fails(self, env, config):
        data = record_episode(env, sweeping_agent, seed=8, max_steps=600)
        data["final_score"] += 1
        assert not verify_replay(data, config)


class TestConfigHash:
    """Only gameplay parameters feed the hash."""

    def test_cosmetics_ignored(self, config):
        no_fx = dataclasses.replace(
            config, cosmetics=dataclasses.replace(config.cosmetics, enabled=False)
        )
        assert compute_config_hash(no_fx) == compute_config_hash(config)

    def test_rules_change_hash(self, config):
        fewer_lives = dataclasses.replace(
            config, session=dataclasses.replace(config.session, max_lives=3)
        )
        assert compute_config_hash(fewer_lives) != compute_config_hash(config)

    def test_mismatched_hash_rejected(self, env, config):
        data = record_episode(env, sweeping_agent, seed=2, max_steps=10)
        data["config_hash"] = "deadbeef"
        with pytest.raises(ValueError):
            verify_replay(data, config)
