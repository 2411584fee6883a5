"""
Tests for the session state machine.
"""

import pytest

from skate_party.catch_core.session import Session, SessionMode, SessionTransitionError


@pytest.fixture
def session():
    return Session(max_lives=3)


class TestTransitions:
    """Test START -> PLAYING -> GAME_OVER -> START."""

    def test_initial_mode(self, session):
        assert session.mode is SessionMode.START
        assert not session.is_playing
        assert session.lives == 3

    def test_full_cycle(self, session):
        session.begin()
        assert session.is_playing
        session.end()
        assert session.mode is SessionMode.GAME_OVER
        session.restart()
        assert session.mode is SessionMode.START

    @pytest.mark.parametrize("action", ["end", "restart"])
    def test_illegal_from_start(self, session, action):
        with pytest.raises(SessionTransitionError):
            getattr(session, action)()

    def test_cannot_begin_twice(self, session):
        session.begin()
        with pytest.raises(SessionTransitionError):
            session.begin()

    def test_game_over_only_once(self, session):
        session.begin()
        session.end()
        with pytest.raises(SessionTransitionError):
            session.end()

    def test_restart_resets_stats(self, session):
        session.begin()
        session.add_points(50)
        session.extend_combo()
        session.lose_life()
        session.advance_clock(3.0)
        session.end()

        assert session.score == 50    # final stats readable in GAME_OVER

        session.restart()
        assert session.score == 0
        assert session.combo == 0
        assert session.best_combo == 0
        assert session.lives == 3
        assert session.elapsed == 0.0


class TestCounters:
    """Test counter bounds."""

    def test_lives_floor(self, session):
        for _ in range(5):
            session.lose_life()
        assert session.lives == 0

    def test_lives_cap(self, session):
        assert not session.gain_life()
        session.lose_life()
        assert session.gain_life()
        assert session.lives == 3

    def test_negative_points_rejected(self, session):
        with pytest.raises(ValueError):
            session.add_points(-1)

    def test_clock_ignores_negative(self, session):
        session.advance_clock(-1.0)
        assert session.elapsed == 0.0

    def test_invalid_max_lives(self):
        with pytest.raises(ValueError):
            Session(0)
