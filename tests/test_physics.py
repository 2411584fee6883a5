"""
Tests for avatar movement, falling and magnetism.
"""

import math

import pytest

from skate_party.catch_core.config_loader import load_classic_config, load_config
from skate_party.catch_core.entities import Avatar, Collectible, Flavor, PowerUp, PowerUpKind
from skate_party.catch_core.physics import PhysicsStep

TICK = 1.0 / 60.0


def make_scoop(uid=0, x=400.0, y=100.0, speed=2.0, wobble_rate=0.0):
    return Collectible(
        uid=uid, x=x, y=y, speed=speed, wobble_phase=0.0,
        wobble_rate=wobble_rate, flavor=Flavor.MANGO
    )


def make_avatar(x=400.0, y=520.0):
    return Avatar(x=x, y=y, target_x=x, target_y=y, width=60.0, height=60.0)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def physics(config):
    return PhysicsStep(config)


class TestAvatarMovement:
    """Test clamping and smoothing."""

    def test_bounds_extended(self, physics):
        assert physics.avatar_bounds() == (30.0, 770.0, 120.0, 520.0)

    def test_bounds_classic(self):
        physics = PhysicsStep(load_classic_config())
        assert physics.avatar_bounds() == (30.0, 770.0, 520.0, 520.0)

    def test_target_clamped(self, physics):
        """Out-of-range targets are clamped, never rejected."""
        avatar = make_avatar()
        avatar.target_x, avatar.target_y = -100.0, 1000.0
        physics.clamp_target(avatar)
        assert avatar.target == (30.0, 520.0)

    def test_smoothing(self, physics):
        avatar = make_avatar()
        avatar.target_x = 500.0
        physics.move_avatar(avatar)
        assert avatar.x == pytest.approx(415.0)

    def test_converges_without_overshoot(self, physics):
        avatar = make_avatar()
        avatar.target_x = 700.0
        for _ in range(200):
            physics.move_avatar(avatar)
            assert avatar.x <= 700.0
        assert avatar.x == pytest.approx(700.0, abs=1e-3)

    def test_classic_pins_row(self):
        physics = PhysicsStep(load_classic_config())
        avatar = make_avatar()
        avatar.target_y = 150.0
        physics.move_avatar(avatar)
        assert avatar.y == 520.0
        assert avatar.target_y == 520.0


class TestFalling:
    """Test entity advance."""

    def test_fall_distance_scales_with_dt(self, physics):
        scoop = make_scoop(speed=2.0)
        physics.advance_entities([scoop], 0.05)
        assert scoop.y == pytest.approx(100.0 + 2.0 * 3.0)

    def test_slowdown_halves_fall(self, physics):
        scoop = make_scoop(speed=2.0)
        physics.advance_entities([scoop], 0.05, slowdown_active=True)
        assert scoop.y == pytest.approx(100.0 + 3.0)

    def test_wobble_and_rotation(self, physics):
        scoop = make_scoop(wobble_rate=4.0)
        physics.advance_entities([scoop], 0.5)
        assert scoop.wobble_phase == pytest.approx(2.0)
        assert scoop.rotation == pytest.approx(1.0)
        assert scoop.effective_position(15.0)[0] == pytest.approx(400.0 + math.sin(2.0) * 15.0)


class TestMagnetism:
    """Test the magnet pull."""

    def test_pull_inside_radius(self, physics):
        avatar = make_avatar()
        scoop = make_scoop(y=420.0)   # 100 px above the avatar

        moved = physics.apply_magnetism([scoop], avatar, TICK)

        assert moved == 1
        # 6 px/frame * (1 - 100/200)
        assert scoop.y == pytest.approx(423.0)
        assert scoop.x == pytest.approx(400.0)

    def test_outside_radius_untouched(self, physics):
        avatar = make_avatar()
        scoop = make_scoop(y=270.0)   # 250 px away
        assert physics.apply_magnetism([scoop], avatar, TICK) == 0
        assert scoop.y == 270.0

    def test_power_ups_not_pulled(self, physics):
        avatar = make_avatar()
        token = PowerUp(
            uid=1, x=400.0, y=420.0, speed=1.0, wobble_phase=0.0,
            wobble_rate=0.0, kind=PowerUpKind.SLOWDOWN
        )
        assert physics.apply_magnetism([token], avatar, TICK) == 0
        assert token.y == 420.0

    def test_never_overshoots(self, physics):
        avatar = make_avatar()
        scoop = make_scoop(y=519.0)
        physics.apply_magnetism([scoop], avatar, TICK)
        assert scoop.y == pytest.approx(520.0)
