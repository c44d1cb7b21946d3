"""
Tests for the Orbit Camera Controller
======================================
"""

import math

import numpy as np
import pytest

from starnav.core.types import FingerStates, Gesture, GestureUpdate, Vec2
from starnav.modules.control.camera_controller import (
    OrbitCameraConfig, OrbitCameraController, map_openness_to_radius, spherical_to_cartesian,
)


def present_update(openness: float, movement=Vec2(0.0, 0.0)) -> GestureUpdate:
    return GestureUpdate(
        gesture=Gesture.OPEN,
        present=True,
        openness=openness,
        finger_states=FingerStates(True, True, True, True, True),
        position=Vec2(0.5, 0.5),
        movement=movement,
        pointer=Vec2(0.5, 0.5),
    )


class TestOpennessMapping:
    """Test suite for openness -> radius."""

    @pytest.fixture
    def config(self):
        return OrbitCameraConfig()

    @pytest.mark.parametrize("openness,radius", [
        (0.055, 28.0),
        (0.16, 86.0),
        (0.1075, 57.0),
        (0.0, 28.0),      # below range clamps
        (-1.0, 28.0),
        (0.5, 86.0),      # above range clamps
    ])
    def test_mapping(self, config, openness, radius):
        assert map_openness_to_radius(openness, config) == pytest.approx(radius)

    def test_mapping_is_monotonic(self, config):
        radii = [map_openness_to_radius(o, config) for o in np.linspace(0.0, 0.2, 41)]
        assert all(a <= b for a, b in zip(radii, radii[1:]))

    @pytest.mark.parametrize("lo,hi", [(0.1, 0.1), (0.2, 0.1)])
    def test_empty_openness_range_rejected(self, lo, hi):
        with pytest.raises(ValueError, match="min_openness"):
            OrbitCameraConfig(min_openness=lo, max_openness=hi)

    def test_empty_openness_range_rejected_from_dict(self):
        with pytest.raises(ValueError):
            OrbitCameraConfig.from_dict({"min_openness": 0.12, "max_openness": 0.12})


class TestOrbitCameraController:
    """Test suite for orbit and zoom integration."""

    @pytest.fixture
    def orbit(self):
        return OrbitCameraController()

    def test_initial_state(self, orbit):
        assert orbit.state.radius == 58.0
        assert orbit.state.target_radius == 58.0
        assert orbit.state.theta == pytest.approx(math.pi * 0.45)
        assert orbit.state.phi == pytest.approx(math.pi * 0.5)

    def test_orbit_applies_sensitivity(self, orbit):
        theta, phi = orbit.state.theta, orbit.state.phi
        orbit.orbit(Vec2(0.1, -0.05))
        assert orbit.state.theta == pytest.approx(theta + 0.38)
        assert orbit.state.phi == pytest.approx(phi - 0.19)

    def test_theta_is_unbounded(self, orbit):
        for _ in range(10):
            orbit.orbit(Vec2(1.0, 0.0))
        assert orbit.state.theta > 2 * math.pi

    @pytest.mark.parametrize("dy,expected", [
        (10.0, math.pi - 0.16),
        (-10.0, 0.16),
    ])
    def test_phi_is_clamped(self, orbit, dy, expected):
        """The camera never reaches the poles."""
        orbit.orbit(Vec2(0.0, dy))
        assert orbit.state.phi == pytest.approx(expected)

    def test_phi_stays_in_range_under_random_movement(self, orbit):
        rng = np.random.default_rng(7)
        for dx, dy in rng.normal(scale=0.3, size=(200, 2)):
            orbit.orbit(Vec2(float(dx), float(dy)))
            assert 0.16 <= orbit.state.phi <= math.pi - 0.16

    def test_zoom_target_eases(self, orbit):
        assert orbit.set_zoom_target(0.16) == pytest.approx(58.0 + (86.0 - 58.0) * 0.25)
        # radius itself only moves on tick()
        assert orbit.state.radius == 58.0

    def test_handle_update(self, orbit):
        orbit.handle_update(present_update(0.055, movement=Vec2(0.1, 0.0)))
        assert orbit.state.target_radius == pytest.approx(58.0 + (28.0 - 58.0) * 0.25)
        assert orbit.state.theta == pytest.approx(math.pi * 0.45 + 0.38)

    def test_absent_update_changes_nothing(self, orbit):
        orbit.handle_update(GestureUpdate.absent())
        assert orbit.state.target_radius == 58.0
        assert orbit.state.theta == pytest.approx(math.pi * 0.45)

    def test_closing_hand_zooms_in(self):
        """Openness falling from the top to the bottom of its range walks the target from 86 to 28."""
        orbit = OrbitCameraController(OrbitCameraConfig(initial_radius=86.0))
        targets = []
        for openness in np.linspace(0.16, 0.055, 40):
            orbit.handle_update(present_update(float(openness)))
            targets.append(orbit.state.target_radius)
        for _ in range(60):
            orbit.handle_update(present_update(0.055))
            targets.append(orbit.state.target_radius)

        assert targets[0] == pytest.approx(86.0)
        assert all(b <= a + 1e-9 for a, b in zip(targets, targets[1:]))
        assert targets[-1] == pytest.approx(28.0, abs=0.01)

    def test_tick_eases_radius(self, orbit):
        orbit.state.target_radius = 86.0
        orbit.tick(1 / 60)
        assert orbit.state.radius == pytest.approx(58.0 + 28.0 * 0.08)

        for _ in range(300):
            orbit.tick(1 / 60)
        assert orbit.state.radius == pytest.approx(86.0)

    def test_position_is_on_orbit_sphere(self, orbit):
        orbit.orbit(Vec2(0.3, 0.2))
        position = orbit.tick()
        assert np.linalg.norm(position) == pytest.approx(orbit.state.radius)
        np.testing.assert_allclose(orbit.position, position)
        np.testing.assert_allclose(orbit.look_at, np.zeros(3))

    def test_reset(self, orbit):
        orbit.orbit(Vec2(0.3, 0.2))
        orbit.set_zoom_target(0.055)
        orbit.reset()
        assert orbit.state.radius == 58.0
        assert orbit.state.target_radius == 58.0

    def test_config_from_dict(self):
        config = OrbitCameraConfig.from_dict({"min_radius": 10.0, "unknown": 1})
        assert config.min_radius == 10.0
        assert config.max_radius == 86.0


class TestSphericalToCartesian:

    def test_equator_on_x_axis(self):
        np.testing.assert_allclose(spherical_to_cartesian(5.0, 0.0, math.pi / 2), (5.0, 0.0, 0.0), atol=1e-12)

    def test_pole_on_y_axis(self):
        np.testing.assert_allclose(spherical_to_cartesian(5.0, 1.2, 0.0), (0.0, 5.0, 0.0), atol=1e-12)

    def test_quarter_turn_on_z_axis(self):
        np.testing.assert_allclose(
            spherical_to_cartesian(2.0, math.pi / 2, math.pi / 2), (0.0, 0.0, 2.0), atol=1e-12
        )
