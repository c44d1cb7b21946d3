"""
Tests for the Starfield and Ray Picking
========================================
"""

import math

import numpy as np
import pytest

from starnav.core.types import Vec2
from starnav.modules.control.camera_controller import OrbitCameraConfig, OrbitCameraController
from starnav.modules.scene.raycaster import PerspectiveCamera, Raycaster, ScenePicker
from starnav.modules.scene.starfield import SceneObject, Starfield, StarfieldConfig


def make_object(object_id: int, position, radius: float = 1.0) -> SceneObject:
    return SceneObject(
        object_id=object_id,
        label=f"Star {object_id}",
        kind="star",
        kind_label="star",
        local_position=position,
        radius=radius,
        emissive=0xFFFFFF,
        emissive_intensity=1.05,
    )


@pytest.fixture
def camera():
    """Camera on +z looking at the origin."""
    cam = PerspectiveCamera(fov=60.0, aspect=1.0)
    cam.position = np.array([0.0, 0.0, 10.0])
    cam.look_at((0.0, 0.0, 0.0))
    return cam


class TestRaycaster:
    """Test suite for ray-sphere picking."""

    def test_camera_basis(self, camera):
        right, up, forward = camera.basis()
        np.testing.assert_allclose(right, (1.0, 0.0, 0.0), atol=1e-12)
        np.testing.assert_allclose(up, (0.0, 1.0, 0.0), atol=1e-12)
        np.testing.assert_allclose(forward, (0.0, 0.0, -1.0), atol=1e-12)

    def test_center_ray_hits_origin_sphere(self, camera):
        raycaster = Raycaster()
        raycaster.set_from_camera(Vec2(0.0, 0.0), camera)
        assert raycaster.intersect_sphere((0.0, 0.0, 0.0), 1.0) == pytest.approx(9.0)

    def test_off_axis_ray_misses(self, camera):
        raycaster = Raycaster()
        raycaster.set_from_camera(Vec2(0.9, 0.9), camera)
        assert raycaster.intersect_sphere((0.0, 0.0, 0.0), 1.0) is None

    def test_ndc_edge_maps_to_fov(self, camera):
        """NDC y=1 points along the top edge of the vertical field of view."""
        raycaster = Raycaster()
        raycaster.set_from_camera(Vec2(0.0, 1.0), camera)
        angle = math.degrees(math.acos(-raycaster.direction[2]))
        assert angle == pytest.approx(30.0)
        assert raycaster.direction[1] > 0

    def test_sphere_behind_camera_is_ignored(self, camera):
        raycaster = Raycaster()
        raycaster.set_from_camera(Vec2(0.0, 0.0), camera)
        assert raycaster.intersect_sphere((0.0, 0.0, 20.0), 1.0) is None

    def test_nearest_hit_first(self, camera):
        near, far = object(), object()
        raycaster = Raycaster()
        raycaster.set_from_camera(Vec2(0.0, 0.0), camera)
        hits = raycaster.intersect([
            (far, np.array([0.0, 0.0, -5.0]), 1.0),
            (near, np.array([0.0, 0.0, 2.0]), 1.0),
        ])
        assert [hit.object for hit in hits] == [near, far]
        assert hits[0].distance == pytest.approx(7.0)
        np.testing.assert_allclose(hits[0].point, (0.0, 0.0, 3.0), atol=1e-9)


class TestScenePicker:
    """Test suite for pointer -> object resolution."""

    @pytest.fixture
    def orbit(self):
        return OrbitCameraController(OrbitCameraConfig(initial_theta=math.pi / 2))

    def test_to_ndc_mirrors_x(self, orbit):
        picker = ScenePicker(Starfield(objects=[]), orbit)
        assert picker.to_ndc(Vec2(0.25, 0.5)) == Vec2(0.5, 0.0)
        assert picker.to_ndc(Vec2(0.5, 0.0)) == Vec2(0.0, 1.0)

    def test_to_ndc_unmirrored(self, orbit):
        picker = ScenePicker(Starfield(objects=[]), orbit, mirror_x=False)
        assert picker.to_ndc(Vec2(0.25, 1.0)) == Vec2(-0.5, -1.0)

    def test_center_pointer_picks_object_at_origin(self, orbit):
        target = make_object(1, (0.0, 0.0, 0.0))
        picker = ScenePicker(Starfield(objects=[target]), orbit)
        assert picker.pick(Vec2(0.5, 0.5)) is target

    def test_nearest_object_wins(self, orbit):
        # Camera sits on +z (theta = pi/2, phi = pi/2)
        behind = make_object(1, (0.0, 0.0, -10.0), radius=3.0)
        front = make_object(2, (0.0, 0.0, 10.0))
        picker = ScenePicker(Starfield(objects=[behind, front]), orbit)
        assert picker.pick(Vec2(0.5, 0.5)) is front

    def test_miss_returns_none(self, orbit):
        picker = ScenePicker(Starfield(objects=[make_object(1, (0.0, 0.0, 0.0))]), orbit)
        assert picker.pick(Vec2(0.0, 0.0)) is None

    def test_follows_orbit_camera(self, orbit):
        """Picking uses the controller's current camera position."""
        target = make_object(1, (0.0, 0.0, 0.0))
        picker = ScenePicker(Starfield(objects=[target]), orbit)
        orbit.state.target_radius = 30.0
        for _ in range(100):
            orbit.tick()
        assert picker.pick(Vec2(0.5, 0.5)) is target
        np.testing.assert_allclose(picker.camera.position, orbit.position)

    def test_set_aspect(self, orbit):
        picker = ScenePicker(Starfield(objects=[]), orbit)
        picker.set_aspect(960, 720)
        assert picker.camera.aspect == pytest.approx(4 / 3)
        picker.set_aspect(960, 0)
        assert picker.camera.aspect == pytest.approx(4 / 3)

    def test_aspect_at_construction(self, orbit):
        picker = ScenePicker(Starfield(objects=[]), orbit, aspect=4 / 3)
        assert picker.camera.aspect == pytest.approx(4 / 3)
        assert ScenePicker(Starfield(objects=[]), orbit).camera.aspect == pytest.approx(16 / 9)

    def test_aspect_changes_horizontal_pick(self, orbit):
        """A pointer near the edge lands on different objects at 4:3 and 16:9."""
        # Mirrored pointer x 0.05 -> NDC x 0.9; camera on +z, 58 units out
        narrow = make_object(1, (58.0 * 0.9 * math.tan(math.radians(30)) * 4 / 3, 0.0, 0.0), radius=3.0)
        wide = make_object(2, (58.0 * 0.9 * math.tan(math.radians(30)) * 16 / 9, 0.0, 0.0), radius=3.0)
        starfield = Starfield(objects=[narrow, wide])
        pointer = Vec2(0.05, 0.5)

        picker_4_3 = ScenePicker(starfield, orbit, aspect=4 / 3)
        assert picker_4_3.pick(pointer) is narrow

        picker_resized = ScenePicker(starfield, orbit)
        assert picker_resized.pick(pointer) is wide
        picker_resized.set_aspect(960, 720)
        assert picker_resized.pick(pointer) is narrow


class TestStarfield:
    """Test suite for starfield generation."""

    @pytest.fixture
    def starfield(self):
        return Starfield(StarfieldConfig(star_count=50, planet_count=3, seed=42))

    def test_object_counts(self, starfield):
        objects = starfield.get_pickable_objects()
        assert len(objects) == 53
        assert sum(obj.kind == "star" for obj in objects) == 50
        assert sum(obj.kind == "planet" for obj in objects) == 3
        assert objects[0].label == "Star 1"
        assert objects[-1].label == "Planet 3"

    def test_placement_within_bounds(self, starfield):
        for obj in starfield.get_pickable_objects():
            distance = np.linalg.norm(obj.local_position)
            if obj.kind == "star":
                assert distance <= 48.0 * 0.92 + 1e-9
                assert 0.18 <= obj.radius <= 0.45
            else:
                assert distance <= 48.0 * 0.75 + 1e-9
                assert 1.2 <= obj.radius <= 2.4

    def test_stars_fill_the_interior(self):
        """Uniform volume placement puts about half the stars inside 0.8 of the radius."""
        starfield = Starfield(StarfieldConfig(seed=1))
        distances = np.array([
            np.linalg.norm(obj.local_position)
            for obj in starfield.get_pickable_objects() if obj.kind == "star"
        ])
        assert len(distances) == 360
        assert (distances < 0.8 * 0.92 * 48.0).sum() > 100
        assert distances.min() < 0.5 * 0.92 * 48.0
        assert np.ptp(distances) > 1.0

    def test_seed_is_reproducible(self, starfield):
        again = Starfield(StarfieldConfig(star_count=50, planet_count=3, seed=42))
        for a, b in zip(starfield.get_pickable_objects(), again.get_pickable_objects()):
            np.testing.assert_allclose(a.local_position, b.local_position)
            assert a.emissive == b.emissive

    def test_rotation_keeps_distance(self, starfield):
        obj = starfield.get_pickable_objects()[0]
        before = starfield.world_position(obj)
        starfield.update(10.0)
        after = starfield.world_position(obj)
        assert starfield.rotation == pytest.approx(0.45)
        assert np.linalg.norm(after) == pytest.approx(np.linalg.norm(before))
        assert after[1] == pytest.approx(before[1])

    def test_bounding_spheres_use_scale(self, starfield):
        obj = starfield.get_pickable_objects()[0]
        starfield.highlight(obj)
        spheres = {o.object_id: radius for o, _, radius in starfield.bounding_spheres()}
        assert spheres[obj.object_id] == pytest.approx(obj.radius * 1.3)

    def test_config_from_dict(self):
        config = StarfieldConfig.from_dict({"star_count": 10, "seed": 3})
        assert config.star_count == 10
        assert config.seed == 3
        assert config.planet_count == 5
