"""Tests for the Whitted integrator: local shading, shadows and reflection."""

import pytest

FLOOR_VERTICES = [[-10.0, -1.0, -10.0], [10.0, -1.0, -10.0], [10.0, -1.0, 10.0], [-10.0, -1.0, 10.0]]
WALL_VERTICES = [[-10.0, -10.0, 5.0], [10.0, -10.0, 5.0], [10.0, 10.0, 5.0], [-10.0, 10.0, 5.0]]
QUAD_FACES = [[0, 1, 2], [0, 2, 3]]


def _assert_color(actual, expected, tol=1e-4):
    for a, e in zip(actual, expected):
        assert abs(a - e) < tol, f"{actual} != {expected}"


@pytest.fixture
def scene():
    from whitted.scene.manager import SceneManager

    return SceneManager()


class TestLocalShading:
    def test_miss_returns_background(self, scene):
        from whitted.core.integrator import trace_ray

        _assert_color(trace_ray((0, 0, 0), (0, 0, 1), background=(0.1, 0.2, 0.3)), (0.1, 0.2, 0.3))

    def test_ambient_only(self, scene):
        from whitted.core.integrator import trace_ray

        red = scene.add_material((1.0, 0.0, 0.0))
        scene.add_sphere((0, 0, 5), 1.0, red)
        scene.add_ambient_light(0.2)

        _assert_color(trace_ray((0, 0, 0), (0, 0, 1)), (0.2, 0.0, 0.0))

    def test_diffuse_and_specular_head_on(self, scene):
        from whitted.core.integrator import trace_ray

        white = scene.add_material((1.0, 1.0, 1.0), diffuse=0.3, specular=0.5, shininess=10.0)
        scene.add_sphere((0, 0, 5), 1.0, white)
        scene.add_point_light(1.0, (0, 0, -1))

        _assert_color(trace_ray((0, 0, 0), (0, 0, 1)), (0.8, 0.8, 0.8))

    def test_color_is_clamped(self, scene):
        from whitted.core.integrator import trace_ray

        red = scene.add_material((1.0, 0.5, 0.0))
        scene.add_sphere((0, 0, 5), 1.0, red)
        scene.add_point_light(3.0, (0, 0, -10))

        _assert_color(trace_ray((0, 0, 0), (0, 0, 1)), (1.0, 1.0, 0.0))

    def test_unnormalized_direction(self, scene):
        from whitted.core.integrator import trace_ray

        red = scene.add_material((1.0, 0.0, 0.0))
        scene.add_sphere((0, 0, 5), 1.0, red)
        scene.add_ambient_light(0.2)

        _assert_color(trace_ray((0, 0, 0), (0, 0, 7)), (0.2, 0.0, 0.0))


class TestShadows:
    def _floor(self, scene):
        gray = scene.add_material((0.5, 0.5, 0.5))
        scene.add_mesh(FLOOR_VERTICES, QUAD_FACES, gray)
        return gray

    def test_lit_floor(self, scene):
        from whitted.core.integrator import trace_ray

        self._floor(scene)
        scene.add_point_light(0.8, (1, 10, -2))

        _assert_color(trace_ray((1, 0, -2), (0, -1, 0)), (0.4, 0.4, 0.4))

    def test_occluder_blocks_point_light(self, scene):
        from whitted.core.integrator import trace_ray

        gray = self._floor(scene)
        scene.add_sphere((1, 5, -2), 1.0, gray)
        scene.add_point_light(0.8, (1, 10, -2))

        _assert_color(trace_ray((1, 0, -2), (0, -1, 0)), (0.0, 0.0, 0.0))

    def test_occluder_beyond_light_casts_no_shadow(self, scene):
        from whitted.core.integrator import trace_ray

        gray = self._floor(scene)
        scene.add_sphere((1, 8, -2), 1.0, gray)
        scene.add_point_light(0.8, (1, 4, -2))

        _assert_color(trace_ray((1, 0, -2), (0, -1, 0)), (0.4, 0.4, 0.4))

    def test_directional_light_is_never_occluded(self, scene):
        from whitted.core.integrator import trace_ray

        gray = self._floor(scene)
        scene.add_sphere((1, 5, -2), 1.0, gray)
        scene.add_directional_light(0.8, (0, -1, 0))

        _assert_color(trace_ray((1, 0, -2), (0, -1, 0)), (0.4, 0.4, 0.4))


class TestReflection:
    def _mirror_scene(self, scene, reflectivity, mirror_color=(1.0, 1.0, 1.0), diffuse=0.0):
        mirror = scene.add_material(mirror_color, diffuse=diffuse, reflectivity=reflectivity)
        red = scene.add_material((1.0, 0.0, 0.0))
        scene.add_mesh(WALL_VERTICES, QUAD_FACES, mirror)
        # Behind the camera, only visible in the mirror
        scene.add_sphere((1, -2, -5), 1.0, red)
        scene.add_ambient_light(0.2)

    def test_perfect_mirror_shows_reflected_object(self, scene):
        from whitted.core.integrator import trace_ray

        self._mirror_scene(scene, reflectivity=1.0)
        _assert_color(trace_ray((1, -2, 0), (0, 0, 1), depth_budget=1), (0.2, 0.0, 0.0))

    def test_perfect_mirror_without_budget_is_black(self, scene):
        from whitted.core.integrator import trace_ray

        self._mirror_scene(scene, reflectivity=1.0)
        _assert_color(trace_ray((1, -2, 0), (0, 0, 1), depth_budget=0), (0.0, 0.0, 0.0))

    def test_reflected_ray_escaping_returns_background(self, scene):
        from whitted.core.integrator import trace_ray

        self._mirror_scene(scene, reflectivity=1.0)
        color = trace_ray((5, 3, 0), (0, 0, 1), depth_budget=2, background=(0.0, 0.0, 1.0))
        _assert_color(color, (0.0, 0.0, 1.0))

    def test_partial_reflection_blends(self, scene):
        from whitted.core.integrator import trace_ray

        self._mirror_scene(scene, reflectivity=0.5, mirror_color=(0.0, 0.0, 1.0), diffuse=1.0)
        # local (0, 0, 0.2) * 0.5 + reflected (0.2, 0, 0) * 0.5
        _assert_color(trace_ray((1, -2, 0), (0, 0, 1), depth_budget=3), (0.1, 0.0, 0.1))
        _assert_color(trace_ray((1, -2, 0), (0, 0, 1), depth_budget=0), (0.0, 0.0, 0.1))

    def test_facing_mirrors_terminate(self, scene):
        from whitted.core.integrator import trace_ray
        from whitted.core.settings import MAX_REFLECTION_DEPTH

        mirror = scene.add_material((1.0, 1.0, 1.0), diffuse=1.0, reflectivity=0.5)
        scene.add_mesh(WALL_VERTICES, QUAD_FACES, mirror)
        back_wall = [[x, y, -5.0] for x, y, _ in WALL_VERTICES]
        scene.add_mesh(back_wall, QUAD_FACES, mirror)
        scene.add_ambient_light(0.2)

        # Each level adds 0.1 and halves what lies below: 0.1 * (2 - 2^-d)
        for depth in range(MAX_REFLECTION_DEPTH + 1):
            expected = 0.1 * (2.0 - 0.5**depth)
            color = trace_ray((1, -2, 0), (0, 0, 1), depth_budget=depth)
            _assert_color(color, (expected, expected, expected))


class TestHostHelpers:
    @pytest.mark.parametrize("depth", [-1, 6])
    def test_depth_budget_out_of_range(self, scene, depth):
        from whitted.core.integrator import trace_ray

        with pytest.raises(ValueError):
            trace_ray((0, 0, 0), (0, 0, 1), depth_budget=depth)

    def test_render_pixel_averages_samples(self, scene):
        from whitted.camera.pinhole import PinholeCamera, setup_camera
        from whitted.core.integrator import render_pixel

        red = scene.add_material((1.0, 0.0, 0.0))
        scene.add_sphere((0, 0, 5), 1.0, red)
        scene.add_ambient_light(0.2)
        # Narrow enough that every jittered ray still hits the sphere
        setup_camera(PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1), field_of_view=10.0), 1.0)

        _assert_color(render_pixel(0, 0, 1, 1, samples=1), (0.2, 0.0, 0.0))
        _assert_color(render_pixel(0, 0, 1, 1, samples=8), (0.2, 0.0, 0.0))

    def test_render_pixel_rejects_zero_samples(self, scene):
        from whitted.core.integrator import render_pixel

        with pytest.raises(ValueError):
            render_pixel(0, 0, 1, 1, samples=0)
