"""Unit tests for the pinhole camera."""

import math

import pytest
import taichi as ti


def _assert_vec_close(actual, expected, tol=1e-5):
    for i in range(3):
        assert abs(actual[i] - expected[i]) < tol, f"{actual} != {expected}"


def _ray_direction(u, v):
    from whitted.camera.pinhole import get_ray

    out = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(u: ti.f32, v: ti.f32):
        out[None] = get_ray(u, v).direction

    test_kernel(u, v)
    return out[None]


def _pixel_rays(row, col, width, height, jitter, count=1):
    from whitted.camera.pinhole import get_pixel_ray

    origins = ti.Vector.field(3, dtype=ti.f32, shape=count)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=count)

    @ti.kernel
    def test_kernel(row: ti.i32, col: ti.i32, width: ti.i32, height: ti.i32, jitter: ti.i32):
        for i in range(count):
            ray = get_pixel_ray(row, col, width, height, jitter)
            origins[i] = ray.origin
            directions[i] = ray.direction

    test_kernel(row, col, width, height, jitter)
    return origins.to_numpy(), directions.to_numpy()


class TestPinholeCamera:
    def test_defaults(self):
        from whitted.camera.pinhole import PinholeCamera

        camera = PinholeCamera(position=(0.0, 0.0, 0.0), look_at=(0.0, 0.0, 1.0))
        assert camera.up == (0.0, 1.0, 0.0)
        assert camera.field_of_view == 60.0
        assert camera.samples_per_pixel == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"look_at": (0.0, 0.0, 0.0)},
            {"up": (0.0, 0.0, 2.0)},
            {"field_of_view": 0.0},
            {"field_of_view": 180.0},
            {"samples_per_pixel": 0},
        ],
    )
    def test_degenerate_configuration(self, kwargs):
        from whitted.camera.pinhole import PinholeCamera

        config = {"position": (0.0, 0.0, 0.0), "look_at": (0.0, 0.0, 1.0)}
        config.update(kwargs)
        with pytest.raises(ValueError):
            PinholeCamera(**config).validate()

    def test_dict_round_trip(self):
        from whitted.camera.pinhole import PinholeCamera

        camera = PinholeCamera(
            position=(1.0, 2.0, 3.0),
            look_at=(0.0, 0.0, 0.0),
            up=(0.0, 0.0, 1.0),
            field_of_view=35.0,
            samples_per_pixel=4,
        )
        assert PinholeCamera.from_dict(camera.to_dict()) == camera


class TestSetupCamera:
    def test_basis(self):
        from whitted.camera.pinhole import PinholeCamera, get_camera_info, setup_camera

        setup_camera(PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1)), aspect_ratio=1.0)
        info = get_camera_info()
        _assert_vec_close(info["w"], (0.0, 0.0, -1.0))
        _assert_vec_close(info["u"], (1.0, 0.0, 0.0))
        _assert_vec_close(info["v"], (0.0, 1.0, 0.0))
        _assert_vec_close(info["origin"], (0.0, 0.0, 0.0))

    def test_viewport_size_follows_fov_and_aspect(self):
        from whitted.camera.pinhole import PinholeCamera, get_camera_info, setup_camera

        camera = PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1), field_of_view=90.0)
        setup_camera(camera, aspect_ratio=2.0)
        info = get_camera_info()
        _assert_vec_close(info["vertical"], (0.0, 2.0, 0.0))
        _assert_vec_close(info["horizontal"], (4.0, 0.0, 0.0))
        _assert_vec_close(info["lower_left"], (-2.0, -1.0, 1.0))

    def test_rejects_bad_aspect_ratio(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1)), aspect_ratio=0.0)

    def test_rejects_degenerate_camera(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(position=(1, 1, 1), look_at=(1, 1, 1)), aspect_ratio=1.0)


class TestRayGeneration:
    def test_center_ray_points_at_target(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 5)), aspect_ratio=1.0)
        _assert_vec_close(_ray_direction(0.5, 0.5), (0.0, 0.0, 1.0))

    def test_corner_ray_at_90_degrees(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        camera = PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1), field_of_view=90.0)
        setup_camera(camera, aspect_ratio=1.0)
        s = 1.0 / math.sqrt(3.0)
        _assert_vec_close(_ray_direction(1.0, 1.0), (s, s, s))

    def test_ray_origin_is_camera_position(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera(position=(1, 2, 3), look_at=(1, 2, 10)), aspect_ratio=1.0)
        origins, _ = _pixel_rays(0, 0, 4, 4, jitter=0)
        _assert_vec_close(origins[0], (1.0, 2.0, 3.0))

    def test_row_zero_is_top_of_image(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        camera = PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1), field_of_view=90.0)
        setup_camera(camera, aspect_ratio=1.0)

        _, top_left = _pixel_rays(0, 0, 2, 2, jitter=0)
        _, bottom_right = _pixel_rays(1, 1, 2, 2, jitter=0)
        norm = math.sqrt(0.25 + 0.25 + 1.0)
        _assert_vec_close(top_left[0], (-0.5 / norm, 0.5 / norm, 1.0 / norm))
        _assert_vec_close(bottom_right[0], (0.5 / norm, -0.5 / norm, 1.0 / norm))

    def test_jittered_rays_stay_inside_pixel(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        camera = PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1), field_of_view=90.0)
        setup_camera(camera, aspect_ratio=1.0)

        # Top-left pixel of a 2x2 image covers x in [-1, 0], y in [0, 1]
        _, directions = _pixel_rays(0, 0, 2, 2, jitter=1, count=64)
        x = directions[:, 0] / directions[:, 2]
        y = directions[:, 1] / directions[:, 2]
        assert (x >= -1.0 - 1e-5).all() and (x <= 1e-5).all()
        assert (y >= -1e-5).all() and (y <= 1.0 + 1e-5).all()
        # Jitter actually spreads the samples
        assert x.std() > 0.05

    def test_rays_are_normalized(self):
        from whitted.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera(position=(0, 0, 0), look_at=(3, 1, 2)), aspect_ratio=1.5)
        _, directions = _pixel_rays(3, 7, 12, 8, jitter=1, count=16)
        lengths = (directions**2).sum(axis=1) ** 0.5
        assert abs(lengths - 1.0).max() < 1e-5
