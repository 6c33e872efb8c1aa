"""Pytest configuration for whitted tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear primitives, materials and lights before and after each test."""
    # Import here so Taichi is initialized before any field is declared
    from whitted.lights.sources import clear_lights
    from whitted.materials.phong import clear_materials
    from whitted.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_lights()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def pyramid_obj(tmp_path):
    """Write a small square pyramid OBJ file and return its path."""
    path = tmp_path / "pyramid.obj"
    path.write_text(
        "\n".join(
            [
                "# pyramid",
                "v -0.5 0.0 -0.5",
                "v 0.5 0.0 -0.5",
                "v 0.5 0.0 0.5",
                "v -0.5 0.0 0.5",
                "v 0.0 1.0 0.0",
                "f 1 2 3",
                "f 1 3 4",
                "f 1 5 2",
                "f 2 5 3",
                "f 3 5 4",
                "f 4 5 1",
            ]
        )
        + "\n"
    )
    return path
