"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.

Modules under ``src.whitted`` allocate Taichi fields at import time, so test
modules import them inside test functions, after the session fixture ran.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the fields allocated by already imported modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the shape, material, pattern and light registries around each test."""
    from src.whitted.geometry.shape import clear_shapes
    from src.whitted.materials.lighting import clear_lights
    from src.whitted.materials.material import clear_materials

    def _clear_all():
        clear_shapes()
        clear_materials()
        clear_lights()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def default_world():
    """The standard two-sphere world."""
    from src.whitted.scene.default_world import create_default_world

    return create_default_world()
