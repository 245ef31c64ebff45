"""Pytest configuration for spheretrace tests.

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
    """Clear scene and material fields before and after each test."""
    # Import here so Taichi is initialized before fields are declared
    from spheretrace.scene.manager import clear_all_fields

    clear_all_fields()
    yield
    clear_all_fields()


@pytest.fixture
def unit_scene_camera():
    """Camera at the origin looking down -z with a square 90 degree view."""
    from spheretrace.camera.pinhole import PinholeCamera

    return PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
    )
