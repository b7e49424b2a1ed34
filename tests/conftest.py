"""Pytest configuration for spheretracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Repeated ti.init() calls invalidate fields allocated at import time,
    so the runtime is set up exactly once.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear spheres, materials and the render target around each test."""
    # Import here so Taichi is initialized before fields are allocated
    from spheretracer.core.render import reset_render_target
    from spheretracer.materials.dielectric import clear_dielectric_materials
    from spheretracer.materials.diffuse import clear_diffuse_materials
    from spheretracer.materials.reflective import clear_reflective_materials
    from spheretracer.scene.manager import _clear_material_tracking
    from spheretracer.scene.world import clear_world

    def _clear_all():
        clear_world()
        clear_diffuse_materials()
        clear_reflective_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        reset_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def default_camera():
    """Set up the camera used by the random spheres scene, without blur."""
    from spheretracer.camera.thin_lens import ThinLensCamera, setup_camera

    camera = ThinLensCamera(
        look_from=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        vfov=20.0,
        aspect_ratio=3.0 / 2.0,
        aperture=0.0,
        focus_distance=10.0,
    )
    setup_camera(camera)
    return camera
