"""Pytest configuration for glintpath tests.

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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_render_state():
    """Clear the scene buffers, frame snapshot and render target.

    This ensures tests are isolated from each other.
    """
    # Import here so the module-level fields are created after ti.init()
    from glintpath.camera.pinhole import clear_frame
    from glintpath.core.integrator import reset_render_target
    from glintpath.scene.buffers import clear_scene_buffers

    def _clear_all():
        clear_scene_buffers()
        clear_frame()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def demo_scene():
    """The ground plane and glass sphere scene, not yet uploaded."""
    from glintpath.scene import Material, Scene

    scene = Scene()
    ground = scene.add_material(Material.lambertian((0.5, 0.5, 0.5)))
    glass = scene.add_material(Material.glass(ior=1.52))
    scene.add_plane((0.0, -0.5, 0.0), ground)
    scene.add_sphere((0.0, 0.0, 0.0), 0.5, glass)
    return scene
