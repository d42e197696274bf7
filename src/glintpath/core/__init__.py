"""Core rendering module.

This module contains the fundamental building blocks of the tracing core:

Components:
    ray: Ray data structure, reflection, refraction and Fresnel helpers
    rng: Deterministic per-pixel pseudo-random stream
    tonemap: Gamma encoding for display
    integrator: Path integrator, frame kernels and render target
    renderer: FrameRenderer frame loop facade

All per-pixel work runs in Taichi kernels.
"""

from .ray import (
    Ray,
    make_ray,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .rng import (
    MAX_UNIT_SPHERE_ATTEMPTS,
    PixelRandom,
    frame_seed_term,
    next_float,
    pixel_seed,
    pixel_seed_host,
    random_in_unit_sphere,
)
from .tonemap import DEFAULT_GAMMA, gamma_encode, gamma_encode_array

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from glintpath.core.integrator or glintpath.core.renderer.

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "reflect",
    "refract",
    "schlick_reflectance",
    "MAX_UNIT_SPHERE_ATTEMPTS",
    "PixelRandom",
    "frame_seed_term",
    "pixel_seed",
    "pixel_seed_host",
    "next_float",
    "random_in_unit_sphere",
    "DEFAULT_GAMMA",
    "gamma_encode",
    "gamma_encode_array",
]
