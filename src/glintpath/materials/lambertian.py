"""Lambertian (ideal diffuse) material.

The scattered direction is the surface normal offset by a random point in
the unit sphere, which distributes outgoing rays with a cosine-like falloff
around the normal. The attenuation is the base color, so no PDF weighting is
needed.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, seed = scatter_lambertian(
    >>> #     albedo, normal, seed
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from glintpath.core.rng import random_in_unit_sphere

vec3 = tm.vec3

# Offset sums shorter than this fall back to the bare normal
DEGENERATE_DIRECTION_EPSILON = 0.001


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, seed: ti.u32):
    """Sample a diffuse bounce.

    Args:
        albedo: The base color of the surface.
        normal: Front-facing unit surface normal.
        seed: PRNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, seed).
        Lambertian surfaces always scatter.
    """
    offset, state = random_in_unit_sphere(seed)
    direction = normal + offset
    if tm.length(direction) < DEGENERATE_DIRECTION_EPSILON:
        direction = normal
    return tm.normalize(direction), albedo, 1, state
