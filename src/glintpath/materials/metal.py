"""Metal (specular reflective) material.

The incident direction is mirrored about the normal and then perturbed by a
random point in the unit sphere scaled by the roughness (fuzz radius).
Perfect metals (roughness=0) produce mirror reflections.

Rays whose perturbed direction points into the surface are absorbed.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, seed = scatter_metal(
    >>> #     albedo, roughness, incident_dir, normal, seed
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from glintpath.core.ray import reflect
from glintpath.core.rng import random_in_unit_sphere

vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    seed: ti.u32,
):
    """Compute the reflected direction for a metal surface.

    A random sample is drawn even for roughness=0 so the stream advances the
    same way regardless of the material parameters.

    Args:
        albedo: The reflective tint.
        roughness: Fuzz radius in [0, 1]; 0 is a perfect mirror.
        incident_direction: Unit incoming ray direction.
        normal: Front-facing unit surface normal.
        seed: PRNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, seed) where
        did_scatter is 0 if the direction ends up below the surface.
    """
    reflected = reflect(incident_direction, normal)
    fuzz, state = random_in_unit_sphere(seed)
    scattered_direction = tm.normalize(reflected + roughness * fuzz)

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, albedo, did_scatter, state
