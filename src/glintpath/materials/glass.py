"""Glass (dielectric) material.

Glass both reflects and refracts. The refraction ratio depends on which side
of the surface the ray arrives from:

    entering (front face): 1 / ior
    leaving (back face):   ior

Total internal reflection occurs when ratio * sin(theta) > 1. Otherwise the
Schlick approximation gives the reflectance, and one PRNG draw chooses
between reflection and refraction.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter, seed = scatter_glass(
    >>> #     albedo, ior, incident_dir, normal, front_face, seed
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from glintpath.core.ray import reflect, refract, schlick_reflectance
from glintpath.core.rng import next_float

vec3 = tm.vec3


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices for a ray crossing the surface."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine whether total internal reflection occurs.

    Returns:
        1 if ratio * sin(theta) > 1, 0 otherwise.
    """
    ratio = refraction_ratio(ior, front_face)
    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    result = 0
    if ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def scatter_glass(
    albedo: vec3,
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    seed: ti.u32,
):
    """Reflect or refract a ray at a glass surface.

    A PRNG value is drawn only when refraction is possible; total internal
    reflection consumes no randomness.

    Args:
        albedo: The tint applied on every bounce (white for clear glass).
        ior: Index of refraction of the material.
        incident_direction: Unit incoming ray direction.
        normal: Front-facing unit surface normal.
        front_face: 1 if the ray arrives from outside the surface.
        seed: PRNG state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, seed).
        Glass always scatters.
    """
    ratio = refraction_ratio(ior, front_face)
    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)

    state = seed
    direction = reflect(incident_direction, normal)
    if cannot_refract(ior, incident_direction, normal, front_face) == 0:
        reflectance = schlick_reflectance(cos_theta, ratio)
        choice, state = next_float(state)
        if reflectance <= choice:
            direction = refract(incident_direction, normal, ratio)

    return tm.normalize(direction), albedo, 1, state
