"""Emissive (light source) material.

Emitters add their emission to the path and terminate it; they never
scatter.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.func
def scatter_emissive(albedo: vec3, seed: ti.u32):
    """Emissive surfaces absorb the path.

    No random value is drawn; the PRNG state is passed through unchanged.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, seed)
        with did_scatter always 0.
    """
    return vec3(0.0, 0.0, 0.0), albedo, 0, seed
