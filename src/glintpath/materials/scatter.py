"""Material dispatch for the path integrator.

scatter() reads the hit material from the flattened buffers and calls the
matching scattering model. The attenuation always starts as the material's
base color; unknown material types absorb the ray.
"""

import taichi as ti
import taichi.math as tm

from glintpath.core.ray import Ray, make_ray
from glintpath.geometry.hit import HitRecord
from glintpath.materials.emissive import scatter_emissive
from glintpath.materials.glass import scatter_glass
from glintpath.materials.lambertian import scatter_lambertian
from glintpath.materials.metal import scatter_metal
from glintpath.scene.buffers import (
    material_base_colors,
    material_emissions,
    material_params,
    material_types,
)
from glintpath.scene.model import MaterialType

vec3 = tm.vec3

TYPE_LAMBERTIAN = int(MaterialType.LAMBERTIAN)
TYPE_METAL = int(MaterialType.METAL)
TYPE_GLASS = int(MaterialType.GLASS)
TYPE_EMISSIVE = int(MaterialType.EMISSIVE)


@ti.func
def emitted(material_index: ti.i32) -> vec3:
    """Emission of a material (zero for non-emitters)."""
    return material_emissions[material_index]


@ti.func
def scatter(incoming: Ray, rec: HitRecord, seed: ti.u32):
    """Scatter a ray at a surface hit.

    Args:
        incoming: The ray that produced the hit (unit direction).
        rec: The closest hit record (hit == 1).
        seed: PRNG state.

    Returns:
        A tuple of (attenuation, scattered_ray, did_scatter, seed). The
        scattered ray starts at the hit point.
    """
    idx = rec.material_index
    mat_type = material_types[idx]
    params = material_params[idx]

    attenuation = material_base_colors[idx]
    direction = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    state = seed

    if mat_type == TYPE_LAMBERTIAN:
        direction, attenuation, did_scatter, state = scatter_lambertian(
            attenuation, rec.normal, state
        )
    elif mat_type == TYPE_METAL:
        direction, attenuation, did_scatter, state = scatter_metal(
            attenuation, params[1], incoming.direction, rec.normal, state
        )
    elif mat_type == TYPE_GLASS:
        direction, attenuation, did_scatter, state = scatter_glass(
            attenuation, params[2], incoming.direction, rec.normal, rec.front_face, state
        )
    elif mat_type == TYPE_EMISSIVE:
        direction, attenuation, did_scatter, state = scatter_emissive(attenuation, state)

    return attenuation, make_ray(rec.point, direction), did_scatter, state
