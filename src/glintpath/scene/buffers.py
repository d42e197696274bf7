"""Flattened scene buffers in Taichi fields.

The scene is stored Structure-of-Arrays style for efficient kernel access:

    objects:   kind, material index, radius, model matrix, inverse model matrix
    materials: type, base color, (metallic, roughness, ior), emission

Buffers are preallocated to fixed capacities so kernels never recompile when
the scene changes. upload_scene() writes a validated Scene into them once at
load time; during rendering they are read-only.
"""

import taichi as ti
import taichi.math as tm
from loguru import logger

from glintpath.scene.model import Scene

vec3 = tm.vec3

# Maximum number of objects and materials supported in the scene
MAX_OBJECTS = 256
MAX_MATERIALS = 256

# Object storage
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_material_indices = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_models = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_OBJECTS)
object_inverse_models = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# Material storage
# material_params[i] = (metallic, roughness, ior)
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_base_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_params = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_scene_buffers() -> None:
    """Reset the object and material counts to zero.

    Field contents are left in place and overwritten by the next upload.
    """
    num_objects[None] = 0
    num_materials[None] = 0


def upload_scene(scene: Scene) -> None:
    """Freeze a scene and write it into the flattened buffers.

    All rows are built on the host first, so a scene that fails validation
    leaves the previously uploaded scene intact.

    Args:
        scene: The scene to upload. It is validated and frozen.

    Raises:
        ValueError: If an object references a missing material.
        RuntimeError: If the scene exceeds buffer capacity.
    """
    if len(scene.objects) > MAX_OBJECTS:
        raise RuntimeError(
            f"Scene has {len(scene.objects)} objects; maximum is {MAX_OBJECTS}"
        )
    if len(scene.materials) > MAX_MATERIALS:
        raise RuntimeError(
            f"Scene has {len(scene.materials)} materials; maximum is {MAX_MATERIALS}"
        )

    scene.validate()
    material_rows = [
        (
            int(material.type),
            list(material.base_color),
            [material.metallic, material.roughness, material.ior],
            list(material.emission),
        )
        for material in scene.materials
    ]
    object_rows = [
        (
            int(obj.kind),
            obj.material_index,
            obj.radius,
            obj.model_matrix().tolist(),
            obj.inverse_model_matrix().tolist(),
        )
        for obj in scene.objects
    ]
    scene.freeze()

    num_materials[None] = 0
    num_objects[None] = 0

    for idx, (mat_type, base_color, params, emission) in enumerate(material_rows):
        material_types[idx] = mat_type
        material_base_colors[idx] = base_color
        material_params[idx] = params
        material_emissions[idx] = emission

    for idx, (kind, material_index, radius, model, inverse) in enumerate(object_rows):
        object_kinds[idx] = kind
        object_material_indices[idx] = material_index
        object_radii[idx] = radius
        object_models[idx] = ti.Matrix(model)
        object_inverse_models[idx] = ti.Matrix(inverse)

    num_materials[None] = len(scene.materials)
    num_objects[None] = len(scene.objects)

    if not scene.objects:
        logger.warning("Uploaded an empty scene; every ray will see the background")
    logger.debug(
        "Uploaded scene with {} objects and {} materials",
        len(scene.objects),
        len(scene.materials),
    )


def get_object_count() -> int:
    """Get the number of uploaded objects."""
    return int(num_objects[None])


def get_material_count() -> int:
    """Get the number of uploaded materials."""
    return int(num_materials[None])


@ti.func
def object_translation(index: ti.i32) -> vec3:
    """Translation column of an object's model matrix."""
    m = object_models[index]
    return vec3(m[0, 3], m[1, 3], m[2, 3])


@ti.func
def object_up_axis(index: ti.i32) -> vec3:
    """The object's +Y axis in world space, normalized."""
    m = object_models[index]
    return tm.normalize(vec3(m[0, 1], m[1, 1], m[2, 1]))
