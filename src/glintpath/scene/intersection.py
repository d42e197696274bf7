"""Closest-hit queries against the uploaded scene.

Every object is tested for every ray (no acceleration structure); the scan
keeps the closest accepted hit and tags it with the object's index and
material index. Dispatch on the object kind happens here and nowhere else.

Example:
    >>> from glintpath.scene.intersection import query_hit
    >>> info = query_hit((0.0, 0.0, 4.0), (0.0, 0.0, -1.0))
    >>> info.hit, info.object_index
    (True, 1)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from glintpath.config import DEFAULT_CONFIG, RenderConfig
from glintpath.geometry.hit import HitRecord, make_miss_record
from glintpath.geometry.plane import Plane, hit_plane
from glintpath.geometry.sphere import Sphere, hit_sphere
from glintpath.scene.buffers import (
    num_objects,
    object_kinds,
    object_material_indices,
    object_radii,
    object_translation,
    object_up_axis,
)
from glintpath.scene.model import ObjectKind

vec3 = tm.vec3

KIND_SPHERE = int(ObjectKind.SPHERE)
KIND_PLANE = int(ObjectKind.PLANE)


@ti.func
def intersect_object(
    index: ti.i32,
    ray_origin: vec3,
    ray_direction: vec3,
    epsilon: ti.f32,
    closest_t: ti.f32,
) -> HitRecord:
    """Test a ray against one object of the scene.

    Args:
        index: Object index.
        ray_origin: The starting point of the ray.
        ray_direction: Unit ray direction.
        epsilon: Hit epsilon shared by all primitives.
        closest_t: Only hits closer than this are accepted.

    Returns:
        A HitRecord tagged with the object and material index on a hit,
        otherwise a miss record. Unsupported kinds always miss.
    """
    kind = object_kinds[index]
    rec = make_miss_record(closest_t)

    if kind == KIND_SPHERE:
        sphere = Sphere(center=object_translation(index), radius=object_radii[index])
        rec = hit_sphere(ray_origin, ray_direction, sphere, epsilon, closest_t)
    elif kind == KIND_PLANE:
        plane = Plane(point=object_translation(index), normal=object_up_axis(index))
        rec = hit_plane(ray_origin, ray_direction, plane, epsilon, closest_t)

    result = rec
    if rec.hit == 1:
        result = HitRecord(
            hit=1,
            t=rec.t,
            point=rec.point,
            normal=rec.normal,
            front_face=rec.front_face,
            material_index=object_material_indices[index],
            object_index=index,
        )

    return result


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    epsilon: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Find the closest hit along a ray among all scene objects.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: Unit ray direction.
        epsilon: Hit epsilon shared by all primitives.
        t_max: Closest-hit sentinel.

    Returns:
        The closest HitRecord, or a miss record with t == t_max.
    """
    closest = make_miss_record(t_max)
    for i in range(num_objects[None]):
        rec = intersect_object(i, ray_origin, ray_direction, epsilon, closest.t)
        if rec.hit == 1:
            closest = rec
    return closest


# =============================================================================
# Host-side probe
# =============================================================================


@dataclass(frozen=True)
class HitInfo:
    """Host-side copy of a HitRecord.

    Attributes:
        hit: Whether anything was hit.
        t: Ray parameter of the hit (the t_max sentinel on a miss).
        point: Hit point.
        normal: Front-facing unit normal.
        front_face: Whether the ray arrived from outside the surface.
        material_index: Material of the hit object, -1 on a miss.
        object_index: Hit object, -1 on a miss.
    """

    hit: bool
    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_index: int
    object_index: int


_probe_record = HitRecord.field(shape=())


@ti.kernel
def _probe_scene(
    origin: vec3,
    direction: vec3,
    epsilon: ti.f32,
    t_max: ti.f32,
    only_object: ti.i32,
):
    unit_dir = tm.normalize(direction)
    if only_object < 0:
        _probe_record[None] = intersect_scene(origin, unit_dir, epsilon, t_max)
    else:
        _probe_record[None] = intersect_object(only_object, origin, unit_dir, epsilon, t_max)


def _read_probe() -> HitInfo:
    rec = _probe_record[None]
    return HitInfo(
        hit=bool(rec.hit),
        t=float(rec.t),
        point=(float(rec.point[0]), float(rec.point[1]), float(rec.point[2])),
        normal=(float(rec.normal[0]), float(rec.normal[1]), float(rec.normal[2])),
        front_face=bool(rec.front_face),
        material_index=int(rec.material_index),
        object_index=int(rec.object_index),
    )


def query_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    config: RenderConfig = DEFAULT_CONFIG,
) -> HitInfo:
    """Run one closest-hit scan against the uploaded scene.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized before the scan.
        config: Supplies the hit epsilon and t_max sentinel.

    Returns:
        The closest hit as a HitInfo.
    """
    _probe_scene(vec3(*origin), vec3(*direction), config.hit_epsilon, config.t_max, -1)
    return _read_probe()


def query_object_hit(
    object_index: int,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    config: RenderConfig = DEFAULT_CONFIG,
) -> HitInfo:
    """Test a ray against a single uploaded object.

    Raises:
        ValueError: If object_index is out of range.
    """
    if not 0 <= object_index < int(num_objects[None]):
        raise ValueError(f"Invalid object_index: {object_index}")
    _probe_scene(
        vec3(*origin), vec3(*direction), config.hit_epsilon, config.t_max, object_index
    )
    return _read_probe()
