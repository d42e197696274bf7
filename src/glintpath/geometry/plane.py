"""Infinite plane primitive intersection.

A plane is defined by a point and a unit normal. For scene objects the point
is the model translation and the normal is the model rotation applied to +Y.

The ray parameter is

    t = dot(point - origin, normal) / dot(normal, direction)

Rays within epsilon of parallel are treated as misses rather than divided
through.
"""

import taichi as ti
import taichi.math as tm

from glintpath.geometry.hit import HitRecord, make_face_record, make_miss_record

vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane.
        normal: Unit normal of the plane (the outward side).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    epsilon: ti.f32,
    closest_t: ti.f32,
) -> HitRecord:
    """Test a ray against an infinite plane.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (normalized by the caller).
        plane: The plane to test.
        epsilon: Near-parallel guard and minimum accepted t.
        closest_t: Only hits with t < closest_t are accepted.

    Returns:
        A HitRecord with hit == 1 on an accepted hit, otherwise a miss record
        carrying closest_t.
    """
    result = make_miss_record(closest_t)

    denom = tm.dot(plane.normal, ray_direction)
    if ti.abs(denom) > epsilon:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if t > epsilon and t < closest_t:
            point = ray_origin + t * ray_direction
            result = make_face_record(t, point, ray_direction, plane.normal)

    return result
