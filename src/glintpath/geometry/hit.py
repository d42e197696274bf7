"""Hit record shared by all primitive intersection routines.

A HitRecord is created fresh for every intersection scan and folded through
the per-object tests, each of which either returns it unchanged or returns a
closer hit. Normals are always oriented against the incoming ray.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of the closest ray-surface intersection found so far.

    Attributes:
        hit: 1 if any surface was accepted, 0 otherwise.
        t: Ray parameter of the closest accepted hit. Holds the t_max
            sentinel while hit == 0.
        point: World-space hit point. Only valid if hit == 1.
        normal: Unit surface normal facing the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray arrived from outside the surface.
            Only valid if hit == 1.
        material_index: Index into the material buffer, -1 on a miss.
        object_index: Index into the object buffer, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_index: ti.i32
    object_index: ti.i32


@ti.func
def make_miss_record(t_max: ti.f32) -> HitRecord:
    """Create a reset hit record with the closest-hit sentinel."""
    return HitRecord(
        hit=0,
        t=t_max,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_index=-1,
        object_index=-1,
    )


@ti.func
def make_face_record(
    t: ti.f32,
    point: vec3,
    ray_direction: vec3,
    outward_normal: vec3,
) -> HitRecord:
    """Create an accepted hit with a front-facing normal.

    The ray hits the front face when it travels against the outward normal;
    otherwise the stored normal is flipped so it always opposes the ray.
    Material and object indices are filled in by the scene scan.

    Args:
        t: Accepted ray parameter.
        point: Hit point.
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        A HitRecord with hit == 1.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return HitRecord(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        front_face=front_face,
        material_index=-1,
        object_index=-1,
    )
