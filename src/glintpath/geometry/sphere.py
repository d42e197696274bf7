"""Sphere primitive intersection.

The ray-sphere intersection solves

    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + 2*b*t + c = 0 with

    a = dot(direction, direction)
    b = dot(oc, direction)
    c = dot(oc, oc) - radius^2
    oc = origin - center

The nearer root is tried first; if it lies at or below the hit epsilon the
farther root is used instead, which lets rays leaving a glass sphere from
the inside find the exit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glintpath.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from glintpath.geometry.hit import HitRecord, make_face_record, make_miss_record

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    epsilon: ti.f32,
    closest_t: ti.f32,
) -> HitRecord:
    """Test a ray against a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (normalized by the caller).
        sphere: The sphere to test.
        epsilon: Hits with t <= epsilon are rejected.
        closest_t: Only hits with t < closest_t are accepted.

    Returns:
        A HitRecord with hit == 1 if the sphere is hit in (epsilon, closest_t),
        otherwise a miss record carrying closest_t.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    result = make_miss_record(closest_t)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t = (-b - sqrt_d) / a
        if t < epsilon:
            t = (-b + sqrt_d) / a

        if t > epsilon and t < closest_t:
            point = ray_origin + t * ray_direction
            outward_normal = tm.normalize(point - sphere.center)
            result = make_face_record(t, point, ray_direction, outward_normal)

    return result
