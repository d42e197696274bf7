"""Geometry module for primitive intersection.

Components:
    hit: HitRecord and front-face helpers shared by all primitives
    sphere: Sphere primitive with quadratic intersection
    plane: Infinite plane primitive

All intersection routines are Taichi functions (@ti.func). Each takes the
current closest-hit distance and returns either a closer hit or a miss, so a
linear scan over the scene folds them into a single closest-hit record.
"""

from .hit import HitRecord, make_face_record, make_miss_record
from .plane import Plane, hit_plane
from .sphere import Sphere, hit_sphere

__all__ = [
    "HitRecord",
    "make_miss_record",
    "make_face_record",
    "Sphere",
    "hit_sphere",
    "Plane",
    "hit_plane",
]
