"""Scene module for the scene data model and ray-scene queries.

Components:
    model: Host-side Material, SceneObject and Scene dataclasses
    buffers: Flattened Structure-of-Arrays Taichi fields and upload
    intersection: Closest-hit linear scan and host-side hit probes

Scenes are built on the host, validated and frozen, then uploaded once.
The kernels only read the flattened buffers; no object or material changes
while a frame is being traced.
"""

from .buffers import (
    MAX_MATERIALS,
    MAX_OBJECTS,
    clear_scene_buffers,
    get_material_count,
    get_object_count,
    upload_scene,
)
from .intersection import (
    HitInfo,
    intersect_object,
    intersect_scene,
    query_hit,
    query_object_hit,
)
from .model import (
    Material,
    MaterialType,
    ObjectKind,
    Scene,
    SceneObject,
    rotation_matrix,
)

__all__ = [
    # Data model
    "Material",
    "MaterialType",
    "ObjectKind",
    "Scene",
    "SceneObject",
    "rotation_matrix",
    # Buffers
    "upload_scene",
    "clear_scene_buffers",
    "get_object_count",
    "get_material_count",
    "MAX_OBJECTS",
    "MAX_MATERIALS",
    # Intersection
    "HitInfo",
    "intersect_object",
    "intersect_scene",
    "query_hit",
    "query_object_hit",
]
