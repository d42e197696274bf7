"""Camera module for primary ray generation.

Components:
    pinhole: Perspective camera driven by a per-frame FrameParams snapshot

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    FrameParams,
    camera_direction,
    clear_frame,
    frame_seed,
    generate_ray,
    get_camera_info,
    get_primary_direction,
    is_frame_ready,
    look_at,
    setup_frame,
)

__all__ = [
    "FrameParams",
    "look_at",
    "setup_frame",
    "clear_frame",
    "is_frame_ready",
    "camera_direction",
    "generate_ray",
    "frame_seed",
    "get_primary_direction",
    "get_camera_info",
]
