"""Pinhole camera model for primary ray generation.

This module converts a normalized pixel coordinate and the per-frame camera
pose into a world-space primary ray. The camera is described by the frame
parameters handed over by the host each frame:

- camera_position: world-space origin of every primary ray
- view_matrix: 4x4 world-to-camera transform (camera looks down its -Z)
- aspect_ratio: width / height of the output image
- elapsed_time: frame time in seconds, folded into the PRNG seeds

Camera-space directions are built as

    dir = normalize(((u*2-1) * aspect * tan(fov/2), (v*2-1) * tan(fov/2), -1))

and rotated into world space by the inverse of the view rotation. The
origin is the camera position itself, untransformed.

setup_frame() writes a read-only snapshot of these values into Taichi
fields; every pixel of a frame reads the same snapshot.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glintpath.camera.pinhole import FrameParams, setup_frame
    >>> params = FrameParams.looking_at(
    ...     eye=(0.0, 0.0, 4.0), target=(0.0, 0.0, 0.0), aspect_ratio=4.0 / 3.0
    ... )
    >>> setup_frame(params, fov_degrees=60.0)
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from loguru import logger

from glintpath.core.ray import Ray, make_ray
from glintpath.core.rng import frame_seed_term

vec3 = tm.vec3


# =============================================================================
# Frame Parameters
# =============================================================================


def look_at(
    eye: tuple[float, float, float],
    target: tuple[float, float, float],
    up: tuple[float, float, float] = (0.0, 1.0, 0.0),
) -> npt.NDArray[np.float64]:
    """Build a right-handed world-to-camera matrix.

    Args:
        eye: Camera position in world space.
        target: Point the camera looks at.
        up: Approximate up direction.

    Returns:
        A 4x4 view matrix. The camera looks down its local -Z axis.

    Raises:
        ValueError: If eye and target coincide or up is parallel to the
            viewing direction.
    """
    eye_v = np.asarray(eye, dtype=np.float64)
    target_v = np.asarray(target, dtype=np.float64)
    up_v = np.asarray(up, dtype=np.float64)

    w = eye_v - target_v
    w_len = np.linalg.norm(w)
    if w_len < 1e-12:
        raise ValueError(f"look_at eye {tuple(eye)} and target {tuple(target)} coincide")
    w = w / w_len

    u = np.cross(up_v, w)
    u_len = np.linalg.norm(u)
    if u_len < 1e-12:
        raise ValueError(f"look_at up vector {tuple(up)} is parallel to the view direction")
    u = u / u_len
    v = np.cross(w, u)

    view = np.identity(4)
    view[0, :3] = u
    view[1, :3] = v
    view[2, :3] = w
    view[:3, 3] = -view[:3, :3] @ eye_v
    return view


@dataclass(frozen=True, eq=False)
class FrameParams:
    """Per-frame snapshot supplied by the host.

    Attributes:
        camera_position: Camera origin in world space.
        view_matrix: 4x4 world-to-camera matrix.
        elapsed_time: Seconds since start (finite); seeds the per-pixel PRNG.
        aspect_ratio: Output width divided by height.
    """

    camera_position: tuple[float, float, float]
    view_matrix: npt.NDArray[np.float64]
    elapsed_time: float = 0.0
    aspect_ratio: float = 1.0

    def __post_init__(self) -> None:
        matrix = np.asarray(self.view_matrix, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"view_matrix must be 4x4, got shape {matrix.shape}")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if not math.isfinite(self.elapsed_time):
            raise ValueError(f"elapsed_time = {self.elapsed_time} must be finite")
        object.__setattr__(self, "view_matrix", matrix)
        object.__setattr__(
            self, "camera_position", tuple(float(c) for c in self.camera_position)
        )

    @classmethod
    def looking_at(
        cls,
        eye: tuple[float, float, float],
        target: tuple[float, float, float],
        up: tuple[float, float, float] = (0.0, 1.0, 0.0),
        elapsed_time: float = 0.0,
        aspect_ratio: float = 1.0,
    ) -> "FrameParams":
        """Create frame parameters for a camera at eye looking at target."""
        return cls(
            camera_position=eye,
            view_matrix=look_at(eye, target, up),
            elapsed_time=elapsed_time,
            aspect_ratio=aspect_ratio,
        )


# =============================================================================
# Taichi Fields for the Frame Snapshot
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_inverse_view = ti.Matrix.field(3, 3, dtype=ti.f32, shape=())
_aspect_ratio = ti.field(dtype=ti.f32, shape=())
_tan_half_fov = ti.field(dtype=ti.f32, shape=())
_frame_seed_term = ti.field(dtype=ti.u32, shape=())

_frame_initialized = ti.field(dtype=ti.i32, shape=())


def setup_frame(params: FrameParams, fov_degrees: float = 60.0) -> None:
    """Write the per-frame camera snapshot.

    Must not be called while a frame kernel is running; all pixels of a
    frame see the same values.

    Args:
        params: Camera pose, frame time and aspect ratio.
        fov_degrees: Vertical field of view in degrees.

    Raises:
        ValueError: If fov_degrees is outside (0, 180) or the view rotation
            is singular.
    """
    if not 0.0 < fov_degrees < 180.0:
        raise ValueError(f"fov_degrees = {fov_degrees} must be in the open interval (0, 180)")

    rotation = params.view_matrix[:3, :3]
    try:
        inverse_rotation = np.linalg.inv(rotation)
    except np.linalg.LinAlgError as exc:
        raise ValueError("view_matrix rotation is singular") from exc

    tan_half_fov = math.tan(math.radians(fov_degrees) / 2.0)

    _camera_position[None] = list(params.camera_position)
    _inverse_view[None] = ti.Matrix(inverse_rotation.tolist())
    _aspect_ratio[None] = params.aspect_ratio
    _tan_half_fov[None] = tan_half_fov
    _frame_seed_term[None] = frame_seed_term(params.elapsed_time)
    _frame_initialized[None] = 1

    logger.debug(
        "Camera at {} (aspect {:.4f}, fov {:.1f}, t={:.3f}s)",
        params.camera_position,
        params.aspect_ratio,
        fov_degrees,
        params.elapsed_time,
    )


def clear_frame() -> None:
    """Forget the current frame snapshot."""
    _frame_initialized[None] = 0


def is_frame_ready() -> bool:
    """Check whether setup_frame() has been called."""
    return bool(_frame_initialized[None])


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def camera_direction(u: ti.f32, v: ti.f32) -> vec3:
    """Camera-space unit direction through normalized coordinates (u, v)."""
    tan_half = _tan_half_fov[None]
    x = (u * 2.0 - 1.0) * _aspect_ratio[None] * tan_half
    y = (v * 2.0 - 1.0) * tan_half
    return tm.normalize(vec3(x, y, -1.0))


@ti.func
def generate_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate the world-space primary ray for (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera position with a unit direction.
    """
    direction = _inverse_view[None] @ camera_direction(u, v)
    return make_ray(_camera_position[None], tm.normalize(direction))


@ti.func
def frame_seed() -> ti.u32:
    """Time component of the pixel seeds for the current frame."""
    return _frame_seed_term[None]


@ti.kernel
def _primary_direction(u: ti.f32, v: ti.f32) -> vec3:
    return generate_ray(u, v).direction


def get_primary_direction(u: float, v: float) -> tuple[float, float, float]:
    """Evaluate the primary ray direction for (u, v) on the host.

    Raises:
        RuntimeError: If no frame has been set up.
    """
    if not is_frame_ready():
        raise RuntimeError("Frame not set up. Call setup_frame() first.")
    d = _primary_direction(u, v)
    return (float(d[0]), float(d[1]), float(d[2]))


def get_camera_info() -> dict[str, object]:
    """Get the current frame snapshot for debugging."""
    pos = _camera_position[None]
    return {
        "position": (float(pos[0]), float(pos[1]), float(pos[2])),
        "inverse_view": _inverse_view[None].to_numpy().tolist(),
        "aspect_ratio": float(_aspect_ratio[None]),
        "tan_half_fov": float(_tan_half_fov[None]),
        "frame_seed_term": int(_frame_seed_term[None]),
    }
