"""Path integrator and frame kernels.

This module drives the bounce loop of every primary ray. Per iteration the
closest hit is found by a linear scan of the scene; a miss adds the sky
gradient and ends the path, a hit adds the surface emission and asks the
material to scatter. Paths also end when the material absorbs the ray or
when max_depth iterations have run. Energy beyond the depth cap is
truncated, not estimated.

Radiance is linear RGB in [0, inf) and is not clamped here. The frame kernel
gamma encodes it into a separate display buffer.

Key features:
    - One primary ray per pixel per frame, through the pixel center
    - Per-pixel PRNG state seeded from the integer pixel coordinate
    - Explicit RenderConfig (depth cap, epsilon, fov, gamma)
    - Per-pixel bounce counts for inspection

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glintpath.camera.pinhole import FrameParams
    >>> from glintpath.core.integrator import render_frame, setup_render_target
    >>> setup_render_target(320, 240)
    >>> params = FrameParams.looking_at((0, 0, 4), (0, 0, 0), aspect_ratio=4 / 3)
    >>> render_frame(params)
"""

import time
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from loguru import logger

from glintpath.camera.pinhole import (
    FrameParams,
    frame_seed,
    generate_ray,
    is_frame_ready,
    setup_frame,
)
from glintpath.config import DEFAULT_CONFIG, RenderConfig
from glintpath.core.ray import Ray, make_ray
from glintpath.core.rng import pixel_seed
from glintpath.core.tonemap import gamma_encode
from glintpath.materials.scatter import emitted, scatter
from glintpath.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Background
# =============================================================================

# Gradient endpoints: white toward -Y, sky blue toward +Y
WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Vertical sky gradient for rays that escape the scene.

    Args:
        direction: Unit ray direction.

    Returns:
        mix(white, sky blue, 0.5 * (direction.y + 1)).
    """
    blend = 0.5 * (direction.y + 1.0)
    return tm.mix(WHITE, SKY_BLUE, blend)


# =============================================================================
# Path Tracing
# =============================================================================


@ti.func
def trace_path(
    ray: Ray,
    seed: ti.u32,
    max_depth: ti.i32,
    epsilon: ti.f32,
    t_max: ti.f32,
):
    """Trace one path from a primary ray.

    Args:
        ray: The primary ray.
        seed: Initial PRNG state of the pixel.
        max_depth: Maximum number of loop iterations.
        epsilon: Hit epsilon shared by all primitives.
        t_max: Closest-hit sentinel.

    Returns:
        A tuple of (radiance, bounces, seed) where bounces counts the
        scattering events (never more than max_depth).
    """
    origin = ray.origin
    direction = tm.normalize(ray.direction)
    state = seed

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    bounces = 0

    # Cleared when the path escapes or is absorbed
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(origin, direction, epsilon, t_max)

            if rec.hit == 0:
                radiance += throughput * background_color(direction)
                active = 0
            else:
                radiance += throughput * emitted(rec.material_index)

                attenuation, scattered, did_scatter, state = scatter(
                    make_ray(origin, direction), rec, state
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = scattered.origin
                    direction = tm.normalize(scattered.direction)
                    bounces += 1

    return radiance, bounces, state


@ti.func
def pixel_uv(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32):
    """Normalized coordinates of a pixel center (j = 0 is the bottom row)."""
    u = (ti.cast(pixel_i, ti.f32) + 0.5) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + 0.5) / ti.cast(height, ti.f32)
    return u, v


@ti.func
def trace_pixel_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    epsilon: ti.f32,
    t_max: ti.f32,
):
    """Trace the primary ray of one pixel of the current frame.

    Returns:
        A tuple of (radiance, bounces).
    """
    u, v = pixel_uv(pixel_i, pixel_j, width, height)
    ray = generate_ray(u, v)
    seed = pixel_seed(pixel_i, pixel_j, frame_seed())
    radiance, bounces, final_seed = trace_path(ray, seed, max_depth, epsilon, t_max)
    return radiance, bounces


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear radiance and gamma-encoded display color
_radiance_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_display_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Scattering events per pixel in the last frame
_bounce_buffer = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Single-pixel probe results
_probe_radiance = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_display = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_bounces = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT; this
    only sets the active region and clears it.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _radiance_buffer.fill(0.0)
    _display_buffer.fill(0.0)
    _bounce_buffer.fill(0)


def reset_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _image_width[None] = 0
    _image_height[None] = 0
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    epsilon: ti.f32,
    t_max: ti.f32,
    gamma: ti.f32,
):
    """Trace one path per pixel; each pixel writes only its own cells."""
    for i, j in ti.ndrange(width, height):
        radiance, bounces = trace_pixel_impl(i, j, width, height, max_depth, epsilon, t_max)
        _radiance_buffer[i, j] = radiance
        _display_buffer[i, j] = gamma_encode(radiance, gamma)
        _bounce_buffer[i, j] = bounces


@ti.kernel
def _trace_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    epsilon: ti.f32,
    t_max: ti.f32,
    gamma: ti.f32,
):
    # Single-iteration outer loop so the bounce loop stays serial
    for _ in range(1):
        radiance, bounces = trace_pixel_impl(
            pixel_i, pixel_j, width, height, max_depth, epsilon, t_max
        )
        _probe_radiance[None] = radiance
        _probe_display[None] = gamma_encode(radiance, gamma)
        _probe_bounces[None] = bounces


# =============================================================================
# Public Rendering API
# =============================================================================


@dataclass(frozen=True)
class PixelSample:
    """Result of tracing a single pixel.

    Attributes:
        radiance: Linear radiance.
        color: Gamma-encoded display color.
        bounces: Number of scattering events along the path.
    """

    radiance: tuple[float, float, float]
    color: tuple[float, float, float]
    bounces: int


def render_frame(params: FrameParams, config: RenderConfig = DEFAULT_CONFIG) -> float:
    """Render one frame (one sample per pixel) into the render target.

    The camera snapshot is written before the kernel launches and stays
    fixed for the whole frame.

    Args:
        params: Per-frame camera pose, time and aspect ratio.
        config: Render configuration.

    Returns:
        Wall-clock seconds spent in the frame kernel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    setup_frame(params, config.fov_degrees)

    start = time.perf_counter()
    _render_frame(
        width,
        height,
        config.max_depth,
        config.hit_epsilon,
        config.t_max,
        config.gamma,
    )
    ti.sync()
    elapsed = time.perf_counter() - start

    logger.debug("Rendered {}x{} frame in {:.3f}s", width, height, elapsed)
    return elapsed


def trace_pixel(
    pixel_i: int, pixel_j: int, config: RenderConfig = DEFAULT_CONFIG
) -> PixelSample:
    """Trace a single pixel of the current frame.

    Uses the camera snapshot of the last setup_frame() (or render_frame())
    call. The result equals what the frame kernel writes for this pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        config: Render configuration.

    Returns:
        The traced PixelSample.

    Raises:
        RuntimeError: If the render target or the frame has not been set up.
        ValueError: If the pixel lies outside the render target.
    """
    _check_render_target_initialized()
    if not is_frame_ready():
        raise RuntimeError("Frame not set up. Call setup_frame() first.")

    width, height = get_image_dimensions()
    if not (0 <= pixel_i < width and 0 <= pixel_j < height):
        raise ValueError(f"Pixel ({pixel_i}, {pixel_j}) outside {width}x{height} target")

    _trace_single_pixel(
        pixel_i,
        pixel_j,
        width,
        height,
        config.max_depth,
        config.hit_epsilon,
        config.t_max,
        config.gamma,
    )

    radiance = _probe_radiance[None]
    color = _probe_display[None]
    return PixelSample(
        radiance=(float(radiance[0]), float(radiance[1]), float(radiance[2])),
        color=(float(color[0]), float(color[1]), float(color[2])),
        bounces=int(_probe_bounces[None]),
    )


def _active_region(field) -> np.ndarray:
    """Crop a (W, H, ...) buffer and flip it to (H, W, ...) with the top row first."""
    width, height = get_image_dimensions()
    data = field.to_numpy()[:width, :height]
    data = np.swapaxes(data, 0, 1)
    return np.flipud(data)


def get_radiance_numpy() -> npt.NDArray[np.float32]:
    """Get the linear radiance of the last frame.

    Returns:
        Array of shape (height, width, 3), top row first, unclamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _active_region(_radiance_buffer).astype(np.float32)


def get_display_numpy() -> npt.NDArray[np.float32]:
    """Get the gamma-encoded color of the last frame.

    Returns:
        Array of shape (height, width, 3), top row first, unclamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _active_region(_display_buffer).astype(np.float32)


def get_bounce_counts() -> npt.NDArray[np.int32]:
    """Get the per-pixel scattering counts of the last frame.

    Returns:
        Array of shape (height, width), top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _active_region(_bounce_buffer).astype(np.int32)
