"""Deterministic per-pixel pseudo-random stream.

Every pixel trace owns its own 32-bit linear congruential state, seeded from
the integer pixel coordinate and the frame time:

    seed = x * 1973 + y * 9277 + floor(time * 1000) * 26699   (mod 2^32)

Each draw advances the state with

    seed = seed * 1664525 + 1013904223                        (mod 2^32)

and returns the low 24 bits scaled into [0, 1). The state is an explicit
``ti.u32`` value threaded through every call that consumes randomness; no
global random state is touched, so two evaluations of the same pixel with
the same frame time produce identical streams.

The frame-time term is folded on the host by frame_seed_term() so that the
kernels only ever perform unsigned 32-bit arithmetic.

PixelRandom is a pure-Python mirror of the Taichi stream, used to check and
reproduce kernel results on the host.

Example:
    >>> rng = PixelRandom(10, 20, elapsed_time=0.0)
    >>> value = rng.next_float()
    >>> 0.0 <= value < 1.0
    True
"""

import math

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Seed and LCG constants
SEED_MULTIPLIER_X = 1973
SEED_MULTIPLIER_Y = 9277
SEED_MULTIPLIER_TIME = 26699
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223

UINT32_MASK = 0xFFFFFFFF
MANTISSA_MASK = 0x00FFFFFF
MANTISSA_SCALE = 16777216.0  # 0x01000000

# Cap on rejection sampling attempts for random_in_unit_sphere
MAX_UNIT_SPHERE_ATTEMPTS = 64


# =============================================================================
# Host-side seeding
# =============================================================================


def frame_seed_term(elapsed_time: float) -> int:
    """Compute the time-dependent part of the pixel seed.

    Args:
        elapsed_time: Frame time in seconds.

    Returns:
        floor(elapsed_time * 1000) * 26699 wrapped to an unsigned 32-bit value.
    """
    return (math.floor(elapsed_time * 1000.0) * SEED_MULTIPLIER_TIME) & UINT32_MASK


def pixel_seed_host(x: int, y: int, elapsed_time: float) -> int:
    """Compute the initial PRNG state of a pixel on the host."""
    return (
        x * SEED_MULTIPLIER_X + y * SEED_MULTIPLIER_Y + frame_seed_term(elapsed_time)
    ) & UINT32_MASK


class PixelRandom:
    """Pure-Python replica of the per-pixel random stream.

    Attributes:
        seed: The current unsigned 32-bit state.
    """

    def __init__(self, x: int, y: int, elapsed_time: float = 0.0) -> None:
        self.seed = pixel_seed_host(x, y, elapsed_time)

    def next_float(self) -> float:
        """Advance the state and return a float in [0, 1)."""
        self.seed = (self.seed * LCG_MULTIPLIER + LCG_INCREMENT) & UINT32_MASK
        return (self.seed & MANTISSA_MASK) / MANTISSA_SCALE

    def random_in_unit_sphere(
        self, max_attempts: int = MAX_UNIT_SPHERE_ATTEMPTS
    ) -> tuple[float, float, float]:
        """Rejection-sample a point inside the unit sphere.

        Returns the last candidate if no sample is accepted within
        max_attempts draws.
        """
        p = (0.0, 0.0, 0.0)
        for _ in range(max_attempts):
            p = (
                self.next_float() * 2.0 - 1.0,
                self.next_float() * 2.0 - 1.0,
                self.next_float() * 2.0 - 1.0,
            )
            if p[0] * p[0] + p[1] * p[1] + p[2] * p[2] < 1.0:
                break
        return p


# =============================================================================
# Taichi stream (state threaded explicitly)
# =============================================================================


@ti.func
def pixel_seed(x: ti.i32, y: ti.i32, frame_term: ti.u32) -> ti.u32:
    """Compute the initial PRNG state of a pixel.

    Args:
        x: Pixel column.
        y: Pixel row.
        frame_term: Time component from frame_seed_term().

    Returns:
        The wrapped unsigned 32-bit seed.
    """
    return (
        ti.cast(x, ti.u32) * ti.cast(SEED_MULTIPLIER_X, ti.u32)
        + ti.cast(y, ti.u32) * ti.cast(SEED_MULTIPLIER_Y, ti.u32)
        + frame_term
    )


@ti.func
def next_float(seed: ti.u32):
    """Draw one uniform float in [0, 1).

    Args:
        seed: The current PRNG state.

    Returns:
        A tuple of (value, seed) where seed is the advanced state.
    """
    state = seed * ti.cast(LCG_MULTIPLIER, ti.u32) + ti.cast(LCG_INCREMENT, ti.u32)
    value = ti.cast(state & ti.cast(MANTISSA_MASK, ti.u32), ti.f32) / MANTISSA_SCALE
    return value, state


@ti.func
def random_in_unit_sphere(seed: ti.u32):
    """Rejection-sample a point inside the unit sphere.

    Draws three values per attempt, maps each to [-1, 1) and accepts the
    first candidate with squared length below one. After
    MAX_UNIT_SPHERE_ATTEMPTS rejections the last candidate is returned.

    Args:
        seed: The current PRNG state.

    Returns:
        A tuple of (point, seed).
    """
    state = seed
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_UNIT_SPHERE_ATTEMPTS):
        if found == 0:
            rx, state = next_float(state)
            ry, state = next_float(state)
            rz, state = next_float(state)
            p = vec3(rx * 2.0 - 1.0, ry * 2.0 - 1.0, rz * 2.0 - 1.0)
            if tm.dot(p, p) < 1.0:
                found = 1
    return p, state
