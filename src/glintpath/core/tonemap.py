"""Gamma encoding of linear radiance for display.

The tone mapper applies color ** (1 / gamma) per channel. There is no
exposure control and no clamping; the display pipeline downstream is
expected to clamp out-of-range values.

Both a Taichi function (used by the frame kernel) and a NumPy variant (for
host-side post-processing of radiance buffers) are provided.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

DEFAULT_GAMMA = 2.2


@ti.func
def gamma_encode(color: vec3, gamma: ti.f32) -> vec3:
    """Gamma encode a linear color.

    Args:
        color: Linear radiance (non-negative).
        gamma: Display gamma.

    Returns:
        The per-channel power color ** (1 / gamma).
    """
    return color ** (1.0 / gamma)


def gamma_encode_array(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Gamma encode a linear image array.

    Args:
        image: Linear image of shape (..., 3) with non-negative values.
        gamma: Display gamma (default 2.2).

    Returns:
        The encoded image as float32, unclamped.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma = {gamma} must be positive")
    return np.power(image, 1.0 / gamma).astype(np.float32)
