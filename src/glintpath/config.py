"""Render configuration with documented defaults.

The tracing core used to embed its tuning constants inline. They are
collected here so the integrator and camera receive them as parameters:

    max_depth:    Maximum number of bounces per path (default 8).
    hit_epsilon:  Minimum accepted ray parameter, also used as the
                  near-parallel guard for planes (default 0.001).
    fov_degrees:  Vertical field of view of the camera (default 60).
    t_max:        Initial closest-hit distance (default +inf).
    gamma:        Display gamma used by the tone mapper (default 2.2).

Example:
    >>> from glintpath.config import RenderConfig
    >>> config = RenderConfig(max_depth=4)
    >>> config.hit_epsilon
    0.001
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any


@dataclass(frozen=True)
class RenderConfig:
    """Named rendering parameters shared by all pixels of a frame.

    Attributes:
        max_depth: Bounce cap of the path integrator. Energy beyond this
            depth is silently truncated.
        hit_epsilon: Self-intersection guard. Every primitive rejects hits
            with t <= hit_epsilon and planes reject rays whose direction is
            within hit_epsilon of parallel.
        fov_degrees: Vertical field of view in degrees.
        t_max: Closest-hit sentinel used to reset the hit record.
        gamma: Gamma of the display encoding (color ** (1 / gamma)).
    """

    max_depth: int = 8
    hit_epsilon: float = 0.001
    fov_degrees: float = 60.0
    t_max: float = math.inf
    gamma: float = 2.2

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth = {self.max_depth} must be at least 1")
        if not self.hit_epsilon > 0.0:
            raise ValueError(f"hit_epsilon = {self.hit_epsilon} must be positive")
        if not 0.0 < self.fov_degrees < 180.0:
            raise ValueError(
                f"fov_degrees = {self.fov_degrees} must be in the open interval (0, 180)"
            )
        if not self.t_max > self.hit_epsilon:
            raise ValueError(
                f"t_max = {self.t_max} must be greater than hit_epsilon = {self.hit_epsilon}"
            )
        if not self.gamma > 0.0:
            raise ValueError(f"gamma = {self.gamma} must be positive")

    @property
    def tan_half_fov(self) -> float:
        """Tangent of half the vertical field of view."""
        return math.tan(math.radians(self.fov_degrees) / 2.0)

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration as a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a configuration from a mapping.

        Missing keys take their defaults.

        Raises:
            ValueError: If the mapping contains unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown render config keys: {', '.join(unknown)}")
        return cls(**data)


DEFAULT_CONFIG = RenderConfig()
