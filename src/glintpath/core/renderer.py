"""Frame renderer for one-sample-per-pixel frame loops.

This module provides a convenient wrapper around the core integrator that
supports:
- Rendering single frames into RGBA arrays
- Frame loops over a sequence of FrameParams
- Per-frame callbacks for UI updates
- Dropping whole frames on cancellation

Cancellation is per frame: a frame is either rendered completely or skipped.
The camera snapshot of a frame is written once before its kernel launches.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glintpath.core.renderer import FrameRenderer
    >>> from glintpath.scene import Scene, Material, upload_scene
    >>>
    >>> scene = Scene()
    >>> glass = scene.add_material(Material.glass(ior=1.52))
    >>> scene.add_sphere((0.0, 0.0, 0.0), 0.5, glass)
    >>> upload_scene(scene)
    >>>
    >>> renderer = FrameRenderer(320, 240)
    >>> params = renderer.frame_params(eye=(0.0, 0.0, 4.0), target=(0.0, 0.0, 0.0))
    >>> image = renderer.render(params)  # (240, 320, 4) RGBA
"""

from collections.abc import Callable, Generator, Iterable

import numpy as np
import numpy.typing as npt
from loguru import logger

from glintpath.camera.pinhole import FrameParams
from glintpath.config import DEFAULT_CONFIG, RenderConfig
from glintpath.core.integrator import (
    get_bounce_counts,
    get_display_numpy,
    get_radiance_numpy,
    render_frame,
    setup_render_target,
)
from glintpath.preview.display import to_rgba

# Type alias for frame callback
# Callback receives (frame_index, rgba_image)
FrameCallback = Callable[[int, npt.NDArray[np.float32]], None]

# Type alias for cancellation check, polled before each frame
CancelCheck = Callable[[], bool]


class FrameRenderer:
    """Renders frames of the uploaded scene at a fixed resolution.

    The renderer owns the active region of the global render target (which
    is made of Taichi fields). The scene must be uploaded separately with
    upload_scene().

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        config: Render configuration used for every frame.
    """

    def __init__(
        self, width: int, height: int, config: RenderConfig = DEFAULT_CONFIG
    ) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            config: Render configuration.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self.config = config
        self._frame_count = 0
        logger.info(
            "Created {}x{} renderer (max_depth={}, fov={})",
            width,
            height,
            config.max_depth,
            config.fov_degrees,
        )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self._width / self._height

    @property
    def frame_count(self) -> int:
        """Number of frames rendered so far."""
        return self._frame_count

    def resize(self, width: int, height: int) -> None:
        """Resize the render target.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def frame_params(
        self,
        eye: tuple[float, float, float],
        target: tuple[float, float, float],
        up: tuple[float, float, float] = (0.0, 1.0, 0.0),
        elapsed_time: float = 0.0,
    ) -> FrameParams:
        """Build FrameParams matching this renderer's aspect ratio."""
        return FrameParams.looking_at(
            eye, target, up, elapsed_time=elapsed_time, aspect_ratio=self.aspect_ratio
        )

    def render(self, params: FrameParams) -> npt.NDArray[np.float32]:
        """Render one frame.

        Args:
            params: Camera pose, frame time and aspect ratio.

        Returns:
            Gamma-encoded RGBA image of shape (height, width, 4), top row
            first, alpha = 1.
        """
        render_frame(params, self.config)
        self._frame_count += 1
        return to_rgba(get_display_numpy())

    def render_frames(
        self,
        frames: Iterable[FrameParams],
        callback: FrameCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> Generator[npt.NDArray[np.float32], None, None]:
        """Render a sequence of frames, yielding each image.

        should_cancel is polled before each frame; when it returns True the
        frame is dropped entirely and the loop moves on to the next one.

        Args:
            frames: Per-frame parameters, consumed lazily.
            callback: Optional callback called after each rendered frame.
                Receives (frame_index, rgba_image).
            should_cancel: Optional cancellation check.

        Yields:
            RGBA images of shape (height, width, 4).

        Example:
            >>> params = (renderer.frame_params(eye, target, elapsed_time=t) for t in times)
            >>> for image in renderer.render_frames(params):
            ...     display(image)
        """
        for index, params in enumerate(frames):
            if should_cancel is not None and should_cancel():
                logger.warning("Dropped frame {} (t={:.3f}s)", index, params.elapsed_time)
                continue

            image = self.render(params)
            if callback is not None:
                callback(index, image)
            yield image

    def get_radiance_numpy(self) -> npt.NDArray[np.float32]:
        """Linear radiance of the last frame, shape (height, width, 3)."""
        return get_radiance_numpy()

    def get_bounce_counts(self) -> npt.NDArray[np.int32]:
        """Scattering events per pixel of the last frame, shape (height, width)."""
        return get_bounce_counts()

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frame_count})"
        )
