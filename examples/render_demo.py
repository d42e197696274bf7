#!/usr/bin/env python3
"""Render the demo scene with an orbiting camera.

This script builds the demo scene (a ground plane, a glass sphere and two
metal spheres), then renders a short sequence of frames while the camera
orbits the origin at

    eye(t) = (4 cos(0.3 t), 1.5, 4 sin(0.3 t))

Each frame traces one path per pixel. The last frame can be shown with
Matplotlib.

Usage:
    python -m examples.render_demo [options]

Options:
    --width WIDTH       Image width in pixels (default: 1024)
    --height HEIGHT     Image height in pixels (default: 768)
    --frames FRAMES     Number of frames to render (default: 10)
    --fps FPS           Frame rate used to advance the clock (default: 30)
    --max-depth DEPTH   Bounce cap (default: 8)
    --scene PATH        Load the scene from a JSON description instead
    --dump-scene        Print the scene description as JSON and exit
    --show              Show the last frame in a Matplotlib window
    --cpu               Force the CPU backend
    --quiet             Only log warnings and errors

Example:
    python -m examples.render_demo --width 320 --height 240 --frames 3 --show
"""

from __future__ import annotations

import argparse
import json
import math
import sys
import time
from pathlib import Path

import taichi as ti
from loguru import logger

# Orbit of the demo camera
ORBIT_RADIUS = 4.0
ORBIT_HEIGHT = 1.5
ORBIT_SPEED = 0.3


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo scene with an orbiting camera.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1024,
        help="Image width in pixels (default: 1024)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=768,
        help="Image height in pixels (default: 768)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=10,
        help="Number of frames to render (default: 10)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=30.0,
        help="Frame rate used to advance the clock (default: 30)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=8,
        help="Bounce cap (default: 8)",
    )
    parser.add_argument(
        "--scene",
        type=Path,
        default=None,
        help="Load the scene from a JSON description",
    )
    parser.add_argument(
        "--dump-scene",
        action="store_true",
        help="Print the scene description as JSON and exit",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show the last frame in a Matplotlib window",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser.parse_args()


def create_demo_scene():
    """Build the demo scene.

    Returns:
        A Scene with a ground plane at y = -0.5, a glass sphere at the origin
        and a mirror and a fuzzy gold sphere on either side.
    """
    from glintpath.scene import Material, Scene

    scene = Scene()
    ground = scene.add_material(Material.lambertian((0.5, 0.5, 0.5), name="ground"))
    glass = scene.add_material(Material.glass(ior=1.52, name="glass"))
    mirror = scene.add_material(Material.metal((0.8, 0.8, 0.8), roughness=0.0, name="mirror"))
    gold = scene.add_material(Material.metal((0.8, 0.6, 0.2), roughness=0.3, name="gold"))

    scene.add_plane((0.0, -0.5, 0.0), ground)
    scene.add_sphere((0.0, 0.0, 0.0), 0.5, glass)
    scene.add_sphere((-1.2, 0.0, 0.0), 0.5, mirror)
    scene.add_sphere((1.2, 0.0, 0.0), 0.5, gold)
    return scene


def orbit_eye(elapsed_time: float) -> tuple[float, float, float]:
    """Camera position on the demo orbit at elapsed_time seconds."""
    angle = ORBIT_SPEED * elapsed_time
    return (
        ORBIT_RADIUS * math.cos(angle),
        ORBIT_HEIGHT,
        ORBIT_RADIUS * math.sin(angle),
    )


def render_demo(
    width: int = 1024,
    height: int = 768,
    num_frames: int = 10,
    fps: float = 30.0,
    max_depth: int = 8,
    scene_path: Path | None = None,
    show: bool = False,
):
    """Render the orbit sequence and return the last frame.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_frames: Number of frames to render.
        fps: Frames per second of the simulated clock.
        max_depth: Bounce cap.
        scene_path: Optional JSON scene description.
        show: If True, show the last frame with Matplotlib.

    Returns:
        The last RGBA frame, or None if no frame was rendered.
    """
    # Lazy imports to allow Taichi initialization first
    from glintpath.config import RenderConfig
    from glintpath.core.renderer import FrameRenderer
    from glintpath.preview.display import show_frame
    from glintpath.scene import Scene, upload_scene

    if scene_path is not None:
        logger.info("Loading scene from {}", scene_path)
        scene = Scene.from_dict(json.loads(scene_path.read_text()))
    else:
        scene = create_demo_scene()
    upload_scene(scene)

    renderer = FrameRenderer(width, height, RenderConfig(max_depth=max_depth))
    frames = (
        renderer.frame_params(orbit_eye(t), (0.0, 0.0, 0.0), elapsed_time=t)
        for t in (index / fps for index in range(num_frames))
    )

    start_time = time.perf_counter()

    def progress_callback(index: int, image) -> None:
        elapsed = time.perf_counter() - start_time
        logger.info(
            "Frame {}/{} done ({:.2f} frames/s)",
            index + 1,
            num_frames,
            (index + 1) / elapsed if elapsed > 0 else 0.0,
        )

    last_frame = None
    for image in renderer.render_frames(frames, callback=progress_callback):
        last_frame = image

    logger.info(
        "Rendered {} frames in {:.2f}s",
        renderer.frame_count,
        time.perf_counter() - start_time,
    )

    if show and last_frame is not None:
        show_frame(last_frame, title=f"Frame {renderer.frame_count - 1}")

    return last_frame


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.quiet:
        logger.remove()
        logger.add(sys.stderr, level="WARNING")

    if args.dump_scene:
        print(json.dumps(create_demo_scene().to_dict(), indent=2))
        return 0

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        try:
            ti.init(arch=ti.gpu)
            logger.info("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            logger.info("Using CPU backend")

    try:
        render_demo(
            width=args.width,
            height=args.height,
            num_frames=args.frames,
            fps=args.fps,
            max_depth=args.max_depth,
            scene_path=args.scene,
            show=args.show,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: {}", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
