"""Preview module for visualizing rendered frames.

Components:
    display: RGBA frame assembly and Matplotlib preview

Matplotlib is imported lazily, only when a figure is shown.
"""

from glintpath.preview.display import prepare_for_display, show_frame, to_rgba

__all__ = [
    "to_rgba",
    "prepare_for_display",
    "show_frame",
]
