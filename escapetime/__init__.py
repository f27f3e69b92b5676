"""Public API for escape-time rendering of the Mandelbrot set."""

from .color import PALETTES, Color, CosinePalette, get_palette, grayscale
from .evaluator import Escape, EscapePolicy, escape, evaluate, weight
from .image import RasterImage, write_gif
from .numeric import Complex, Point
from .renderer import (
    RenderParameters,
    RenderResult,
    colorize,
    palette_cycle,
    render_frame,
    render_image,
    render_pixels,
)
from .transform import PlaneWindow, pixel_to_plane, plane_grid, plane_window

__all__ = [
    "Color",
    "Complex",
    "CosinePalette",
    "Escape",
    "EscapePolicy",
    "PALETTES",
    "PlaneWindow",
    "Point",
    "RasterImage",
    "RenderParameters",
    "RenderResult",
    "colorize",
    "escape",
    "evaluate",
    "get_palette",
    "grayscale",
    "palette_cycle",
    "pixel_to_plane",
    "plane_grid",
    "plane_window",
    "render_frame",
    "render_image",
    "render_pixels",
    "weight",
    "write_gif",
]
