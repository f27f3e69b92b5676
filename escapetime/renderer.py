"""Rendering of full escape-time frames."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

import numpy as np
import tensorflow as tf

from .color import COLORINGS, DEFAULT_PALETTE, Color, colormap_color, colormap_rgb, get_colormap, get_palette, grayscale, grayscale_rgb, to_rgb8_array
from .evaluator import ESCAPE_RADIUS_SQ, EscapePolicy, evaluate, weights_from_escape
from .image import RasterImage
from .numeric import Point
from .transform import PlaneWindow, pixel_to_plane, plane_grid, plane_window

PRECISIONS = {"float32": np.float32, "float64": np.float64}


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of the Mandelbrot set."""

    resolution: int = 512
    max_iterations: int = 100
    center: tuple[float, float] = (0.0, 0.0)
    scale: float = 1.0
    palette_phase: float = 0.0
    policy: EscapePolicy = EscapePolicy.ORBIT_TRAP
    coloring: str = "palette"
    palette: str = DEFAULT_PALETTE
    colormap: str = "twilight_shifted"
    precision: str = "float32"

    def __post_init__(self) -> None:
        object.__setattr__(self, "policy", EscapePolicy.parse(self.policy))
        center = tuple(float(v) for v in self.center)
        if len(center) != 2:
            raise ValueError(f"center must be a (re, im) pair, got {self.center!r}.")
        object.__setattr__(self, "center", center)

        if int(self.resolution) < 1:
            raise ValueError(f"resolution must be at least 1, got {self.resolution}.")
        if self.max_iterations < 2:
            raise ValueError(f"max_iterations must be at least 2, got {self.max_iterations}.")
        if not self.scale > 0:
            raise ValueError(f"scale must be positive, got {self.scale}.")
        if self.coloring not in COLORINGS:
            raise ValueError(f"Unknown coloring '{self.coloring}'. Valid choices: {', '.join(COLORINGS)}.")
        if self.precision not in PRECISIONS:
            raise ValueError(f"Unknown precision '{self.precision}'. Valid choices: {', '.join(PRECISIONS)}.")
        try:
            get_palette(self.palette)
            get_colormap(self.colormap)
        except KeyError as exc:
            raise ValueError(exc.args[0]) from None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "RenderParameters":
        """Build parameters from a mapping of recognized option names."""

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unknown render options: {', '.join(unknown)}.")
        return cls(**dict(options))

    @property
    def dtype(self) -> type:
        return PRECISIONS[self.precision]

    @property
    def window(self) -> PlaneWindow:
        return plane_window(self.resolution, self.center, self.scale)


@dataclass(frozen=True)
class RenderResult:
    """Container for the numerical results of a render."""

    weights: np.ndarray
    steps: np.ndarray
    escaped: np.ndarray
    window: PlaneWindow


def color_for_weight(weight: float, params: RenderParameters, phase: Optional[float] = None) -> Color:
    if params.coloring == "grayscale":
        return grayscale(weight)
    if params.coloring == "colormap":
        return colormap_color(weight, params.colormap)
    phase = params.palette_phase if phase is None else phase
    return get_palette(params.palette)(weight, phase)


def render_pixels(params: RenderParameters, sink: Optional[RasterImage] = None) -> RasterImage:
    """Evaluate every pixel one at a time and write it to ``sink``."""

    n = int(params.resolution)
    if sink is None:
        sink = RasterImage(n, n)
    for x in range(n):
        for y in range(n):
            c = pixel_to_plane(Point(x, y), n, params.center, params.scale, params.dtype)
            w = evaluate(c, params.max_iterations, params.policy)
            sink.put_pixel(x, y, color_for_weight(w, params).to_rgb8())
    return sink


@tf.function
def _escape_step(
    i: tf.Tensor,
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    steps: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Test and advance the points that have not escaped yet."""

    zr2 = zr * zr
    zi2 = zi * zi
    radius_sq = tf.cast(ESCAPE_RADIUS_SQ, zr.dtype)
    escaping = tf.logical_and(active, zr2 + zi2 > radius_sq)
    steps = tf.where(escaping, i + 1, steps)
    active = tf.logical_and(active, tf.logical_not(escaping))

    two = tf.cast(2.0, zr.dtype)
    zi_new = two * zr * zi + ci
    zr_new = zr2 - zi2 + cr
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    return steps, zr, zi, active


@tf.function
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate every point using a TensorFlow while loop."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    steps = tf.fill(tf.shape(cr), max_iterations)
    active = tf.ones_like(cr, tf.bool)

    def cond(i, zr, zi, steps, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, steps, active):
        steps, zr, zi, active = _escape_step(i, zr, zi, cr, ci, steps, active)
        return i + 1, zr, zi, steps, active

    return tf.while_loop(cond, body, (i, cr, ci, steps, active))


def render_frame(params: RenderParameters, *, device: Optional[str] = None) -> RenderResult:
    """Evaluate the whole pixel grid at once.

    Escape steps match :func:`render_pixels` exactly; weights agree up to the
    rounding of the final logarithms.
    """

    real, imag = plane_grid(params.resolution, params.center, params.scale, params.dtype)
    max_iterations = tf.constant(params.max_iterations, dtype=tf.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        cr = tf.convert_to_tensor(real)
        ci = tf.convert_to_tensor(imag)
        _, zr, zi, steps, active = _escape_run(cr, ci, max_iterations)

    escaped = np.logical_not(active.numpy())
    steps = steps.numpy()
    weights = weights_from_escape(steps, escaped, zr.numpy(), zi.numpy(), params.max_iterations, params.policy)
    return RenderResult(weights=weights, steps=steps, escaped=escaped, window=params.window)


def colorize(result: RenderResult, params: RenderParameters, phase: Optional[float] = None) -> np.ndarray:
    """Map render weights to an ``(N, N, 3)`` uint8 array."""

    if params.coloring == "grayscale":
        rgb = grayscale_rgb(result.weights)
    elif params.coloring == "colormap":
        rgb = colormap_rgb(result.weights, params.colormap)
    else:
        phase = params.palette_phase if phase is None else phase
        rgb = get_palette(params.palette).apply(result.weights, phase)
    return to_rgb8_array(rgb)


def render_image(params: RenderParameters, *, device: Optional[str] = None) -> RasterImage:
    return RasterImage.from_array(colorize(render_frame(params, device=device), params))


def palette_cycle(result: RenderResult, params: RenderParameters, frames: int) -> list[np.ndarray]:
    """Frames whose palette phase sweeps one full period from ``params.palette_phase``."""

    if frames < 1:
        raise ValueError(f"frames must be at least 1, got {frames}.")
    phases = params.palette_phase + np.arange(frames, dtype=np.float64) / frames
    return [colorize(result, params, phase=float(phase)) for phase in phases]
