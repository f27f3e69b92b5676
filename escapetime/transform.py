"""Mapping from pixel coordinates to sample points in the complex plane."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .numeric import DEFAULT_DTYPE, Complex, Point

# Unit square [0, 1) maps to [-PLANE_HALF_WIDTH, PLANE_HALF_WIDTH) on each axis.
PLANE_HALF_WIDTH = 2


@dataclass(frozen=True)
class PlaneWindow:
    """Describe the regular grid of plane points sampled by a render."""

    x_min: float
    y_min: float
    step: float
    resolution: int

    @property
    def x_max(self) -> float:
        return self.x_min + self.step * (self.resolution - 1)

    @property
    def y_max(self) -> float:
        return self.y_min + self.step * (self.resolution - 1)


def _check(resolution: int, scale: float) -> None:
    if int(resolution) < 1:
        raise ValueError(f"resolution must be at least 1, got {resolution}.")
    if not scale > 0:
        raise ValueError(f"scale must be positive, got {scale}.")


def pixel_to_plane(
    point: Point,
    resolution: int,
    center: tuple[float, float] = (0.0, 0.0),
    scale: float = 1.0,
    dtype: type = DEFAULT_DTYPE,
) -> Complex:
    """Map pixel ``point`` of an ``resolution``-square image into the plane."""

    _check(resolution, scale)
    c = Complex.from_point(point.to_uv(resolution, dtype))
    c = c * (2 * PLANE_HALF_WIDTH) - PLANE_HALF_WIDTH
    return c * scale + Complex.from_tuple(center, dtype)


def plane_window(
    resolution: int,
    center: tuple[float, float] = (0.0, 0.0),
    scale: float = 1.0,
) -> PlaneWindow:
    _check(resolution, scale)
    x_center, y_center = center
    return PlaneWindow(
        x_min=float(x_center - PLANE_HALF_WIDTH * scale),
        y_min=float(y_center - PLANE_HALF_WIDTH * scale),
        step=float(2 * PLANE_HALF_WIDTH * scale / resolution),
        resolution=int(resolution),
    )


def plane_grid(
    resolution: int,
    center: tuple[float, float] = (0.0, 0.0),
    scale: float = 1.0,
    dtype: type = DEFAULT_DTYPE,
) -> tuple[np.ndarray, np.ndarray]:
    """Return real and imaginary sample arrays of shape ``(N, N)``, indexed ``[y, x]``.

    Each element goes through the same operations, in the same element type,
    as :func:`pixel_to_plane`, so the two agree exactly.
    """

    _check(resolution, scale)
    n = int(resolution)
    axis = np.arange(n, dtype=dtype) / dtype(n)
    axis = axis * dtype(2 * PLANE_HALF_WIDTH) - dtype(PLANE_HALF_WIDTH)
    axis = axis * dtype(scale)
    re = axis + dtype(center[0])
    im = axis + dtype(center[1])
    real, imag = np.meshgrid(re, im)
    return real, imag
