"""Turning escape weights into colors."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from matplotlib import colormaps as _mpl_colormaps

COLORINGS = ("palette", "grayscale", "colormap")


@dataclass(frozen=True)
class Color:
    """An RGB triple; channels are unconstrained until converted to 8 bits."""

    r: float
    g: float
    b: float

    def __add__(self, other: "Color") -> "Color":
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, other) -> "Color":
        if isinstance(other, Color):
            return Color(self.r * other.r, self.g * other.g, self.b * other.b)
        return Color(self.r * other, self.g * other, self.b * other)

    __rmul__ = __mul__

    def cos(self) -> "Color":
        return Color(math.cos(self.r), math.cos(self.g), math.cos(self.b))

    def clamp(self, low: float = 0.0, high: float = 1.0) -> "Color":
        return Color(
            min(max(self.r, low), high),
            min(max(self.g, low), high),
            min(max(self.b, low), high),
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return self.r, self.g, self.b

    def to_rgb8(self) -> tuple[int, int, int]:
        """Clamp to ``[0, 1]``, scale by 255 and truncate."""

        c = self.clamp(0.0, 1.0)
        return int(c.r * 255.0), int(c.g * 255.0), int(c.b * 255.0)


Color.BLACK = Color(0.0, 0.0, 0.0)
Color.WHITE = Color(1.0, 1.0, 1.0)


def grayscale(weight: float) -> Color:
    if not 0.0 <= weight <= 1.0:
        raise ValueError(f"grayscale weight must lie in [0, 1], got {weight}.")
    return Color(weight, weight, weight)


def fract(t):
    return t - np.floor(t)


@dataclass(frozen=True)
class CosinePalette:
    """Periodic palette ``a + b * cos(2*pi*(c*t + d))``, one triple per term."""

    a: Color
    b: Color
    c: Color
    d: Color

    def __call__(self, t: float, phase: float = 0.0) -> Color:
        t = float(fract(t + phase))
        return self.a + self.b * (2.0 * math.pi * (self.c * t + self.d)).cos()

    def apply(self, weights: np.ndarray, phase: float = 0.0) -> np.ndarray:
        """Array form of :meth:`__call__`; returns float RGB with a trailing axis of 3."""

        t = fract(np.asarray(weights, dtype=np.float64) + phase)[..., np.newaxis]
        a, b, c, d = (np.array(term.as_tuple(), dtype=np.float64) for term in (self.a, self.b, self.c, self.d))
        return a + b * np.cos(2.0 * np.pi * (c * t + d))


def _cosine(d: tuple[float, float, float], c: tuple[float, float, float] = (1.0, 1.0, 1.0)) -> CosinePalette:
    half = Color(0.5, 0.5, 0.5)
    return CosinePalette(a=half, b=half, c=Color(*c), d=Color(*d))


PALETTES = {
    "reference": _cosine((0.0, 0.1, 0.2)),
    "classic": _cosine((0.0, 0.33, 0.67)),
    "inferno": _cosine((0.0, 0.15, 0.20), c=(1.0, 0.7, 0.4)),
    "ocean": _cosine((0.5, 0.6, 0.7)),
    "electric": _cosine((0.0, 0.10, 0.67)),
    "emerald": _cosine((0.35, 0.0, 0.67)),
    "twilight": _cosine((0.8, 0.9, 0.3), c=(1.0, 1.0, 0.5)),
    "rainbow": _cosine((0.0, 0.167, 0.333)),
}

DEFAULT_PALETTE = "reference"


def get_palette(name: str) -> CosinePalette:
    try:
        return PALETTES[name]
    except KeyError:
        raise KeyError(f"Unknown palette '{name}'. Valid choices: {', '.join(sorted(PALETTES))}.") from None


def grayscale_rgb(weights: np.ndarray) -> np.ndarray:
    """Array form of :func:`grayscale`."""

    weights = np.asarray(weights, dtype=np.float64)
    if weights.size and not np.all((weights >= 0.0) & (weights <= 1.0)):
        raise ValueError("grayscale weights must lie in [0, 1].")
    return np.repeat(weights[..., np.newaxis], 3, axis=-1)


def get_colormap(name: str):
    try:
        return _mpl_colormaps[name]
    except KeyError:
        raise KeyError(f"Unknown matplotlib colormap '{name}'.") from None


def colormap_rgb(weights: np.ndarray, name: str = "twilight_shifted") -> np.ndarray:
    """Color ``weights`` with a named matplotlib colormap, dropping alpha."""

    cmap = get_colormap(name)
    rgba = np.array(cmap(np.asarray(weights, dtype=np.float64)), copy=True)
    return rgba[..., :3]


def colormap_color(weight: float, name: str = "twilight_shifted") -> Color:
    return Color(*(float(v) for v in colormap_rgb(np.array(weight), name)))


def to_rgb8_array(rgb: np.ndarray) -> np.ndarray:
    """Array form of :meth:`Color.to_rgb8`."""

    return (np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 1.0) * 255.0).astype(np.uint8)
