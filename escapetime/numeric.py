"""Small value types for complex-plane arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

DEFAULT_DTYPE = np.float32


def _element_type(*values) -> type:
    floating = [np.dtype(type(v)) for v in values if isinstance(v, np.floating)]
    if not floating:
        return DEFAULT_DTYPE
    dtype = floating[0]
    for other in floating[1:]:
        dtype = np.promote_types(dtype, other)
    return dtype.type


@dataclass(frozen=True)
class Point:
    """A pair of pixel or unit coordinates."""

    x: float
    y: float

    def map(self, fn: Callable) -> "Point":
        return Point(fn(self.x), fn(self.y))

    def to_uv(self, n: int, dtype: type = DEFAULT_DTYPE) -> "Point":
        """Convert a pixel coordinate to the unit square for an ``n``-pixel image."""

        size = dtype(n)
        return self.map(lambda v: dtype(v) / size)


@dataclass(frozen=True)
class Complex:
    """A complex number over a numpy floating element type.

    Operations never mutate; they return new values in the same element type.
    A real right-hand operand applies the operation to both components.
    """

    re: np.floating
    im: np.floating

    def __post_init__(self) -> None:
        dtype = _element_type(self.re, self.im)
        object.__setattr__(self, "re", dtype(self.re))
        object.__setattr__(self, "im", dtype(self.im))

    @property
    def dtype(self) -> type:
        return type(self.re)

    @classmethod
    def from_point(cls, point: Point) -> "Complex":
        return cls(point.x, point.y)

    @classmethod
    def from_tuple(cls, value: tuple, dtype: type = DEFAULT_DTYPE) -> "Complex":
        re, im = value
        return cls(dtype(re), dtype(im))

    def as_tuple(self) -> tuple:
        return self.re, self.im

    def map(self, fn: Callable) -> "Complex":
        dtype = self.dtype
        return Complex(dtype(fn(self.re)), dtype(fn(self.im)))

    def zip(self, other: "Complex") -> tuple:
        return (self.re, other.re), (self.im, other.im)

    def _scalar(self, value) -> np.floating:
        return self.dtype(value)

    def __add__(self, other):
        if isinstance(other, Complex):
            return Complex(self.re + other.re, self.im + other.im)
        value = self._scalar(other)
        return Complex(self.re + value, self.im + value)

    def __sub__(self, other):
        if isinstance(other, Complex):
            return Complex(self.re - other.re, self.im - other.im)
        value = self._scalar(other)
        return Complex(self.re - value, self.im - value)

    def __mul__(self, other):
        if isinstance(other, Complex):
            return Complex(
                self.re * other.re - self.im * other.im,
                self.re * other.im + self.im * other.re,
            )
        value = self._scalar(other)
        return Complex(self.re * value, self.im * value)

    def __truediv__(self, other):
        # Zero divisors follow IEEE-754: the result is non-finite, not an exception.
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            if isinstance(other, Complex):
                d = other.re * other.re + other.im * other.im
                return Complex(
                    (self.re * other.re + self.im * other.im) / d,
                    (self.im * other.re - self.re * other.im) / d,
                )
            value = self._scalar(other)
            return Complex(self.re / value, self.im / value)

    def norm_sq(self) -> np.floating:
        """Squared magnitude, without the square root."""

        return self.re * self.re + self.im * self.im

    def abs(self) -> np.floating:
        return np.hypot(self.re, self.im)

    def __abs__(self) -> np.floating:
        return self.abs()
