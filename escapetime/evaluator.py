"""Escape-time iteration of ``z <- z**2 + c`` and its weighting policies."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

import numpy as np

from .numeric import Complex

# |z| > 2 guarantees divergence; compared squared to stay clear of a square root.
ESCAPE_RADIUS_SQ = 4.0


class EscapePolicy(enum.Enum):
    """How an escape is turned into a weight in ``[0, 1]``."""

    BINARY = "binary"
    ITERATION_LOG = "iteration-log"
    ORBIT_TRAP = "orbit-trap"
    ORBIT_TRAP_UNSQUARED = "orbit-trap-unsquared"

    @classmethod
    def parse(cls, value) -> "EscapePolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower().replace("_", "-"))
        except ValueError:
            choices = ", ".join(policy.value for policy in cls)
            raise ValueError(f"Unknown escape policy '{value}'. Valid choices: {choices}.") from None


@dataclass(frozen=True)
class Escape:
    """Outcome of iterating a single plane point.

    ``steps`` counts escape tests from 1, so the first test that fails reports
    ``steps == 1``; points that never escape report ``steps == max_iterations``.
    ``z`` is the orbit value at which the escape was detected.
    """

    steps: int
    escaped: bool
    z: Complex


def check_iterations(max_iterations: int, policy: EscapePolicy = EscapePolicy.BINARY) -> None:
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}.")
    if policy is EscapePolicy.ITERATION_LOG and max_iterations < 2:
        raise ValueError("the iteration-log policy needs max_iterations >= 2.")


def escape(c: Complex, max_iterations: int) -> Escape:
    """Iterate from ``z = c`` for up to ``max_iterations`` escape tests."""

    check_iterations(max_iterations)
    dtype = c.dtype
    two = dtype(2)
    radius_sq = dtype(ESCAPE_RADIUS_SQ)
    cr, ci = c.re, c.im
    zr, zi = cr, ci
    for n in range(max_iterations):
        zr2 = zr * zr
        zi2 = zi * zi
        if zr2 + zi2 > radius_sq:
            return Escape(n + 1, True, Complex(zr, zi))
        zi = two * zr * zi + ci
        zr = zr2 - zi2 + cr
    return Escape(max_iterations, False, Complex(zr, zi))


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _smooth_steps(steps: float, magnitude: float) -> float:
    # The /2 halves log10 of a squared magnitude; fed a plain magnitude it is kept as is.
    nu = math.log2(math.log10(magnitude) / 2)
    return steps - nu


def weight(result: Escape, max_iterations: int, policy: EscapePolicy) -> float:
    policy = EscapePolicy.parse(policy)
    check_iterations(max_iterations, policy)
    if not result.escaped:
        return 0.0

    if policy is EscapePolicy.BINARY:
        return 1.0
    if policy is EscapePolicy.ITERATION_LOG:
        return _clamp01(math.log(result.steps) / math.log(max_iterations))
    if policy is EscapePolicy.ORBIT_TRAP:
        magnitude = float(result.z.norm_sq())
    else:
        magnitude = float(result.z.abs())
    return _clamp01(_smooth_steps(result.steps, magnitude) / max_iterations)


def evaluate(c: Complex, max_iterations: int, policy: EscapePolicy = EscapePolicy.BINARY) -> float:
    """Escape weight of plane point ``c``; ``0.0`` when it never escapes."""

    policy = EscapePolicy.parse(policy)
    check_iterations(max_iterations, policy)
    return weight(escape(c, max_iterations), max_iterations, policy)


def weights_from_escape(
    steps: np.ndarray,
    escaped: np.ndarray,
    zr: np.ndarray,
    zi: np.ndarray,
    max_iterations: int,
    policy: EscapePolicy,
) -> np.ndarray:
    """Array form of :func:`weight` over whole-grid escape results."""

    policy = EscapePolicy.parse(policy)
    check_iterations(max_iterations, policy)
    escaped = np.asarray(escaped, dtype=bool)
    steps = np.asarray(steps, dtype=np.float64)

    if policy is EscapePolicy.BINARY:
        return escaped.astype(np.float64)

    # Non-escaped entries get a harmless placeholder so the logs stay finite.
    if policy is EscapePolicy.ITERATION_LOG:
        values = np.log(np.where(escaped, steps, 1.0)) / np.log(max_iterations)
    else:
        zr = np.asarray(zr)
        zi = np.asarray(zi)
        if policy is EscapePolicy.ORBIT_TRAP:
            magnitude = zr * zr + zi * zi
        else:
            magnitude = np.hypot(zr, zi)
        magnitude = np.where(escaped, magnitude.astype(np.float64), 100.0)
        nu = np.log2(np.log10(magnitude) / 2)
        values = (steps - nu) / max_iterations

    return np.where(escaped, np.clip(values, 0.0, 1.0), 0.0)
