import itertools
import math

import numpy as np
import pytest

from escapetime import Complex, EscapePolicy, Point, escape, evaluate, pixel_to_plane, weight
from escapetime.evaluator import weights_from_escape

ALL_POLICIES = list(EscapePolicy)
SMOOTH_POLICIES = [p for p in EscapePolicy if p is not EscapePolicy.BINARY]


def grid_points(n=16, dtype=np.float32):
    return [pixel_to_plane(Point(x, y), n, dtype=dtype) for x, y in itertools.product(range(n), repeat=2)]


def reference_steps(cr, ci, max_iterations):
    zr, zi = cr, ci
    for n in range(max_iterations):
        if zr * zr + zi * zi > 4.0:
            return n + 1
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
    return max_iterations


def test_corner_of_default_window_escapes_immediately():
    c = pixel_to_plane(Point(0, 0), 4)
    result = escape(c, 50)
    assert result.escaped
    assert result.steps == 1
    assert evaluate(c, 50, EscapePolicy.BINARY) == 1.0


@pytest.mark.parametrize("policy", ALL_POLICIES)
@pytest.mark.parametrize("max_iterations", [2, 10, 500])
def test_origin_never_escapes(policy, max_iterations):
    c = pixel_to_plane(Point(8, 8), 16)
    assert c == Complex(0, 0)
    assert not escape(c, max_iterations).escaped
    assert evaluate(c, max_iterations, policy) == 0.0


@pytest.mark.parametrize("c", [Complex(-1, 0), Complex(-0.5, 0), Complex(0.25, 0), Complex(-0.1, 0.6), Complex(-0.1226, 0.7449)])
def test_points_inside_the_set_do_not_escape(c):
    assert not escape(c, 200).escaped


def test_escape_threshold_is_strict():
    # The orbit of -2 sits at |z| = 2 forever.
    assert not escape(Complex(-2, 0), 100).escaped


def test_step_count_and_escape_value():
    result = escape(Complex(1, 0), 10)
    assert result.escaped
    assert result.steps == 3
    assert result.z == Complex(5, 0)


def test_iteration_log_weight():
    assert evaluate(Complex(1, 0), 10, EscapePolicy.ITERATION_LOG) == pytest.approx(math.log(3) / math.log(10))
    assert evaluate(Complex(-2, -2), 10, EscapePolicy.ITERATION_LOG) == 0.0


def test_orbit_trap_weights():
    nu_squared = math.log2(math.log10(25) / 2)
    nu_plain = math.log2(math.log10(5) / 2)
    assert evaluate(Complex(1, 0), 10, EscapePolicy.ORBIT_TRAP) == pytest.approx((3 - nu_squared) / 10)
    assert evaluate(Complex(1, 0), 10, EscapePolicy.ORBIT_TRAP_UNSQUARED) == pytest.approx((3 - nu_plain) / 10)


def test_policy_names_parse():
    assert EscapePolicy.parse("orbit-trap") is EscapePolicy.ORBIT_TRAP
    assert EscapePolicy.parse("ITERATION_LOG") is EscapePolicy.ITERATION_LOG
    with pytest.raises(ValueError):
        EscapePolicy.parse("distance")


def test_binary_weights_are_exactly_zero_or_one():
    values = {evaluate(c, 30, EscapePolicy.BINARY) for c in grid_points()}
    assert values == {0.0, 1.0}


@pytest.mark.parametrize("policy", SMOOTH_POLICIES)
@pytest.mark.parametrize("max_iterations", [2, 3, 50])
def test_smooth_weights_stay_in_unit_interval(policy, max_iterations):
    points = grid_points() + [Complex(100, 100), Complex(-3, 0.5), Complex(0.3, 0.5)]
    for c in points:
        w = evaluate(c, max_iterations, policy)
        assert 0.0 <= w <= 1.0


def test_steps_match_a_plain_float_reference():
    for c in grid_points(dtype=np.float64):
        expected = reference_steps(float(c.re), float(c.im), 60)
        assert escape(c, 60).steps == expected


def test_invalid_iteration_bounds():
    with pytest.raises(ValueError):
        escape(Complex(0, 0), 0)
    with pytest.raises(ValueError):
        evaluate(Complex(1, 0), 1, EscapePolicy.ITERATION_LOG)
    assert evaluate(Complex(1, 0), 1, EscapePolicy.BINARY) == 0.0


@pytest.mark.parametrize("policy", ALL_POLICIES)
def test_array_weights_match_scalar_weights(policy):
    points = grid_points(8)
    results = [escape(c, 25) for c in points]
    steps = np.array([r.steps for r in results])
    escaped = np.array([r.escaped for r in results])
    zr = np.array([r.z.re for r in results], dtype=np.float32)
    zi = np.array([r.z.im for r in results], dtype=np.float32)
    weights = weights_from_escape(steps, escaped, zr, zi, 25, policy)
    expected = [weight(r, 25, policy) for r in results]
    np.testing.assert_allclose(weights, expected, rtol=1e-9, atol=1e-12)
