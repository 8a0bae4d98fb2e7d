"""Tests for finitediff.comparison."""

import logging

import numpy as np
import pytest

from finitediff import (
    compare_gradient,
    compare_hessian,
    compare_jacobian,
    finite_gradient,
    finite_jacobian,
)


def test_compare_jacobian_returns_false_for_different_sizes(rng):
    """Tests that a 2x3 and a 3x2 matrix never compare equal."""
    a = rng.uniform(-1, 1, (2, 3))
    b = rng.uniform(-1, 1, (3, 2))
    assert compare_jacobian(a, b) is False


def test_compare_jacobian_shape_mismatch_is_logged(caplog):
    """Tests that a shape mismatch emits a warning record."""
    with caplog.at_level(logging.WARNING, logger="finitediff"):
        assert not compare_jacobian(np.zeros((2, 3)), np.zeros((3, 2)))
    assert "shape mismatch" in caplog.text


def test_compare_gradient_returns_false_for_different_lengths():
    """Tests that vectors of different lengths never compare equal."""
    assert compare_gradient(np.zeros(3), np.zeros(4)) is False


def test_compare_equal_arrays():
    """Tests that identical inputs compare equal for every helper."""
    v = np.array([1.0, -2.0, 1e6])
    m = np.outer(v, v)
    assert compare_gradient(v, v) is True
    assert compare_jacobian(m, m) is True
    assert compare_hessian(m, m) is True


@pytest.mark.parametrize(
    "x, y, expected",
    [
        # Near zero the tolerance acts as an absolute tolerance.
        (0.0, 0.9e-4, True),
        (0.0, 1.1e-4, False),
        (1e-7, -1e-7, True),
        # For large values it acts as a relative tolerance.
        (1e6, 1e6 + 90.0, True),
        (1e6, 1e6 + 110.0, False),
        (-5e3, -5e3 * (1 + 2e-4), False),
    ],
)
def test_scale_aware_rule(x, y, expected):
    """Tests |x - y| <= tol * max(|x|, |y|, 1) with the default tolerance."""
    assert compare_gradient([x], [y]) is expected
    assert compare_jacobian([[x]], [[y]]) is expected


def test_custom_tolerance():
    """Tests that an explicit tolerance is honoured."""
    assert not compare_gradient([1.0], [1.01])
    assert compare_gradient([1.0], [1.01], tolerance=0.02)


def test_nan_never_compares_equal():
    """Tests that NaN entries fail the comparison."""
    assert not compare_gradient([np.nan], [np.nan])
    assert not compare_jacobian([[1.0, np.nan]], [[1.0, 0.0]])


def test_compare_hessian_matches_compare_jacobian(rng):
    """Tests that compare_hessian applies the same rule as compare_jacobian."""
    a = rng.uniform(-1, 1, (4, 4))
    b = a + rng.uniform(-2e-4, 2e-4, (4, 4))
    assert compare_hessian(a, b) == compare_jacobian(a, b)
    assert compare_hessian(a, b, tolerance=1e-3) == compare_jacobian(a, b, tolerance=1e-3)


def test_mismatch_records_are_logged_at_debug(caplog):
    """Tests that each failing entry emits one debug record with the header."""
    a = np.array([[1.0, 2.0], [3.0, 4.0]])
    b = np.array([[1.0, 2.5], [3.0, 0.0]])
    with caplog.at_level(logging.DEBUG, logger="finitediff"):
        assert not compare_jacobian(a, b, msg="check J ")

    records = [r for r in caplog.records if r.levelno == logging.DEBUG]
    assert len(records) == 2
    assert all(r.getMessage().startswith("check J ") for r in records)
    assert "r=0 c=1" in records[0].getMessage()
    assert "r=1 c=1" in records[1].getMessage()


def test_gradient_mismatch_record_names_index(caplog):
    """Tests the debug record of a 1D comparison."""
    with caplog.at_level(logging.DEBUG, logger="finitediff"):
        assert not compare_gradient([0.0, 5.0], [0.0, 0.0])
    messages = [r.getMessage() for r in caplog.records]
    assert len(messages) == 1
    assert "r=1" in messages[0]
    assert messages[0].startswith("compare_gradient ")


def test_logging_does_not_change_result(caplog):
    """Tests that the result is the same with and without debug logging."""
    a, b = np.array([1.0, 2.0]), np.array([1.0, 2.1])
    quiet = compare_gradient(a, b)
    with caplog.at_level(logging.DEBUG, logger="finitediff"):
        loud = compare_gradient(a, b)
    assert quiet is loud is False


def test_compare_gradient_rejects_matrices():
    """Tests that compare_gradient requires 1D inputs."""
    with pytest.raises(ValueError):
        compare_gradient(np.zeros((2, 2)), np.zeros((2, 2)))


def test_compare_jacobian_rejects_3d():
    """Tests that compare_jacobian requires at most 2D inputs."""
    with pytest.raises(ValueError):
        compare_jacobian(np.zeros((2, 2, 2)), np.zeros((2, 2, 2)))


@pytest.mark.parametrize("bad", [-1e-4, np.nan, np.inf, "tight"])
def test_invalid_tolerance(bad):
    """Tests that invalid tolerances raise ValueError."""
    with pytest.raises(ValueError, match="tolerance"):
        compare_gradient([1.0], [1.0], tolerance=bad)


@pytest.mark.parametrize("shape", [(-1, 1), (1, -1)])
def test_compare_gradient_accepts_single_column_or_row(shape):
    """Tests that (n, 1) and (1, n) gradients compare like 1D vectors."""
    g = np.array([1.0, -2.0, 3.0])
    assert compare_gradient(g, g.reshape(shape)) is True
    assert compare_gradient(g.reshape(shape), g + 1.0) is False


def test_compare_gradient_against_single_output_jacobian():
    """Tests comparing a gradient with the 1 x n Jacobian of the same function."""
    x = np.array([0.3, -0.7, 1.1])

    def f(v):
        return float(np.sum(v**2))

    assert compare_gradient(finite_gradient(x, f), finite_jacobian(x, f))


def test_compare_jacobian_treats_vectors_as_columns(caplog):
    """Tests that a 1D reference matches the (m, 1) Jacobian of a one-input function."""
    a = np.array([1.0, -2.0, 3.0])
    jac = finite_jacobian([0.5], lambda v: a * v[0])
    assert jac.shape == (3, 1)
    with caplog.at_level(logging.WARNING, logger="finitediff"):
        assert compare_jacobian(a, jac) is True
    assert "shape mismatch" not in caplog.text


def test_compare_jacobian_scalar_is_one_by_one():
    """Tests that a scalar compares against a 1 x 1 matrix."""
    assert compare_jacobian(2.0, [[2.0]]) is True


def test_infinite_entries_never_compare_equal():
    """Tests that an infinite entry fails against a finite or infinite one."""
    assert not compare_gradient([np.inf], [1.0])
    assert not compare_gradient([np.inf], [np.inf])
