"""Tests for finitediff.utils.sandbox."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from finitediff.utils.sandbox import (
    generate_test_function,
    make_linear_map,
    make_quadratic,
    make_tensor_linear,
)


def test_make_quadratic_values():
    """Tests f, grad and hess of the quadratic on a small example."""
    a = np.array([[1.0, 2.0], [0.0, 3.0]])
    b = np.array([1.0, -1.0])
    f, grad, hess = make_quadratic(a, b)
    x = np.array([1.0, 2.0])
    assert f(x) == pytest.approx(1.0 + 4.0 + 12.0 + 1.0 - 2.0)
    assert_allclose(grad(x), a @ x + a.T @ x + b)
    assert_allclose(hess(x), [[2.0, 2.0], [2.0, 6.0]])


def test_make_quadratic_rejects_mismatched_shapes():
    """Tests that A and b must agree."""
    with pytest.raises(ValueError):
        make_quadratic(np.eye(2), np.ones(3))


def test_make_linear_map():
    """Tests that f(x) = A x and its Jacobian is A."""
    a = np.array([[1.0, 2.0, 3.0]])
    f, jac = make_linear_map(a)
    assert_allclose(f([1.0, 1.0, 1.0]), [6.0])
    assert_allclose(jac(None), a)


def test_make_tensor_linear_layouts():
    """Tests the analytic layouts of sum_k x_k T_k."""
    t0 = np.array([[1.0, 2.0], [3.0, 4.0]])
    t1 = np.array([[5.0, 6.0], [7.0, 8.0]])
    f, even, odd = make_tensor_linear([t0, t1])
    assert_allclose(f([2.0, -1.0]), 2.0 * t0 - t1)
    assert_allclose(even, [[1.0, 2.0, 5.0, 6.0], [3.0, 4.0, 7.0, 8.0]])
    assert_allclose(odd, [[1.0, 5.0], [2.0, 6.0], [3.0, 7.0], [4.0, 8.0]])


def test_make_tensor_linear_rejects_mixed_shapes():
    """Tests that all matrices must share a shape."""
    with pytest.raises(ValueError):
        make_tensor_linear([np.zeros((2, 2)), np.zeros((2, 3))])
    with pytest.raises(ValueError):
        make_tensor_linear([])


def test_rosenbrock_minimum():
    """Tests the Rosenbrock function at its minimum."""
    f, grad, hess = generate_test_function("rosenbrock")
    assert f([1.0, 1.0]) == 0.0
    assert_allclose(grad([1.0, 1.0]), [0.0, 0.0])
    assert_allclose(hess([1.0, 1.0]), [[802.0, -400.0], [-400.0, 200.0]])


def test_trig_function():
    """Tests sum(sin(x)^2) and its derivatives."""
    f, grad, hess = generate_test_function("trig")
    x = np.array([0.3, -1.2])
    assert f(x) == pytest.approx(np.sin(0.3) ** 2 + np.sin(-1.2) ** 2)
    assert_allclose(grad(x), np.sin(2 * x))
    assert_allclose(hess(x), np.diag(2 * np.cos(2 * x)))


def test_unknown_test_function():
    """Tests that unknown names raise ValueError."""
    with pytest.raises(ValueError, match="Unknown"):
        generate_test_function("himmelblau")
