"""Test functions with analytic derivatives for experimentation and testing."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from finitediff.utils.reshape import flatten

__all__ = [
    "make_quadratic",
    "make_linear_map",
    "make_tensor_linear",
    "generate_test_function",
]


def make_quadratic(
    matrix: ArrayLike,
    offset: ArrayLike,
) -> tuple[Callable, Callable, Callable]:
    """Returns ``(f, grad, hess)`` for ``f(x) = x^T A x + b^T x``.

    Args:
        matrix: Square matrix ``A`` (not necessarily symmetric).
        offset: Vector ``b``.

    Returns:
        The function, its gradient ``A x + A^T x + b`` and its constant
        Hessian ``A + A^T``.
    """
    a = np.asarray(matrix, dtype=float)
    b = np.asarray(offset, dtype=float).reshape(-1)
    if a.ndim != 2 or a.shape[0] != a.shape[1] or a.shape[0] != b.size:
        raise ValueError(
            f"matrix must be square and match offset; got {a.shape} and {b.shape}."
        )

    def f(x):
        x = np.asarray(x, dtype=float)
        return float(x @ a @ x + b @ x)

    def grad(x):
        x = np.asarray(x, dtype=float)
        return a @ x + a.T @ x + b

    def hess(_x):
        return a + a.T

    return f, grad, hess


def make_linear_map(matrix: ArrayLike) -> tuple[Callable, Callable]:
    """Returns ``(f, jac)`` for ``f(x) = A x``; the Jacobian is ``A`` everywhere."""
    a = np.asarray(matrix, dtype=float)
    if a.ndim != 2:
        raise ValueError(f"matrix must be 2D; got shape {a.shape}.")

    def f(x):
        return a @ np.asarray(x, dtype=float)

    def jac(_x):
        return a.copy()

    return f, jac


def make_tensor_linear(
    tensors: Sequence[ArrayLike],
) -> tuple[Callable, NDArray[np.float64], NDArray[np.float64]]:
    """Returns a matrix-valued linear function and its Jacobian in both tensor layouts.

    The function is ``f(x) = sum_k x[k] * T_k`` so its derivative with
    respect to ``x[k]`` is ``T_k``.

    Args:
        tensors: One ``p x q`` matrix per input coordinate.

    Returns:
        ``(f, jac_column_blocks, jac_flattened)`` where ``jac_column_blocks`` has
        shape ``(p, q * n)`` and ``jac_flattened`` has shape ``(p * q, n)``.
    """
    ts = [np.asarray(t, dtype=float) for t in tensors]
    if not ts:
        raise ValueError("tensors must contain at least one matrix.")
    shape = ts[0].shape
    if len(shape) != 2 or any(t.shape != shape for t in ts):
        raise ValueError("tensors must be 2D matrices of a common shape.")
    stack = np.stack(ts, axis=0)

    def f(x):
        x = np.asarray(x, dtype=float)
        return np.tensordot(x, stack, axes=(0, 0))

    jac_column_blocks = np.concatenate(ts, axis=1)
    jac_flattened = np.column_stack([flatten(t) for t in ts])
    return f, jac_column_blocks, jac_flattened


def _rosenbrock(x):
    t1 = 1.0 - x[0]
    t2 = x[1] - x[0] * x[0]
    return t1 * t1 + 100.0 * t2 * t2


def _rosenbrock_grad(x):
    return np.array([
        -2.0 * (1.0 - x[0]) + 200.0 * (x[1] - x[0] * x[0]) * (-2.0 * x[0]),
        200.0 * (x[1] - x[0] * x[0]),
    ])


def _rosenbrock_hess(x):
    return np.array([
        [1200.0 * x[0] * x[0] - 400.0 * x[1] + 2.0, -400.0 * x[0]],
        [-400.0 * x[0], 200.0],
    ])


def _trig(x):
    return float(np.sum(np.sin(x) ** 2))


def _trig_grad(x):
    return 2.0 * np.sin(x) * np.cos(x)


def _trig_hess(x):
    s, c = np.sin(x), np.cos(x)
    return np.diag(2.0 * c * c - 2.0 * s * s)


_TEST_FUNCTIONS = {
    "rosenbrock": (_rosenbrock, _rosenbrock_grad, _rosenbrock_hess),
    "trig": (_trig, _trig_grad, _trig_hess),
}


def generate_test_function(name: str = "trig") -> tuple[Callable, Callable, Callable]:
    """Return (f, grad, hess) tuple for a named test function.

    Args:
        name: One of {"rosenbrock", "trig"}. ``"rosenbrock"`` is the 2D
            Rosenbrock function and ``"trig"`` is ``sum(sin(x)**2)`` in any
            dimension.

    Returns:
        Tuple of callables (f, grad, hess) for testing.
    """
    try:
        f, grad, hess = _TEST_FUNCTIONS[name]
    except KeyError:
        raise ValueError(f"Unknown test function: {name!r}") from None

    def wrap(fn):
        return lambda x: fn(np.asarray(x, dtype=float))

    return wrap(f), wrap(grad), wrap(hess)
