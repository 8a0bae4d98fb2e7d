"""Tolerance-based comparison of derivatives.

These helpers check a finite-difference derivative against a reference (for
example an analytic gradient). Two entries ``a`` and ``b`` agree when

.. math::

    |a - b| \\le \\mathrm{tol} \\cdot \\max(|a|, |b|, 1),

which is an absolute test near zero and a relative test for large
magnitudes.

Inputs of different shapes never agree: the comparison returns ``False`` and
logs a warning instead of raising. Every disagreeing entry is logged at
``DEBUG`` level on the ``finitediff`` logger; logging never changes the result.

Typical usage:

>>> import numpy as np
>>> from finitediff import compare_gradient, finite_gradient
>>> f = lambda x: float(np.sum(x**2))
>>> x = np.array([0.5, -1.0])
>>> compare_gradient(2 * x, finite_gradient(x, f))
True
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from finitediff.logger import finitediff_logger
from finitediff.utils.numerics import within_tolerance
from finitediff.utils.validate import validate_tolerance

__all__ = [
    "DEFAULT_TOLERANCE",
    "compare_gradient",
    "compare_jacobian",
    "compare_hessian",
]


#: Default tolerance of the comparison helpers.
DEFAULT_TOLERANCE = 1.0e-4


def compare_gradient(
    x: ArrayLike,
    y: ArrayLike,
    tolerance: float = DEFAULT_TOLERANCE,
    msg: str = "compare_gradient ",
) -> bool:
    """Checks whether two gradients agree within ``tolerance``.

    Args:
        x: The first gradient (1D, or a single row or column).
        y: The second gradient.
        tolerance: Scale-aware tolerance.
        msg: Header of the debug records emitted for mismatching entries.

    Returns:
        True if every entry agrees, False otherwise or if the lengths differ.

    Raises:
        ValueError: If an input is neither 1D nor a single row or column, or
            ``tolerance`` is invalid.
    """
    tol = validate_tolerance(tolerance)
    a = _as_vector(x)
    b = _as_vector(y)
    if a.ndim != 1 or b.ndim != 1:
        raise ValueError(
            f"compare_gradient expects 1D arrays; got shapes {a.shape} and {b.shape}."
        )
    return _compare(a, b, tol, msg)


def compare_jacobian(
    x: ArrayLike,
    y: ArrayLike,
    tolerance: float = DEFAULT_TOLERANCE,
    msg: str = "compare_jacobian ",
) -> bool:
    """Checks whether two Jacobians agree within ``tolerance``.

    Args:
        x: The first Jacobian (2D; 1D inputs are treated as a single column).
        y: The second Jacobian.
        tolerance: Scale-aware tolerance.
        msg: Header of the debug records emitted for mismatching entries.

    Returns:
        True if every entry agrees, False otherwise or if the shapes differ.

    Raises:
        ValueError: If an input has more than two dimensions or ``tolerance``
            is invalid.
    """
    tol = validate_tolerance(tolerance)
    a = _as_matrix(x)
    b = _as_matrix(y)
    if a.ndim != 2 or b.ndim != 2:
        raise ValueError(
            f"compare_jacobian expects 2D arrays; got shapes {a.shape} and {b.shape}."
        )
    return _compare(a, b, tol, msg)


def compare_hessian(
    x: ArrayLike,
    y: ArrayLike,
    tolerance: float = DEFAULT_TOLERANCE,
    msg: str = "compare_hessian ",
) -> bool:
    """Checks whether two Hessians agree within ``tolerance``.

    Uses the same entrywise rule as :func:`compare_jacobian`.
    """
    return compare_jacobian(x, y, tolerance=tolerance, msg=msg)


def _as_vector(value: ArrayLike) -> NDArray[np.float64]:
    """Views a gradient as 1D; ``(n, 1)`` and ``(1, n)`` matrices are raveled."""
    arr = np.atleast_1d(np.asarray(value, dtype=float))
    if arr.ndim == 2 and 1 in arr.shape:
        return arr.ravel()
    return arr


def _as_matrix(value: ArrayLike) -> NDArray[np.float64]:
    """Views a Jacobian as 2D; scalars are ``(1, 1)`` and vectors are columns."""
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 0:
        return arr.reshape(1, 1)
    if arr.ndim == 1:
        return arr.reshape(-1, 1)
    return arr


def _compare(
    a: NDArray[np.float64],
    b: NDArray[np.float64],
    tolerance: float,
    msg: str,
) -> bool:
    """Applies the entrywise rule to two arrays of the same rank."""
    if a.shape != b.shape:
        finitediff_logger.warning(
            "%sshape mismatch: %s vs %s; treating as not equal.",
            msg, a.shape, b.shape,
        )
        return False

    close = within_tolerance(a, b, tolerance)
    same = bool(close.all())
    if not same and finitediff_logger.isEnabledFor(logging.DEBUG):
        _log_mismatches(a, b, close, tolerance, msg)
    return same


def _log_mismatches(
    a: NDArray[np.float64],
    b: NDArray[np.float64],
    close: NDArray[np.bool_],
    tolerance: float,
    msg: str,
) -> None:
    """Emits one debug record per entry outside the tolerance."""
    with np.errstate(divide="ignore", invalid="ignore"):
        abs_diff = np.abs(a - b)
        rel_a = abs_diff / np.abs(a)
        rel_b = abs_diff / np.abs(b)

    for idx in map(tuple, np.argwhere(~close)):
        if len(idx) == 1:
            where = f"r={idx[0]}"
        else:
            where = f"r={idx[0]} c={idx[1]}"
        finitediff_logger.debug(
            "%s eps=%.3e %s x=%.3e y=%.3e |x-y|=%.3e |x-y|/|x|=%.3e |x-y|/|y|=%.3e",
            msg, tolerance, where, a[idx], b[idx], abs_diff[idx], rel_a[idx], rel_b[idx],
        )
