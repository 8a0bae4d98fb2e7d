"""Contains functions used to construct the gradient of scalar-valued functions."""

from __future__ import annotations

from functools import partial

import numpy as np
from numpy.typing import NDArray

from finitediff.calculus.calculus_core import (
    directional_sum,
    prepare_evaluation,
    run_with_working_copies,
    warn_if_nonfinite,
)
from finitediff.finite.stencil import (
    DEFAULT_FIRST_ORDER_STEP,
    AccuracyOrder,
    Stencil,
)
from finitediff.logger import finitediff_logger
from finitediff.utils.types import ArrayLike1D, ScalarFunction
from finitediff.utils.validate import as_scalar_output

__all__ = ["finite_gradient"]


def finite_gradient(
    x: ArrayLike1D,
    function: ScalarFunction,
    accuracy: AccuracyOrder | int | str = AccuracyOrder.SECOND,
    eps: float = DEFAULT_FIRST_ORDER_STEP,
    *,
    n_workers: int | None = 1,
) -> NDArray[np.float64]:
    """Returns the gradient of a scalar-valued function using central finite differences.

    For every coordinate ``i`` the function is evaluated at
    ``x + inner[s] * eps * e_i`` for each stencil tap ``s``, so the cost is
    ``len(x) * accuracy.num_points`` function evaluations.

    Args:
        x: Point at which the gradient is evaluated. It is never modified.
        function: Maps a 1D float array to a scalar. It must not keep or modify
            the array it receives.
        accuracy: Accuracy order of the stencil.
        eps: Finite-difference step.
        n_workers: Number of threads sharing the coordinates. ``None`` uses
            the configured default.

    Returns:
        A 1D array with one entry per coordinate of ``x``.

    Raises:
        ValueError: If ``accuracy``, ``eps`` or ``x`` is invalid.
        TypeError: If ``function`` does not return a scalar value.
    """
    base, stencil, step = prepare_evaluation(x, accuracy, eps)

    worker = partial(
        _grad_component,
        function=function,
        base=base,
        stencil=stencil,
        eps=step,
    )
    vals = run_with_working_copies(worker, range(base.size), base, n_workers)
    grad = np.asarray(vals, dtype=float)

    finitediff_logger.debug(
        "finite_gradient: n=%d, %d-point stencil, %d evaluations.",
        base.size, stencil.num_points, base.size * stencil.num_points,
    )
    warn_if_nonfinite(grad, "finite_gradient result")
    return grad


def _grad_component(
    work: NDArray[np.float64],
    i: int,
    function: ScalarFunction,
    base: NDArray[np.float64],
    stencil: Stencil,
    eps: float,
) -> float:
    """Returns one entry of the gradient.

    Args:
        work: Working copy of the point owned by the calling worker.
        i: The index of the coordinate being varied.
        function: Scalar-valued function.
        base: Unperturbed point.
        stencil: Stencil coefficients.
        eps: Finite-difference step.

    Returns:
        The partial derivative with respect to ``x[i]``.
    """
    total = directional_sum(function, work, base, i, stencil, eps, as_scalar_output)
    return total / (stencil.denominator * eps)
