"""Contains functions used in constructing the Hessian of a scalar-valued function."""

from __future__ import annotations

from functools import partial

import numpy as np
from numpy.typing import NDArray

from finitediff.calculus.calculus_core import (
    pair_sum,
    prepare_evaluation,
    run_with_working_copies,
    warn_if_nonfinite,
)
from finitediff.finite.stencil import (
    DEFAULT_SECOND_ORDER_STEP,
    AccuracyOrder,
    Stencil,
)
from finitediff.logger import finitediff_logger
from finitediff.utils.types import ArrayLike1D, ScalarFunction
from finitediff.utils.validate import as_scalar_output

__all__ = ["finite_hessian"]


def finite_hessian(
    x: ArrayLike1D,
    function: ScalarFunction,
    accuracy: AccuracyOrder | int | str = AccuracyOrder.SECOND,
    eps: float = DEFAULT_SECOND_ORDER_STEP,
    *,
    n_workers: int | None = 1,
) -> NDArray[np.float64]:
    """Returns the Hessian of a scalar-valued function using central finite differences.

    Every entry ``H[i, j]`` with ``i <= j`` applies the first-derivative
    stencil along ``i`` and along ``j`` at once; the lower triangle is a copy
    of the upper one, so the result is exactly symmetric.

    Performance: the cost is ``n * (n + 1) / 2 * accuracy.num_points**2``
    function evaluations for ``n = len(x)``, e.g. 20 800 evaluations for
    ``n = 25`` with the eighth-order stencil. This quadratic growth is
    inherent to the central second difference.

    The default step is larger than for gradients because round-off in the
    function values is divided by ``(denominator * eps) ** 2``.

    Args:
        x: Point at which the Hessian is evaluated. It is never modified.
        function: Maps a 1D float array to a scalar. It must not keep or modify
            the array it receives.
        accuracy: Accuracy order of the stencil.
        eps: Finite-difference step.
        n_workers: Number of threads sharing the ``(i, j)`` pairs. ``None``
            uses the configured default.

    Returns:
        A symmetric array of shape ``(n, n)``.

    Raises:
        ValueError: If ``accuracy``, ``eps`` or ``x`` is invalid.
        TypeError: If ``function`` does not return a scalar value.
    """
    base, stencil, step = prepare_evaluation(x, accuracy, eps)
    n = base.size

    pairs = [(i, j) for i in range(n) for j in range(i, n)]
    worker = partial(
        _hessian_entry,
        function=function,
        base=base,
        stencil=stencil,
        eps=step,
    )
    vals = run_with_working_copies(worker, pairs, base, n_workers)

    hess = np.zeros((n, n), dtype=float)
    for (i, j), v in zip(pairs, vals):
        hess[i, j] = v
        hess[j, i] = v

    finitediff_logger.debug(
        "finite_hessian: n=%d, %d-point stencil, %d evaluations.",
        n, stencil.num_points, len(pairs) * stencil.num_points**2,
    )
    warn_if_nonfinite(hess, "finite_hessian result")
    return hess


def _hessian_entry(
    work: NDArray[np.float64],
    pair: tuple[int, int],
    function: ScalarFunction,
    base: NDArray[np.float64],
    stencil: Stencil,
    eps: float,
) -> float:
    """Returns ``H[i, j]`` for one pair ``(i, j)`` with ``i <= j``."""
    i, j = pair
    total = pair_sum(function, work, base, i, j, stencil, eps, as_scalar_output)
    scale = stencil.denominator * eps
    return total / (scale * scale)
