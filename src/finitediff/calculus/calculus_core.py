"""Core utilities shared by the finite-difference gradient, Jacobian and Hessian.

Every routine follows the same perturb-and-restore pattern: a private working
copy of the evaluation point is shifted along one (or two) coordinates for
each stencil tap, the function is evaluated at the shifted copy, and the
shifted coordinates are reset to their original values before the next tap.

Work can be split across threads. Each thread then owns its own working copy
seeded from the unperturbed point, so no coordinate is ever perturbed by two
threads at once.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import partial
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from finitediff.finite.stencil import AccuracyOrder, Stencil, get_stencil
from finitediff.logger import finitediff_logger
from finitediff.utils.concurrency import (
    parallel_execute,
    resolve_workers,
    split_into_chunks,
)
from finitediff.utils.validate import validate_point, validate_step

__all__ = [
    "prepare_evaluation",
    "directional_sum",
    "pair_sum",
    "run_with_working_copies",
    "warn_if_nonfinite",
]


def prepare_evaluation(
    x: ArrayLike,
    accuracy: AccuracyOrder | int | str,
    eps: float,
) -> tuple[NDArray[np.float64], Stencil, float]:
    """Validates the inputs common to all derivative routines.

    Validation happens before the function is evaluated even once.

    Args:
        x: Point at which the derivative is evaluated.
        accuracy: Accuracy order of the stencil.
        eps: Finite-difference step.

    Returns:
        ``(base, stencil, step)`` where ``base`` is a private copy of ``x``.

    Raises:
        ValueError: If any input is invalid.
    """
    stencil = get_stencil(accuracy)
    step = validate_step(eps)
    base = validate_point(x)
    return base, stencil, step


def directional_sum(
    function: Callable[[NDArray[np.float64]], Any],
    work: NDArray[np.float64],
    base: NDArray[np.float64],
    index: int,
    stencil: Stencil,
    eps: float,
    convert: Callable[[Any], Any],
) -> Any:
    """Returns ``sum_s outer[s] * f(x + inner[s] * eps * e_index)``.

    Args:
        function: Function to evaluate.
        work: Working copy of the point. Equal to ``base`` on entry and on exit.
        base: Unperturbed point.
        index: Coordinate to perturb.
        stencil: Stencil coefficients.
        eps: Finite-difference step.
        convert: Maps a raw function value to a float or float array.

    Returns:
        The weighted sum, not yet divided by ``denominator * eps``.
    """
    total = 0.0
    try:
        for c_out, c_in in zip(stencil.outer, stencil.inner):
            work[index] = base[index] + c_in * eps
            total = total + c_out * convert(function(work))
            work[index] = base[index]
    finally:
        work[index] = base[index]
    return total


def pair_sum(
    function: Callable[[NDArray[np.float64]], Any],
    work: NDArray[np.float64],
    base: NDArray[np.float64],
    i: int,
    j: int,
    stencil: Stencil,
    eps: float,
    convert: Callable[[Any], float],
) -> float:
    """Returns ``sum_{a,b} outer[a] * outer[b] * f(x + inner[a] eps e_i + inner[b] eps e_j)``.

    When ``i == j`` both increments are applied to the same coordinate.

    Args:
        function: Scalar function to evaluate.
        work: Working copy of the point. Equal to ``base`` on entry and on exit.
        base: Unperturbed point.
        i: First coordinate to perturb.
        j: Second coordinate to perturb.
        stencil: Stencil coefficients.
        eps: Finite-difference step.
        convert: Maps a raw function value to a float.

    Returns:
        The weighted sum, not yet divided by ``(denominator * eps) ** 2``.
    """
    total = 0.0
    try:
        for out_i, in_i in zip(stencil.outer, stencil.inner):
            for out_j, in_j in zip(stencil.outer, stencil.inner):
                work[i] += in_i * eps
                work[j] += in_j * eps
                total += out_i * out_j * convert(function(work))
                work[j] = base[j]
                work[i] = base[i]
    finally:
        work[j] = base[j]
        work[i] = base[i]
    return total


def _run_chunk(
    chunk: Sequence[Any],
    base: NDArray[np.float64],
    task: Callable[..., Any],
) -> list[Any]:
    """Runs ``task(work, item)`` for every item of a chunk with one working copy."""
    work = base.copy()
    return [task(work, item) for item in chunk]


def run_with_working_copies(
    task: Callable[..., Any],
    items: Sequence[Any],
    base: NDArray[np.float64],
    n_workers: int | None = 1,
) -> list[Any]:
    """Evaluates ``task(work, item)`` for every item and returns results in item order.

    Items are split into contiguous chunks, one per worker. Each chunk gets
    its own working copy of ``base``; with a single worker the whole call
    shares one working copy.

    Args:
        task: Callable receiving a working copy and one item.
        items: Units of work (coordinates or coordinate pairs).
        base: Unperturbed point used to seed each working copy.
        n_workers: Number of threads. ``None`` uses the configured default.

    Returns:
        One result per item.
    """
    workers = resolve_workers(n_workers)
    chunks = split_into_chunks(items, workers)
    worker = partial(_run_chunk, base=base, task=task)
    results = parallel_execute(
        worker,
        arg_tuples=[(chunk,) for chunk in chunks],
        n_workers=workers,
    )
    return [r for chunk_results in results for r in chunk_results]


def warn_if_nonfinite(values: NDArray[np.floating], label: str) -> None:
    """Logs a warning when a computed derivative contains NaN or inf."""
    if not np.isfinite(values).all():
        n_bad = int(np.size(values) - np.count_nonzero(np.isfinite(values)))
        finitediff_logger.warning(
            "%s contains %d non-finite entries out of %d.",
            label, n_bad, int(np.size(values)),
        )
