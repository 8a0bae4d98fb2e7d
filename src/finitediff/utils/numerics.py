"""Numerical utilities."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

__all__ = [
    "scaled_difference",
    "relative_error",
    "within_tolerance",
]


def scaled_difference(a: ArrayLike, b: ArrayLike) -> NDArray[np.float64]:
    """Computes the elementwise scale-aware difference between a and b.

    Each entry is ``|a - b| / max(|a|, |b|, 1.0)``, i.e. an absolute
    difference for entries of magnitude below one and a relative difference
    above it.

    Args:
        a: First array-like input.
        b: Second array-like input with the same shape as ``a``.

    Returns:
        An array with the shape of the inputs.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    denom = np.maximum(1.0, np.maximum(np.abs(a), np.abs(b)))
    with np.errstate(invalid="ignore"):
        return np.abs(a - b) / denom


def relative_error(a: ArrayLike, b: ArrayLike) -> float:
    """Computes the relative error metric between a and b.

    This metric is defined as the maximum over all components of a and b of
    the absolute difference divided by the maximum of 1.0 and the absolute values of
    a and b.

    Args:
        a: First array-like input.
        b: Second array-like input.

    Returns:
        The relative error metric as a float. Empty inputs give ``0.0``.
    """
    diff = scaled_difference(a, b)
    if diff.size == 0:
        return 0.0
    return float(np.max(diff))


def within_tolerance(
    a: NDArray[np.float64],
    b: NDArray[np.float64],
    tolerance: float,
) -> NDArray[np.bool_]:
    """Returns the elementwise mask ``scaled_difference(a, b) <= tolerance``.

    Entries involving NaN or infinity are reported as not within tolerance.
    """
    with np.errstate(invalid="ignore"):
        return scaled_difference(a, b) <= tolerance
