"""Row-major conversions between matrices and vectors.

These helpers adapt matrix-valued data to routines that work on vectors.
Element ``(r, c)`` of an ``R x C`` matrix maps to index ``r * C + c``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from finitediff.utils.validate import validate_width

__all__ = [
    "flatten",
    "unflatten",
]


def flatten(matrix: ArrayLike) -> NDArray[np.float64]:
    """Flattens a matrix row by row.

    Args:
        matrix: A 2D array-like. 1D inputs are treated as a single row.

    Returns:
        A new 1D array of length ``R * C``.

    Raises:
        ValueError: If ``matrix`` has more than two dimensions.
    """
    arr = np.asarray(matrix, dtype=float)
    if arr.ndim > 2:
        raise ValueError(f"flatten expects a 2D matrix; got shape {arr.shape}.")
    return np.array(arr, copy=True).ravel(order="C")


def unflatten(vector: ArrayLike, width: int) -> NDArray[np.float64]:
    """Rebuilds a matrix from a row-major flattened vector.

    Args:
        vector: 1D array-like of length ``R * width``.
        width: Number of columns of the result.

    Returns:
        A new array of shape ``(len(vector) // width, width)`` where index ``k``
        lands in row ``k // width`` and column ``k % width``.

    Raises:
        ValueError: If ``vector`` is not 1D, or ``width`` is not a positive
            integer dividing its length.
    """
    arr = np.asarray(vector, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"unflatten expects a 1D vector; got shape {arr.shape}.")
    w = validate_width(width, arr.size)
    return np.array(arr, copy=True).reshape(arr.size // w, w, order="C")
