"""Validation utilities for finitediff."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

__all__ = [
    "validate_point",
    "validate_step",
    "validate_tolerance",
    "validate_tensor_order",
    "validate_width",
    "as_scalar_output",
    "as_matrix_output",
]


def validate_point(x: ArrayLike, name: str = "x") -> NDArray[np.float64]:
    """Returns a private float copy of a 1D evaluation point.

    Args:
        x: Point at which a derivative is evaluated.
        name: Parameter name used in error messages.

    Returns:
        A new 1D float64 array with the same values as ``x``.

    Raises:
        ValueError: If ``x`` is not 1D or is empty.
    """
    arr = np.array(x, dtype=np.float64, copy=True)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be a 1D array; got shape {arr.shape}.")
    if arr.size == 0:
        raise ValueError(f"{name} must be a non-empty 1D array.")
    return arr


def validate_step(eps: Any, name: str = "eps") -> float:
    """Checks that a finite-difference step is a positive finite number.

    Raises:
        ValueError: If ``eps`` is not a positive finite number.
    """
    try:
        step = float(eps)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a positive finite number; got {eps!r}.") from e
    if not np.isfinite(step) or step <= 0.0:
        raise ValueError(f"{name} must be a positive finite number; got {eps!r}.")
    return step


def validate_tolerance(tolerance: Any) -> float:
    """Checks that a comparison tolerance is a non-negative finite number.

    Raises:
        ValueError: If ``tolerance`` is negative, non-finite or not a number.
    """
    try:
        tol = float(tolerance)
    except (TypeError, ValueError) as e:
        raise ValueError(
            f"tolerance must be a non-negative finite number; got {tolerance!r}."
        ) from e
    if not np.isfinite(tol) or tol < 0.0:
        raise ValueError(
            f"tolerance must be a non-negative finite number; got {tolerance!r}."
        )
    return tol


def validate_tensor_order(tensor_order: Any) -> int:
    """Checks that a tensor order is a non-negative integer.

    Raises:
        ValueError: If ``tensor_order`` is not a non-negative integer.
    """
    if isinstance(tensor_order, bool) or not isinstance(tensor_order, (int, np.integer)):
        raise ValueError(
            f"tensor_order must be a non-negative integer; got {tensor_order!r}."
        )
    if tensor_order < 0:
        raise ValueError(
            f"tensor_order must be a non-negative integer; got {tensor_order!r}."
        )
    return int(tensor_order)


def validate_width(width: Any, size: int) -> int:
    """Checks that ``width`` is a positive integer dividing ``size``.

    Raises:
        ValueError: If ``width`` is not a positive integer or does not divide ``size``.
    """
    if isinstance(width, bool) or not isinstance(width, (int, np.integer)):
        raise ValueError(f"width must be a positive integer; got {width!r}.")
    if width <= 0:
        raise ValueError(f"width must be a positive integer; got {width!r}.")
    if size % width != 0:
        raise ValueError(
            f"vector length {size} is not divisible by width={int(width)}."
        )
    return int(width)


def as_scalar_output(value: Any) -> float:
    """Converts a function value to a float, requiring exactly one element.

    Raises:
        TypeError: If ``value`` does not hold exactly one element.
    """
    arr = np.asarray(value, dtype=float)
    if arr.size != 1:
        raise TypeError(
            "expected a scalar-valued function; "
            f"got output with shape {arr.shape}."
        )
    return float(arr.reshape(()))


def as_matrix_output(value: Any) -> NDArray[np.float64]:
    """Views a function value as a 2D float array.

    Scalars become ``(1, 1)`` and vectors of length ``m`` become ``(m, 1)``.

    Raises:
        TypeError: If ``value`` has more than two dimensions.
    """
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 0:
        return arr.reshape(1, 1)
    if arr.ndim == 1:
        return arr.reshape(-1, 1)
    if arr.ndim == 2:
        return arr
    raise TypeError(
        "expected a scalar, vector or matrix valued function; "
        f"got output with shape {arr.shape}."
    )
