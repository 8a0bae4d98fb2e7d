"""Contains functions used to construct the Jacobian matrix."""

from __future__ import annotations

from functools import partial
from typing import Any

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
from finitediff.utils.reshape import flatten
from finitediff.utils.types import ArrayLike1D, TensorFunction
from finitediff.utils.validate import as_matrix_output, validate_tensor_order

__all__ = [
    "finite_jacobian",
    "finite_jacobian_tensor",
]


def finite_jacobian(
    x: ArrayLike1D,
    function: TensorFunction,
    accuracy: AccuracyOrder | int | str = AccuracyOrder.SECOND,
    eps: float = DEFAULT_FIRST_ORDER_STEP,
    *,
    n_workers: int | None = 1,
) -> NDArray[np.float64]:
    """Computes the Jacobian of a vector-valued function using central finite differences.

    Each column in the Jacobian is the derivative with respect to one
    coordinate of ``x``. Matrix-valued functions are stored in column blocks,
    as with an even :func:`finite_jacobian_tensor` order.

    Args:
        x: Point at which the Jacobian is evaluated. It is never modified.
        function: Maps a 1D float array to a vector of length ``m`` (or a
            scalar, or a matrix). It must not keep or modify the array it receives.
        accuracy: Accuracy order of the stencil.
        eps: Finite-difference step.
        n_workers: Number of threads sharing the coordinates. ``None`` uses
            the configured default.

    Returns:
        An array of shape ``(m, n)`` for a vector output of length ``m`` and
        ``n = len(x)``.

    Raises:
        ValueError: If ``accuracy``, ``eps`` or ``x`` is invalid, or if the
            output shape changes between evaluations.
        TypeError: If ``function`` returns an array with more than two dimensions.
    """
    return _build_jacobian(x, function, accuracy, eps, column_blocks=True, n_workers=n_workers)


def finite_jacobian_tensor(
    x: ArrayLike1D,
    function: TensorFunction,
    tensor_order: int,
    accuracy: AccuracyOrder | int | str = AccuracyOrder.SECOND,
    eps: float = DEFAULT_FIRST_ORDER_STEP,
    *,
    n_workers: int | None = 1,
) -> NDArray[np.float64]:
    """Computes the Jacobian of a matrix-valued function with a layout chosen by tensor order.

    Let ``function`` return a ``p x q`` matrix and ``D_k`` be its derivative
    with respect to ``x[k]``. Even-order tensors are stored in column blocks
    and odd-order tensors in flattened columns, following the tensor
    vectorization of Kim and Eberle, "Dynamic Deformables" (2022):

    - even ``tensor_order``: shape ``(p, q * n)``; ``D_k`` fills columns
      ``q * k`` to ``q * k + q - 1``.
    - odd ``tensor_order``: shape ``(p * q, n)``; column ``k`` is the
      row-major flatten of ``D_k``.

    Only the parity of ``tensor_order`` matters.

    Args:
        x: Point at which the Jacobian is evaluated. It is never modified.
        function: Maps a 1D float array to a matrix (vectors are treated as
            one-column matrices).
        tensor_order: Order of the tensor represented by the function output.
        accuracy: Accuracy order of the stencil.
        eps: Finite-difference step.
        n_workers: Number of threads sharing the coordinates. ``None`` uses
            the configured default.

    Returns:
        The Jacobian in the layout selected by ``tensor_order``.

    Raises:
        ValueError: If ``tensor_order`` is not a non-negative integer, or any
            other input is invalid.
        TypeError: If ``function`` returns an array with more than two dimensions.
    """
    order = validate_tensor_order(tensor_order)
    return _build_jacobian(
        x, function, accuracy, eps, column_blocks=order % 2 == 0, n_workers=n_workers
    )


def _build_jacobian(
    x: ArrayLike1D,
    function: TensorFunction,
    accuracy: AccuracyOrder | int | str,
    eps: float,
    *,
    column_blocks: bool,
    n_workers: int | None,
) -> NDArray[np.float64]:
    """Computes the per-coordinate derivative blocks and assembles them."""
    base, stencil, step = prepare_evaluation(x, accuracy, eps)

    # One evaluation at the unperturbed point fixes the output shape.
    y0 = as_matrix_output(function(base.copy()))
    out_shape = y0.shape

    worker = partial(
        _column_block,
        function=function,
        base=base,
        stencil=stencil,
        eps=step,
        out_shape=out_shape,
    )
    blocks = run_with_working_copies(worker, range(base.size), base, n_workers)

    if column_blocks:
        jac = np.concatenate(blocks, axis=1)
    else:
        jac = np.column_stack([flatten(b) for b in blocks])

    finitediff_logger.debug(
        "finite_jacobian: n=%d, output shape %s, %d-point stencil, %d evaluations.",
        base.size, out_shape, stencil.num_points, base.size * stencil.num_points + 1,
    )
    warn_if_nonfinite(jac, "finite_jacobian result")
    return jac


def _checked_matrix(value: Any, out_shape: tuple[int, ...]) -> NDArray[np.float64]:
    """Converts a function value to a matrix and checks it has ``out_shape``.

    Raises:
        ValueError: If the output shape differs from the one at the base point.
    """
    mat = as_matrix_output(value)
    if mat.shape != out_shape:
        raise ValueError(
            f"function output shape changed between evaluations: "
            f"expected {out_shape}, got {mat.shape}."
        )
    return mat


def _column_block(
    work: NDArray[np.float64],
    i: int,
    function: TensorFunction,
    base: NDArray[np.float64],
    stencil: Stencil,
    eps: float,
    out_shape: tuple[int, ...],
) -> NDArray[np.float64]:
    """Derivative of the function output with respect to coordinate i.

    Args:
        work: Working copy of the point owned by the calling worker.
        i: Index of the coordinate to differentiate with respect to.
        function: The function to be differentiated.
        base: Unperturbed point.
        stencil: Stencil coefficients.
        eps: Finite-difference step.
        out_shape: Matrix shape of the function output.

    Returns:
        An array of shape ``out_shape``.
    """
    convert = partial(_checked_matrix, out_shape=out_shape)
    total = directional_sum(function, work, base, i, stencil, eps, convert)
    return np.asarray(total, dtype=float) / (stencil.denominator * eps)
