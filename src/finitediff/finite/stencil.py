"""Central-difference stencils used by the finite-difference derivative routines.

Each stencil approximates a first derivative as

.. math::

    f'(x) \\approx \\frac{1}{d\\,h} \\sum_s c_s\\, f(x + k_s h),

where ``c_s`` are the outer coefficients, ``k_s`` the inner offsets and
``d`` the denominator. See
https://en.wikipedia.org/wiki/Finite_difference_coefficient for the tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType

import numpy as np

__all__ = [
    "AccuracyOrder",
    "Stencil",
    "STENCILS",
    "TRUNCATION_ORDER",
    "DEFAULT_FIRST_ORDER_STEP",
    "DEFAULT_SECOND_ORDER_STEP",
    "resolve_accuracy",
    "get_stencil",
    "coefficients",
    "truncation_order",
]


#: Default step for gradients and Jacobians.
DEFAULT_FIRST_ORDER_STEP = 1.0e-8
#: Default step for Hessians. The squared denominator of the second difference
#: amplifies round-off, hence the larger step.
DEFAULT_SECOND_ORDER_STEP = 1.0e-5


class AccuracyOrder(IntEnum):
    """Order of accuracy of a central finite-difference stencil.

    The integer value is the truncation order of the stencil.
    """

    SECOND = 2
    FOURTH = 4
    SIXTH = 6
    EIGHTH = 8

    @property
    def index(self) -> int:
        """Position of the order in the table (0 for ``SECOND``)."""
        return self.value // 2 - 1

    @property
    def num_points(self) -> int:
        """Number of function evaluations per stencil."""
        return 2 * (self.index + 1)


@dataclass(frozen=True)
class Stencil:
    """Coefficients of a central first-derivative stencil.

    Attributes:
        outer: Weights applied to the function values.
        inner: Offsets of the evaluation points, in units of the step size.
        denominator: Divisor applied, together with the step size, to the
            weighted sum.
    """

    outer: tuple[float, ...]
    inner: tuple[float, ...]
    denominator: float

    def __post_init__(self) -> None:
        if len(self.outer) != len(self.inner):
            raise ValueError(
                f"outer and inner coefficients must have the same length; "
                f"got {len(self.outer)} and {len(self.inner)}."
            )
        if not self.denominator > 0:
            raise ValueError(f"denominator must be positive; got {self.denominator}.")

    @property
    def num_points(self) -> int:
        """Number of taps in the stencil."""
        return len(self.outer)

    def as_tuple(self) -> tuple[tuple[float, ...], tuple[float, ...], float]:
        """Returns ``(outer, inner, denominator)``."""
        return self.outer, self.inner, self.denominator


#: Read-only table of stencils keyed by accuracy order.
STENCILS = MappingProxyType({
    AccuracyOrder.SECOND: Stencil(
        outer=(1.0, -1.0),
        inner=(1.0, -1.0),
        denominator=2.0,
    ),
    AccuracyOrder.FOURTH: Stencil(
        outer=(1.0, -8.0, 8.0, -1.0),
        inner=(-2.0, -1.0, 1.0, 2.0),
        denominator=12.0,
    ),
    AccuracyOrder.SIXTH: Stencil(
        outer=(-1.0, 9.0, -45.0, 45.0, -9.0, 1.0),
        inner=(-3.0, -2.0, -1.0, 1.0, 2.0, 3.0),
        denominator=60.0,
    ),
    AccuracyOrder.EIGHTH: Stencil(
        outer=(3.0, -32.0, 168.0, -672.0, 672.0, -168.0, 32.0, -3.0),
        inner=(-4.0, -3.0, -2.0, -1.0, 1.0, 2.0, 3.0, 4.0),
        denominator=840.0,
    ),
})


def resolve_accuracy(accuracy: AccuracyOrder | int | str) -> AccuracyOrder:
    """Converts a user-facing accuracy value to an :class:`AccuracyOrder`.

    Args:
        accuracy: An :class:`AccuracyOrder`, its integer value (2, 4, 6 or 8)
            or its case-insensitive name (e.g. ``"fourth"``).

    Returns:
        The matching accuracy order.

    Raises:
        ValueError: If ``accuracy`` does not name one of the supported orders.
    """
    if isinstance(accuracy, AccuracyOrder):
        return accuracy
    supported = [a.name.lower() for a in AccuracyOrder]
    if isinstance(accuracy, str):
        key = accuracy.strip().upper()
        if key in AccuracyOrder.__members__:
            return AccuracyOrder[key]
    elif isinstance(accuracy, (int, np.integer)) and not isinstance(accuracy, bool):
        try:
            return AccuracyOrder(int(accuracy))
        except ValueError:
            pass
    raise ValueError(
        f"Invalid accuracy order: accuracy={accuracy!r}. "
        f"Must be one of {supported} or {[int(a) for a in AccuracyOrder]}."
    )


def get_stencil(accuracy: AccuracyOrder | int | str) -> Stencil:
    """Returns the stencil for a given accuracy order.

    Raises:
        ValueError: If ``accuracy`` is not a supported order.
    """
    return STENCILS[resolve_accuracy(accuracy)]


def coefficients(
    accuracy: AccuracyOrder | int | str,
) -> tuple[tuple[float, ...], tuple[float, ...], float]:
    """Returns ``(outer, inner, denominator)`` for a given accuracy order.

    Raises:
        ValueError: If ``accuracy`` is not a supported order.
    """
    return get_stencil(accuracy).as_tuple()


def truncation_order(
    accuracy: AccuracyOrder | int | str,
    tol: float = 1e-9,
) -> int:
    """Computes the truncation order of a first-derivative stencil from its moments.

    The stencil reproduces ``f'`` exactly for polynomials up to degree ``r - 1``
    when all moments ``sum(c * k**j)`` for ``1 < j < r`` vanish. The
    first non-vanishing moment above the derivative order sets the leading
    error term.

    Args:
        accuracy: The accuracy order whose stencil is inspected.
        tol: Numerical tolerance below which a moment counts as zero.

    Returns:
        The truncation order of the stencil.

    Raises:
        RuntimeError: If no non-vanishing moment is found.
    """
    stencil = get_stencil(accuracy)
    offsets = np.asarray(stencil.inner, dtype=float)
    coeffs = np.asarray(stencil.outer, dtype=float) / stencil.denominator

    deriv_order = 1
    max_r = 40
    for r in range(deriv_order + 1, max_r + 1):
        moment = float(np.dot(coeffs, offsets**r))
        if abs(moment) > tol:
            return r - deriv_order
    raise RuntimeError("Could not detect truncation order.")


#: Truncation order of every tabulated stencil.
TRUNCATION_ORDER = MappingProxyType({a: truncation_order(a) for a in AccuracyOrder})
