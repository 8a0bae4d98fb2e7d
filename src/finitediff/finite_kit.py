"""Provides the FiniteDiffKit class.

A light wrapper around the calculus helpers that binds a function, an
evaluation point and a stencil accuracy, and exposes gradient, Jacobian and
Hessian computations.

Typical usage examples:

>>> import numpy as np
>>> from finitediff.finite_kit import FiniteDiffKit
>>>
>>> def sin_function(x):
...     # scalar-valued function: f(x) = sin(x0)
...     return np.sin(x[0])
>>>
>>> def identity_function(x):
...     # vector-valued function: f(x) = x
...     return np.asarray(x, dtype=float)
>>>
>>> kit = FiniteDiffKit(sin_function, x0=np.array([0.5]), accuracy="fourth")
>>> grad = kit.gradient()
>>> hess = kit.hessian()
>>>
>>> jac = FiniteDiffKit(identity_function, x0=np.array([1.0, 2.0])).jacobian()
"""

from collections.abc import Callable
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from .calculus import (
    finite_gradient,
    finite_hessian,
    finite_jacobian,
    finite_jacobian_tensor,
)
from .finite.stencil import (
    DEFAULT_FIRST_ORDER_STEP,
    DEFAULT_SECOND_ORDER_STEP,
    AccuracyOrder,
    resolve_accuracy,
)
from .utils.validate import validate_point


class FiniteDiffKit:
    """Provides access to finite-difference gradient, Jacobian, and Hessian arrays."""

    def __init__(
        self,
        function: Callable[[NDArray[np.float64]], Any],
        x0: Sequence[float] | np.ndarray,
        accuracy: AccuracyOrder | int | str = AccuracyOrder.SECOND,
        n_workers: int | None = 1,
    ):
        """Initialise with function, evaluation point and accuracy.

        Args:
            function: Maps a 1D float array of length n to a scalar (for
                gradient/Hessian), a vector or a matrix (for Jacobians).
            x0: Point at which to evaluate derivatives (shape (n,)).
            accuracy: Accuracy order used by every method.
            n_workers: Number of threads used by every method.

        Raises:
            ValueError: If ``x0`` or ``accuracy`` is invalid.
        """
        self.function = function
        self.x0 = validate_point(x0, name="x0")
        self.accuracy = resolve_accuracy(accuracy)
        self.n_workers = n_workers

    def gradient(self, eps: float = DEFAULT_FIRST_ORDER_STEP) -> NDArray[np.float64]:
        """Returns the gradient of a scalar-valued function."""
        return finite_gradient(
            self.x0, self.function, self.accuracy, eps, n_workers=self.n_workers
        )

    def jacobian(self, eps: float = DEFAULT_FIRST_ORDER_STEP) -> NDArray[np.float64]:
        """Returns the Jacobian of a vector-valued function."""
        return finite_jacobian(
            self.x0, self.function, self.accuracy, eps, n_workers=self.n_workers
        )

    def jacobian_tensor(
        self,
        tensor_order: int,
        eps: float = DEFAULT_FIRST_ORDER_STEP,
    ) -> NDArray[np.float64]:
        """Returns the Jacobian of a matrix-valued function in the layout set by ``tensor_order``."""
        return finite_jacobian_tensor(
            self.x0,
            self.function,
            tensor_order,
            self.accuracy,
            eps,
            n_workers=self.n_workers,
        )

    def hessian(self, eps: float = DEFAULT_SECOND_ORDER_STEP) -> NDArray[np.float64]:
        """Returns the Hessian of a scalar-valued function."""
        return finite_hessian(
            self.x0, self.function, self.accuracy, eps, n_workers=self.n_workers
        )
