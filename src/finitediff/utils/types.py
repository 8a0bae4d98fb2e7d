"""Shared typing aliases for finitediff."""

from __future__ import annotations

from typing import Any, Callable, Sequence, TypeAlias

import numpy as np
from numpy.typing import NDArray

FloatArray: TypeAlias = NDArray[np.float64]
ArrayLike1D: TypeAlias = Sequence[float] | NDArray[np.floating]

#: Function whose gradient or Hessian is taken.
ScalarFunction: TypeAlias = Callable[[FloatArray], float]
#: Function whose Jacobian is taken (scalar, vector or matrix valued).
TensorFunction: TypeAlias = Callable[[FloatArray], Any]
