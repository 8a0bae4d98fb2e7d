"""Calculus utilities.

Provides finite-difference gradient, Jacobian, and Hessian computations.
"""

from .gradient import finite_gradient
from .hessian import finite_hessian
from .jacobian import finite_jacobian, finite_jacobian_tensor

__all__ = [
    "finite_gradient",
    "finite_jacobian",
    "finite_jacobian_tensor",
    "finite_hessian",
]
