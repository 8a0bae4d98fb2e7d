"""Provides all finitediff methods."""

from importlib.metadata import PackageNotFoundError, version

from finitediff.calculus import (
    finite_gradient,
    finite_hessian,
    finite_jacobian,
    finite_jacobian_tensor,
)
from finitediff.comparison import compare_gradient, compare_hessian, compare_jacobian
from finitediff.finite.stencil import AccuracyOrder, Stencil, coefficients, get_stencil
from finitediff.finite_kit import FiniteDiffKit
from finitediff.utils.reshape import flatten, unflatten

try:
    __version__ = version("finitediff")
except PackageNotFoundError:
    pass

__all__ = [
    "AccuracyOrder",
    "Stencil",
    "coefficients",
    "get_stencil",
    "finite_gradient",
    "finite_jacobian",
    "finite_jacobian_tensor",
    "finite_hessian",
    "compare_gradient",
    "compare_jacobian",
    "compare_hessian",
    "flatten",
    "unflatten",
    "FiniteDiffKit",
]
