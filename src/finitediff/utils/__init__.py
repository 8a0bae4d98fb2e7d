"""Utility functions for finitediff package."""

from .reshape import (
    flatten,
    unflatten,
)

__all__ = [
    "flatten",
    "unflatten",
]
