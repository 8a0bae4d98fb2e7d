"""Finite-difference stencil tables."""
