"""Tests for finitediff.utils.reshape."""

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from finitediff import flatten, unflatten


def test_flatten_and_unflatten_round_trip(rng):
    """Tests that unflatten(flatten(X), X.shape[1]) recovers X exactly."""
    x = rng.uniform(-1, 1, (1000, 3))
    r = unflatten(flatten(x), x.shape[1])
    assert_array_equal(x, r)


def test_flatten_is_row_major():
    """Tests that element (r, c) lands at index r * C + c."""
    x = np.array([[1.0, 2.0, 3.0],
                  [4.0, 5.0, 6.0]])
    flat = flatten(x)
    assert_array_equal(flat, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    for r in range(2):
        for c in range(3):
            assert flat[r * 3 + c] == x[r, c]


def test_unflatten_index_mapping():
    """Tests that index k lands at row k // width, column k % width."""
    v = np.arange(12, dtype=float)
    m = unflatten(v, 4)
    assert m.shape == (3, 4)
    for k in range(12):
        assert m[k // 4, k % 4] == v[k]


@pytest.mark.parametrize("width", [1, 2, 3, 6])
def test_unflatten_then_flatten_round_trip(width):
    """Tests the inverse direction for every compatible width."""
    v = np.linspace(-1.0, 1.0, 6)
    assert_array_equal(flatten(unflatten(v, width)), v)


def test_results_do_not_alias_inputs():
    """Tests that the results are new arrays."""
    x = np.ones((2, 2))
    flat = flatten(x)
    flat[0] = 5.0
    assert x[0, 0] == 1.0

    v = np.ones(4)
    m = unflatten(v, 2)
    m[0, 0] = 5.0
    assert v[0] == 1.0


def test_flatten_treats_vector_as_row():
    """Tests that a 1D input is flattened unchanged."""
    assert_array_equal(flatten([1.0, 2.0]), [1.0, 2.0])


def test_flatten_rejects_3d():
    """Tests that flatten requires at most two dimensions."""
    with pytest.raises(ValueError):
        flatten(np.zeros((2, 2, 2)))


@pytest.mark.parametrize("width", [4, 0, -2, 1.5, True])
def test_unflatten_rejects_incompatible_width(width):
    """Tests that widths not dividing the length raise ValueError."""
    with pytest.raises(ValueError, match="width"):
        unflatten(np.arange(6, dtype=float), width)


def test_unflatten_rejects_matrix_input():
    """Tests that unflatten requires a 1D vector."""
    with pytest.raises(ValueError):
        unflatten(np.zeros((2, 2)), 2)
