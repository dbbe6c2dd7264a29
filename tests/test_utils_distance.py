"""Tests for derivcheck.utils.distance and derivcheck.utils.batch."""

import numpy as np
import pytest

from derivcheck.utils.batch import batch_size, get_batch_element
from derivcheck.utils.distance import element_distance


def test_integer_labels_use_absolute_difference():
    """Tests that integer results compare by absolute difference."""
    assert element_distance(3, 7) == 4.0
    assert element_distance(np.int64(7), 3) == 4.0
    assert element_distance(np.uint32(2), np.uint32(5)) == 3.0


def test_real_scalars_use_absolute_difference():
    """Tests that float scalars compare by absolute difference."""
    assert element_distance(1.5, -0.5) == pytest.approx(2.0)
    assert element_distance(np.float64(1.0), np.array(1.25)) == pytest.approx(0.25)


def test_vectors_use_euclidean_norm():
    """Tests that arrays compare by the L2 norm of the difference."""
    assert element_distance(np.array([0.0, 0.0]), np.array([3.0, 4.0])) == pytest.approx(5.0)
    assert element_distance(np.zeros((2, 2)), np.ones((2, 2))) == pytest.approx(2.0)


def test_structures_combine_component_distances():
    """Tests tuples and mappings of results."""
    a = (np.array([0.0, 0.0]), 1)
    b = (np.array([3.0, 4.0]), 1)
    assert element_distance(a, b) == pytest.approx(5.0)

    m1 = {"mean": np.array([1.0]), "label": 2}
    m2 = {"mean": np.array([4.0]), "label": 6}
    assert element_distance(m1, m2) == pytest.approx(5.0)


def test_mismatched_structures_raise():
    """Tests that incompatible results are reported as errors."""
    with pytest.raises(ValueError, match="shapes"):
        element_distance(np.zeros(2), np.zeros(3))
    with pytest.raises(ValueError, match="keys"):
        element_distance({"a": 1}, {"b": 1})
    with pytest.raises(ValueError, match="lengths"):
        element_distance((1, 2), (1,))
    with pytest.raises(ValueError, match="mapping"):
        element_distance({"a": 1}, 1)


def test_batch_size_of_arrays_and_sequences():
    """Tests that arrays are batched along axis 0 and sequences by length."""
    assert batch_size(np.zeros((4, 2))) == 4
    assert batch_size([1, 2, 3]) == 3
    with pytest.raises(TypeError):
        batch_size(np.float64(1.0))
    with pytest.raises(TypeError):
        batch_size(np.array(1.0))


def test_get_batch_element_unwraps_scalars():
    """Tests that scalar entries become plain Python scalars."""
    labels = np.array([3, 1, 2])
    element = get_batch_element(labels, 1)
    assert element == 1 and isinstance(element, int)

    rows = np.arange(6.0).reshape(3, 2)
    np.testing.assert_array_equal(get_batch_element(rows, 2), [4.0, 5.0])
