"""Helpers for working with batches of model inputs and results."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

__all__ = [
    "batch_size",
    "get_batch_element",
]


def batch_size(batch: Sequence[Any] | np.ndarray) -> int:
    """Returns the number of elements in a batch.

    NumPy arrays are batched along their first axis; any other sequence
    counts its entries.

    Raises:
        TypeError: If ``batch`` is a scalar or has no length.
    """
    if isinstance(batch, np.ndarray):
        if batch.ndim == 0:
            raise TypeError("A 0-dimensional array is not a batch.")
        return int(batch.shape[0])
    try:
        return len(batch)
    except TypeError:
        raise TypeError(f"Object of type {type(batch).__name__} is not a batch.") from None


def get_batch_element(batch: Sequence[Any] | np.ndarray, i: int) -> Any:
    """Returns element ``i`` of a batch.

    Scalar-like entries (Python scalars or 0-dimensional arrays) are
    returned as plain Python scalars so they compare the same way whether
    they came from an array or a list.
    """
    element = batch[i]
    if isinstance(element, np.ndarray) and element.shape == ():
        return element.item()
    if isinstance(element, np.generic):
        return element.item()
    return element
