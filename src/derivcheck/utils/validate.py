"""Validation utilities for DerivCheck."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

__all__ = [
    "as_vector",
    "as_row_batch",
    "validate_epsilon",
    "validate_n_trials",
]


def as_vector(
    values: ArrayLike,
    size: int,
    *,
    name: str,
) -> NDArray[np.float64]:
    """Converts ``values`` into a 1D float array of the expected length.

    Args:
        values: Array-like input.
        size: Required number of entries.
        name: Name used in the error message.

    Returns:
        A flat float array of length ``size``.

    Raises:
        ValueError: If the input is not 1D or has the wrong length.
    """
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1D; got shape {arr.shape}.")
    if arr.size != size:
        raise ValueError(f"{name} must have length {size}; got {arr.size}.")
    return arr


def as_row_batch(
    values: ArrayLike,
    size: int,
    *,
    name: str,
) -> NDArray[np.float64]:
    """Converts a vector into a batch holding it as its only row."""
    return as_vector(values, size, name=name).reshape(1, size)


def validate_epsilon(epsilon: float) -> float:
    """Checks that a finite difference step is strictly positive and finite."""
    eps = float(epsilon)
    if not np.isfinite(eps) or eps <= 0:
        raise ValueError(f"epsilon must be positive and finite; got {epsilon!r}.")
    return eps


def validate_n_trials(n_trials: int) -> int:
    """Checks that a trial count is a positive integer."""
    if isinstance(n_trials, bool) or not isinstance(n_trials, (int, np.integer)):
        raise TypeError(f"n_trials must be an integer; got {type(n_trials).__name__}.")
    if n_trials < 1:
        raise ValueError(f"n_trials must be at least 1; got {n_trials}.")
    return int(n_trials)
