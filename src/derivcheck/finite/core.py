"""Central finite difference step with a single step size."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
from numpy.typing import NDArray

from derivcheck.utils.validate import validate_epsilon

__all__ = [
    "central_difference",
]


def central_difference(
    function: Callable[[float], float | np.ndarray],
    x0: float,
    epsilon: float,
) -> NDArray[np.float64]:
    """Returns the symmetric finite-difference estimate at step size ``epsilon``.

    Uses ``(f(x0 + epsilon) - f(x0 - epsilon)) / (2 * epsilon)``, which
    cancels the first-order truncation error.

    Args:
        function:
            The function whose derivative is to be estimated. Must accept
            a float and return a float or NumPy array.
        x0:
            The point at which to evaluate the derivative.
        epsilon:
            The step size used on either side of ``x0``.

    Returns:
        The estimated derivative, flattened in C order to a 1D array
        (length 1 for scalar-valued functions).

    Raises:
        ValueError:
            If ``epsilon`` is not positive or the two evaluations have
            different shapes.
    """
    eps = validate_epsilon(epsilon)
    x0 = float(x0)

    forward = np.asarray(function(x0 + eps), dtype=float)
    backward = np.asarray(function(x0 - eps), dtype=float)
    if forward.shape != backward.shape:
        raise ValueError(
            f"Function output changed shape under perturbation: "
            f"{forward.shape} vs {backward.shape}."
        )

    return np.ravel((forward - backward) / (2.0 * eps), order="C")
