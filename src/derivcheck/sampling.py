"""Random number handling for the randomized checks.

All randomized checks draw from an explicitly passed
:class:`numpy.random.Generator`. Global NumPy random state is never used,
so a fixed seed reproduces a run and separate runs do not interfere.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "resolve_rng",
    "sample_uniform",
]


def resolve_rng(rng: np.random.Generator | int | None = None) -> np.random.Generator:
    """Returns a random number generator.

    Args:
        rng: An existing generator (returned unchanged), an integer seed,
            or ``None`` for a freshly seeded generator.

    Returns:
        A :class:`numpy.random.Generator`.

    Raises:
        TypeError: If ``rng`` is neither a generator, an integer nor ``None``.
    """
    if isinstance(rng, np.random.Generator):
        return rng
    if rng is not None and not isinstance(rng, (int, np.integer)):
        raise TypeError(
            f"rng must be a numpy Generator, an integer seed or None; got {type(rng).__name__}."
        )
    return np.random.default_rng(rng)


def sample_uniform(
    rng: np.random.Generator,
    lo: float,
    hi: float,
    size: int | tuple[int, ...],
) -> NDArray[np.float64]:
    """Draws values uniformly from ``[lo, hi)``.

    Args:
        rng: Generator to draw from.
        lo: Lower bound.
        hi: Upper bound; must not be smaller than ``lo``.
        size: Output shape.

    Returns:
        Array of samples with shape ``size``.
    """
    if hi < lo:
        raise ValueError(f"Empty sampling interval [{lo}, {hi}].")
    return rng.uniform(lo, hi, size=size)
