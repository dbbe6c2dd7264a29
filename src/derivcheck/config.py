"""Default tolerances, step sizes and the sampling convention of DerivCheck.

All public checks take these values as keyword arguments; the constants
below are only the defaults.

Sampling convention
-------------------
Every randomly drawn quantity (parameters, coefficients, points) is
described by one :class:`SamplingConfig`. Values are drawn uniformly from
the symmetric interval ``[-w, w]`` where

* ``w = half_width / dim`` if ``scale_by_dimension`` is set, and
* ``w = half_width`` otherwise.

``dim`` is the length of the sampled vector (the number of parameters, the
output size or the input size). A ``fixed_value`` replaces sampling by a
constant that follows the same scaling rule.

The randomized drivers use these defaults:

======================================  ============  ============  ============
driver                                  parameters    coefficients  points
======================================  ============  ============  ============
weighted parameter derivative           ``[-1, 1]``   ``[-1, 1]``   ``[-1, 1]``
weighted input derivative               ``1/dim``     ``[-1, 1]``   ``[-1, 1]``
fused vs. separate derivatives          ``±1/dim``    ``±1/dim``    ``±1/dim``
======================================  ============  ============  ============

Scaling by dimension bounds the size of sums accumulated over a batch.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from derivcheck.sampling import sample_uniform

__all__ = [
    "DEFAULT_PROBE_EPSILON",
    "DEFAULT_ESTIMATION_EPSILON",
    "DEFAULT_TOLERANCE",
    "DEFAULT_JOINT_TOLERANCE",
    "DEFAULT_BATCH_TOLERANCE",
    "DEFAULT_N_TRIALS",
    "DEFAULT_JOINT_N_TRIALS",
    "DEFAULT_JOINT_BATCH_SIZE",
    "SamplingConfig",
    "parameter_check_sampling",
    "input_check_sampling",
    "joint_check_sampling",
]

DEFAULT_PROBE_EPSILON = 1e-10
DEFAULT_ESTIMATION_EPSILON = 1e-5
DEFAULT_TOLERANCE = 1e-5
DEFAULT_JOINT_TOLERANCE = 1e-10
DEFAULT_BATCH_TOLERANCE = 1e-7
DEFAULT_N_TRIALS = 1000
DEFAULT_JOINT_N_TRIALS = 100
DEFAULT_JOINT_BATCH_SIZE = 10


class SamplingConfig:
    """Configuration for drawing one random quantity in the randomized checks."""

    def __init__(
        self,
        half_width: float = 1.0,
        scale_by_dimension: bool = False,
        fixed_value: float | None = None,
    ):
        """
        Args:
            half_width:
                Half width of the symmetric sampling interval.
            scale_by_dimension:
                If True, divide ``half_width`` (and ``fixed_value``) by the
                length of the sampled vector.
            fixed_value:
                If given, every entry takes this value instead of being sampled.
        """
        if not np.isfinite(half_width) or half_width <= 0:
            raise ValueError(f"half_width must be positive and finite; got {half_width!r}.")
        self.half_width = float(half_width)
        self.scale_by_dimension = bool(scale_by_dimension)
        self.fixed_value = None if fixed_value is None else float(fixed_value)

    def __repr__(self) -> str:
        return (
            f"SamplingConfig(half_width={self.half_width}, "
            f"scale_by_dimension={self.scale_by_dimension}, "
            f"fixed_value={self.fixed_value})"
        )

    def _scale(self, dim: int) -> float:
        if self.scale_by_dimension and dim > 0:
            return 1.0 / dim
        return 1.0

    def bound(self, dim: int) -> float:
        """Returns the half width of the interval used for vectors of length ``dim``."""
        return self.half_width * self._scale(dim)

    def sample(
        self,
        rng: np.random.Generator,
        size: int | tuple[int, ...],
    ) -> NDArray[np.float64]:
        """Draws an array of the given size.

        The dimension used for scaling is the last entry of ``size``.

        Args:
            rng: Random number generator to draw from.
            size: Length of the vector, or shape of a batch of vectors.

        Returns:
            Array of shape ``size``.
        """
        shape = (int(size),) if np.isscalar(size) else tuple(int(s) for s in size)
        dim = shape[-1] if shape else 1
        if self.fixed_value is not None:
            return np.full(shape, self.fixed_value * self._scale(dim), dtype=float)
        w = self.bound(dim)
        return sample_uniform(rng, -w, w, shape)


def parameter_check_sampling() -> dict[str, SamplingConfig]:
    """Returns the default sampling for the weighted parameter derivative driver."""
    return {
        "parameters": SamplingConfig(),
        "coefficients": SamplingConfig(),
        "points": SamplingConfig(),
    }


def input_check_sampling() -> dict[str, SamplingConfig]:
    """Returns the default sampling for the weighted input derivative driver."""
    return {
        "parameters": SamplingConfig(scale_by_dimension=True, fixed_value=1.0),
        "coefficients": SamplingConfig(),
        "points": SamplingConfig(),
    }


def joint_check_sampling() -> dict[str, SamplingConfig]:
    """Returns the default sampling for the fused derivative consistency check."""
    return {
        "parameters": SamplingConfig(scale_by_dimension=True),
        "coefficients": SamplingConfig(scale_by_dimension=True),
        "points": SamplingConfig(scale_by_dimension=True),
    }
