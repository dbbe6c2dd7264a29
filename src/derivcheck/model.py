"""Model interfaces consumed by the DerivCheck checks.

The checks do not implement models themselves. Any object that provides
the methods below can be checked; no inheritance is required.

Shapes used throughout:

* a point is a 1D array of length ``input_size()``,
* a batch of points is a 2D array of shape ``(n, input_size())``,
* a coefficient batch has shape ``(n, output_size())``,
* a parameter vector has length ``number_of_parameters()``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Protocol

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "BatchModel",
    "DifferentiableModel",
    "EvaluationState",
    "parameters_restored",
]


class EvaluationState:
    """Opaque container filled by ``eval`` and read by the derivative methods.

    A state belongs to one evaluation and must not be reused once the model
    parameters have changed.
    """

    def __repr__(self) -> str:
        keys = ", ".join(sorted(vars(self)))
        return f"EvaluationState({keys})"


class BatchModel(Protocol):
    """Protocol for models checked for batch/element consistency.

    The inputs and results may be of any type as long as batches support
    ``len()`` and integer indexing.
    """

    def __call__(self, inputs: Any) -> Any:
        """Evaluate a single element or a whole batch."""
        ...

    def create_state(self) -> Any:
        """Return a fresh state object for :meth:`eval`."""
        ...

    def eval(self, batch: Any, state: Any) -> Any:
        """Evaluate a batch and store what the derivatives need in ``state``."""
        ...


class DifferentiableModel(BatchModel, Protocol):
    """Protocol for parameterized vector-valued models with first derivatives.

    The weighted derivatives are vector-Jacobian products: for a coefficient
    batch ``C`` they are the derivatives of ``sum_n sum_k C[n, k] f_k(x_n)``
    with respect to the parameters (summed over the batch) or with respect
    to each input row.
    """

    def input_size(self) -> int:
        """Number of input dimensions."""
        ...

    def output_size(self) -> int:
        """Number of output dimensions."""
        ...

    def number_of_parameters(self) -> int:
        """Length of the parameter vector."""
        ...

    def get_parameters(self) -> NDArray[np.floating]:
        """Return the current parameter vector."""
        ...

    def set_parameters(self, parameters: NDArray[np.floating]) -> None:
        """Replace the parameter vector."""
        ...

    def has_parameter_derivative(self) -> bool:
        """Whether :meth:`weighted_parameter_derivative` is available."""
        ...

    def has_input_derivative(self) -> bool:
        """Whether :meth:`weighted_input_derivative` is available."""
        ...

    def weighted_parameter_derivative(
        self,
        batch: NDArray[np.floating],
        outputs: NDArray[np.floating],
        coefficients: NDArray[np.floating],
        state: Any,
    ) -> NDArray[np.floating]:
        """Return the weighted derivative with respect to the parameters, shape ``(P,)``."""
        ...

    def weighted_input_derivative(
        self,
        batch: NDArray[np.floating],
        outputs: NDArray[np.floating],
        coefficients: NDArray[np.floating],
        state: Any,
    ) -> NDArray[np.floating]:
        """Return the weighted derivative with respect to the inputs, shape ``batch.shape``."""
        ...

    def weighted_derivatives(
        self,
        batch: NDArray[np.floating],
        outputs: NDArray[np.floating],
        coefficients: NDArray[np.floating],
        state: Any,
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Return ``(parameter_derivative, input_derivative)`` in one call."""
        ...


@contextmanager
def parameters_restored(model: DifferentiableModel) -> Iterator[NDArray[np.float64]]:
    """Restores the parameters of ``model`` when the block exits.

    The parameter vector is copied on entry and written back on every exit
    path, including when the block raises.

    Args:
        model: Model whose parameters may be overwritten inside the block.

    Yields:
        A copy of the parameter vector as it was on entry.
    """
    saved = np.array(model.get_parameters(), dtype=float, copy=True).ravel()
    try:
        yield saved.copy()
    finally:
        model.set_parameters(saved.copy())
