"""Sandbox utilities for experimentation and testing.

Besides :func:`get_partial_function`, this module provides a few small
models with correct analytic derivatives. They implement the
:class:`~derivcheck.model.DifferentiableModel` protocol and serve as
references in the tests and documentation.

Example:
    >>> import numpy as np
    >>> from derivcheck.utils.sandbox import ElementwiseLinearModel
    >>> model = ElementwiseLinearModel(2, parameters=[2.0, -1.0])
    >>> model(np.array([1.0, 3.0]))
    array([ 2., -3.])
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from derivcheck.model import EvaluationState
from derivcheck.utils.validate import as_vector

__all__ = [
    "get_partial_function",
    "SandboxModel",
    "ElementwiseLinearModel",
    "DenseTanhModel",
    "IdentityModel",
]


def get_partial_function(
    full_function: Callable,
    variable_index: int,
    fixed_values: list | np.ndarray,
) -> Callable:
    """Returns a single-variable version of a multivariate function.

    A single coordinate must be specified by index. All other coordinates
    are held fixed.

    Args:
        full_function (callable): A function that takes a vector and
            returns a vector.
        variable_index (int): The index of the coordinate to treat as the
            variable.
        fixed_values (list or np.ndarray): The values to use for all
            coordinates except the one being varied.

    Returns:
        callable: A function of a single variable, suitable for use in
            differentiation.

    Raises:
        ValueError: If ``fixed_values`` is not 1D.
        TypeError: If ``variable_index`` is not an integer.
        IndexError: If ``variable_index`` is out of bounds for the size of ``fixed_values``.
    """
    fixed_arr = np.asarray(fixed_values, dtype=float)
    if fixed_arr.ndim != 1:
        raise ValueError(
            f"fixed_values must be 1D; got shape {fixed_arr.shape}."
        )
    if not isinstance(variable_index, (int, np.integer)):
        raise TypeError(
            f"variable_index must be an integer; got {type(variable_index).__name__}."
        )
    if variable_index < 0 or variable_index >= fixed_arr.size:
        raise IndexError(
            f"variable_index {variable_index} out of bounds for size {fixed_arr.size}."
        )

    def partial_function(x):
        values = fixed_arr.copy()
        values[variable_index] = x
        return np.atleast_1d(full_function(values))

    return partial_function


class SandboxModel:
    """Shared plumbing of the sandbox models.

    Subclasses implement ``_forward`` and the two weighted derivatives.
    Calling the model with a 1D point returns a 1D output; calling it with a
    2D batch returns one output row per input row.
    """

    def __init__(self, input_size: int, output_size: int, parameters: ArrayLike):
        self._input_size = int(input_size)
        self._output_size = int(output_size)
        self._parameters = np.asarray(parameters, dtype=float).ravel().copy()

    def input_size(self) -> int:
        return self._input_size

    def output_size(self) -> int:
        return self._output_size

    def number_of_parameters(self) -> int:
        return int(self._parameters.size)

    def get_parameters(self) -> NDArray[np.float64]:
        return self._parameters.copy()

    def set_parameters(self, parameters: ArrayLike) -> None:
        self._parameters = as_vector(
            parameters, self.number_of_parameters(), name="parameters"
        ).copy()

    def has_parameter_derivative(self) -> bool:
        return True

    def has_input_derivative(self) -> bool:
        return True

    def create_state(self) -> EvaluationState:
        return EvaluationState()

    def __call__(self, inputs: ArrayLike) -> NDArray[np.float64]:
        x = np.asarray(inputs, dtype=float)
        if x.ndim == 1:
            return self.eval(x.reshape(1, -1), self.create_state())[0]
        return self.eval(x, self.create_state())

    def eval(self, batch: ArrayLike, state: EvaluationState) -> NDArray[np.float64]:
        x = np.asarray(batch, dtype=float)
        if x.ndim != 2 or x.shape[1] != self._input_size:
            raise ValueError(
                f"batch must have shape (n, {self._input_size}); got {x.shape}."
            )
        outputs = self._forward(x)
        state.inputs = x
        state.outputs = outputs
        return outputs

    def weighted_derivatives(self, batch, outputs, coefficients, state):
        return (
            self.weighted_parameter_derivative(batch, outputs, coefficients, state),
            self.weighted_input_derivative(batch, outputs, coefficients, state),
        )

    def _forward(self, x: NDArray[np.float64]) -> NDArray[np.float64]:
        raise NotImplementedError


class ElementwiseLinearModel(SandboxModel):
    """Elementwise product ``f(x) = theta * x`` with one parameter per input."""

    def __init__(self, size: int, parameters: ArrayLike | None = None):
        if parameters is None:
            parameters = np.ones(int(size))
        super().__init__(size, size, as_vector(parameters, int(size), name="parameters"))

    def _forward(self, x):
        return x * self._parameters

    def weighted_parameter_derivative(self, batch, outputs, coefficients, state):
        return np.sum(np.asarray(coefficients, dtype=float) * state.inputs, axis=0)

    def weighted_input_derivative(self, batch, outputs, coefficients, state):
        return np.asarray(coefficients, dtype=float) * self._parameters


class DenseTanhModel(SandboxModel):
    """One dense layer with tanh activation, ``f(x) = tanh(W x + b)``.

    The parameter vector holds ``W`` in row-major order followed by ``b``.
    """

    def __init__(
        self,
        input_size: int,
        output_size: int,
        parameters: ArrayLike | None = None,
    ):
        n_params = int(output_size) * (int(input_size) + 1)
        if parameters is None:
            parameters = np.zeros(n_params)
        super().__init__(
            input_size, output_size, as_vector(parameters, n_params, name="parameters")
        )

    def _split(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        n_weights = self._output_size * self._input_size
        weights = self._parameters[:n_weights].reshape(self._output_size, self._input_size)
        return weights, self._parameters[n_weights:]

    def _forward(self, x):
        weights, bias = self._split()
        return np.tanh(x @ weights.T + bias)

    def _delta(self, coefficients, state):
        return np.asarray(coefficients, dtype=float) * (1.0 - state.outputs**2)

    def weighted_parameter_derivative(self, batch, outputs, coefficients, state):
        delta = self._delta(coefficients, state)
        return np.concatenate([(delta.T @ state.inputs).ravel(), delta.sum(axis=0)])

    def weighted_input_derivative(self, batch, outputs, coefficients, state):
        weights, _ = self._split()
        return self._delta(coefficients, state) @ weights

    def weighted_derivatives(self, batch, outputs, coefficients, state):
        weights, _ = self._split()
        delta = self._delta(coefficients, state)
        parameter_derivative = np.concatenate(
            [(delta.T @ state.inputs).ravel(), delta.sum(axis=0)]
        )
        return parameter_derivative, delta @ weights


class IdentityModel(SandboxModel):
    """Identity map without parameters."""

    def __init__(self, size: int):
        super().__init__(size, size, np.zeros(0))

    def _forward(self, x):
        return x.copy()

    def weighted_parameter_derivative(self, batch, outputs, coefficients, state):
        return np.zeros(0)

    def weighted_input_derivative(self, batch, outputs, coefficients, state):
        return np.asarray(coefficients, dtype=float).copy()
