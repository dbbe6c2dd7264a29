"""Provides the CentralDifferenceEstimator class.

The estimator computes derivative tables of a model by symmetric finite
differences, either with respect to the model parameters or with respect
to the input point. Row ``i`` of a table holds the derivative of every
output component with respect to coordinate ``i``.

Examples:
--------
>>> import numpy as np
>>> from derivcheck.utils.sandbox import ElementwiseLinearModel
>>> from derivcheck.finite.central_difference import estimate_parameter_derivative
>>> model = ElementwiseLinearModel(2, parameters=[2.0, -1.0])
>>> table = estimate_parameter_derivative(model, np.array([1.0, 3.0]), epsilon=1e-6)
>>> np.allclose(table, [[1.0, 0.0], [0.0, 3.0]])
True

The model parameters are left untouched:

>>> model.get_parameters()
array([ 2., -1.])
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from derivcheck.config import DEFAULT_PROBE_EPSILON
from derivcheck.finite.core import central_difference
from derivcheck.model import DifferentiableModel, parameters_restored
from derivcheck.utils.sandbox import get_partial_function
from derivcheck.utils.validate import as_vector, validate_epsilon

__all__ = [
    "CentralDifferenceEstimator",
    "estimate_parameter_derivative",
    "estimate_input_derivative",
]


def _stack_rows(rows: list[NDArray[np.float64]], n_outputs: int) -> NDArray[np.float64]:
    if not rows:
        return np.zeros((0, n_outputs), dtype=float)
    return np.vstack(rows)


def estimate_parameter_derivative(
    model: DifferentiableModel,
    point: ArrayLike,
    epsilon: float = DEFAULT_PROBE_EPSILON,
) -> NDArray[np.float64]:
    """Estimates the derivative of the model output with respect to its parameters.

    Row ``p`` of the result is
    ``(f(theta + epsilon * e_p, x) - f(theta - epsilon * e_p, x)) / (2 * epsilon)``
    where ``theta`` is the current parameter vector of ``model``.

    The parameters are overwritten during the sweep and restored before
    returning, also when the model raises.

    Args:
        model: The model to probe.
        point: Input point of length ``model.input_size()``.
        epsilon: Perturbation applied to each parameter.

    Returns:
        Array of shape ``(model.number_of_parameters(), model.output_size())``.

    Raises:
        ValueError: If ``epsilon`` is not positive, the point has the wrong
            length, or the model output does not have ``output_size()`` entries.
    """
    eps = validate_epsilon(epsilon)
    x = as_vector(point, model.input_size(), name="point")
    n_outputs = model.output_size()

    with parameters_restored(model) as theta0:

        def evaluate_at(parameters):
            model.set_parameters(parameters)
            return model(x)

        rows = []
        for p in range(theta0.size):
            partial = get_partial_function(evaluate_at, p, theta0)
            rows.append(_check_row(central_difference(partial, theta0[p], eps), n_outputs, p))

    return _stack_rows(rows, n_outputs)


def estimate_input_derivative(
    model: DifferentiableModel,
    point: ArrayLike,
    epsilon: float = DEFAULT_PROBE_EPSILON,
) -> NDArray[np.float64]:
    """Estimates the derivative of the model output with respect to its input.

    Row ``i`` of the result is
    ``(f(x + epsilon * e_i) - f(x - epsilon * e_i)) / (2 * epsilon)`` with the
    parameters held fixed.

    Args:
        model: The model to probe.
        point: Input point of length ``model.input_size()``.
        epsilon: Perturbation applied to each input coordinate.

    Returns:
        Array of shape ``(model.input_size(), model.output_size())``.

    Raises:
        ValueError: If ``epsilon`` is not positive, the point has the wrong
            length, or the model output does not have ``output_size()`` entries.
    """
    eps = validate_epsilon(epsilon)
    x = as_vector(point, model.input_size(), name="point")
    n_outputs = model.output_size()

    # Parameters are not touched here, but a misbehaving model must not
    # leave them changed either.
    with parameters_restored(model):
        rows = []
        for i in range(x.size):
            partial = get_partial_function(model, i, x)
            rows.append(_check_row(central_difference(partial, x[i], eps), n_outputs, i))

    return _stack_rows(rows, n_outputs)


def _check_row(row: NDArray[np.float64], n_outputs: int, index: int) -> NDArray[np.float64]:
    if row.size != n_outputs:
        raise ValueError(
            f"Expected derivative of length {n_outputs} but got {row.size} for index {index}."
        )
    return row


class CentralDifferenceEstimator:
    """Estimates parameter and input derivative tables of a model.

    Attributes:
        model: The model to probe.
        epsilon: The perturbation size used for every coordinate.

    Example:
        >>> import numpy as np
        >>> from derivcheck.utils.sandbox import IdentityModel
        >>> est = CentralDifferenceEstimator(IdentityModel(2), epsilon=1e-6)
        >>> np.allclose(est.input_derivative([0.5, -0.5]), np.eye(2))
        True
    """

    def __init__(self, model: DifferentiableModel, epsilon: float = DEFAULT_PROBE_EPSILON):
        """Initialises the estimator.

        Args:
            model: The model to probe.
            epsilon: Perturbation size. Too small values suffer from
                cancellation error, too large ones from truncation error.
        """
        self.model = model
        self.epsilon = validate_epsilon(epsilon)

    def parameter_derivative(self, point: ArrayLike) -> NDArray[np.float64]:
        """Returns the parameter derivative table at ``point``."""
        return estimate_parameter_derivative(self.model, point, self.epsilon)

    def input_derivative(self, point: ArrayLike) -> NDArray[np.float64]:
        """Returns the input derivative table at ``point``."""
        return estimate_input_derivative(self.model, point, self.epsilon)
