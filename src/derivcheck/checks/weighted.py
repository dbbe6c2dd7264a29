"""Checks weighted derivatives of a model against finite differences.

The weighted parameter derivative is linear in the coefficients. Isolating
a single nonzero coefficient ``w`` at output ``k`` and dividing the result
by ``w`` therefore yields column ``k`` of the parameter Jacobian, free of
contributions from other outputs. Comparing every column separately checks
both the values and the linearity.

The weighted input derivative is checked in one call against the
finite-difference table contracted with the coefficients.

Example:
    >>> from derivcheck.utils.sandbox import DenseTanhModel
    >>> model = DenseTanhModel(3, 2)
    >>> report = check_weighted_parameter_derivative_random(model, n_trials=20, rng=0)
    >>> report.passed
    True
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from derivcheck.checks.report import CheckReport
from derivcheck.config import (
    DEFAULT_ESTIMATION_EPSILON,
    DEFAULT_N_TRIALS,
    DEFAULT_TOLERANCE,
    SamplingConfig,
    input_check_sampling,
    parameter_check_sampling,
)
from derivcheck.finite.central_difference import (
    estimate_input_derivative,
    estimate_parameter_derivative,
)
from derivcheck.logger import derivcheck_logger
from derivcheck.model import DifferentiableModel, parameters_restored
from derivcheck.sampling import resolve_rng
from derivcheck.utils.validate import as_row_batch, as_vector, validate_n_trials

__all__ = [
    "check_derivative_tables",
    "check_weighted_parameter_derivative",
    "check_weighted_input_derivative",
    "check_weighted_parameter_derivative_random",
    "check_weighted_input_derivative_random",
]


def check_derivative_tables(
    table: ArrayLike,
    reference: ArrayLike,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    report: CheckReport | None = None,
) -> CheckReport:
    """Compares two derivative tables row by row.

    Args:
        table: Derivative table to check, shape ``(n, m)``.
        reference: Reference table of the same shape.
        tolerance: Largest acceptable L2 norm of the difference of a row.
        report: Report to record into; a new one is created if None.

    Returns:
        The report.

    Raises:
        ValueError: If the tables do not have the same shape.
    """
    report = report if report is not None else CheckReport("derivative_tables")
    a = np.atleast_2d(np.asarray(table, dtype=float))
    b = np.atleast_2d(np.asarray(reference, dtype=float))
    report.require_equal(a.shape[0], b.shape[0], what="number of table rows")
    report.require_equal(a.shape, b.shape, what="table shape")
    for i in range(a.shape[0]):
        report.check_small(
            np.linalg.norm(a[i] - b[i]),
            tolerance,
            label=f"table row {i}",
            context={"actual": a[i], "expected": b[i]},
        )
    return report


def check_weighted_parameter_derivative(
    model: DifferentiableModel,
    point: ArrayLike,
    coefficients: ArrayLike,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    estimation_epsilon: float = DEFAULT_ESTIMATION_EPSILON,
    report: CheckReport | None = None,
    context: dict[str, Any] | None = None,
) -> CheckReport:
    """Checks ``weighted_parameter_derivative`` at one point.

    For every output ``k`` a single-row coefficient batch holding only
    ``coefficients[k]`` at column ``k`` is passed to the model. The result
    divided by ``coefficients[k]`` must match the finite-difference
    derivative of output ``k`` with respect to all parameters.

    Args:
        model: The model to check, with its parameters already set.
        point: Input point of length ``model.input_size()``.
        coefficients: Nonzero scales, one per output.
        tolerance: Largest acceptable L2 norm of the difference per output.
        estimation_epsilon: Step size of the finite-difference estimate.
        report: Report to record into; a new one is created if None.
        context: Extra values attached to any recorded failure.

    Returns:
        The report. Its status is UNSUPPORTED if the model has no weighted
        parameter derivative.

    Raises:
        ValueError: If shapes do not match the model, a coefficient is zero,
            or the model returns a derivative of the wrong length.
    """
    report = report if report is not None else CheckReport("weighted_parameter_derivative")
    if not model.has_parameter_derivative():
        report.mark_unsupported("model does not provide a weighted parameter derivative")
        return report
    n_outputs = model.output_size()
    n_params = model.number_of_parameters()
    x = as_vector(point, model.input_size(), name="point")
    coeffs = as_vector(coefficients, n_outputs, name="coefficients")
    if np.any(coeffs == 0.0):
        raise ValueError("coefficients must be nonzero to isolate single outputs.")

    point_batch = x.reshape(1, -1)
    state = model.create_state()
    outputs = model.eval(point_batch, state)

    derivative = estimate_parameter_derivative(model, x, estimation_epsilon)

    for k in range(n_outputs):
        coeff_batch = np.zeros((1, n_outputs), dtype=float)
        coeff_batch[0, k] = coeffs[k]

        gradient = np.asarray(
            model.weighted_parameter_derivative(point_batch, outputs, coeff_batch, state),
            dtype=float,
        ).ravel()
        report.require_equal(
            gradient.size, n_params, what="weighted_parameter_derivative length"
        )
        # independent of the coefficient if the derivative is linear in it
        gradient = gradient / coeffs[k]

        expected = derivative[:, k]
        report.check_small(
            np.linalg.norm(gradient - expected),
            tolerance,
            label=f"parameter derivative of output {k}",
            context={
                **(context or {}),
                "output_index": k,
                "point": x,
                "coefficients": coeffs,
                "actual": gradient,
                "expected": expected,
            },
        )
    return report


def check_weighted_input_derivative(
    model: DifferentiableModel,
    point: ArrayLike,
    coefficients: ArrayLike,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    estimation_epsilon: float = DEFAULT_ESTIMATION_EPSILON,
    report: CheckReport | None = None,
    context: dict[str, Any] | None = None,
) -> CheckReport:
    """Checks ``weighted_input_derivative`` at one point.

    The expected value is the finite-difference input derivative table
    contracted with the coefficients. The comparison uses the infinity norm.

    Args:
        model: The model to check, with its parameters already set.
        point: Input point of length ``model.input_size()``.
        coefficients: Weights, one per output.
        tolerance: Largest acceptable infinity norm of the difference.
        estimation_epsilon: Step size of the finite-difference estimate.
        report: Report to record into; a new one is created if None.
        context: Extra values attached to a recorded failure.

    Returns:
        The report. Its status is UNSUPPORTED if the model has no weighted
        input derivative.

    Raises:
        ValueError: If shapes do not match the model or the model returns
            an input derivative of the wrong shape.
    """
    report = report if report is not None else CheckReport("weighted_input_derivative")
    if not model.has_input_derivative():
        report.mark_unsupported("model does not provide a weighted input derivative")
        return report
    n_inputs = model.input_size()
    point_batch = as_row_batch(point, n_inputs, name="point")
    coeff_batch = as_row_batch(coefficients, model.output_size(), name="coefficients")

    state = model.create_state()
    outputs = model.eval(point_batch, state)

    test_gradient = np.asarray(
        model.weighted_input_derivative(point_batch, outputs, coeff_batch, state),
        dtype=float,
    )
    report.require_equal(
        test_gradient.shape, point_batch.shape, what="weighted_input_derivative shape"
    )

    derivative = estimate_input_derivative(model, point_batch[0], estimation_epsilon)
    expected = derivative @ coeff_batch[0]
    actual = test_gradient[0]

    error = float(np.max(np.abs(actual - expected))) if actual.size else 0.0
    report.check_small(
        error,
        tolerance,
        label="input derivative",
        context={
            **(context or {}),
            "point": point_batch[0],
            "coefficients": coeff_batch[0],
            "actual": actual,
            "expected": expected,
        },
    )
    return report


def _sampling(
    defaults: dict[str, SamplingConfig],
    parameter_sampling: SamplingConfig | None,
    coefficient_sampling: SamplingConfig | None,
    point_sampling: SamplingConfig | None,
) -> tuple[SamplingConfig, SamplingConfig, SamplingConfig]:
    return (
        parameter_sampling or defaults["parameters"],
        coefficient_sampling or defaults["coefficients"],
        point_sampling or defaults["points"],
    )


def _run_random_trials(
    single_check,
    model: DifferentiableModel,
    n_trials: int,
    rng: np.random.Generator,
    sampling: tuple[SamplingConfig, SamplingConfig, SamplingConfig],
    report: CheckReport,
    check_kwargs: dict[str, Any],
) -> CheckReport:
    parameter_sampling, coefficient_sampling, point_sampling = sampling
    n_params = model.number_of_parameters()
    n_outputs = model.output_size()
    n_inputs = model.input_size()

    derivcheck_logger.info("[%s] running %d random trials.", report.name, n_trials)
    with parameters_restored(model):
        for trial in range(n_trials):
            parameters = parameter_sampling.sample(rng, n_params)
            coefficients = coefficient_sampling.sample(rng, n_outputs)
            point = point_sampling.sample(rng, n_inputs)

            model.set_parameters(parameters)
            derivcheck_logger.debug("[%s] trial %d", report.name, trial)
            single_check(
                model,
                point,
                coefficients,
                report=report,
                context={"trial": trial, "parameters": parameters},
                **check_kwargs,
            )
    derivcheck_logger.info(
        "[%s] finished with status %s (%d failures in %d comparisons).",
        report.name,
        report.status.value,
        len(report.failures),
        report.n_comparisons,
    )
    return report


def check_weighted_parameter_derivative_random(
    model: DifferentiableModel,
    n_trials: int = DEFAULT_N_TRIALS,
    *,
    rng: np.random.Generator | int | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
    estimation_epsilon: float = DEFAULT_ESTIMATION_EPSILON,
    parameter_sampling: SamplingConfig | None = None,
    coefficient_sampling: SamplingConfig | None = None,
    point_sampling: SamplingConfig | None = None,
    report: CheckReport | None = None,
) -> CheckReport:
    """Runs :func:`check_weighted_parameter_derivative` on random inputs.

    Each trial draws parameters, coefficients and a point (in that order)
    from ``rng``, sets the parameters and checks the derivative. By default
    all three are uniform on ``[-1, 1]``. The model parameters are restored
    afterwards.

    Args:
        model: The model to check.
        n_trials: Number of random trials.
        rng: Generator or seed for the draws.
        tolerance: See :func:`check_weighted_parameter_derivative`.
        estimation_epsilon: See :func:`check_weighted_parameter_derivative`.
        parameter_sampling: Overrides the parameter sampling.
        coefficient_sampling: Overrides the coefficient sampling.
        point_sampling: Overrides the point sampling.
        report: Report to record into; a new one is created if None.

    Returns:
        The report. Its status is UNSUPPORTED if the model has no weighted
        parameter derivative.
    """
    n_trials = validate_n_trials(n_trials)
    report = report if report is not None else CheckReport("weighted_parameter_derivative")
    if not model.has_parameter_derivative():
        report.mark_unsupported("model does not provide a weighted parameter derivative")
        return report
    return _run_random_trials(
        check_weighted_parameter_derivative,
        model,
        n_trials,
        resolve_rng(rng),
        _sampling(
            parameter_check_sampling(),
            parameter_sampling,
            coefficient_sampling,
            point_sampling,
        ),
        report,
        {"tolerance": tolerance, "estimation_epsilon": estimation_epsilon},
    )


def check_weighted_input_derivative_random(
    model: DifferentiableModel,
    n_trials: int = DEFAULT_N_TRIALS,
    *,
    rng: np.random.Generator | int | None = None,
    tolerance: float = DEFAULT_TOLERANCE,
    estimation_epsilon: float = DEFAULT_ESTIMATION_EPSILON,
    parameter_sampling: SamplingConfig | None = None,
    coefficient_sampling: SamplingConfig | None = None,
    point_sampling: SamplingConfig | None = None,
    report: CheckReport | None = None,
) -> CheckReport:
    """Runs :func:`check_weighted_input_derivative` on random inputs.

    By default the parameters are held at ``1 / number_of_parameters`` while
    coefficients and points are uniform on ``[-1, 1]``. The model
    parameters are restored afterwards.

    Args:
        model: The model to check.
        n_trials: Number of random trials.
        rng: Generator or seed for the draws.
        tolerance: See :func:`check_weighted_input_derivative`.
        estimation_epsilon: See :func:`check_weighted_input_derivative`.
        parameter_sampling: Overrides the parameter sampling.
        coefficient_sampling: Overrides the coefficient sampling.
        point_sampling: Overrides the point sampling.
        report: Report to record into; a new one is created if None.

    Returns:
        The report. Its status is UNSUPPORTED if the model has no weighted
        input derivative.
    """
    n_trials = validate_n_trials(n_trials)
    report = report if report is not None else CheckReport("weighted_input_derivative")
    if not model.has_input_derivative():
        report.mark_unsupported("model does not provide a weighted input derivative")
        return report
    return _run_random_trials(
        check_weighted_input_derivative,
        model,
        n_trials,
        resolve_rng(rng),
        _sampling(
            input_check_sampling(),
            parameter_sampling,
            coefficient_sampling,
            point_sampling,
        ),
        report,
        {"tolerance": tolerance, "estimation_epsilon": estimation_epsilon},
    )
