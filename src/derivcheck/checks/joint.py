"""Checks that the fused derivative call agrees with the separate ones."""

from __future__ import annotations

import numpy as np

from derivcheck.checks.report import CheckReport
from derivcheck.config import (
    DEFAULT_JOINT_BATCH_SIZE,
    DEFAULT_JOINT_N_TRIALS,
    DEFAULT_JOINT_TOLERANCE,
    SamplingConfig,
    joint_check_sampling,
)
from derivcheck.logger import derivcheck_logger
from derivcheck.model import DifferentiableModel, parameters_restored
from derivcheck.sampling import resolve_rng
from derivcheck.utils.validate import validate_n_trials

__all__ = [
    "check_weighted_derivatives_same",
]


def _max_abs_difference(a: np.ndarray, b: np.ndarray) -> float:
    if a.size == 0:
        return 0.0
    return float(np.max(np.abs(a - b)))


def check_weighted_derivatives_same(
    model: DifferentiableModel,
    n_trials: int = DEFAULT_JOINT_N_TRIALS,
    *,
    rng: np.random.Generator | int | None = None,
    tolerance: float = DEFAULT_JOINT_TOLERANCE,
    batch_size: int = DEFAULT_JOINT_BATCH_SIZE,
    parameter_sampling: SamplingConfig | None = None,
    coefficient_sampling: SamplingConfig | None = None,
    point_sampling: SamplingConfig | None = None,
    report: CheckReport | None = None,
) -> CheckReport:
    """Checks ``weighted_derivatives`` against the two separate derivative calls.

    Each trial draws parameters, a ``(batch_size, output_size)`` coefficient
    batch and a ``(batch_size, input_size)`` point batch. By default every
    quantity is uniform on ``[-1/dim, 1/dim]`` where ``dim`` is its own
    length. The model is evaluated once and the same outputs and state are
    passed to all three derivative calls.

    Args:
        model: The model to check.
        n_trials: Number of random trials.
        rng: Generator or seed for the draws.
        tolerance: Largest acceptable absolute difference of any entry.
        batch_size: Number of points per trial batch.
        parameter_sampling: Overrides the parameter sampling.
        coefficient_sampling: Overrides the coefficient sampling.
        point_sampling: Overrides the point sampling.
        report: Report to record into; a new one is created if None.

    Returns:
        The report. Its status is UNSUPPORTED unless the model provides both
        the parameter and the input derivative.

    Raises:
        ValueError: If any of the derivative calls returns a result of the
            wrong size.
    """
    n_trials = validate_n_trials(n_trials)
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1; got {batch_size}.")
    report = report if report is not None else CheckReport("weighted_derivatives_same")
    if not (model.has_parameter_derivative() and model.has_input_derivative()):
        report.mark_unsupported(
            "fused derivatives need both the parameter and the input derivative"
        )
        return report

    rng = resolve_rng(rng)
    defaults = joint_check_sampling()
    parameter_sampling = parameter_sampling or defaults["parameters"]
    coefficient_sampling = coefficient_sampling or defaults["coefficients"]
    point_sampling = point_sampling or defaults["points"]

    n_params = model.number_of_parameters()
    n_outputs = model.output_size()
    n_inputs = model.input_size()

    derivcheck_logger.info(
        "[%s] running %d random trials with batches of %d.", report.name, n_trials, batch_size
    )
    with parameters_restored(model):
        for trial in range(n_trials):
            parameters = parameter_sampling.sample(rng, n_params)
            coeff_batch = coefficient_sampling.sample(rng, (batch_size, n_outputs))
            point_batch = point_sampling.sample(rng, (batch_size, n_inputs))
            model.set_parameters(parameters)
            derivcheck_logger.debug("[%s] trial %d", report.name, trial)

            state = model.create_state()
            outputs = model.eval(point_batch, state)

            input_derivative = np.asarray(
                model.weighted_input_derivative(point_batch, outputs, coeff_batch, state),
                dtype=float,
            )
            parameter_derivative = np.asarray(
                model.weighted_parameter_derivative(point_batch, outputs, coeff_batch, state),
                dtype=float,
            ).ravel()
            fused_parameter, fused_input = model.weighted_derivatives(
                point_batch, outputs, coeff_batch, state
            )
            fused_parameter = np.asarray(fused_parameter, dtype=float).ravel()
            fused_input = np.asarray(fused_input, dtype=float)

            report.require_equal(
                parameter_derivative.size, n_params,
                what="weighted_parameter_derivative length",
            )
            report.require_equal(
                fused_parameter.size, n_params,
                what="parameter part of weighted_derivatives length",
            )
            report.require_equal(
                input_derivative.shape, point_batch.shape,
                what="weighted_input_derivative shape",
            )
            report.require_equal(
                fused_input.shape, point_batch.shape,
                what="input part of weighted_derivatives shape",
            )

            report.check_small(
                _max_abs_difference(input_derivative, fused_input),
                tolerance,
                label="fused input derivative",
                context={
                    "trial": trial,
                    "parameters": parameters,
                    "actual": fused_input,
                    "expected": input_derivative,
                },
            )
            if n_params > 0:
                report.check_small(
                    _max_abs_difference(parameter_derivative, fused_parameter),
                    tolerance,
                    label="fused parameter derivative",
                    context={
                        "trial": trial,
                        "parameters": parameters,
                        "actual": fused_parameter,
                        "expected": parameter_derivative,
                    },
                )

    derivcheck_logger.info("[%s] finished with status %s.", report.name, report.status.value)
    return report
