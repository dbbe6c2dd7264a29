"""Tests for derivcheck.checks.weighted."""

import logging

import numpy as np
import pytest

from derivcheck.checks.report import CheckReport, CheckStatus
from derivcheck.checks.weighted import (
    check_derivative_tables,
    check_weighted_input_derivative,
    check_weighted_input_derivative_random,
    check_weighted_parameter_derivative,
    check_weighted_parameter_derivative_random,
)
from derivcheck.config import SamplingConfig
from derivcheck.utils.sandbox import DenseTanhModel, ElementwiseLinearModel, IdentityModel


class ScaledParameterDerivative(ElementwiseLinearModel):
    """Linear model whose parameter derivative is 10% too large."""

    def weighted_parameter_derivative(self, batch, outputs, coefficients, state):
        return 1.1 * super().weighted_parameter_derivative(batch, outputs, coefficients, state)


class SquaredCoefficients(ElementwiseLinearModel):
    """Linear model whose parameter derivative is not linear in the coefficients."""

    def weighted_parameter_derivative(self, batch, outputs, coefficients, state):
        c = np.asarray(coefficients, dtype=float)
        return np.sum(c * c * state.inputs, axis=0)


class TruncatedParameterDerivative(ElementwiseLinearModel):
    """Linear model that drops the last entry of its parameter derivative."""

    def weighted_parameter_derivative(self, batch, outputs, coefficients, state):
        return super().weighted_parameter_derivative(batch, outputs, coefficients, state)[:-1]


class WrongInputDerivative(DenseTanhModel):
    """Tanh layer whose input derivative ignores the activation slope."""

    def weighted_input_derivative(self, batch, outputs, coefficients, state):
        weights, _ = self._split()
        return np.asarray(coefficients, dtype=float) @ weights


class NoDerivatives(ElementwiseLinearModel):
    """Linear model that advertises no derivatives."""

    def has_parameter_derivative(self):
        return False

    def has_input_derivative(self):
        return False

    def weighted_parameter_derivative(self, batch, outputs, coefficients, state):
        raise AssertionError("must not be called")

    def weighted_input_derivative(self, batch, outputs, coefficients, state):
        raise AssertionError("must not be called")


class RecordingTanh(DenseTanhModel):
    """Tanh layer recording every parameter vector it is given."""

    def __init__(self, *args, **kwargs):
        """Initialises the recorder."""
        super().__init__(*args, **kwargs)
        self.seen = []

    def set_parameters(self, parameters):
        self.seen.append(np.array(parameters, dtype=float))
        super().set_parameters(parameters)


def test_isolated_coefficient_recovers_jacobian_column(linear_model):
    """Tests the isolation trick on theta * x with x=[1, 3] and w=3 at output 0."""
    x = np.array([[1.0, 3.0]])
    state = linear_model.create_state()
    y = linear_model.eval(x, state)
    r = linear_model.weighted_parameter_derivative(x, y, np.array([[3.0, 0.0]]), state)
    np.testing.assert_allclose(r / 3.0, [1.0, 0.0], atol=1e-5)

    report = check_weighted_parameter_derivative(linear_model, [1.0, 3.0], [3.0, 3.0])
    assert report.status is CheckStatus.PASSED
    assert report.n_comparisons == 2


def test_parameter_check_passes_for_tanh(tanh_model):
    """Tests a correct nonlinear model at a fixed point."""
    report = check_weighted_parameter_derivative(tanh_model, [0.2, -0.7, 0.4], [0.5, -1.5])
    assert report.passed
    assert report.n_comparisons == 2


def test_parameter_check_records_wrong_values():
    """Tests that a scaled derivative fails for every output, with context."""
    model = ScaledParameterDerivative(2, parameters=[2.0, -1.0])
    report = check_weighted_parameter_derivative(model, [1.0, 3.0], [0.5, 2.0])
    assert report.status is CheckStatus.FAILED
    assert [f.context["output_index"] for f in report.failures] == [0, 1]
    failure = report.failures[1]
    np.testing.assert_allclose(failure.context["expected"], [0.0, 3.0], atol=1e-6)
    np.testing.assert_allclose(failure.context["actual"], [0.0, 3.3], atol=1e-12)


def test_parameter_check_detects_nonlinearity_in_coefficients():
    """Tests that a derivative quadratic in the coefficients is caught."""
    model = SquaredCoefficients(2, parameters=[2.0, -1.0])
    assert check_weighted_parameter_derivative(model, [1.0, 3.0], [1.0, 1.0]).passed
    assert not check_weighted_parameter_derivative(model, [1.0, 3.0], [2.0, 1.0]).passed


def test_parameter_check_aborts_on_wrong_length():
    """Tests that a derivative of the wrong length is fatal."""
    model = TruncatedParameterDerivative(2)
    with pytest.raises(ValueError, match="weighted_parameter_derivative length"):
        check_weighted_parameter_derivative(model, [1.0, 1.0], [1.0, 1.0])


def test_parameter_check_rejects_zero_coefficients(linear_model):
    """Tests that zero coefficients cannot isolate an output."""
    with pytest.raises(ValueError, match="nonzero"):
        check_weighted_parameter_derivative(linear_model, [1.0, 1.0], [1.0, 0.0])


def test_parameter_check_leaves_parameters_unchanged(tanh_model):
    """Tests that the finite-difference sweep does not leak into the model."""
    before = tanh_model.get_parameters()
    check_weighted_parameter_derivative(tanh_model, [0.1, 0.2, 0.3], [1.0, 1.0])
    np.testing.assert_array_equal(tanh_model.get_parameters(), before)


def test_parameter_check_on_model_without_parameters():
    """Tests that a parameter-free model passes trivially."""
    report = check_weighted_parameter_derivative(IdentityModel(2), [0.5, 0.5], [1.0, 2.0])
    assert report.passed


def test_input_check_passes_for_tanh(tanh_model):
    """Tests a correct input derivative."""
    report = check_weighted_input_derivative(tanh_model, [0.2, -0.7, 0.4], [0.5, -1.5])
    assert report.passed
    assert report.n_comparisons == 1


def test_input_check_reports_diagnostics(caplog, tanh_model):
    """Tests that a wrong input derivative is recorded and logged with its inputs."""
    model = WrongInputDerivative(3, 2, parameters=tanh_model.get_parameters())
    point = np.array([0.2, -0.7, 0.4])
    coefficients = np.array([0.5, -1.5])
    with caplog.at_level(logging.WARNING, logger="derivcheck"):
        report = check_weighted_input_derivative(model, point, coefficients)

    assert report.status is CheckStatus.FAILED
    ctx = report.failures[0].context
    np.testing.assert_array_equal(ctx["point"], point)
    np.testing.assert_array_equal(ctx["coefficients"], coefficients)
    assert ctx["actual"].shape == (3,)
    assert ctx["expected"].shape == (3,)
    assert "coefficients" in caplog.text
    assert "input derivative" in caplog.text


def test_input_check_validates_shapes(linear_model):
    """Tests that wrong point or coefficient lengths are fatal."""
    with pytest.raises(ValueError, match="point"):
        check_weighted_input_derivative(linear_model, [1.0], [1.0, 1.0])
    with pytest.raises(ValueError, match="coefficients"):
        check_weighted_input_derivative(linear_model, [1.0, 1.0], [1.0])


def test_random_parameter_driver_passes_and_restores(tanh_model):
    """Tests the randomized parameter driver on a correct model."""
    before = tanh_model.get_parameters()
    report = check_weighted_parameter_derivative_random(tanh_model, n_trials=25, rng=3)
    assert report.passed
    assert report.n_comparisons == 25 * 2
    np.testing.assert_array_equal(tanh_model.get_parameters(), before)


def test_random_parameter_driver_single_failing_trial_fails_property():
    """Tests that a broken model fails the whole trial batch."""
    model = ScaledParameterDerivative(3)
    report = check_weighted_parameter_derivative_random(model, n_trials=5, rng=0)
    assert report.status is CheckStatus.FAILED
    assert {f.context["trial"] for f in report.failures} == set(range(5))


def test_random_drivers_are_reproducible_with_seed():
    """Tests that the same seed gives the same sampled inputs."""
    a = check_weighted_parameter_derivative_random(ScaledParameterDerivative(2), 3, rng=11)
    b = check_weighted_parameter_derivative_random(ScaledParameterDerivative(2), 3, rng=11)
    for fa, fb in zip(a.failures, b.failures):
        np.testing.assert_array_equal(fa.context["point"], fb.context["point"])
        np.testing.assert_array_equal(fa.context["parameters"], fb.context["parameters"])


def test_random_parameter_driver_samples_in_unit_interval():
    """Tests that parameters are drawn from [-1, 1] by default."""
    model = RecordingTanh(2, 2)
    check_weighted_parameter_derivative_random(model, n_trials=50, rng=5)
    # the finite-difference sweep perturbs each draw by at most the estimation step
    drawn = np.vstack(model.seen[:-1])
    assert np.all(np.abs(drawn) <= 1.0 + 1e-4)
    assert np.max(np.abs(drawn)) > 0.5


def test_random_input_driver_holds_parameters_fixed():
    """Tests that the input driver uses theta = 1 / n_params by default."""
    model = RecordingTanh(2, 3)
    report = check_weighted_input_derivative_random(model, n_trials=10, rng=7)
    assert report.passed
    n = model.number_of_parameters()
    trial_parameters = [p for p in model.seen if np.allclose(p, 1.0 / n)]
    assert len(trial_parameters) >= 10
    np.testing.assert_array_equal(model.get_parameters(), np.zeros(n))


def test_random_input_driver_accepts_custom_sampling(tanh_model):
    """Tests that sampling can be overridden per quantity."""
    report = check_weighted_input_derivative_random(
        tanh_model,
        n_trials=10,
        rng=1,
        parameter_sampling=SamplingConfig(half_width=0.5),
        point_sampling=SamplingConfig(half_width=2.0),
    )
    assert report.passed


def test_random_input_driver_detects_wrong_derivative():
    """Tests that the randomized input driver fails a broken model."""
    model = WrongInputDerivative(3, 2)
    report = check_weighted_input_derivative_random(model, n_trials=5, rng=2)
    assert report.status is CheckStatus.FAILED


def test_random_drivers_report_unsupported_without_comparisons():
    """Tests that missing capabilities short-circuit with UNSUPPORTED."""
    model = NoDerivatives(2)
    p = check_weighted_parameter_derivative_random(model, n_trials=3, rng=0)
    i = check_weighted_input_derivative_random(model, n_trials=3, rng=0)
    for report in (p, i):
        assert report.status is CheckStatus.UNSUPPORTED
        assert report.n_comparisons == 0
        assert report.unsupported


def test_random_drivers_validate_trial_count(tanh_model):
    """Tests that non-positive trial counts are rejected."""
    with pytest.raises(ValueError, match="n_trials"):
        check_weighted_parameter_derivative_random(tanh_model, n_trials=0)
    with pytest.raises(TypeError, match="n_trials"):
        check_weighted_input_derivative_random(tanh_model, n_trials=2.5)


def test_random_driver_records_into_given_report(tanh_model):
    """Tests that an existing report is extended, not replaced."""
    report = CheckReport("shared")
    out = check_weighted_parameter_derivative_random(tanh_model, 2, rng=0, report=report)
    out = check_weighted_input_derivative_random(tanh_model, 2, rng=0, report=out)
    assert out is report
    assert report.n_comparisons == 2 * 2 + 2


def test_derivative_tables_compare_rows():
    """Tests the row-wise table comparison."""
    a = np.array([[1.0, 0.0], [0.0, 3.0]])
    assert check_derivative_tables(a, a + 1e-9).passed
    report = check_derivative_tables(a, np.array([[1.0, 0.0], [0.0, 2.0]]))
    assert [f.label for f in report.failures] == ["table row 1"]
    with pytest.raises(ValueError, match="number of table rows"):
        check_derivative_tables(a, a[:1])


def test_single_point_checks_report_unsupported():
    """Tests that single-point checks skip models without the derivative."""
    model = NoDerivatives(2)
    p = check_weighted_parameter_derivative(model, [1.0, 3.0], [1.0, 1.0])
    i = check_weighted_input_derivative(model, [1.0, 3.0], [1.0, 1.0])
    for report in (p, i):
        assert report.status is CheckStatus.UNSUPPORTED
        assert report.n_comparisons == 0
        assert len(report.unsupported) == 1


def test_trial_count_is_validated_before_capabilities():
    """Tests that bad trial counts raise even for unsupported models."""
    model = NoDerivatives(2)
    with pytest.raises(ValueError, match="n_trials"):
        check_weighted_parameter_derivative_random(model, n_trials=0)
    with pytest.raises(TypeError, match="n_trials"):
        check_weighted_input_derivative_random(model, n_trials=2.5)
