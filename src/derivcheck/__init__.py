"""Provides all derivcheck methods."""

from importlib.metadata import PackageNotFoundError, version

from derivcheck.checks import (
    CheckReport,
    CheckStatus,
    check_batch_eval,
    check_deterministic_eval,
    check_weighted_derivatives_same,
    check_weighted_input_derivative,
    check_weighted_input_derivative_random,
    check_weighted_parameter_derivative,
    check_weighted_parameter_derivative_random,
)
from derivcheck.config import SamplingConfig
from derivcheck.finite.central_difference import (
    CentralDifferenceEstimator,
    estimate_input_derivative,
    estimate_parameter_derivative,
)
from derivcheck.model import parameters_restored
from derivcheck.model_check_kit import ModelCheckKit

try:
    __version__ = version("derivcheck")
except PackageNotFoundError:
    pass

ModelCheckKit.__module__ = "derivcheck"

__all__ = [
    "CentralDifferenceEstimator",
    "CheckReport",
    "CheckStatus",
    "ModelCheckKit",
    "SamplingConfig",
    "check_batch_eval",
    "check_deterministic_eval",
    "check_weighted_derivatives_same",
    "check_weighted_input_derivative",
    "check_weighted_input_derivative_random",
    "check_weighted_parameter_derivative",
    "check_weighted_parameter_derivative_random",
    "estimate_input_derivative",
    "estimate_parameter_derivative",
    "parameters_restored",
]
