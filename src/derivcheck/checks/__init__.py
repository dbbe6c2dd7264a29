"""Derivative and evaluation consistency checks for models."""

from .batch_eval import check_batch_eval, check_deterministic_eval
from .joint import check_weighted_derivatives_same
from .report import CheckFailure, CheckReport, CheckStatus
from .weighted import (
    check_derivative_tables,
    check_weighted_input_derivative,
    check_weighted_input_derivative_random,
    check_weighted_parameter_derivative,
    check_weighted_parameter_derivative_random,
)

__all__ = [
    "CheckFailure",
    "CheckReport",
    "CheckStatus",
    "check_batch_eval",
    "check_deterministic_eval",
    "check_derivative_tables",
    "check_weighted_derivatives_same",
    "check_weighted_input_derivative",
    "check_weighted_input_derivative_random",
    "check_weighted_parameter_derivative",
    "check_weighted_parameter_derivative_random",
]
