"""Finite difference estimates of model derivatives."""

from .central_difference import (
    CentralDifferenceEstimator,
    estimate_input_derivative,
    estimate_parameter_derivative,
)
from .core import central_difference

__all__ = [
    "CentralDifferenceEstimator",
    "central_difference",
    "estimate_input_derivative",
    "estimate_parameter_derivative",
]
