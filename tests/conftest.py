"""Pytest configuration file with shared fixtures for the model checks."""

import numpy as np
import pytest

from derivcheck.utils.sandbox import DenseTanhModel, ElementwiseLinearModel, IdentityModel

__all__ = ["rng", "linear_model", "tanh_model", "identity_model"]


@pytest.fixture
def rng():
    """Seeded generator so randomized checks are reproducible."""
    return np.random.default_rng(20240611)


@pytest.fixture
def linear_model():
    """Elementwise linear model f(x) = theta * x with theta = [2, -1]."""
    return ElementwiseLinearModel(2, parameters=[2.0, -1.0])


@pytest.fixture
def tanh_model(rng):
    """Dense tanh layer with 3 inputs and 2 outputs and random parameters."""
    model = DenseTanhModel(3, 2)
    model.set_parameters(rng.uniform(-1.0, 1.0, model.number_of_parameters()))
    return model


@pytest.fixture
def identity_model():
    """One-dimensional identity model without parameters."""
    return IdentityModel(1)
