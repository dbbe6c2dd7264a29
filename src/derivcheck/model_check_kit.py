"""Provides the ModelCheckKit class.

A light wrapper around the checks in :mod:`derivcheck.checks` that binds a
model and a random number generator once.

Typical usage examples:

>>> import numpy as np
>>> from derivcheck.model_check_kit import ModelCheckKit
>>> from derivcheck.utils.sandbox import DenseTanhModel
>>>
>>> kit = ModelCheckKit(DenseTanhModel(3, 2), rng=1234)
>>> kit.parameter_derivative(n_trials=10).passed
True
>>> report = kit.run_all(n_trials=10)
>>> report.assert_passed()
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from derivcheck.checks import (
    CheckReport,
    check_batch_eval,
    check_weighted_derivatives_same,
    check_weighted_input_derivative_random,
    check_weighted_parameter_derivative_random,
)
from derivcheck.config import (
    DEFAULT_JOINT_BATCH_SIZE,
    DEFAULT_JOINT_N_TRIALS,
    DEFAULT_N_TRIALS,
    SamplingConfig,
)
from derivcheck.logger import derivcheck_logger
from derivcheck.model import DifferentiableModel
from derivcheck.sampling import resolve_rng


class ModelCheckKit:
    """Runs the derivative and batch consistency checks on one model.

    All randomized checks share the generator given at construction, so a
    fixed seed reproduces the whole sequence of checks.

    Attributes:
        model: The model under test.
        rng: The shared random number generator.
    """

    def __init__(
        self,
        model: DifferentiableModel,
        *,
        rng: np.random.Generator | int | None = None,
    ):
        """Initialise with the model and a generator or seed.

        Args:
            model: The model to check.
            rng: Generator, integer seed, or None for a fresh generator.
        """
        self.model = model
        self.rng = resolve_rng(rng)

    def parameter_derivative(self, n_trials: int = DEFAULT_N_TRIALS, **kwargs: Any) -> CheckReport:
        """Checks the weighted parameter derivative on random inputs."""
        return check_weighted_parameter_derivative_random(
            self.model, n_trials, rng=self.rng, **kwargs
        )

    def input_derivative(self, n_trials: int = DEFAULT_N_TRIALS, **kwargs: Any) -> CheckReport:
        """Checks the weighted input derivative on random inputs."""
        return check_weighted_input_derivative_random(
            self.model, n_trials, rng=self.rng, **kwargs
        )

    def weighted_derivatives_same(
        self, n_trials: int = DEFAULT_JOINT_N_TRIALS, **kwargs: Any
    ) -> CheckReport:
        """Checks the fused derivative call against the separate ones."""
        return check_weighted_derivatives_same(self.model, n_trials, rng=self.rng, **kwargs)

    def batch_eval(self, batch: Sequence[Any] | np.ndarray, **kwargs: Any) -> CheckReport:
        """Checks batched evaluation against per-element evaluation."""
        return check_batch_eval(self.model, batch, **kwargs)

    def sample_batch(
        self,
        size: int = DEFAULT_JOINT_BATCH_SIZE,
        sampling: SamplingConfig | None = None,
    ) -> np.ndarray:
        """Draws a batch of ``size`` input points, uniform on ``[-1, 1]`` by default."""
        sampling = sampling or SamplingConfig()
        return sampling.sample(self.rng, (int(size), self.model.input_size()))

    def run_all(
        self,
        *,
        n_trials: int | None = None,
        batch: Sequence[Any] | np.ndarray | None = None,
    ) -> CheckReport:
        """Runs every check and merges the results into one report.

        Checks the model does not support contribute an unsupported entry
        instead of comparisons.

        Args:
            n_trials: Number of trials for every randomized check. If None,
                each check uses its own default.
            batch: Inputs for the batch consistency check. If None, a batch
                is drawn with :meth:`sample_batch`.

        Returns:
            The merged report.
        """
        trials = {} if n_trials is None else {"n_trials": n_trials}
        report = CheckReport("model_check")
        report.merge(self.parameter_derivative(**trials))
        report.merge(self.input_derivative(**trials))
        report.merge(self.weighted_derivatives_same(**trials))
        report.merge(self.batch_eval(self.sample_batch() if batch is None else batch))
        derivcheck_logger.info(
            "[%s] %s: %d failures in %d comparisons.",
            report.name,
            report.status.value,
            len(report.failures),
            report.n_comparisons,
        )
        return report
