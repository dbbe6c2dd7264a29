"""Checks that batched evaluation matches evaluating elements one by one."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from derivcheck.checks.report import CheckReport
from derivcheck.config import DEFAULT_BATCH_TOLERANCE
from derivcheck.model import BatchModel
from derivcheck.utils.batch import batch_size, get_batch_element
from derivcheck.utils.distance import ResultDistance, element_distance

__all__ = [
    "check_batch_eval",
    "check_deterministic_eval",
]


def check_batch_eval(
    model: BatchModel,
    sample_batch: Sequence[Any] | np.ndarray,
    *,
    tolerance: float = DEFAULT_BATCH_TOLERANCE,
    distance: ResultDistance | None = None,
    report: CheckReport | None = None,
) -> CheckReport:
    """Checks batched evaluation against per-element evaluation.

    The batch is evaluated twice: with ``model(batch)`` and with
    ``model.eval(batch, model.create_state())``. Every element ``i`` is then
    evaluated on its own with ``model(batch[i])`` and compared to entry ``i``
    of both batch results.

    Args:
        model: The model to check. Only ``__call__``, ``create_state`` and
            ``eval`` are used.
        sample_batch: The inputs. NumPy arrays are batched along axis 0.
        tolerance: Largest acceptable distance between two results.
        distance: Distance between two results; defaults to
            :func:`~derivcheck.utils.distance.element_distance`.
        report: Report to record into; a new one is created if None.

    Returns:
        The report.

    Raises:
        ValueError: If the batch is empty or a batch result does not have
            one entry per input.
    """
    report = report if report is not None else CheckReport("batch_eval")
    distance = distance or element_distance
    size = batch_size(sample_batch)
    if size == 0:
        raise ValueError(f"[{report.name}] sample batch must not be empty.")

    result_batch = model(sample_batch)
    state = model.create_state()
    result_batch_with_state = model.eval(sample_batch, state)

    report.require_equal(batch_size(result_batch), size, what="size of model(batch)")
    report.require_equal(
        batch_size(result_batch_with_state), size, what="size of model.eval(batch, state)"
    )

    for i in range(size):
        element = get_batch_element(sample_batch, i)
        result = model(element)
        direct = get_batch_element(result_batch, i)
        with_state = get_batch_element(result_batch_with_state, i)
        report.check_small(
            distance(result, direct),
            tolerance,
            label=f"model(batch)[{i}]",
            context={"index": i, "input": element, "actual": direct, "expected": result},
        )
        report.check_small(
            distance(result, with_state),
            tolerance,
            label=f"model.eval(batch, state)[{i}]",
            context={"index": i, "input": element, "actual": with_state, "expected": result},
        )
    return report


def check_deterministic_eval(
    model: BatchModel,
    inputs: Any,
    *,
    tolerance: float = 0.0,
    distance: ResultDistance | None = None,
    report: CheckReport | None = None,
) -> CheckReport:
    """Checks that evaluating the same input twice gives the same result.

    Args:
        model: The model to check.
        inputs: A single element or a batch, passed to ``model`` unchanged.
        tolerance: Largest acceptable distance; zero demands identical results.
        distance: Distance between two results; defaults to
            :func:`~derivcheck.utils.distance.element_distance`.
        report: Report to record into; a new one is created if None.

    Returns:
        The report.
    """
    report = report if report is not None else CheckReport("deterministic_eval")
    distance = distance or element_distance
    first = model(inputs)
    second = model(inputs)
    report.check_small(
        distance(first, second),
        tolerance,
        label="repeated evaluation",
        context={"input": inputs, "actual": second, "expected": first},
    )
    return report
