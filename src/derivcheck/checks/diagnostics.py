"""Human-readable formatting of check failures and reports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from derivcheck.checks.report import CheckFailure, CheckReport

__all__ = [
    "format_failure",
    "format_report",
]

_CONTEXT_ORDER = (
    "trial",
    "output_index",
    "parameters",
    "point",
    "coefficients",
    "actual",
    "expected",
)


def _preview(value: Any, max_rows: int) -> str:
    """Returns a compact string for a context value, truncating long arrays."""
    if isinstance(value, np.ndarray) and value.dtype.kind in "biufc":
        if value.ndim >= 1 and value.shape[0] > max_rows:
            head = np.array2string(value[:max_rows], separator=", ")
            return f"{head} ... ({value.shape[0]} rows)"
        return np.array2string(value, separator=", ")
    return str(value)


def format_failure(
    failure: CheckFailure,
    *,
    decimals: int = 4,
    max_rows: int = 12,
) -> str:
    """Formats one failure with its diagnostic context.

    Args:
        failure: The failure to format.
        decimals: Number of decimal places for floating-point numbers.
        max_rows: Maximum number of rows shown for arrays; longer arrays are truncated.

    Returns:
        A multi-line string.
    """
    with np.printoptions(precision=decimals, suppress=False):
        lines = [
            f"[{failure.check}] {failure.label}: "
            f"error={failure.error:.{decimals}e} > tolerance={failure.tolerance:.1e}"
        ]
        ctx = failure.context
        for k in _CONTEXT_ORDER:
            if k in ctx:
                lines.append(f"  {k}: {_preview(ctx[k], max_rows)}")
        for k, v in ctx.items():
            if k not in _CONTEXT_ORDER:
                lines.append(f"  {k}: {_preview(v, max_rows)}")
    return "\n".join(lines)


def format_report(
    report: CheckReport,
    *,
    decimals: int = 4,
    max_rows: int = 12,
    max_failures: int = 10,
) -> str:
    """Formats a report into a human-readable summary.

    Args:
        report: The report to format.
        decimals: Number of decimal places for floating-point numbers.
        max_rows: Maximum number of rows shown for arrays.
        max_failures: Maximum number of failures listed in full.

    Returns:
        A multi-line string.
    """
    lines = [
        f"=== {report.name}: {report.status.value} ===",
        f"comparisons: {report.n_comparisons}, failures: {len(report.failures)}",
    ]
    for reason in report.unsupported:
        lines.append(f"unsupported: {reason}")
    for failure in report.failures[:max_failures]:
        lines.append(format_failure(failure, decimals=decimals, max_rows=max_rows))
    hidden = len(report.failures) - max_failures
    if hidden > 0:
        lines.append(f"... {hidden} more failure(s) not shown")
    return "\n".join(lines)
