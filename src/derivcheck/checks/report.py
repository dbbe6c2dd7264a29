"""Collects the outcome of a check.

Two severities are distinguished:

* Structural problems (mismatched sizes, wrong derivative lengths) make the
  check meaningless. :meth:`CheckReport.require_equal` raises a
  ``ValueError`` and aborts the check.
* Numerical disagreements are recorded by :meth:`CheckReport.check_small`
  and the check continues, so a single run can surface every discrepancy.

A model that lacks the capability a check needs gets an explicit
``UNSUPPORTED`` outcome instead of a comparison.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from derivcheck.checks.diagnostics import format_failure, format_report
from derivcheck.logger import derivcheck_logger

__all__ = [
    "CheckFailure",
    "CheckReport",
    "CheckStatus",
]


class CheckStatus(Enum):
    """Outcome of a check."""

    PASSED = "passed"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


@dataclass
class CheckFailure:
    """One comparison that exceeded its tolerance.

    Attributes:
        check: Name of the report the failure was recorded in.
        label: What was compared.
        error: The measured error.
        tolerance: The tolerance it was compared against.
        context: Inputs, expected and actual values useful for diagnosis.
    """

    check: str
    label: str
    error: float
    tolerance: float
    context: dict[str, Any] = field(default_factory=dict)


class CheckReport:
    """Accumulates comparisons, failures and unsupported outcomes of checks.

    Example:
        >>> report = CheckReport("demo")
        >>> report.check_small(1e-12, 1e-10, label="difference")
        True
        >>> report.status
        <CheckStatus.PASSED: 'passed'>
    """

    def __init__(self, name: str):
        self.name = name
        self.n_comparisons = 0
        self.failures: list[CheckFailure] = []
        self.unsupported: list[str] = []

    def __repr__(self) -> str:
        return (
            f"CheckReport(name={self.name!r}, status={self.status.value}, "
            f"comparisons={self.n_comparisons}, failures={len(self.failures)})"
        )

    @property
    def status(self) -> CheckStatus:
        """FAILED if any comparison failed, UNSUPPORTED if nothing could be compared."""
        if self.failures:
            return CheckStatus.FAILED
        if self.unsupported and self.n_comparisons == 0:
            return CheckStatus.UNSUPPORTED
        return CheckStatus.PASSED

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASSED

    def check_small(
        self,
        error: float,
        tolerance: float,
        *,
        label: str,
        context: dict[str, Any] | None = None,
    ) -> bool:
        """Records whether ``|error| <= tolerance``.

        Non-finite errors always fail. A failure is stored together with
        ``context`` and logged as a warning; it does not stop the check.

        Args:
            error: The measured error.
            tolerance: The largest acceptable error.
            label: Short description of what was compared.
            context: Optional diagnostic values (inputs, expected, actual).

        Returns:
            True if the comparison passed.
        """
        self.n_comparisons += 1
        err = float(error)
        if np.isfinite(err) and abs(err) <= tolerance:
            return True

        failure = CheckFailure(
            check=self.name,
            label=label,
            error=err,
            tolerance=float(tolerance),
            context=dict(context or {}),
        )
        self.failures.append(failure)
        derivcheck_logger.warning("%s", format_failure(failure))
        return False

    def require_equal(self, actual: Any, expected: Any, *, what: str) -> None:
        """Aborts the check unless ``actual == expected``.

        Raises:
            ValueError: If the values differ.
        """
        if actual != expected:
            raise ValueError(f"[{self.name}] {what}: expected {expected}, got {actual}.")

    def mark_unsupported(self, reason: str) -> None:
        """Records that the model cannot be checked and why."""
        self.unsupported.append(reason)
        derivcheck_logger.warning("[%s] skipped: %s", self.name, reason)

    def merge(self, other: CheckReport) -> CheckReport:
        """Adds the comparisons, failures and unsupported reasons of ``other``."""
        self.n_comparisons += other.n_comparisons
        self.failures.extend(other.failures)
        self.unsupported.extend(other.unsupported)
        return self

    def format(self, *, decimals: int = 4, max_rows: int = 12) -> str:
        """Returns a human-readable summary of the report."""
        return format_report(self, decimals=decimals, max_rows=max_rows)

    def assert_passed(self, *, allow_unsupported: bool = True) -> None:
        """Raises ``AssertionError`` with the formatted summary if the check failed.

        Args:
            allow_unsupported: If False, an UNSUPPORTED outcome also raises.
        """
        status = self.status
        if status is CheckStatus.FAILED or (
            status is CheckStatus.UNSUPPORTED and not allow_unsupported
        ):
            raise AssertionError(self.format())
