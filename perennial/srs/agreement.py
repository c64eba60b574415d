"""Compare a local projection with the scheduling state the API reports.

The preview and the server's review rule are separate implementations, so
agreement is checked numerically instead of assumed. A value the server did
not report is "unknown" and never counts as a mismatch.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from perennial.core.logging import get_logger
from perennial.srs.projector import StepResult

logger = get_logger(__name__)

DEFAULT_EASE_TOLERANCE: float = 1e-6


@dataclass(frozen=True)
class AgreementReport:
    """Outcome of comparing one projected step with the server result.

    Attributes:
        projected: What the local projector predicted
        observed_interval_days: Interval reported by the server, if any
        observed_ease: Ease reported by the server, if any
        interval_matches: None when the server did not report an interval
        ease_matches: None when the server did not report an ease
    """

    projected: StepResult
    observed_interval_days: Optional[int]
    observed_ease: Optional[float]
    interval_matches: Optional[bool]
    ease_matches: Optional[bool]

    @property
    def agrees(self) -> bool:
        """True unless a reported value differs from the projection."""
        return self.interval_matches is not False and self.ease_matches is not False

    @property
    def checked(self) -> bool:
        """True when the server reported at least one comparable value."""
        return self.interval_matches is not None or self.ease_matches is not None

    def describe(self) -> str:
        """One-line human readable summary."""
        if not self.checked:
            return "server response has no scheduling fields to compare"
        parts = []
        if self.interval_matches is not None:
            mark = "ok" if self.interval_matches else "MISMATCH"
            parts.append(
                f"interval {self.projected.interval_days}d vs "
                f"{self.observed_interval_days}d ({mark})"
            )
        if self.ease_matches is not None:
            mark = "ok" if self.ease_matches else "MISMATCH"
            parts.append(
                f"ease {self.projected.ease:.2f} vs {self.observed_ease:.2f} ({mark})"
            )
        return "; ".join(parts)


def check_agreement(
    projected: StepResult,
    observed_interval_days: Optional[float],
    observed_ease: Optional[float],
    ease_tolerance: float = DEFAULT_EASE_TOLERANCE,
) -> AgreementReport:
    """Compare a projected step against server-reported values.

    Args:
        projected: Local projection for the same rating and starting state.
        observed_interval_days: Interval the server stored, or None.
        observed_ease: Ease the server stored, or None.
        ease_tolerance: Absolute tolerance for the ease comparison.

    Returns:
        AgreementReport; a divergence is also logged as a warning.
    """
    interval_matches: Optional[bool] = None
    if observed_interval_days is not None:
        interval_matches = projected.interval_days == observed_interval_days

    ease_matches: Optional[bool] = None
    if observed_ease is not None:
        ease_matches = math.isclose(
            projected.ease, observed_ease, rel_tol=0.0, abs_tol=ease_tolerance
        )

    report = AgreementReport(
        projected=projected,
        observed_interval_days=observed_interval_days,
        observed_ease=observed_ease,
        interval_matches=interval_matches,
        ease_matches=ease_matches,
    )
    if not report.agrees:
        logger.warning("Projection disagrees with server", detail=report.describe())
    return report
