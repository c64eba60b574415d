"""Spaced repetition scheduling preview.

- projector: interval projection for a rating script
- models: per-profile scheduling configuration
- agreement: numeric comparison of a projection with the server result
"""

from __future__ import annotations

from perennial.srs.projector import (
    DEFAULT_SCRIPT,
    Rating,
    StepResult,
    format_path,
    parse_rating,
    parse_script,
    project_config,
    project_path,
    project_step,
    project_trace,
    starting_ease,
    starting_interval,
)
from perennial.srs.models import (
    MAX_EASE,
    MAX_INTERVAL_MODIFIER,
    MIN_EASE,
    MIN_INTERVAL_MODIFIER,
    SchedulingConfig,
)
from perennial.srs.agreement import AgreementReport, check_agreement

__all__ = [
    # Projector
    "DEFAULT_SCRIPT",
    "Rating",
    "StepResult",
    "format_path",
    "parse_rating",
    "parse_script",
    "project_config",
    "project_path",
    "project_step",
    "project_trace",
    "starting_ease",
    "starting_interval",
    # Models
    "MAX_EASE",
    "MAX_INTERVAL_MODIFIER",
    "MIN_EASE",
    "MIN_INTERVAL_MODIFIER",
    "SchedulingConfig",
    # Agreement
    "AgreementReport",
    "check_agreement",
]
