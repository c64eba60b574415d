"""Scheduling configuration owned by a profile.

Mirrors the ``srs_config`` object the API stores per profile and accepts on
``PATCH /profiles/{id}/srs``."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from perennial.core.exceptions import ConfigValidationError

MIN_EASE: float = 1.3
MAX_EASE: float = 4.0
DEFAULT_EASE: float = 2.5

MIN_INTERVAL_MODIFIER: float = 0.5
MAX_INTERVAL_MODIFIER: float = 2.0
DEFAULT_INTERVAL_MODIFIER: float = 1.0

DEFAULT_BASE_INTERVAL_DAYS: int = 1


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class SchedulingConfig:
    """Per-profile spaced repetition settings.

    Attributes:
        base_interval_days: Starting interval in days (positive; may be
            fractional, clamped() rounds it to whole days)
        ease_multiplier: Growth factor after a successful recall
        interval_modifier: Global scale applied to every computed interval
    """

    base_interval_days: float = DEFAULT_BASE_INTERVAL_DAYS
    ease_multiplier: float = DEFAULT_EASE
    interval_modifier: float = DEFAULT_INTERVAL_MODIFIER

    def validate(self) -> "SchedulingConfig":
        """Check that every value is a finite positive number.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigValidationError: On the first invalid field
        """
        for name in ("base_interval_days", "ease_multiplier", "interval_modifier"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigValidationError(
                    f"{name} must be a number, got {value!r}", field=name, value=value
                )
            if not math.isfinite(value) or value <= 0:
                raise ConfigValidationError(
                    f"{name} must be a positive number, got {value!r}",
                    field=name,
                    value=value,
                )
        if self.ease_multiplier < MIN_EASE:
            raise ConfigValidationError(
                f"ease_multiplier must be at least {MIN_EASE}, got {self.ease_multiplier}",
                field="ease_multiplier",
                value=self.ease_multiplier,
            )
        return self

    def clamped(self) -> "SchedulingConfig":
        """Return a copy pulled into the practical ranges.

        Ease is clamped to [1.3, 4.0], the modifier to [0.5, 2.0], and the
        base interval is raised to at least one whole day.
        """
        return replace(
            self,
            base_interval_days=max(1, math.floor(self.base_interval_days + 0.5)),
            ease_multiplier=_clamp(self.ease_multiplier, MIN_EASE, MAX_EASE),
            interval_modifier=_clamp(
                self.interval_modifier, MIN_INTERVAL_MODIFIER, MAX_INTERVAL_MODIFIER
            ),
        )

    def with_changes(
        self,
        base_interval_days: Optional[float] = None,
        ease_multiplier: Optional[float] = None,
        interval_modifier: Optional[float] = None,
    ) -> "SchedulingConfig":
        """Return a copy with the given fields replaced; None keeps the old value."""
        changes: Dict[str, Any] = {}
        if base_interval_days is not None:
            changes["base_interval_days"] = base_interval_days
        if ease_multiplier is not None:
            changes["ease_multiplier"] = ease_multiplier
        if interval_modifier is not None:
            changes["interval_modifier"] = interval_modifier
        return replace(self, **changes)

    def to_payload(self) -> Dict[str, Any]:
        """Body for ``PATCH /profiles/{id}/srs``."""
        return {
            "base_interval_days": self.base_interval_days,
            "ease_multiplier": self.ease_multiplier,
            "interval_modifier": self.interval_modifier,
        }

    @classmethod
    def from_payload(cls, data: Optional[Mapping[str, Any]]) -> "SchedulingConfig":
        """Build from an API ``srs_config`` object; missing or null keys use defaults."""
        data = data or {}

        def pick(key: str, default: Any) -> Any:
            value = data.get(key)
            return default if value is None else value

        return cls(
            base_interval_days=pick("base_interval_days", DEFAULT_BASE_INTERVAL_DAYS),
            ease_multiplier=pick("ease_multiplier", DEFAULT_EASE),
            interval_modifier=pick("interval_modifier", DEFAULT_INTERVAL_MODIFIER),
        )
