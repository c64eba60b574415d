"""Interval projector for the scheduling settings preview.

Predicts the review intervals a card would get if it were answered with a
scripted sequence of ratings, starting from a profile's scheduling config.
The update rule mirrors the one the API applies on
``POST /facts/{id}/review``; nothing here touches stored state.

All functions are pure and never raise for numeric input: missing or zero
ease falls back to 2.5, a missing or zero modifier falls back to 1, and
non-finite intermediates collapse to 0 days.

Example:
    >>> project_path(1, 2.5, 1.0)
    [1, 3, 10, 27, 94]
    >>> format_path([1, 3, 10, 27, 94])
    '1d -> 3d -> 10d -> 27d -> 94d'
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from perennial.core.exceptions import ValidationError
from perennial.srs.models import (
    DEFAULT_EASE,
    DEFAULT_INTERVAL_MODIFIER,
    MIN_EASE,
    SchedulingConfig,
)

AGAIN_EASE_PENALTY: float = 0.2
HARD_EASE_PENALTY: float = 0.15
EASY_EASE_BONUS: float = 0.15
HARD_INTERVAL_FACTOR: float = 1.2
EASY_INTERVAL_BONUS: float = 1.3

PATH_SEPARATOR = " -> "


class Rating(str, Enum):
    """Recall quality reported for one review."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    def __str__(self) -> str:
        return self.value


DEFAULT_SCRIPT: Tuple[Rating, ...] = (Rating.GOOD, Rating.EASY, Rating.GOOD, Rating.EASY)


@dataclass(frozen=True)
class StepResult:
    """Scheduling state after one simulated review."""

    interval_days: int
    ease: float


def _is_unset(value: Optional[float]) -> bool:
    """True for the values the preview treats as "not provided"."""
    if value is None or value == 0:
        return True
    return isinstance(value, float) and math.isnan(value)


def _finite_or_zero(value: Optional[float]) -> float:
    if value is None or not math.isfinite(value):
        return 0
    return value


def _ceil_days(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return math.ceil(value)


def round_half_up(value: float) -> int:
    """Round to the nearest whole day, with halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def project_step(
    current_interval_days: float,
    current_ease: Optional[float],
    rating: Union[Rating, str],
    base_interval_days: float,
    interval_modifier: Optional[float],
) -> StepResult:
    """Apply one rating to the running (interval, ease) state.

    Args:
        current_interval_days: Interval produced by the previous step.
        current_ease: Current ease; 2.5 when missing or zero.
        rating: Rating for this step.
        base_interval_days: Floor for the interval the rating is applied to.
        interval_modifier: Global interval scale; 1 when missing or zero.

    Returns:
        StepResult with the next interval (whole days) and ease.
    """
    rating = parse_rating(rating)
    effective = max(
        _finite_or_zero(current_interval_days), _finite_or_zero(base_interval_days), 0
    )
    ease = starting_ease(current_ease)
    modifier = effective_modifier(interval_modifier)

    if rating is Rating.AGAIN:
        return StepResult(0, max(MIN_EASE, ease - AGAIN_EASE_PENALTY))
    if rating is Rating.HARD:
        return StepResult(
            _ceil_days(effective * HARD_INTERVAL_FACTOR * modifier),
            max(MIN_EASE, ease - HARD_EASE_PENALTY),
        )
    if rating is Rating.GOOD:
        return StepResult(_ceil_days(effective * ease * modifier), ease)
    return StepResult(
        _ceil_days(effective * ease * EASY_INTERVAL_BONUS * modifier),
        max(MIN_EASE, ease + EASY_EASE_BONUS),
    )


def starting_interval(base_interval_days: Optional[float]) -> int:
    """First entry of a projected path: the base interval, at least one day."""
    base = _finite_or_zero(base_interval_days)
    return max(1, round_half_up(base))


def starting_ease(ease_multiplier: Optional[float]) -> float:
    """Ease the first step starts from; 2.5 when missing, zero or NaN."""
    return DEFAULT_EASE if _is_unset(ease_multiplier) else ease_multiplier


def effective_modifier(interval_modifier: Optional[float]) -> float:
    """Interval modifier actually applied; 1 when missing, zero or NaN."""
    return (
        DEFAULT_INTERVAL_MODIFIER if _is_unset(interval_modifier) else interval_modifier
    )


def project_trace(
    base_interval_days: Optional[float],
    ease_multiplier: Optional[float],
    interval_modifier: Optional[float],
    script: Iterable[Union[Rating, str]] = DEFAULT_SCRIPT,
) -> List[Tuple[Rating, StepResult]]:
    """Project every step of ``script`` and keep the full state per step.

    Same fold as project_path(), but returns (rating, StepResult) pairs so
    callers can show how ease evolves alongside the intervals.
    """
    base = _finite_or_zero(base_interval_days)
    floor = max(1, base)
    modifier = effective_modifier(interval_modifier)

    interval: float = starting_interval(base)
    ease = starting_ease(ease_multiplier)

    trace: List[Tuple[Rating, StepResult]] = []
    for raw in script:
        rating = parse_rating(raw)
        step = project_step(interval, ease, rating, floor, modifier)
        interval, ease = step.interval_days, step.ease
        trace.append((rating, StepResult(max(0, step.interval_days), step.ease)))
    return trace


def project_path(
    base_interval_days: Optional[float],
    ease_multiplier: Optional[float],
    interval_modifier: Optional[float],
    script: Iterable[Union[Rating, str]] = DEFAULT_SCRIPT,
) -> List[int]:
    """Project the review intervals produced by a rating script.

    Args:
        base_interval_days: Profile's base interval; treated as at least 1.
        ease_multiplier: Starting ease; 2.5 when missing or zero.
        interval_modifier: Global interval scale; 1 when missing or zero.
        script: Ratings to apply in order (default Good, Easy, Good, Easy).

    Returns:
        The starting interval followed by one interval per rating.
        An empty script returns just the starting interval.
    """
    path = [starting_interval(base_interval_days)]
    for _, step in project_trace(
        base_interval_days, ease_multiplier, interval_modifier, script
    ):
        path.append(step.interval_days)
    return path


def project_config(
    config: SchedulingConfig,
    script: Iterable[Union[Rating, str]] = DEFAULT_SCRIPT,
) -> List[int]:
    """project_path() for a SchedulingConfig."""
    return project_path(
        config.base_interval_days,
        config.ease_multiplier,
        config.interval_modifier,
        script,
    )


def format_path(path: Sequence[int]) -> str:
    """Render a path as ``"1d -> 3d -> 10d"``."""
    return PATH_SEPARATOR.join(f"{days}d" for days in path)


def parse_rating(value: Union[Rating, str]) -> Rating:
    """Convert a rating name (any case) to a Rating.

    Raises:
        ValidationError: If the name is not again, hard, good or easy.
    """
    if isinstance(value, Rating):
        return value
    try:
        return Rating(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(r.value for r in Rating)
        raise ValidationError(
            f"Unknown rating {value!r}; expected one of: {choices}"
        ) from None


def parse_script(text: str) -> Tuple[Rating, ...]:
    """Parse ``"good,easy good"`` into a rating script.

    Ratings may be separated by commas and/or whitespace. A blank string
    gives an empty script.
    """
    tokens = [token for token in re.split(r"[,\s]+", text or "") if token]
    return tuple(parse_rating(token) for token in tokens)
