"""Wire models for the Perennial REST API.

Only the fields this client reads are declared; anything else the server
sends is kept (``extra="allow"``) so responses round-trip unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from perennial.srs.models import SchedulingConfig


class SRSConfigPayload(BaseModel):
    """``srs_config`` object as stored on a profile."""

    model_config = ConfigDict(extra="allow")

    base_interval_days: Optional[float] = None
    ease_multiplier: Optional[float] = None
    interval_modifier: Optional[float] = None

    def to_config(self) -> SchedulingConfig:
        """Convert to a SchedulingConfig, filling missing values with defaults."""
        config = SchedulingConfig.from_payload(self.model_dump())
        base = config.base_interval_days
        if isinstance(base, float) and base.is_integer():
            config = config.with_changes(base_interval_days=int(base))
        return config


class Profile(BaseModel):
    """A learner profile with its own scheduling settings."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    srs_config: SRSConfigPayload = Field(default_factory=SRSConfigPayload)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @property
    def scheduling(self) -> SchedulingConfig:
        """Scheduling settings with defaults applied."""
        return self.srs_config.to_config()


class CreateProfileRequest(BaseModel):
    """Body for ``POST /profiles``."""

    name: str = Field(..., min_length=1)


class ReviewRequest(BaseModel):
    """Body for ``POST /facts/{id}/review``."""

    rating: str
    profile_id: str


class ReviewItem(BaseModel):
    """One due entry from ``GET /review/queue``."""

    model_config = ConfigDict(extra="allow")

    id: str
    concept_id: str = ""
    concept_name: str = ""
    collection_id: str = ""
    collection_name: str = ""
    key: str = ""
    value: str = ""
    input_type: str = ""
    next_review_at: Optional[str] = None

    @field_validator("id", "concept_id", "collection_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> str:
        return "" if value is None else str(value)


class ReviewOutcome(BaseModel):
    """Response of ``POST /facts/{id}/review``.

    The server owns this shape; the scheduling fields are optional and read
    under their common spellings.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    interval_days: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("interval_days", "interval"),
    )
    ease: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("ease", "ease_factor", "ease_multiplier"),
    )
    next_review_at: Optional[str] = None

    @classmethod
    def from_response(cls, data: Any) -> "ReviewOutcome":
        """Build from any JSON body; non-object bodies give an empty outcome."""
        if isinstance(data, dict):
            return cls.model_validate(data)
        return cls()

    def extras(self) -> Dict[str, Any]:
        """Fields the server sent beyond the ones declared here."""
        return dict(self.model_extra or {})
