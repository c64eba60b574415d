"""Client for the Perennial REST API."""

from __future__ import annotations

from perennial.api.client import PerennialClient, api_base, select_profile
from perennial.api.models import (
    Profile,
    ReviewItem,
    ReviewOutcome,
    SRSConfigPayload,
)

__all__ = [
    "PerennialClient",
    "api_base",
    "select_profile",
    "Profile",
    "ReviewItem",
    "ReviewOutcome",
    "SRSConfigPayload",
]
