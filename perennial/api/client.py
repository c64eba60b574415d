"""
Perennial REST API client.

Synchronous HTTP client for the endpoints the scheduling preview works
against: profiles, their SRS settings, the review queue and fact reviews.

API Endpoints:
- GET   /profiles                 - List profiles
- POST  /profiles                 - Create a profile
- PATCH /profiles/{id}/srs        - Update scheduling settings
- GET   /review/queue?profile_id= - Due review items
- POST  /facts/{id}/review        - Record a rating

Requests are not retried. Non-2xx responses raise APIError carrying the
response text.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from perennial.api.models import (
    CreateProfileRequest,
    Profile,
    ReviewItem,
    ReviewOutcome,
    ReviewRequest,
)
from perennial.core.config import (
    DEFAULT_API_BASE,
    DEFAULT_TIMEOUT_SECONDS,
    api_base,
)
from perennial.core.exceptions import (
    APIError,
    APITimeoutError,
    ConnectionError,
)
from perennial.core.logging import get_logger
from perennial.srs.models import SchedulingConfig
from perennial.srs.projector import Rating, parse_rating

logger = get_logger(__name__)

DEFAULT_PROFILE_NAME = "My Profile"

__all__ = [
    "DEFAULT_API_BASE",
    "DEFAULT_PROFILE_NAME",
    "DEFAULT_TIMEOUT_SECONDS",
    "PerennialClient",
    "api_base",
    "select_profile",
]


def select_profile(
    profiles: Sequence[Profile], preferred_id: Optional[str] = None
) -> Optional[Profile]:
    """Pick the active profile.

    The preferred id wins when it is in the list; otherwise the first
    profile is used. Returns None for an empty list.
    """
    if preferred_id:
        for profile in profiles:
            if profile.id == preferred_id:
                return profile
    return profiles[0] if profiles else None


class PerennialClient:
    """
    HTTP client for the Perennial API.

    Example:
        with PerennialClient() as client:
            profile = select_profile(client.ensure_profiles())
            client.update_profile_srs(profile.id, SchedulingConfig(ease_multiplier=2.8))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API base URL; resolved with api_base() when omitted
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = (base_url or api_base()).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "PerennialClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    # === Transport ===

    def fetch_json(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            json: Optional JSON body
            params: Optional query parameters

        Returns:
            Decoded JSON body (None for an empty body)

        Raises:
            APIError: Non-2xx status
            APITimeoutError: Request timed out
            ConnectionError: Server unreachable
        """
        logger.debug("API request", method=method, path=path)
        try:
            response = self._http.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            raise APITimeoutError(
                f"{method} {path} timed out after {self.timeout_seconds}s"
            ) from e
        except httpx.TransportError as e:
            raise ConnectionError(
                f"Could not reach the API at {self.base_url}: {e}"
            ) from e

        if response.is_error:
            detail = response.text.strip()
            logger.debug(
                "API request failed", path=path, status=response.status_code
            )
            raise APIError(
                detail or f"Request failed with {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
                detail=response.text,
            ) from e

    # === Profiles ===

    def list_profiles(self) -> List[Profile]:
        """Return every profile."""
        data = self.fetch_json("GET", "/profiles")
        if not isinstance(data, list):
            return []
        return [Profile.model_validate(item) for item in data]

    def create_profile(self, name: str) -> Profile:
        """Create a profile with default scheduling settings."""
        body = CreateProfileRequest(name=name.strip())
        data = self.fetch_json("POST", "/profiles", json=body.model_dump())
        profile = Profile.model_validate(data)
        logger.info("Created profile", profile_id=profile.id, name=profile.name)
        return profile

    def ensure_profiles(self) -> List[Profile]:
        """List profiles, creating a default one when none exist."""
        profiles = self.list_profiles()
        if profiles:
            return profiles
        logger.info("No profiles found, creating default", name=DEFAULT_PROFILE_NAME)
        return [self.create_profile(DEFAULT_PROFILE_NAME)]

    def update_profile_srs(
        self, profile_id: str, config: SchedulingConfig
    ) -> Profile:
        """Save scheduling settings for a profile.

        The config is validated before anything is sent.
        """
        config.validate()
        data = self.fetch_json(
            "PATCH", f"/profiles/{profile_id}/srs", json=config.to_payload()
        )
        profile = Profile.model_validate(data)
        logger.info(
            "Updated scheduling settings",
            profile_id=profile.id,
            **config.to_payload(),
        )
        return profile

    # === Reviews ===

    def review_queue(self, profile_id: str) -> List[ReviewItem]:
        """Return the items due for review for a profile."""
        data = self.fetch_json(
            "GET", "/review/queue", params={"profile_id": profile_id}
        )
        if not isinstance(data, list):
            return []
        return [ReviewItem.model_validate(item) for item in data]

    def review_fact(
        self, fact_id: str, rating: Union[Rating, str], profile_id: str
    ) -> ReviewOutcome:
        """Record a rating for a fact and return the server's outcome."""
        body = ReviewRequest(rating=parse_rating(rating).value, profile_id=profile_id)
        data = self.fetch_json(
            "POST", f"/facts/{fact_id}/review", json=body.model_dump()
        )
        logger.info(
            "Recorded review", fact_id=fact_id, rating=body.rating, profile_id=profile_id
        )
        return ReviewOutcome.from_response(data)
