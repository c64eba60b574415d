"""Tests for the REST client.

Uses httpx.MockTransport through the api_server fixture; no network.
"""

import json

import httpx
import pytest

from perennial.api.client import (
    DEFAULT_API_BASE,
    PerennialClient,
    api_base,
    select_profile,
)
from perennial.api.models import Profile
from perennial.core.exceptions import (
    APIError,
    APITimeoutError,
    ConfigValidationError,
    ConnectionError,
)
from perennial.srs.models import SchedulingConfig
from perennial.srs.projector import Rating


class TestApiBase:
    def test_default(self) -> None:
        assert api_base() == DEFAULT_API_BASE

    def test_env_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VITE_API_BASE_URL", "http://vite:1")
        assert api_base() == "http://vite:1"
        monkeypatch.setenv("API_BASE_URL", "http://plain:2/")
        assert api_base() == "http://plain:2"
        monkeypatch.setenv("PERENNIAL_API_BASE_URL", "http://own:3")
        assert api_base() == "http://own:3"


class TestSelectProfile:
    def _profiles(self):
        return [Profile(id="a", name="A"), Profile(id="b", name="B")]

    def test_preferred_wins(self) -> None:
        assert select_profile(self._profiles(), "b").id == "b"

    def test_unknown_preferred_falls_back_to_first(self) -> None:
        assert select_profile(self._profiles(), "zzz").id == "a"

    def test_empty(self) -> None:
        assert select_profile([], "a") is None


class TestProfiles:
    def test_list_profiles(self, client, api_server) -> None:
        api_server.add_profile("p1", "Main", ease_multiplier=2.8)
        profiles = client.list_profiles()
        assert [p.id for p in profiles] == ["p1"]
        assert profiles[0].scheduling == SchedulingConfig(1, 2.8, 1.0)

    def test_ensure_profiles_bootstraps_default(self, client, api_server) -> None:
        profiles = client.ensure_profiles()
        assert len(profiles) == 1
        assert profiles[0].name == "My Profile"
        body = json.loads(api_server.last_request("POST", "/profiles").content)
        assert body == {"name": "My Profile"}

    def test_ensure_profiles_does_not_create_when_present(
        self, client, api_server
    ) -> None:
        api_server.add_profile("p1")
        client.ensure_profiles()
        assert all(r.method == "GET" for r in api_server.requests)

    def test_create_profile(self, client, api_server) -> None:
        profile = client.create_profile("  Spanish ")
        assert profile.name == "Spanish"

    def test_update_profile_srs_sends_payload(self, client, api_server) -> None:
        api_server.add_profile("p1")
        saved = client.update_profile_srs("p1", SchedulingConfig(2, 2.7, 1.2))

        request = api_server.last_request("PATCH", "/profiles/p1/srs")
        assert json.loads(request.content) == {
            "base_interval_days": 2,
            "ease_multiplier": 2.7,
            "interval_modifier": 1.2,
        }
        assert saved.scheduling == SchedulingConfig(2, 2.7, 1.2)

    def test_update_profile_srs_validates_first(self, client, api_server) -> None:
        api_server.add_profile("p1")
        with pytest.raises(ConfigValidationError):
            client.update_profile_srs("p1", SchedulingConfig(ease_multiplier=1.0))
        assert api_server.requests == []


class TestReviews:
    def test_review_queue(self, client, api_server) -> None:
        api_server.queue["p1"] = [
            {"id": 7, "concept_name": "Cat", "key": "name", "value": "Tom"}
        ]
        items = client.review_queue("p1")
        assert items[0].id == "7"
        assert items[0].concept_name == "Cat"
        request = api_server.last_request("GET", "/review/queue")
        assert request.url.params["profile_id"] == "p1"

    def test_review_fact_posts_rating(self, client, api_server) -> None:
        api_server.review_response = {"interval_days": 3, "ease": 2.5}
        outcome = client.review_fact("f1", Rating.GOOD, "p1")

        body = json.loads(api_server.last_request("POST", "/facts/f1/review").content)
        assert body == {"rating": "good", "profile_id": "p1"}
        assert outcome.interval_days == 3
        assert outcome.ease == 2.5

    def test_review_fact_accepts_alias_fields(self, client, api_server) -> None:
        api_server.review_response = {"interval": 6, "ease_factor": 2.35, "id": "f1"}
        outcome = client.review_fact("f1", "hard", "p1")
        assert outcome.interval_days == 6
        assert outcome.ease == 2.35
        assert outcome.extras() == {"id": "f1"}

    def test_review_fact_empty_body(self, client, api_server) -> None:
        api_server.review_response = None
        outcome = client.review_fact("f1", "again", "p1")
        assert outcome.interval_days is None


class TestErrors:
    def test_error_status_uses_response_text(self, client, api_server) -> None:
        api_server.fail_with = httpx.Response(422, text="ease too low")
        with pytest.raises(APIError, match="ease too low") as exc_info:
            client.list_profiles()
        assert exc_info.value.status_code == 422
        assert exc_info.value.detail == "ease too low"

    def test_error_status_without_body(self, client, api_server) -> None:
        api_server.fail_with = httpx.Response(500)
        with pytest.raises(APIError, match="Request failed with 500"):
            client.list_profiles()

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with PerennialClient("http://api.test", transport=httpx.MockTransport(handler)) as c:
            with pytest.raises(APITimeoutError):
                c.list_profiles()

    def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with PerennialClient("http://api.test", transport=httpx.MockTransport(handler)) as c:
            with pytest.raises(ConnectionError, match="Could not reach"):
                c.list_profiles()

    def test_non_json_body(self, client, api_server) -> None:
        api_server.fail_with = httpx.Response(200, text="<html>")
        with pytest.raises(APIError, match="non-JSON"):
            client.list_profiles()
