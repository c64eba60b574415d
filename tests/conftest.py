"""
Shared pytest fixtures for Perennial tests.

Fixture Organization
--------------------
- **isolated_env**: Clean environment and working directory (autouse)
- **api_server**: In-memory fake of the REST API behind httpx.MockTransport
- **patch_client**: Routes CLI-created clients to the fake server
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

from perennial.api.client import PerennialClient
from perennial.cli.console import set_verbose_mode
from perennial.core.logging import configure_logging


ENV_VARS = (
    "PERENNIAL_API_BASE_URL",
    "API_BASE_URL",
    "VITE_API_BASE_URL",
    "PERENNIAL_PROFILE_ID",
    "PERENNIAL_LOG_LEVEL",
    "PERENNIAL_TIMEOUT",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test in an empty directory with no Perennial env vars.

    HOME is redirected so ~/.perennial/config.yaml is never picked up.
    Logging and verbose mode are reset afterwards.
    """
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    configure_logging()
    set_verbose_mode(False)


class FakeAPI:
    """Minimal in-memory implementation of the endpoints the client uses."""

    def __init__(self) -> None:
        self.profiles: List[Dict[str, Any]] = []
        self.queue: Dict[str, List[Dict[str, Any]]] = {}
        self.review_response: Any = {}
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[httpx.Response] = None

    def add_profile(
        self, profile_id: str, name: str = "", **srs_config: Any
    ) -> Dict[str, Any]:
        profile = {"id": profile_id, "name": name or profile_id, "srs_config": srs_config}
        self.profiles.append(profile)
        return profile

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return self.fail_with

        path = request.url.path
        body = json.loads(request.content) if request.content else None

        if path == "/profiles" and request.method == "GET":
            return httpx.Response(200, json=self.profiles)
        if path == "/profiles" and request.method == "POST":
            created = self.add_profile(f"p{len(self.profiles) + 1}", body["name"])
            return httpx.Response(201, json=created)
        if path.startswith("/profiles/") and path.endswith("/srs"):
            profile_id = path.split("/")[2]
            for profile in self.profiles:
                if profile["id"] == profile_id:
                    profile["srs_config"] = dict(body)
                    return httpx.Response(200, json=profile)
            return httpx.Response(404, text="profile not found")
        if path == "/review/queue":
            profile_id = request.url.params.get("profile_id", "")
            return httpx.Response(200, json=self.queue.get(profile_id, []))
        if path.startswith("/facts/") and path.endswith("/review"):
            return httpx.Response(200, json=self.review_response)
        return httpx.Response(404, text="not found")

    def last_request(self, method: str, path: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path == path:
                return request
        raise AssertionError(f"no {method} {path} request was made")


@pytest.fixture
def api_server() -> FakeAPI:
    """Fake API with no profiles."""
    return FakeAPI()


@pytest.fixture
def client(api_server: FakeAPI):
    """PerennialClient wired to the fake API."""
    transport = httpx.MockTransport(api_server.handler)
    with PerennialClient(base_url="http://api.test", transport=transport) as c:
        yield c


@pytest.fixture
def patch_client(api_server: FakeAPI, monkeypatch: pytest.MonkeyPatch) -> FakeAPI:
    """Make CLI commands talk to the fake API."""
    transport = httpx.MockTransport(api_server.handler)

    def fake_open_client(state: Any) -> PerennialClient:
        return PerennialClient(base_url="http://api.test", transport=transport)

    for module in ("perennial.cli.srs", "perennial.cli.profiles", "perennial.cli.review"):
        monkeypatch.setattr(f"{module}.open_client", fake_open_client)
    return api_server
