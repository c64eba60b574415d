"""Tests for `perennial srs show` and `perennial srs set`."""

from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from perennial.cli.main import app


runner = CliRunner()


@pytest.fixture
def server(patch_client):
    patch_client.add_profile(
        "p1", "Main", base_interval_days=1, ease_multiplier=2.5, interval_modifier=1.0
    )
    patch_client.add_profile("p2", "Spanish", ease_multiplier=2.8)
    return patch_client


def patch_requests(server):
    return [r for r in server.requests if r.method == "PATCH"]


class TestShow:
    def test_shows_first_profile(self, server) -> None:
        result = runner.invoke(app, ["srs", "show"])
        assert result.exit_code == 0
        assert "Main (p1)" in result.output
        assert "Ease: 2.50" in result.output
        assert "Path: 1d -> 3d -> 10d -> 27d -> 94d" in result.output

    def test_explicit_profile(self, server) -> None:
        result = runner.invoke(app, ["srs", "show", "--profile", "p2"])
        assert result.exit_code == 0
        assert "Spanish (p2)" in result.output
        assert "Path: 1d -> 3d -> 11d -> 33d -> 127d" in result.output

    def test_configured_profile(self, server, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERENNIAL_PROFILE_ID", "p2")
        result = runner.invoke(app, ["srs", "show"])
        assert "Spanish (p2)" in result.output

    def test_unknown_profile(self, server) -> None:
        result = runner.invoke(app, ["srs", "show", "-p", "zzz"])
        assert result.exit_code == 1
        assert "PN-CFG-001" in result.output
        assert "not found" in result.output

    def test_creates_default_profile(self, patch_client) -> None:
        result = runner.invoke(app, ["srs", "show"])
        assert result.exit_code == 0
        assert "My Profile" in result.output
        patch_client.last_request("POST", "/profiles")


class TestSet:
    def test_saves_with_yes(self, server) -> None:
        result = runner.invoke(app, ["srs", "set", "--ease", "2.8", "--yes"])
        assert result.exit_code == 0
        assert "Before: 1d -> 3d -> 10d -> 27d -> 94d" in result.output
        assert "After:  1d -> 3d -> 11d -> 33d -> 127d" in result.output
        assert "Saved settings for Main" in result.output

        body = json.loads(server.last_request("PATCH", "/profiles/p1/srs").content)
        assert body == {
            "base_interval_days": 1,
            "ease_multiplier": 2.8,
            "interval_modifier": 1.0,
        }

    def test_dry_run_does_not_save(self, server) -> None:
        result = runner.invoke(app, ["srs", "set", "--modifier", "1.5", "--dry-run"])
        assert result.exit_code == 0
        assert "--dry-run" in result.output
        assert patch_requests(server) == []

    def test_clamps_out_of_range_values(self, server) -> None:
        result = runner.invoke(app, ["srs", "set", "--ease", "9", "-y"])
        assert result.exit_code == 0
        assert "clamped" in result.output
        body = json.loads(server.last_request("PATCH", "/profiles/p1/srs").content)
        assert body["ease_multiplier"] == 4.0

    def test_no_changes(self, server) -> None:
        result = runner.invoke(app, ["srs", "set", "--ease", "2.5", "--yes"])
        assert result.exit_code == 0
        assert "No changes to save." in result.output
        assert patch_requests(server) == []

    def test_confirm_declined(self, server) -> None:
        result = runner.invoke(app, ["srs", "set", "--base", "2"], input="n\n")
        assert result.exit_code == 1
        assert patch_requests(server) == []

    def test_confirm_accepted(self, server) -> None:
        result = runner.invoke(app, ["srs", "set", "--base", "2"], input="y\n")
        assert result.exit_code == 0
        assert len(patch_requests(server)) == 1

    def test_other_profile(self, server) -> None:
        result = runner.invoke(
            app, ["srs", "set", "-p", "p2", "--modifier", "1.2", "--yes"]
        )
        assert result.exit_code == 0
        assert "Saved settings for Spanish" in result.output
        server.last_request("PATCH", "/profiles/p2/srs")

    def test_server_error(self, server) -> None:
        server.fail_with = httpx.Response(503, text="db down")
        result = runner.invoke(app, ["srs", "set", "--ease", "2.8", "--yes"])
        assert result.exit_code == 1
        assert "PN-API-000" in result.output
        assert "db down" in result.output

