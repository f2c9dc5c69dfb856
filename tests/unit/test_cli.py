"""
Tests for the Typer CLI.

Capabilities are swapped for the fake bypass so every command runs
against recorded payloads.
"""

import json

import pytest
from typer.testing import CliRunner

from mediahub import __version__
from mediahub.cli.main import app
from mediahub.core.capabilities import Capabilities


pytestmark = pytest.mark.usefixtures("restore_logging")

runner = CliRunner()


@pytest.fixture
def with_bypass(monkeypatch, kickass_capabilities):
    monkeypatch.setattr("mediahub.cli.main._build_capabilities", lambda config_manager: kickass_capabilities)


@pytest.fixture
def without_bypass(monkeypatch):
    monkeypatch.setattr("mediahub.cli.main._build_capabilities", lambda config_manager: Capabilities())


def invoke(config_dir, *args):
    return runner.invoke(app, ["--no-color", "--config-dir", str(config_dir), *args], env={"COLUMNS": "200"})


class TestCLI:
    """End-to-end command tests."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_providers(self, config_dir, with_bypass):
        result = invoke(config_dir, "providers")

        assert result.exit_code == 0
        assert "KickAssAnime" in result.output
        assert "ANIME" in result.output

    def test_providers_reports_skipped(self, config_dir, without_bypass):
        result = invoke(config_dir, "providers")

        assert result.exit_code == 0
        assert "No providers registered" in result.output
        assert "cloudflare_bypass" in result.output

    def test_search(self, config_dir, with_bypass, kickass_bypass):
        result = invoke(config_dir, "search", "anime", "KickAssAnime", "Overlord IV")

        assert result.exit_code == 0, result.output
        assert "Overlord IV" in result.output
        assert "overlord-iv-5d2f" in result.output
        assert "Page 1 of 2" in result.output
        assert kickass_bypass.calls[0][3] == {"query": "Overlord IV", "page": 1}

    def test_info(self, config_dir, with_bypass, test_data):
        result = invoke(config_dir, "info", "ANIME", "KickAssAnime", test_data.SHOW_ID)

        assert result.exit_code == 0, result.output
        assert "July 5, 2022" in result.output
        assert "Completed" in result.output

    def test_unknown_provider(self, config_dir, with_bypass):
        result = invoke(config_dir, "search", "ANIME", "Nope", "Overlord")

        assert result.exit_code == 1
        assert "Provider Not Found" in result.output

    def test_unknown_provider_mentions_skipped(self, config_dir, without_bypass):
        result = invoke(config_dir, "search", "ANIME", "KickAssAnime", "Overlord")

        assert result.exit_code == 1
        assert "skipped" in result.output

    def test_unsupported_sources(self, config_dir, with_bypass):
        result = invoke(config_dir, "sources", "KickAssAnime", "overlord-iv-5d2f/ep-1")

        assert result.exit_code == 1
        assert "Unsupported Operation" in result.output

    def test_servers_rejects_non_streaming_family(self, config_dir, with_bypass):
        result = invoke(config_dir, "servers", "KickAssAnime", "ep-1", "--family", "BOOKS")

        assert result.exit_code == 1
        assert "Unsupported Operation" in result.output
        assert "BOOKS providers have no episode servers" in result.output

    def test_disable_and_enable(self, config_dir):
        result = invoke(config_dir, "disable", "KickAssAnime")
        assert result.exit_code == 0
        settings = json.loads((config_dir / "settings.json").read_text(encoding="utf-8"))
        assert settings["providers"]["KickAssAnime"]["enabled"] is False

        result = invoke(config_dir, "enable", "KickAssAnime")
        assert result.exit_code == 0
        settings = json.loads((config_dir / "settings.json").read_text(encoding="utf-8"))
        assert settings["providers"]["KickAssAnime"]["enabled"] is True

    def test_debug_flag_shows_traceback(self, config_dir, with_bypass):
        result = runner.invoke(
            app,
            ["--debug", "--no-color", "--config-dir", str(config_dir), "search", "ANIME", "Nope", "Overlord"],
            env={"COLUMNS": "200"},
        )

        assert result.exit_code == 1
        assert "Provider Not Found" in result.output
        assert "Traceback" in result.output
