"""Tests for CLI module."""

import re

from typer.testing import CliRunner

from keepwarm.cli.main import app

runner = CliRunner()


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class TestVersionCommand:
    """Tests for version command."""

    def test_version_command(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "keepwarm" in result.output


class TestClassifyCommand:
    """Tests for classify command."""

    def test_managed_endpoint(self):
        result = runner.invoke(app, ["classify", "https://api.smithery.ai/x"])
        assert result.exit_code == 0
        assert "Keepalive enabled" in strip_ansi(result.output)

    def test_unmanaged_endpoint(self):
        result = runner.invoke(app, ["classify", "http://localhost:3000"])
        assert result.exit_code == 0
        assert "Keepalive disabled" in strip_ansi(result.output)

    def test_credentials_enable(self):
        result = runner.invoke(app, ["classify", "http://localhost:3000", "--api-key", "sk-1"])
        assert result.exit_code == 0
        assert "Keepalive enabled" in strip_ansi(result.output)

    def test_force(self):
        result = runner.invoke(app, ["classify", "http://localhost:3000", "--force"])
        assert result.exit_code == 0
        assert "Keepalive forced" in strip_ansi(result.output)


class TestConfigCommand:
    """Tests for config command."""

    def test_shows_defaults(self):
        result = runner.invoke(app, ["config"])
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        assert "30000 ms" in output
        assert "auto" in output

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("KEEPWARM_INTERVAL", "4500")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "4500 ms" in strip_ansi(result.output)

    def test_invalid_settings_exit_nonzero(self, monkeypatch):
        monkeypatch.setenv("KEEPWARM_MAX_FAILURES", "0")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 1
        assert "Invalid keepalive settings" in strip_ansi(result.output)

    def test_verbose_flag_accepted(self):
        result = runner.invoke(app, ["-vv", "config"])
        assert result.exit_code == 0
