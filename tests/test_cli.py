"""Tests for the speakable CLI."""

from __future__ import annotations

import json
import logging

import pytest
from click.testing import CliRunner

from speakable.cli import main


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    for key in ("CONFIG", "LOCALE", "TIMEZONE", "MAX_DEPTH", "DEBUG", "LOG_LEVEL"):
        monkeypatch.delenv(f"SPEAKABLE_{key}", raising=False)
    logger = logging.getLogger("speakable")
    handlers = list(logger.handlers)
    yield
    # CliRunner closes its captured streams after each invoke
    logger.handlers[:] = handlers


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def guild_file(tmp_path):
    path = tmp_path / "guild.json"
    path.write_text(
        json.dumps(
            {
                "id": "111111111111111111",
                "members": {"222222222222222222": "Alice"},
                "channels": {"333333333333333333": "\U0001f389-party"},
            }
        ),
        encoding="utf-8",
    )
    return path


class TestRender:
    def test_argument(self, runner):
        result = runner.invoke(main, ["render", "**hi** there"])
        assert result.exit_code == 0
        assert result.output == "hi there\n"

    def test_stdin(self, runner):
        result = runner.invoke(main, ["render"], input="~~gone~~")
        assert result.exit_code == 0
        assert result.output == "gone\n"

    def test_without_guild_mentions_are_unknown(self, runner):
        result = runner.invoke(main, ["render", "<@222222222222222222>"])
        assert result.output == " 不明なユーザー \n"

    def test_guild_file(self, runner, guild_file):
        result = runner.invoke(
            main, ["render", "<@222222222222222222> in <#333333333333333333>", "--guild", str(guild_file)]
        )
        assert result.exit_code == 0
        assert result.output == "Alice in \U0001f389-party\n"

    def test_english_locale(self, runner):
        result = runner.invoke(main, ["render", "||x||", "--locale", "en-US", "--timezone", "UTC"])
        assert result.exit_code == 0
        assert result.output == " redacted \n"

    def test_bad_locale_is_usage_error(self, runner):
        result = runner.invoke(main, ["render", "hi", "--locale", "zz"])
        assert result.exit_code == 2
        assert "Unknown locale" in result.output

    def test_invalid_guild_json(self, runner, tmp_path):
        path = tmp_path / "guild.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(main, ["render", "hi", "--guild", str(path)])
        assert result.exit_code == 2

    def test_colon_text_unchanged(self, runner):
        result = runner.invoke(main, ["render", "std::vector::push_back"])
        assert result.output == "std::vector::push_back\n"

    def test_config_section_not_a_table(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('speakable = "x"\n', encoding="utf-8")
        result = runner.invoke(main, ["render", "hi", "--config", str(path)])
        assert result.exit_code == 2
        assert "must be a table" in result.output

    def test_config_file(self, runner, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[speakable]\nlocale = "en-US"\n', encoding="utf-8")
        result = runner.invoke(main, ["render", "||x||", "--config", str(path)])
        assert result.output == " redacted \n"


class TestSegments:
    def test_japanese(self, runner):
        result = runner.invoke(main, ["segments", "1704132245"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[:2] == ["2024年", "1月"]
        assert lines[-3:] == ["3時", "4分", "5秒"]

    def test_invalid(self, runner):
        result = runner.invoke(main, ["segments", "soon"])
        assert result.exit_code == 2
