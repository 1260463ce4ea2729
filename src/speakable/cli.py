"""
speakable CLI.

Sub-commands:
  render     Convert chat markup (argument or stdin) to speakable text
  segments   Show the calendar segments of an epoch-seconds timestamp

Configuration sources (in priority order, highest first):
  1. CLI flags
  2. Environment variables (SPEAKABLE_*)
  3. TOML config file (--config / SPEAKABLE_CONFIG), [speakable] table
  4. Built-in defaults

Examples:
  speakable render "**hi** <@123456789012345678>" --guild guild.json
  echo "<t:1700000000:F>" | speakable render --locale en-US --timezone UTC
  speakable segments 1700000000
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from speakable.config import ConfigError, SpeakableConfig, load_config
from speakable.context import StaticGuild
from speakable.logging_config import setup_logging
from speakable.renderer import parse_epoch_seconds, render_speakable_text
from speakable.segments import get_segmenter

log = logging.getLogger("speakable.cli")


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

_config_option = click.option(
    "--config",
    "-c",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to TOML config file",
)

_log_level_option = click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (default: SPEAKABLE_LOG_LEVEL or WARNING)",
)

_locale_option = click.option("--locale", default=None, help="Locale, e.g. ja-JP or en-US")
_timezone_option = click.option("--timezone", default=None, help="IANA time zone, e.g. Asia/Tokyo")


def _resolve_config(config: str | None, locale: str | None, timezone: str | None) -> SpeakableConfig:
    try:
        return load_config(config, locale=locale, timezone=timezone)
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc


def _load_guild(path: str) -> StaticGuild:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path} is not valid JSON: {exc}", param_hint="--guild") from exc
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a JSON object", param_hint="--guild")
    return StaticGuild.from_dict(data)


# ---------------------------------------------------------------------------
# CLI root
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="speakable")
def main() -> None:
    """speakable: Discord chat markup to text-to-speech friendly text."""


@main.command("render")
@click.argument("text", required=False)
@click.option(
    "--guild",
    "-g",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file with guild id, members, channels and roles",
)
@_locale_option
@_timezone_option
@_config_option
@_log_level_option
def render_cmd(
    text: str | None,
    guild: str | None,
    locale: str | None,
    timezone: str | None,
    config: str | None,
    log_level: str | None,
) -> None:
    """Render TEXT (or stdin) as speakable text."""
    setup_logging(log_level)
    cfg = _resolve_config(config, locale, timezone)

    if text is None:
        text = sys.stdin.read()
    context = _load_guild(guild) if guild else None

    log.debug("Rendering message", extra={"chars": len(text), "preview": text, "guild": bool(context)})
    click.echo(render_speakable_text(text, context, config=cfg))


@main.command("segments")
@click.argument("epoch_seconds")
@_locale_option
@_timezone_option
@_config_option
@_log_level_option
def segments_cmd(
    epoch_seconds: str,
    locale: str | None,
    timezone: str | None,
    config: str | None,
    log_level: str | None,
) -> None:
    """Print the calendar segments of EPOCH_SECONDS, one per line."""
    setup_logging(log_level)
    cfg = _resolve_config(config, locale, timezone)

    instant = parse_epoch_seconds(epoch_seconds)
    if instant is None:
        raise click.BadParameter(f"not a usable timestamp: {epoch_seconds!r}", param_hint="EPOCH_SECONDS")

    try:
        segments = get_segmenter(cfg.locale, cfg.timezone).segments(instant)
    except (OverflowError, ValueError) as exc:
        raise click.BadParameter(f"out of range in {cfg.timezone}: {epoch_seconds!r}", param_hint="EPOCH_SECONDS") from exc

    for segment in segments:
        click.echo(segment)


if __name__ == "__main__":
    main()
