"""Configuration for speakable rendering.

Configuration sources (in priority order, highest first):
  1. Explicit overrides (CLI flags, keyword arguments)
  2. Environment variables (SPEAKABLE_*)
  3. TOML config file, ``[speakable]`` table (--config / SPEAKABLE_CONFIG)
  4. Built-in defaults

Example config.toml::

    [speakable]
    locale = "en-US"
    timezone = "America/Vancouver"
    max_depth = 32
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from speakable.segments import (
    DEFAULT_LOCALE,
    DEFAULT_TIMEZONE,
    ConfigError,
    parse_locale,
    parse_timezone,
)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import]

log = logging.getLogger("speakable.config")

__all__ = ["ConfigError", "SpeakableConfig", "load_config"]

_KEYS = ("locale", "timezone", "max_depth")


@dataclass(frozen=True)
class SpeakableConfig:
    """Rendering settings."""

    # Locale for timestamp formatting and placeholder wording (BCP 47 or POSIX)
    locale: str = DEFAULT_LOCALE

    # IANA zone timestamps are read in
    timezone: str = DEFAULT_TIMEZONE

    # Container nesting beyond this renders as empty
    max_depth: int = 32

    def validate(self) -> SpeakableConfig:
        """Check every setting, returning self.

        Raises:
            ConfigError: On an unknown locale/timezone or a non-positive depth.
        """
        parse_locale(self.locale)
        parse_timezone(self.timezone)
        if self.max_depth < 1:
            raise ConfigError(f"max_depth must be positive, got {self.max_depth}")
        return self


def _load_toml_config(path: Path) -> dict:
    """Load a TOML config file and return the parsed dict."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        log.warning("Config file not found: %s", path)
        return {}
    except (OSError, tomllib.TOMLDecodeError) as exc:
        log.error("Failed to parse config file %s: %s", path, exc)
        return {}


def _env(key: str, default: str | None = None) -> str | None:
    """Read an environment variable with the SPEAKABLE_ prefix."""
    return os.environ.get(f"SPEAKABLE_{key.upper()}", default)


def load_config(path: str | Path | None = None, **overrides: Any) -> SpeakableConfig:
    """Resolve a validated :class:`SpeakableConfig` from all sources.

    Args:
        path: TOML file; defaults to ``SPEAKABLE_CONFIG`` when unset.
        **overrides: ``locale``, ``timezone`` or ``max_depth``; None values
            are ignored.

    Raises:
        ConfigError: If the file's ``speakable`` entry is not a table, or the
            resolved settings are invalid.
    """
    path = path or _env("CONFIG")
    file_cfg: dict = {}
    if path:
        file_cfg = _load_toml_config(Path(path)).get("speakable", {})
        if not isinstance(file_cfg, dict):
            raise ConfigError(f"'speakable' in {path} must be a table, got {type(file_cfg).__name__}")

    values: dict[str, Any] = {}
    for key in _KEYS:
        for source in (overrides.get(key), _env(key), file_cfg.get(key)):
            if source is not None:
                values[key] = source
                break

    if "max_depth" in values:
        try:
            values["max_depth"] = int(values["max_depth"])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"max_depth must be an integer, got {values['max_depth']!r}") from exc

    config = SpeakableConfig(**values).validate()
    log.debug("Configuration resolved", extra={"locale": config.locale, "timezone": config.timezone})
    return config
