"""Locale-aware calendar segmentation of instants.

An instant is formatted with the locale's *full* date and *full* time CLDR
patterns (Babel) and cut into one segment per numeric field::

    2024年1月2日火曜日 3時04分05秒 日本標準時
    → ["2024年", "1月", "2日火曜日 ", "3時", "4分", "5秒"]

Numeric fields (year, month, day, hour, minute, second) open a new segment
with leading zeros stripped.  Weekday and literal text is glued onto the
preceding segment.  Everything else (era, day period, time zone name, ...)
is dropped.  Twelve-hour fields are read on the 24-hour clock, so 3 AM and
3 PM differ in the hour segment.  Because the pattern is fixed per locale,
two instants always yield the same number of segments in the same order,
which is what makes index-by-index comparison meaningful.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from babel import Locale, UnknownLocaleError
from babel.dates import (
    DateTimeFormat,
    get_date_format,
    get_datetime_format,
    get_time_format,
    tokenize_pattern,
)

log = logging.getLogger("speakable.segments")

DEFAULT_LOCALE = "ja-JP"
DEFAULT_TIMEZONE = "Asia/Tokyo"

# CLDR pattern characters grouped by the part they produce
_NUMERIC_FIELDS = frozenset("yYuUMLdHkms")
_ATTACHED_FIELDS = frozenset("Eec")
# 12-hour clock fields and their 24-hour counterparts
_HOUR_CYCLE_24 = {"h": "H", "K": "k"}


class ConfigError(ValueError):
    """Raised for an unusable locale, timezone or other setting."""


def parse_locale(identifier: str) -> Locale:
    """Parse a BCP 47 (``ja-JP``) or POSIX (``ja_JP``) locale identifier.

    Raises:
        ConfigError: If Babel has no data for the locale.
    """
    try:
        return Locale.parse(identifier.replace("-", "_"))
    except (UnknownLocaleError, ValueError) as exc:
        raise ConfigError(f"Unknown locale: {identifier!r}") from exc


def parse_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA time zone name.

    Raises:
        ConfigError: If the zone does not exist.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown timezone: {name!r}") from exc


@dataclass(frozen=True)
class DateSegmenter:
    """Immutable formatter for one locale/timezone pair.

    Build it once and share it; it holds no per-call state.
    """

    locale: str = DEFAULT_LOCALE
    timezone: str = DEFAULT_TIMEZONE
    _babel_locale: Locale = field(init=False, repr=False, compare=False)
    _zone: ZoneInfo = field(init=False, repr=False, compare=False)
    _tokens: tuple[tuple[str, object], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        babel_locale = parse_locale(self.locale)
        zone = parse_timezone(self.timezone)

        date_pattern = get_date_format("full", locale=babel_locale).pattern
        time_pattern = get_time_format("full", locale=babel_locale).pattern
        glue = get_datetime_format("full", locale=babel_locale)
        pattern = glue.replace("{1}", date_pattern).replace("{0}", time_pattern)

        object.__setattr__(self, "_babel_locale", babel_locale)
        object.__setattr__(self, "_zone", zone)
        object.__setattr__(self, "_tokens", tuple(_to_24_hour(tokenize_pattern(pattern))))
        log.debug(
            "Date segmenter ready",
            extra={"locale": self.locale, "timezone": self.timezone, "pattern": pattern},
        )

    def segments(self, instant: datetime) -> list[str]:
        """Split *instant* into calendar segments.

        Args:
            instant: Any datetime; naive values are taken as UTC.

        Returns:
            Segments in pattern order, the last one right-trimmed.
        """
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=dt_timezone.utc)
        local = instant.astimezone(self._zone)
        fmt = DateTimeFormat(local, self._babel_locale)

        segments: list[str] = []
        for kind, value in self._tokens:
            if kind == "chars":
                text = str(value)
            else:
                char, count = value  # type: ignore[misc]
                if char in _NUMERIC_FIELDS:
                    segments.append(_strip_leading_zero(fmt[char * count]))
                    continue
                if char not in _ATTACHED_FIELDS:
                    continue
                text = fmt[char * count]

            if segments:
                segments[-1] += text
            else:
                segments.append(text)

        if segments:
            segments[-1] = segments[-1].rstrip()
        return segments


def _to_24_hour(tokens: list[tuple[str, object]]) -> list[tuple[str, object]]:
    """Swap the 12-hour fields h/K for H/k."""
    converted: list[tuple[str, object]] = []
    for kind, value in tokens:
        if kind == "field":
            char, count = value  # type: ignore[misc]
            value = (_HOUR_CYCLE_24.get(char, char), count)
        converted.append((kind, value))
    return converted


def _strip_leading_zero(value: str) -> str:
    """``"04"`` → ``"4"``; non-numeric values (month names) pass through."""
    try:
        return str(int(value))
    except ValueError:
        return value


@lru_cache(maxsize=16)
def get_segmenter(locale: str = DEFAULT_LOCALE, timezone: str = DEFAULT_TIMEZONE) -> DateSegmenter:
    """Return the shared segmenter for *locale* and *timezone*."""
    return DateSegmenter(locale=locale, timezone=timezone)
