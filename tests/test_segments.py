"""Tests for calendar segmentation of instants."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from speakable.segments import ConfigError, DateSegmenter, get_segmenter

JST = ZoneInfo("Asia/Tokyo")


@pytest.fixture
def ja() -> DateSegmenter:
    return DateSegmenter(locale="ja-JP", timezone="Asia/Tokyo")


class TestJapanese:
    def test_full_segments(self, ja):
        segments = ja.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=JST))
        assert len(segments) == 6
        assert segments[0] == "2024年"
        assert segments[1] == "1月"
        assert segments[2].startswith("2日火曜日")
        assert segments[3:] == ["3時", "4分", "5秒"]

    def test_leading_zeros_stripped(self, ja):
        segments = ja.segments(datetime(2024, 3, 9, 0, 0, 7, tzinfo=JST))
        assert segments[3:] == ["0時", "0分", "7秒"]

    def test_converts_into_configured_zone(self, ja):
        utc = datetime(2024, 1, 1, 18, 4, 5, tzinfo=timezone.utc)
        assert ja.segments(utc) == ja.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=JST))

    def test_naive_is_utc(self, ja):
        assert ja.segments(datetime(2024, 1, 1, 18, 4, 5)) == ja.segments(
            datetime(2024, 1, 1, 18, 4, 5, tzinfo=timezone.utc)
        )

    def test_time_zone_name_dropped(self, ja):
        segments = ja.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=JST))
        assert "日本標準時" not in "".join(segments)

    def test_last_segment_trimmed(self, ja):
        segments = ja.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=JST))
        assert segments[-1] == segments[-1].rstrip()


class TestStableShape:
    @pytest.mark.parametrize(
        "instant",
        [
            datetime(1970, 1, 1, tzinfo=timezone.utc),
            datetime(1999, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
            datetime(2038, 7, 15, 12, 0, 0, tzinfo=timezone.utc),
        ],
    )
    def test_segment_count_is_fixed(self, ja, instant):
        reference = ja.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=JST))
        assert len(ja.segments(instant)) == len(reference)


class TestEnglish:
    def test_month_name_kept_and_weekday_leads(self):
        en = DateSegmenter(locale="en-US", timezone="UTC")
        segments = en.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        assert segments[0].startswith("Tuesday")
        assert segments[1].startswith("January")
        assert segments[-1] == "5"

    def test_hours_on_24_hour_clock(self):
        en = DateSegmenter(locale="en-US", timezone="UTC")
        morning = en.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        evening = en.segments(datetime(2024, 1, 2, 15, 4, 5, tzinfo=timezone.utc))
        assert len(morning) == len(evening)
        assert morning[-3:] == ["3:", "4:", "5"]
        assert evening[-3:] == ["15:", "4:", "5"]

    def test_day_period_dropped(self):
        en = DateSegmenter(locale="en-US", timezone="UTC")
        joined = "".join(en.segments(datetime(2024, 1, 2, 15, 4, 5, tzinfo=timezone.utc)))
        assert "PM" not in joined
        assert "AM" not in joined

    def test_posix_locale_id(self):
        en = DateSegmenter(locale="en_US", timezone="UTC")
        segments = en.segments(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        assert segments[1].startswith("January")


class TestConfiguration:
    def test_unknown_locale(self):
        with pytest.raises(ConfigError):
            DateSegmenter(locale="zz", timezone="UTC")

    def test_unknown_timezone(self):
        with pytest.raises(ConfigError):
            DateSegmenter(locale="ja-JP", timezone="Mars/Olympus_Mons")

    def test_shared_instance(self):
        assert get_segmenter("ja-JP", "Asia/Tokyo") is get_segmenter("ja-JP", "Asia/Tokyo")

    def test_defaults(self):
        segmenter = get_segmenter()
        assert segmenter.locale == "ja-JP"
        assert segmenter.timezone == "Asia/Tokyo"
