"""Tests for narration_sync.timecode — display string <-> seconds."""

import math

import pytest

from narration_sync.timecode import TimecodeError, format_timecode, parse_timecode


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParseTimecode:
    def test_minutes_seconds(self):
        assert parse_timecode("1:05") == 65

    def test_zero_padded(self):
        assert parse_timecode("00:03") == 3

    def test_hours_minutes_seconds(self):
        assert parse_timecode("01:02:03") == 3723

    def test_fractional_seconds(self):
        assert parse_timecode("0:02.5") == 2.5

    def test_whitespace_tolerated(self):
        assert parse_timecode(" 00:04 ") == 4

    def test_minutes_over_59(self):
        assert parse_timecode("75:00") == 4500

    @pytest.mark.parametrize("bad", ["", "7", "abc", "1:xx", "-1:00", "1:2:3:4", "1::2", "1:2e1"])
    def test_malformed_rejected(self, bad):
        with pytest.raises(TimecodeError):
            parse_timecode(bad)

    def test_non_string_rejected(self):
        with pytest.raises(TimecodeError):
            parse_timecode(5)

    def test_is_value_error(self):
        # Callers that only know ValueError still catch bad timecodes
        with pytest.raises(ValueError):
            parse_timecode("nope")


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

class TestFormatTimecode:
    def test_under_a_minute(self):
        assert format_timecode(7) == "0:07"

    def test_minutes_not_padded(self):
        assert format_timecode(65) == "1:05"

    def test_hours_roll_into_minutes(self):
        assert format_timecode(3723) == "62:03"

    def test_fraction_floored(self):
        assert format_timecode(2.9) == "0:02"

    def test_zero(self):
        assert format_timecode(0) == "0:00"

    @pytest.mark.parametrize("bad", [-1, math.nan, math.inf, "5", None, True])
    def test_invalid_rejected(self, bad):
        with pytest.raises(TimecodeError):
            format_timecode(bad)


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------

class TestRoundTrip:
    @pytest.mark.parametrize("display", ["00:00", "00:03", "0:59", "01:00", "12:34", "99:59"])
    def test_parse_format_parse_is_stable(self, display):
        seconds = parse_timecode(display)
        assert parse_timecode(format_timecode(seconds)) == seconds
