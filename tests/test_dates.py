"""Tests for date/time normalization."""

import pytest

from loadcheck.normalize import is_canonical_timestamp, normalize_datetime, to_canonical
from loadcheck.normalize.dates import PLACEHOLDER_ERROR


class TestPlaceholders:
    """Test placeholder and empty values."""

    @pytest.mark.parametrize("value", ["TBD", "tbd", "2025-TBD-01", ""])
    def test_placeholders_fail(self, value):
        """Test TBD-like and empty values are rejected with a fixed message."""
        result = normalize_datetime(value)

        assert result.success is False
        assert result.error == PLACEHOLDER_ERROR
        assert result.error == "Cannot parse TBD or similar placeholders"

    def test_placeholder_in_time_column_fails(self):
        """Test a TBD time alongside a valid date is rejected."""
        result = normalize_datetime("2025-09-08", "TBD")

        assert result.success is False
        assert result.error == PLACEHOLDER_ERROR


class TestCanonicalInput:
    """Test values already in or near the canonical format."""

    def test_canonical_value_is_unchanged(self):
        """Test canonical input is returned untouched without a flag."""
        result = normalize_datetime("2025-09-08T10:00:00Z")

        assert result.success is True
        assert result.iso_string == "2025-09-08T10:00:00Z"
        assert result.was_normalized is False

    def test_milliseconds_are_stripped(self):
        """Test fractional seconds are removed and flagged."""
        result = normalize_datetime("2025-09-08T10:00:00.123Z")

        assert result.iso_string == "2025-09-08T10:00:00Z"
        assert result.was_normalized is True

    @pytest.mark.parametrize("value", ["2025-09-08T10:00Z", "2025-09-08T10:00:00"])
    def test_relaxed_iso_is_completed(self, value):
        """Test missing seconds or zone markers are filled in as UTC."""
        result = normalize_datetime(value)

        assert result.success is True
        assert result.iso_string == "2025-09-08T10:00:00Z"
        assert result.was_normalized is True

    def test_renormalizing_output_is_stable(self):
        """Test canonical output normalizes to itself."""
        first = normalize_datetime("Sep 8, 2025 2:30 PM", assume_timezone="America/Chicago")
        second = normalize_datetime(first.iso_string)

        assert second.iso_string == first.iso_string
        assert second.was_normalized is False


class TestTimezones:
    """Test assumed timezones and explicit zone markers."""

    def test_date_only_is_midnight_utc(self):
        """Test a bare date becomes midnight UTC."""
        result = normalize_datetime("2025-09-08")

        assert result.iso_string == "2025-09-08T00:00:00Z"
        assert result.was_normalized is True

    def test_split_date_and_time_with_zone_name(self):
        """Test Kuala Lumpur local time converts to UTC."""
        result = normalize_datetime("2025-09-08", "14:30", assume_timezone="Asia/Kuala_Lumpur")

        assert result.iso_string == "2025-09-08T06:30:00Z"

    def test_combined_text_with_zone_name(self):
        """Test Singapore local time converts to UTC."""
        result = normalize_datetime("2025-09-08 16:00", assume_timezone="Asia/Singapore")

        assert result.iso_string == "2025-09-08T08:00:00Z"

    def test_numeric_offset_is_applied(self):
        """Test a numeric assumed offset shifts the result."""
        result = normalize_datetime("2025-09-08", assume_timezone="-05:00")

        assert result.iso_string == "2025-09-08T05:00:00Z"

    def test_relaxed_iso_ignores_assumed_zone(self):
        """Test T-separated text stays UTC while space-separated text uses the zone."""
        relaxed = normalize_datetime("2025-09-20T10:00", assume_timezone="America/Chicago")
        spaced = normalize_datetime("2025-09-20 10:00", assume_timezone="America/Chicago")

        assert relaxed.iso_string == "2025-09-20T10:00:00Z"
        assert spaced.iso_string == "2025-09-20T16:00:00Z"

    def test_zone_names_use_fixed_offsets(self):
        """Test named zones do not follow daylight saving."""
        summer = normalize_datetime("2025-07-01 12:00", assume_timezone="America/New_York")
        winter = normalize_datetime("2025-01-01 12:00", assume_timezone="America/New_York")

        assert summer.iso_string == "2025-07-01T17:00:00Z"
        assert winter.iso_string == "2025-01-01T17:00:00Z"

    def test_unknown_zone_name_defaults_to_utc(self):
        """Test zone names outside the lookup fall back to +00:00."""
        result = normalize_datetime("2025-09-08 12:00", assume_timezone="Mars/Olympus")

        assert result.iso_string == "2025-09-08T12:00:00Z"

    def test_us_abbreviation_is_converted(self):
        """Test trailing EST is read as -05:00."""
        result = normalize_datetime("2025-09-08 10:00 EST", assume_timezone="Asia/Singapore")

        assert result.iso_string == "2025-09-08T15:00:00Z"

    def test_explicit_offset_wins_over_assumed_zone(self):
        """Test an offset in the text is not overridden."""
        result = normalize_datetime("2025-09-08 10:00 +02:00", assume_timezone="Asia/Singapore")

        assert result.iso_string == "2025-09-08T08:00:00Z"


class TestDayFirst:
    """Test the day-first convention for ambiguous numeric dates."""

    def test_month_first_by_default(self):
        """Test 03/04/2025 reads as March 4th by default."""
        result = normalize_datetime("03/04/2025")

        assert result.iso_string == "2025-03-04T00:00:00Z"

    def test_day_first_option(self):
        """Test 03/04/2025 reads as 3 April when day_first is set."""
        result = normalize_datetime("03/04/2025", day_first=True)

        assert result.iso_string == "2025-04-03T00:00:00Z"

    def test_unambiguous_day_parses_either_way(self):
        """Test 20/09/2025 parses with day_first set."""
        result = normalize_datetime("20/09/2025 08:15", day_first=True)

        assert result.iso_string == "2025-09-20T08:15:00Z"

    def test_year_first_text_ignores_day_first(self):
        """Test ISO-ordered dates are never day/month swapped."""
        result = normalize_datetime("2025-03-04 10:00", day_first=True)

        assert result.iso_string == "2025-03-04T10:00:00Z"


class TestInvalidInput:
    """Test unparseable values."""

    def test_garbage_text(self):
        """Test free text fails naming the original value."""
        result = normalize_datetime("not-a-date")

        assert result.success is False
        assert result.error == "Invalid date format: not-a-date"

    def test_out_of_range_time(self):
        """Test an impossible time fails naming the combined text."""
        result = normalize_datetime("2025-09-08", "25:99:99")

        assert result.success is False
        assert result.error == "Invalid date format: 2025-09-08 25:99:99"

    def test_time_without_date_fails(self):
        """Test a bare time does not borrow today's date."""
        result = normalize_datetime("14:30")

        assert result.success is False

    def test_missing_year_fails(self):
        """Test a date without a year is rejected rather than guessed."""
        result = normalize_datetime("Sep 8")

        assert result.success is False


class TestCanonicalHelpers:
    """Test canonical pattern helpers."""

    def test_is_canonical_timestamp(self):
        """Test the canonical pattern check."""
        assert is_canonical_timestamp("2025-09-08T10:00:00Z")
        assert not is_canonical_timestamp("2025-09-08 10:00:00")
        assert not is_canonical_timestamp("2025-02-30T10:00:00Z")
        assert not is_canonical_timestamp(None)

    def test_to_canonical_strips_fraction(self):
        """Test fractional seconds are removed."""
        assert to_canonical("2025-09-08T10:00:00.5Z") == "2025-09-08T10:00:00Z"
