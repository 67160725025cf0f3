"""Tests for row validation and the required-column check."""

from conftest import make_row

from loadcheck.mapping import HeaderMapper
from loadcheck.validation import (
    RowValidator,
    cell_text,
    check_required_columns,
    normalization_changes,
)


def validate(headers, rows, **kwargs):
    mapped = HeaderMapper().map_headers(headers)
    return RowValidator(**kwargs).validate(headers, rows, mapped.mapping, mapped.split)


def codes(issues):
    return [issue.code for issue in issues]


class TestRequiredColumns:
    """Test the structural required-column check."""

    def test_complete_mapping_has_no_issues(self, headers):
        """Test a full header row passes."""
        mapped = HeaderMapper().map_headers(headers)

        assert check_required_columns(mapped.mapping, mapped.split) == []

    def test_missing_fields_are_reported_individually(self):
        """Test one MISSING_COLUMN error per absent required field."""
        mapped = HeaderMapper().map_headers(["Load ID", "Driver"])
        issues = check_required_columns(mapped.mapping, mapped.split)
        columns = {issue.column for issue in issues}

        assert all(issue.code == "MISSING_COLUMN" for issue in issues)
        assert all(issue.severity == "error" for issue in issues)
        assert "load_id" not in columns
        assert "driver_name" not in columns
        assert "driver_phone" not in columns
        assert "broker" in columns
        assert len(issues) == 7

    def test_split_mapping_satisfies_datetime_fields(self):
        """Test split date/time columns count as present."""
        headers = ["Load ID", "PU", "PU Date", "PU Time", "Delivery", "DEL Date", "Status",
                   "Driver", "Truck", "Broker"]
        mapped = HeaderMapper().map_headers(headers)

        assert check_required_columns(mapped.mapping, mapped.split) == []


class TestValidRows:
    """Test rows that produce records."""

    def test_valid_rows_become_records(self, headers, valid_rows):
        """Test clean rows yield records and no errors."""
        result = validate(headers, valid_rows)

        assert [r.load_id for r in result.records] == ["L1", "L2"]
        assert result.record_rows == [2, 3]
        assert not any(issue.is_error for issue in result.issues)
        assert result.records[1].status == "DELIVERED"
        assert result.records[0].driver_phone == "555-123-4567"

    def test_original_values_keep_sheet_text(self, headers, valid_rows):
        """Test the snapshot keeps the pre-normalization status."""
        result = validate(headers, valid_rows)

        assert result.original_values["L2"]["status"] == "Delivered"

    def test_status_change_is_logged(self, headers, valid_rows):
        """Test canonicalized statuses appear in the change log."""
        result = validate(headers, valid_rows)
        changes = normalization_changes(result)

        assert len(changes) == 1
        assert changes[0].type == "data"
        assert changes[0].from_value == "Delivered"
        assert changes[0].to_value == "DELIVERED"
        assert changes[0].row == 3

    def test_optional_phone_may_be_empty(self, headers):
        """Test an empty phone neither errors nor blocks the record."""
        result = validate(headers, [make_row(phone="")])

        assert len(result.records) == 1
        assert result.records[0].driver_phone is None


class TestCellErrors:
    """Test per-cell data quality errors."""

    def test_empty_required_cell(self, headers):
        """Test an empty driver blocks the record."""
        result = validate(headers, [make_row(driver="")])

        assert result.records == []
        assert codes(result.issues) == ["EMPTY_REQUIRED_CELL"]
        assert result.issues[0].rows == [2]
        assert result.issues[0].column == "driver_name"

    def test_short_row_counts_as_empty(self, headers):
        """Test cells missing from a short row are empty."""
        result = validate(headers, [make_row()[:8]])

        assert result.records == []
        assert {i.column for i in result.issues} == {"unit_number", "broker"}

    def test_bad_date_is_reported_once(self, headers):
        """Test an unparseable date is an error but not also an empty cell."""
        result = validate(headers, [make_row(pickup_time="not-a-date")])

        assert codes(result.issues) == ["BAD_DATE_FORMAT"]
        assert result.issues[0].message == (
            "Invalid date format: not-a-date (Invalid date format: not-a-date)"
        )
        assert result.records == []

    def test_placeholder_date_is_an_error(self, headers):
        """Test TBD appointment times block the record."""
        result = validate(headers, [make_row(drop_time="TBD")])

        assert codes(result.issues) == ["BAD_DATE_FORMAT"]
        assert result.issues[0].column == "to_appointment_utc"

    def test_non_iso_date_is_a_warning(self, headers):
        """Test a parseable non-ISO date warns and still yields a record."""
        result = validate(headers, [make_row(pickup_time="2025-09-08 10:00")])

        assert codes(result.issues) == ["NON_ISO_OUTPUT"]
        assert result.issues[0].severity == "warn"
        assert result.records[0].from_appointment_utc == "2025-09-08T10:00:00Z"

        changes = normalization_changes(result)
        assert changes[0].type == "format"
        assert changes[0].from_value == "2025-09-08 10:00"
        assert changes[0].to_value == "2025-09-08T10:00:00Z"

    def test_assumed_timezone_applies(self, headers):
        """Test the validator passes its timezone to the normalizer."""
        result = validate(
            headers, [make_row(pickup_time="2025-09-08 16:00")], assume_timezone="Asia/Singapore"
        )

        assert result.records[0].from_appointment_utc == "2025-09-08T08:00:00Z"


class TestDuplicates:
    """Test duplicate load id detection."""

    def test_second_occurrence_is_flagged(self, headers):
        """Test the first A1 is kept and the second is an error."""
        rows = [make_row(load_id="A1"), make_row(load_id="A1", truck="T-9")]
        result = validate(headers, rows)

        assert codes(result.issues) == ["DUPLICATE_ID"]
        assert result.issues[0].rows == [3]
        assert [r.load_id for r in result.records] == ["A1"]
        assert result.records[0].unit_number == "T-100"

    def test_n_rows_give_n_minus_one_errors(self, headers):
        """Test four rows sharing an id give three duplicate errors."""
        rows = [make_row(load_id="A1") for _ in range(4)]
        result = validate(headers, rows)
        duplicates = [i for i in result.issues if i.code == "DUPLICATE_ID"]

        assert len(duplicates) == 3
        assert [i.rows for i in duplicates] == [[3], [4], [5]]


class TestSplitRows:
    """Test datetime fields built from two columns."""

    def test_split_columns_are_joined(self):
        """Test date and time cells combine into one timestamp."""
        headers = ["Load ID", "PU", "PU Date", "PU Time", "Delivery", "DEL Date", "DEL Time",
                   "Status", "Driver", "Truck", "Broker"]
        row = ["L1", "Dallas", "2025-09-08", "14:30", "Houston", "2025-09-09", "09:00",
               "rolling", "Sam", "T-1", "Acme"]
        result = validate(headers, [row], assume_timezone="Asia/Kuala_Lumpur")

        record = result.records[0]
        assert record.from_appointment_utc == "2025-09-08T06:30:00Z"
        assert record.to_appointment_utc == "2025-09-09T01:00:00Z"
        assert record.status == "IN_TRANSIT"
        assert result.original_values["L1"]["from_appointment_utc"] == "2025-09-08 14:30"

    def test_empty_split_date_is_an_empty_cell(self):
        """Test a missing date in a split pair reports the field as empty."""
        headers = ["Load ID", "PU", "PU Date", "PU Time", "Delivery", "DEL Time",
                   "Status", "Driver", "Truck", "Broker"]
        row = ["L1", "Dallas", "", "14:30", "Houston", "2025-09-09T09:00:00Z",
               "IN_TRANSIT", "Sam", "T-1", "Acme"]
        result = validate(headers, [row])

        assert codes(result.issues) == ["EMPTY_REQUIRED_CELL"]
        assert result.issues[0].column == "from_appointment_utc"


class TestStatusVocabulary:
    """Test the aggregate vocabulary drift warning."""

    def test_sixth_distinct_status_warns_once(self, headers):
        """Test six distinct statuses give exactly one VOCAB_STATUS warning."""
        statuses = ["rolling", "Delivered", "pending", "loading", "unloading", "On Hold"]
        rows = [make_row(load_id=f"L{i}", status=s) for i, s in enumerate(statuses)]
        result = validate(headers, rows)
        vocab = [i for i in result.issues if i.code == "VOCAB_STATUS"]

        assert len(vocab) == 1
        assert vocab[0].severity == "warn"
        assert vocab[0].message.startswith("Found 6 different status values:")
        assert "On Hold" in result.status_values
        assert len(result.records) == 6

    def test_canonical_statuses_do_not_warn(self, headers):
        """Test five canonical statuses raise no warning."""
        statuses = ["rolling", "Delivered", "pending", "loading", "unloading"]
        rows = [make_row(load_id=f"L{i}", status=s) for i, s in enumerate(statuses)]
        result = validate(headers, rows)

        assert "VOCAB_STATUS" not in codes(result.issues)

    def test_single_unknown_status_warns(self, headers):
        """Test an unknown status outside the vocabulary warns."""
        result = validate(headers, [make_row(status="On Hold")])

        assert codes(result.issues) == ["VOCAB_STATUS"]
        assert result.records[0].status == "On Hold"


class TestCellText:
    """Test cell coercion."""

    def test_cell_coercion(self):
        """Test numbers, blanks and text become stripped strings."""
        assert cell_text(None) == ""
        assert cell_text(1001.0) == "1001"
        assert cell_text(12.5) == "12.5"
        assert cell_text(42) == "42"
        assert cell_text("  A1 ") == "A1"
