"""Tests for final record validation and issue aggregation."""

from loadcheck.models import Issue, IssueCode, Severity, ShipmentRecord
from loadcheck.validation import aggregate_issues, validate_final_records


def make_record(**overrides):
    data = dict(
        load_id="L1",
        from_address="Dallas, TX",
        from_appointment_utc="2025-09-08T10:00:00Z",
        to_address="Houston, TX",
        to_appointment_utc="2025-09-09T15:00:00Z",
        status="IN_TRANSIT",
        driver_name="Sam Ortiz",
        unit_number="T-100",
        broker="Acme",
    )
    data.update(overrides)
    return ShipmentRecord(**data)


def warning(code=IssueCode.NON_ISO_OUTPUT):
    return Issue(code=code, severity=Severity.WARN, message="w")


def error(code=IssueCode.EMPTY_REQUIRED_CELL):
    return Issue(code=code, severity=Severity.ERROR, message="e")


class TestValidateFinalRecords:
    """Test re-checks on the returned record set."""

    def test_clean_records_pass(self):
        """Test valid records produce no issues."""
        assert validate_final_records([make_record(), make_record(load_id="L2")]) == []

    def test_duplicate_ids_are_errors(self):
        """Test a duplicate id slipping through is caught."""
        issues = validate_final_records([make_record(), make_record()], row_numbers=[2, 7])

        assert len(issues) == 1
        assert issues[0].code == "DUPLICATE_ID"
        assert issues[0].rows == [7]
        assert issues[0].message == "Duplicate load ID in final result: L1"

    def test_empty_required_field_is_an_error(self):
        """Test a blank required field is caught."""
        issues = validate_final_records([make_record(broker="")])

        assert [i.code for i in issues] == ["EMPTY_REQUIRED_CELL"]
        assert issues[0].column == "broker"
        assert issues[0].rows == [2]

    def test_non_canonical_timestamps_are_errors(self):
        """Test both timestamps are checked against the canonical pattern."""
        record = make_record(
            from_appointment_utc="2025-09-08 10:00",
            to_appointment_utc="2025-09-09T15:00:00.000Z",
        )
        issues = validate_final_records([record])

        assert [i.code for i in issues] == ["NON_ISO_OUTPUT", "NON_ISO_OUTPUT"]
        assert all(i.severity == "error" for i in issues)
        assert issues[0].message == "Pickup date not in ISO format: 2025-09-08 10:00"
        assert issues[1].message.startswith("Delivery date not in ISO format")


class TestAggregateIssues:
    """Test issue concatenation, capping and the success decision."""

    def test_records_and_no_errors_is_ok(self):
        """Test warnings do not block success."""
        result = aggregate_issues([[warning()], []], record_count=3)

        assert result.ok is True
        assert result.error_count == 0
        assert result.warning_count == 1

    def test_any_error_fails(self):
        """Test one error makes the run fail even with records."""
        result = aggregate_issues([[warning()], [error()]], record_count=3)

        assert result.ok is False
        assert result.error_count == 1

    def test_no_records_and_no_errors_adds_no_valid_loads(self):
        """Test a run with nothing wrong and nothing produced still fails."""
        result = aggregate_issues([[warning()]], record_count=0)

        assert result.ok is False
        assert result.issues[-1].code == "NO_VALID_LOADS"
        assert result.issues[-1].severity == "error"

    def test_no_records_with_errors_does_not_add_no_valid_loads(self):
        """Test NO_VALID_LOADS is only added when there are no other errors."""
        result = aggregate_issues([[error()]], record_count=0)

        assert "NO_VALID_LOADS" not in [i.code for i in result.issues]

    def test_stage_order_is_preserved(self):
        """Test issues keep the order of their stages."""
        result = aggregate_issues(
            [[warning(IssueCode.HEADER_AMBIGUITY)], [warning(IssueCode.VOCAB_STATUS)]],
            record_count=1,
        )

        assert [i.code for i in result.issues] == ["HEADER_AMBIGUITY", "VOCAB_STATUS"]

    def test_cap_applies_after_success_decision(self):
        """Test an error beyond the cap still fails the run."""
        stages = [[warning() for _ in range(5)], [error()]]
        result = aggregate_issues(stages, record_count=2, max_issues=5)

        assert len(result.issues) == 5
        assert result.dropped_count == 1
        assert result.ok is False
