"""Row-by-row validation and normalization of shipment data."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ..mapping.models import FieldMapping, SplitMapping
from ..models import (
    DATETIME_FIELDS,
    REQUIRED_FIELDS,
    ChangeRecord,
    Issue,
    IssueCode,
    Severity,
    ShipmentField,
    ShipmentRecord,
    humanize_field,
)
from ..normalize import canonicalize_status, is_canonical_status, normalize_datetime

logger = logging.getLogger(__name__)

MAX_DISTINCT_STATUSES = 5
STATUS_SAMPLE_LIMIT = 8
FIRST_DATA_ROW = 2  # header is row 1

Cell = Any  # str, int, float or None


@dataclass
class RowValidationResult:
    """Records and diagnostics produced by walking every row."""

    records: list[ShipmentRecord] = field(default_factory=list)
    record_rows: list[int] = field(default_factory=list)  # source row per record
    issues: list[Issue] = field(default_factory=list)
    # load id -> field -> text as it appeared in the sheet (first occurrence)
    original_values: dict[str, dict[str, str]] = field(default_factory=dict)
    status_values: list[str] = field(default_factory=list)


def cell_text(cell: Cell) -> str:
    """Coerce a cell to stripped text; empty cells become ''."""
    if cell is None:
        return ""
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()


class RowValidator:
    """Validates rows against the shipment schema and builds records."""

    def __init__(self, assume_timezone: str = "UTC", day_first: bool = False):
        self.assume_timezone = assume_timezone
        self.day_first = day_first

    def validate(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Cell]],
        mapping: FieldMapping,
        split: SplitMapping,
    ) -> RowValidationResult:
        """
        Walk every row, normalizing dates and statuses and collecting issues.

        Rows are numbered from 2 because the header occupies row 1. A record
        is emitted only for rows without error issues and with a load id.
        """
        result = RowValidationResult()
        column_index: dict[str, int] = {}
        for idx, header in enumerate(headers):
            column_index.setdefault(header, idx)

        direct = [
            (f, column_index[h])
            for h, f in mapping.items()
            if h in column_index and f not in split
        ]
        seen_ids: set[str] = set()
        statuses: dict[str, str] = {}

        for offset, row in enumerate(rows):
            row_number = offset + FIRST_DATA_ROW
            values: dict[str, str] = {}
            originals: dict[str, str] = {}
            row_issues: list[Issue] = []
            failed: set[str] = set()

            def cell_at(idx: Optional[int]) -> str:
                if idx is None or idx >= len(row):
                    return ""
                return cell_text(row[idx])

            for target, idx in direct:
                values[target] = originals[target] = cell_at(idx)

            for target, columns in split.items():
                date_value = cell_at(column_index.get(columns.date))
                time_value = cell_at(column_index.get(columns.time)) if columns.time else ""
                if not date_value:
                    continue
                originals[target] = f"{date_value} {time_value}".strip()
                self._normalize_field(
                    values, failed, row_issues, target, row_number,
                    original=originals[target], date_value=date_value, time_value=time_value,
                )

            for target in DATETIME_FIELDS:
                if target in split or not values.get(target):
                    continue
                raw = values[target]
                self._normalize_field(
                    values, failed, row_issues, target, row_number,
                    original=raw, date_value=raw, time_value=None,
                )

            for target in REQUIRED_FIELDS:
                if target in failed or values.get(target):
                    continue
                row_issues.append(
                    Issue(
                        code=IssueCode.EMPTY_REQUIRED_CELL,
                        severity=Severity.ERROR,
                        message=f"Required field '{target}' is empty",
                        rows=[row_number],
                        column=target,
                        suggestion=f"Provide a value for {humanize_field(target)}.",
                    )
                )

            load_id = values.get(ShipmentField.LOAD_ID.value, "")
            if load_id:
                if load_id in seen_ids:
                    row_issues.append(
                        Issue(
                            code=IssueCode.DUPLICATE_ID,
                            severity=Severity.ERROR,
                            message=f"Duplicate load ID: {load_id}",
                            rows=[row_number],
                            column=ShipmentField.LOAD_ID.value,
                            suggestion="Each load must have a unique identifier.",
                        )
                    )
                else:
                    seen_ids.add(load_id)

            status = values.get(ShipmentField.STATUS.value)
            if status:
                canonical = canonicalize_status(status)
                values[ShipmentField.STATUS.value] = canonical
                statuses.setdefault(canonical.lower(), canonical)

            result.issues.extend(row_issues)
            if load_id and load_id not in result.original_values:
                result.original_values[load_id] = originals

            if load_id and not any(i.is_error for i in row_issues):
                result.records.append(self._build_record(values))
                result.record_rows.append(row_number)

        result.status_values = list(statuses.values())
        vocab_issue = self._check_status_vocabulary(result.status_values)
        if vocab_issue:
            result.issues.append(vocab_issue)

        logger.debug(
            f"Validated {len(rows)} rows: {len(result.records)} records, "
            f"{len(result.issues)} issues"
        )
        return result

    def _normalize_field(
        self,
        values: dict[str, str],
        failed: set[str],
        row_issues: list[Issue],
        target: str,
        row_number: int,
        original: str,
        date_value: str,
        time_value: Optional[str],
    ) -> None:
        outcome = normalize_datetime(
            date_value, time_value, self.assume_timezone, day_first=self.day_first
        )
        if outcome.success:
            values[target] = outcome.iso_string
            if outcome.was_normalized:
                row_issues.append(
                    Issue(
                        code=IssueCode.NON_ISO_OUTPUT,
                        severity=Severity.WARN,
                        message=f"Date normalized from {original} to {outcome.iso_string}",
                        rows=[row_number],
                        column=target,
                        suggestion="Use ISO 8601 format for consistency.",
                    )
                )
            return

        values[target] = ""
        failed.add(target)
        row_issues.append(
            Issue(
                code=IssueCode.BAD_DATE_FORMAT,
                severity=Severity.ERROR,
                message=f"Invalid date format: {original} ({outcome.error})",
                rows=[row_number],
                column=target,
                suggestion=(
                    "Use ISO 8601 UTC format: YYYY-MM-DDTHH:mm:ssZ "
                    "or provide valid date/time values."
                ),
            )
        )

    @staticmethod
    def _build_record(values: dict[str, str]) -> ShipmentRecord:
        data = {f: values.get(f, "") for f in REQUIRED_FIELDS}
        data[ShipmentField.DRIVER_PHONE.value] = values.get(ShipmentField.DRIVER_PHONE.value) or None
        return ShipmentRecord(**data)

    @staticmethod
    def _check_status_vocabulary(status_values: list[str]) -> Optional[Issue]:
        """One aggregate warning when statuses drift from the canonical set."""
        too_many = len(status_values) > MAX_DISTINCT_STATUSES
        unknown = any(not is_canonical_status(s) for s in status_values)
        if not (too_many or unknown):
            return None

        sample = ", ".join(status_values[:STATUS_SAMPLE_LIMIT])
        more = "..." if len(status_values) > STATUS_SAMPLE_LIMIT else ""
        return Issue(
            code=IssueCode.VOCAB_STATUS,
            severity=Severity.WARN,
            message=f"Found {len(status_values)} different status values: {sample}{more}",
            column=ShipmentField.STATUS.value,
            suggestion=(
                'Consider standardizing status values (e.g., "IN_TRANSIT", '
                '"DELIVERED", "CANCELLED").'
            ),
        )


def normalization_changes(result: RowValidationResult) -> list[ChangeRecord]:
    """Change log entries for values rewritten on emitted records."""
    changes = []
    for record, row_number in zip(result.records, result.record_rows):
        originals = result.original_values.get(record.load_id, {})

        for target in DATETIME_FIELDS:
            before = originals.get(target)
            after = getattr(record, target)
            if before and before != after:
                changes.append(
                    ChangeRecord(
                        type="format",
                        field=target,
                        from_value=before,
                        to_value=after,
                        reason="Normalized to canonical UTC timestamp",
                        row=row_number,
                    )
                )

        before_status = originals.get(ShipmentField.STATUS.value)
        if before_status and before_status != record.status:
            changes.append(
                ChangeRecord(
                    type="data",
                    field=ShipmentField.STATUS.value,
                    from_value=before_status,
                    to_value=record.status,
                    reason="Canonicalized status value",
                    row=row_number,
                )
            )

    return changes
