"""Final invariant checks on the record set about to be returned."""

from typing import Optional, Sequence

from ..models import (
    DATETIME_FIELDS,
    REQUIRED_FIELDS,
    Issue,
    IssueCode,
    Severity,
    ShipmentField,
    ShipmentRecord,
)
from ..normalize import is_canonical_timestamp

_TIMESTAMP_LABELS = {
    ShipmentField.FROM_APPOINTMENT.value: "Pickup",
    ShipmentField.TO_APPOINTMENT.value: "Delivery",
}


def validate_final_records(
    records: Sequence[ShipmentRecord],
    row_numbers: Optional[Sequence[int]] = None,
) -> list[Issue]:
    """
    Re-check the returned records regardless of how they were produced.

    Flags duplicate ids, required fields that are empty and timestamps that
    are not canonical UTC. Every violation is an error.

    Args:
        records: The records that will be returned
        row_numbers: Source row of each record; defaults to position + 2
    """
    issues: list[Issue] = []
    seen_ids: set[str] = set()

    for i, record in enumerate(records):
        row_number = row_numbers[i] if row_numbers is not None else i + 2

        if record.load_id in seen_ids:
            issues.append(
                Issue(
                    code=IssueCode.DUPLICATE_ID,
                    severity=Severity.ERROR,
                    message=f"Duplicate load ID in final result: {record.load_id}",
                    rows=[row_number],
                    column=ShipmentField.LOAD_ID.value,
                    suggestion="Each load must have a unique identifier.",
                )
            )
        else:
            seen_ids.add(record.load_id)

        for field in REQUIRED_FIELDS:
            if getattr(record, field):
                continue
            issues.append(
                Issue(
                    code=IssueCode.EMPTY_REQUIRED_CELL,
                    severity=Severity.ERROR,
                    message=f"Required field '{field}' is empty after normalization",
                    rows=[row_number],
                    column=field,
                    suggestion=f"Provide a value for {field}.",
                )
            )

        for field in DATETIME_FIELDS:
            value = getattr(record, field)
            if value and not is_canonical_timestamp(value):
                issues.append(
                    Issue(
                        code=IssueCode.NON_ISO_OUTPUT,
                        severity=Severity.ERROR,
                        message=f"{_TIMESTAMP_LABELS[field]} date not in ISO format: {value}",
                        rows=[row_number],
                        column=field,
                        suggestion="Date should be normalized to YYYY-MM-DDTHH:mm:ssZ format.",
                    )
                )

    return issues
