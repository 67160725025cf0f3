"""Structural check: every required field must be backed by a column."""

from ..mapping.models import FieldMapping, SplitMapping
from ..models import REQUIRED_FIELDS, Issue, IssueCode, Severity, humanize_field


def check_required_columns(mapping: FieldMapping, split: SplitMapping) -> list[Issue]:
    """Return one MISSING_COLUMN error per required field with no source column."""
    mapped_fields = set(mapping.values())
    issues = []

    for field in REQUIRED_FIELDS:
        if field in mapped_fields or field in split:
            continue
        issues.append(
            Issue(
                code=IssueCode.MISSING_COLUMN,
                severity=Severity.ERROR,
                message=f"Missing required column for '{field}'.",
                column=field,
                suggestion=(
                    f"Ensure the column for {humanize_field(field)} is present, "
                    "or use separate date/time columns."
                ),
            )
        )

    return issues
