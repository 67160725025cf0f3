"""Row, column and final-result validation."""

from .columns import check_required_columns
from .rows import RowValidationResult, RowValidator, cell_text, normalization_changes
from .final import validate_final_records
from .aggregator import AggregatedIssues, aggregate_issues

__all__ = [
    "check_required_columns",
    "RowValidationResult",
    "RowValidator",
    "cell_text",
    "normalization_changes",
    "validate_final_records",
    "AggregatedIssues",
    "aggregate_issues",
]
