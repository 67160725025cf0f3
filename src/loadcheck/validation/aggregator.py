"""Combine issues from every stage and decide overall success."""

import logging
from dataclasses import dataclass
from typing import Iterable

from ..models import Issue, IssueCode, Severity

logger = logging.getLogger(__name__)

DEFAULT_MAX_ISSUES = 100


@dataclass
class AggregatedIssues:
    """Capped issue list plus the success decision."""

    ok: bool
    issues: list[Issue]
    error_count: int
    warning_count: int
    dropped_count: int = 0


def aggregate_issues(
    stages: Iterable[list[Issue]],
    record_count: int,
    max_issues: int = DEFAULT_MAX_ISSUES,
) -> AggregatedIssues:
    """
    Concatenate stage issues in order and compute overall success.

    Success means at least one record and zero errors, evaluated over the
    full list before it is capped to ``max_issues``.
    """
    issues = [issue for stage in stages for issue in stage]
    error_count = sum(1 for i in issues if i.is_error)

    if error_count == 0 and record_count == 0:
        issues.append(
            Issue(
                code=IssueCode.NO_VALID_LOADS,
                severity=Severity.ERROR,
                message="No valid loads found after validation",
                suggestion="Check your data for required fields and correct formats.",
            )
        )
        error_count = 1

    ok = record_count > 0 and error_count == 0
    dropped = max(0, len(issues) - max_issues)
    if dropped:
        logger.info(f"Capping issue list at {max_issues}, dropping {dropped}")

    return AggregatedIssues(
        ok=ok,
        issues=issues[:max_issues],
        error_count=error_count,
        warning_count=len(issues) - error_count,
        dropped_count=dropped,
    )
