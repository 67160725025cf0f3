"""Reconcile confidence-scored suggestions with the deterministic mapping."""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..mapping.models import FieldMapping, SplitMapping
from ..models import ChangeRecord, Issue, IssueCode, Severity, ShipmentField
from .models import (
    ConfidenceSuggestion,
    ConfidenceTier,
    SuggestionFailure,
    SuggestionOutcome,
)

logger = logging.getLogger(__name__)

UNMAPPED = "unmapped"

_FAILURE_ISSUES = {
    SuggestionFailure.TIMEOUT: (
        IssueCode.MODEL_TIMEOUT,
        "Header suggestions timed out, using basic validation",
    ),
    SuggestionFailure.UNAVAILABLE: (
        IssueCode.MODEL_ERROR,
        "Header suggestions unavailable, using basic validation",
    ),
    SuggestionFailure.UNPARSEABLE: (
        IssueCode.MODEL_PARSE_ERROR,
        "Header suggestions could not be read, using basic validation only",
    ),
}

_SCHEMA_FIELDS = {f.value for f in ShipmentField}


@dataclass
class MergeResult:
    """Adjusted mapping plus the change log and issues the merge produced."""

    mapping: FieldMapping
    split: SplitMapping
    changes: list[ChangeRecord] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    applied: bool = False
    average_confidence: Optional[float] = None


def _percent(confidence: float) -> str:
    return f"{confidence * 100:.1f}%"


class SuggestionMerger:
    """
    Applies suggestions by confidence tier.

    Auto-tier suggestions rewrite the mapping, review-tier ones become
    warnings and reject-tier ones become errors. A failed outcome leaves the
    mapping as it was and adds a single warning.
    """

    def __init__(self, headers: Sequence[str]):
        self.headers = set(headers)

    def merge(
        self,
        outcome: SuggestionOutcome,
        mapping: FieldMapping,
        split: SplitMapping,
    ) -> MergeResult:
        result = MergeResult(mapping=dict(mapping), split=dict(split))

        if outcome.failed:
            code, message = _FAILURE_ISSUES[outcome.failure]
            result.issues.append(
                Issue(
                    code=code,
                    severity=Severity.WARN,
                    message=message,
                    suggestion="Check your data format and try again.",
                )
            )
            return result

        for suggestion in outcome.suggestions:
            tier = suggestion.tier
            if tier is ConfidenceTier.AUTO:
                self._apply(result, suggestion)
            elif tier is ConfidenceTier.REVIEW:
                result.issues.append(self._review_issue(suggestion))
            else:
                result.issues.append(self._reject_issue(suggestion))

        if outcome.suggestions:
            result.average_confidence = sum(s.confidence for s in outcome.suggestions) / len(
                outcome.suggestions
            )
        result.applied = result.mapping != mapping or result.split != split

        logger.info(
            f"Merged {len(outcome.suggestions)} suggestions: "
            f"{len(result.changes)} applied, {len(result.issues)} issues"
        )
        return result

    def _apply(self, result: MergeResult, suggestion: ConfidenceSuggestion) -> None:
        header, target = suggestion.header, suggestion.field

        if header not in self.headers or target not in _SCHEMA_FIELDS:
            unknown = f"header '{header}'" if header not in self.headers else f"field '{target}'"
            result.issues.append(
                Issue(
                    code=IssueCode.SUGGESTION_UNKNOWN_HEADER,
                    severity=Severity.WARN,
                    message=f"Suggested mapping {header} -> {target} refers to unknown {unknown}",
                    column=header,
                    suggestion="Suggestion ignored.",
                )
            )
            return

        if result.mapping.get(header) == target:
            return
        own_split = result.split.get(target)
        if own_split is not None and header in (own_split.date, own_split.time):
            # Already read from this date/time pair
            return

        previous = self._release_field(result, header, target)
        displaced = self._release_header(result, header, target)
        result.mapping[header] = target
        result.changes.append(
            ChangeRecord(
                type="mapping",
                field=target,
                from_value=previous or UNMAPPED,
                to_value=header,
                reason=f"Auto-mapped with {_percent(suggestion.confidence)} confidence",
            )
        )
        for lost_field, source in displaced:
            logger.info(f"Field '{lost_field}' lost column '{source}' to '{target}'")
            result.changes.append(
                ChangeRecord(
                    type="mapping",
                    field=lost_field,
                    from_value=source,
                    to_value=UNMAPPED,
                    reason=f"Column '{header}' reassigned to {target}",
                )
            )

    @staticmethod
    def _release_field(result: MergeResult, header: str, target: str) -> Optional[str]:
        """Drop every other source of ``target``; returns the first one dropped."""
        previous = None

        columns = result.split.pop(target, None)
        if columns is not None:
            previous = columns.synthetic_key
            result.mapping.pop(columns.synthetic_key, None)

        for holder, mapped in list(result.mapping.items()):
            if mapped == target and holder != header:
                previous = previous or holder
                del result.mapping[holder]

        return previous

    @staticmethod
    def _release_header(result: MergeResult, header: str, target: str) -> list[tuple[str, str]]:
        """Detach ``header`` from other fields; returns (field, former source) pairs."""
        displaced = []

        for other_field, other in list(result.split.items()):
            if header in (other.date, other.time):
                del result.split[other_field]
                result.mapping.pop(other.synthetic_key, None)
                displaced.append((other_field, other.synthetic_key))

        current = result.mapping.get(header)
        if current is not None and current != target:
            displaced.append((current, header))

        return displaced

    @staticmethod
    def _review_issue(suggestion: ConfidenceSuggestion) -> Issue:
        if suggestion.alternatives:
            hint = f"Consider alternatives: {', '.join(suggestion.alternatives)}"
        else:
            hint = "Review mapping accuracy"
        return Issue(
            code=IssueCode.MAPPING_AMBIGUOUS,
            severity=Severity.WARN,
            message=(
                f'Header "{suggestion.header}" has moderate confidence '
                f'({_percent(suggestion.confidence)}) for field "{suggestion.field}"'
            ),
            column=suggestion.header,
            suggestion=hint,
        )

    @staticmethod
    def _reject_issue(suggestion: ConfidenceSuggestion) -> Issue:
        return Issue(
            code=IssueCode.MAPPING_UNCLEAR,
            severity=Severity.ERROR,
            message=(
                f'Header "{suggestion.header}" has low confidence '
                f'({_percent(suggestion.confidence)}) for field "{suggestion.field}"'
            ),
            column=suggestion.header,
            suggestion="Manual mapping required - header meaning is unclear",
        )
