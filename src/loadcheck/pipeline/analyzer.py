"""Orchestrates mapping, validation, suggestions and aggregation."""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import Settings
from ..config import settings as default_settings
from ..logging_utils import new_request_id, scrub_pii
from ..mapping import HeaderMapper, build_synonym_table
from ..mapping.models import HeaderMappingResult
from ..models import Issue, IssueCode, Severity
from ..suggestions import (
    SuggestionMerger,
    SuggestionProvider,
    SuggestionRequest,
    fetch_suggestions,
)
from ..suggestions.merger import MergeResult
from ..suggestions.models import SuggestionOutcome
from ..validation import (
    RowValidator,
    aggregate_issues,
    cell_text,
    check_required_columns,
    normalization_changes,
    validate_final_records,
)
from .models import (
    SERVICE_DETERMINISTIC,
    SERVICE_SUGGESTED,
    AnalysisRequest,
    AnalysisResponse,
    MappingMeta,
    RunMeta,
)

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ShipmentAnalyzer:
    """
    Runs one table through the full analysis pipeline.

    The analyzer holds configuration only; every call builds its own mapper,
    validator and merger, so a single instance can serve concurrent calls.
    Suggestions are requested only when a provider is injected.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        suggestion_provider: Optional[SuggestionProvider] = None,
    ):
        self.settings = settings or default_settings
        self.suggestion_provider = suggestion_provider

    def analyze(
        self,
        request: AnalysisRequest,
        request_id: Optional[str] = None,
    ) -> AnalysisResponse:
        """Analyze a bounded request and build the response."""
        started = time.monotonic()
        request_id = request_id or new_request_id()
        options = request.options
        assume_timezone = options.assume_timezone or self.settings.default_timezone
        day_first = options.day_first if options.day_first is not None else self.settings.day_first

        logger.info(
            f"[{request_id}] Analyzing {len(request.rows)} rows x {len(request.headers)} columns "
            f"(timezone={assume_timezone}, day_first={day_first})"
        )
        logger.debug(f"[{request_id}] Headers preview: {scrub_pii(request.headers[:3])}")

        def run_meta(analyzed_rows: int, **extra) -> RunMeta:
            return RunMeta(
                analyzed_rows=analyzed_rows,
                analyzed_at=_now_iso(),
                request_id=request_id,
                total_latency_ms=(time.monotonic() - started) * 1000,
                **extra,
            )

        if not request.rows:
            return AnalysisResponse(
                ok=False,
                issues=[
                    Issue(
                        code=IssueCode.NO_DATA,
                        severity=Severity.ERROR,
                        message="No data rows found to analyze",
                        suggestion="Ensure your spreadsheet has data below the header row",
                    )
                ],
                meta=run_meta(0),
            )

        mapper = HeaderMapper(build_synonym_table(request.known_synonyms))
        mapped = mapper.map_headers(request.headers, request.header_overrides)
        logger.debug(f"[{request_id}] Header mapping: {mapped.mapping}")

        column_issues = check_required_columns(mapped.mapping, mapped.split)
        if column_issues:
            logger.info(f"[{request_id}] Missing {len(column_issues)} required columns")
            return AnalysisResponse(
                ok=False,
                issues=column_issues,
                mapping=mapped.mapping,
                mapping_meta=MappingMeta(split=mapped.split, ambiguities=mapped.ambiguities),
                meta=run_meta(0),
            )

        validator = RowValidator(assume_timezone=assume_timezone, day_first=day_first)
        rows_result = validator.validate(request.headers, request.rows, mapped.mapping, mapped.split)

        outcome: Optional[SuggestionOutcome] = None
        merged: Optional[MergeResult] = None
        effective = mapped
        if self.suggestion_provider is not None:
            outcome = self._request_suggestions(request, assume_timezone, request_id)
            merged = SuggestionMerger(request.headers).merge(outcome, mapped.mapping, mapped.split)
            if merged.applied:
                effective = mapped.with_mapping(request.headers, merged.mapping, merged.split)
                lost_columns = check_required_columns(merged.mapping, merged.split)
                if lost_columns:
                    logger.warning(
                        f"[{request_id}] Adjusted mapping left {len(lost_columns)} "
                        f"required fields without a column"
                    )
                    return self._lost_columns_response(
                        effective, merged, outcome, lost_columns, run_meta
                    )
                logger.info(f"[{request_id}] Re-validating rows with adjusted mapping")
                rows_result = validator.validate(
                    request.headers, request.rows, merged.mapping, merged.split
                )

        final_issues = validate_final_records(rows_result.records, rows_result.record_rows)
        aggregated = aggregate_issues(
            [
                effective.issues(),
                rows_result.issues,
                merged.issues if merged else [],
                final_issues,
            ],
            record_count=len(rows_result.records),
            max_issues=self.settings.max_issues,
        )

        changes = (merged.changes if merged else []) + normalization_changes(rows_result)
        has_vocab_warning = any(
            issue.code == IssueCode.VOCAB_STATUS.value for issue in aggregated.issues
        )
        applied = merged is not None and merged.applied

        response = AnalysisResponse(
            ok=aggregated.ok,
            issues=aggregated.issues,
            records=rows_result.records if aggregated.ok else None,
            mapping=merged.mapping if merged else mapped.mapping,
            mapping_meta=self._mapping_meta(mapped, merged, outcome),
            changes=changes or None,
            meta=run_meta(
                len(request.rows),
                suggestion_latency_ms=outcome.latency_ms if outcome else None,
                confidence=merged.average_confidence if merged else None,
                status_values=rows_result.status_values if has_vocab_warning else None,
                dropped_issues=aggregated.dropped_count,
                service=SERVICE_SUGGESTED if applied else SERVICE_DETERMINISTIC,
            ),
        )

        logger.info(
            f"[{request_id}] Analysis completed: ok={response.ok}, "
            f"errors={aggregated.error_count}, warnings={aggregated.warning_count}, "
            f"records={len(rows_result.records)}"
        )
        return response

    def _request_suggestions(
        self,
        request: AnalysisRequest,
        assume_timezone: str,
        request_id: str,
    ) -> SuggestionOutcome:
        sample = [
            [cell_text(cell) for cell in row]
            for row in request.rows[: self.settings.suggestion_sample_rows]
        ]
        suggestion_request = SuggestionRequest(
            headers=request.headers,
            sample_rows=sample,
            assume_timezone=assume_timezone,
            locale=request.options.locale,
        )
        outcome = fetch_suggestions(
            self.suggestion_provider,
            suggestion_request,
            timeout_seconds=self.settings.suggestion_timeout_seconds,
        )
        logger.info(
            f"[{request_id}] Suggestions: {len(outcome.suggestions)} received, "
            f"failure={outcome.failure.value if outcome.failure else None}, "
            f"{outcome.latency_ms:.0f}ms"
        )
        return outcome

    def _lost_columns_response(
        self,
        effective: HeaderMappingResult,
        merged: MergeResult,
        outcome: SuggestionOutcome,
        lost_columns: list[Issue],
        run_meta: Callable[..., RunMeta],
    ) -> AnalysisResponse:
        """Stop like a missing column would when suggestions take a required field's column."""
        aggregated = aggregate_issues(
            [effective.issues(), lost_columns, merged.issues],
            record_count=0,
            max_issues=self.settings.max_issues,
        )
        return AnalysisResponse(
            ok=False,
            issues=aggregated.issues,
            mapping=merged.mapping,
            mapping_meta=self._mapping_meta(effective, merged, outcome),
            changes=merged.changes or None,
            meta=run_meta(
                0,
                suggestion_latency_ms=outcome.latency_ms,
                confidence=merged.average_confidence,
                dropped_issues=aggregated.dropped_count,
                service=SERVICE_SUGGESTED,
            ),
        )

    @staticmethod
    def _mapping_meta(
        mapped: HeaderMappingResult,
        merged: Optional[MergeResult],
        outcome: Optional[SuggestionOutcome],
    ) -> MappingMeta:
        return MappingMeta(
            split=merged.split if merged else mapped.split,
            ambiguities=mapped.ambiguities,
            suggestions_applied=merged is not None and merged.applied,
            suggestions=outcome.suggestions if outcome and outcome.suggestions else None,
        )
