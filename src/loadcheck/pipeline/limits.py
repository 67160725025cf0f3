"""Input bounding applied before a request reaches the analyzer."""

import logging

from ..config import Settings
from .models import AnalysisRequest, Cell

logger = logging.getLogger(__name__)


def _clip_cell(cell: Cell, max_chars: int) -> Cell:
    if isinstance(cell, str) and len(cell) > max_chars:
        return cell[:max_chars]
    return cell


def bound_request(request: AnalysisRequest, settings: Settings) -> AnalysisRequest:
    """
    Return a copy of the request cut down to the configured limits.

    Columns beyond ``max_columns`` are dropped from the header and every row,
    rows beyond ``min(max_rows, options.row_limit)`` are dropped, and header
    and string cell text is truncated. Override keys are truncated the same
    way so they keep matching their headers.
    """
    max_rows = settings.max_rows
    if request.options.row_limit:
        max_rows = min(max_rows, request.options.row_limit)

    headers = [h[: settings.max_header_chars] for h in request.headers[: settings.max_columns]]
    rows = [
        [_clip_cell(cell, settings.max_cell_chars) for cell in row[: settings.max_columns]]
        for row in request.rows[:max_rows]
    ]

    overrides = None
    if request.header_overrides is not None:
        overrides = {
            header[: settings.max_header_chars]: target
            for header, target in request.header_overrides.items()
        }

    if len(request.headers) > settings.max_columns or len(request.rows) > max_rows:
        logger.info(
            f"Bounded request from {len(request.rows)}x{len(request.headers)} "
            f"to {len(rows)}x{len(headers)}"
        )

    return request.model_copy(
        update={"headers": headers, "rows": rows, "header_overrides": overrides}
    )
