"""Request and response models for shipment table analysis."""

from typing import Optional, Union

from pydantic import BaseModel, Field

from ..mapping.models import Ambiguity, FieldMapping, SplitColumns
from ..models import ChangeRecord, Issue, ShipmentRecord
from ..suggestions.models import ConfidenceSuggestion

Cell = Optional[Union[str, int, float]]

SERVICE_DETERMINISTIC = "deterministic"
SERVICE_SUGGESTED = "suggested"


class AnalysisOptions(BaseModel):
    """Per-request knobs; unset values fall back to settings."""

    row_limit: Optional[int] = Field(default=None, ge=1)
    assume_timezone: Optional[str] = None
    locale: str = "en-US"
    day_first: Optional[bool] = None


class AnalysisRequest(BaseModel):
    """A table extract submitted for analysis."""

    headers: list[str]
    rows: list[list[Cell]] = Field(default_factory=list)
    header_overrides: Optional[dict[str, str]] = None
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)
    known_synonyms: Optional[dict[str, list[str]]] = None


class MappingMeta(BaseModel):
    """How the effective mapping was reached."""

    split: dict[str, SplitColumns] = Field(default_factory=dict)
    ambiguities: list[Ambiguity] = Field(default_factory=list)
    suggestions_applied: bool = False
    suggestions: Optional[list[ConfidenceSuggestion]] = None


class RunMeta(BaseModel):
    """Run metadata."""

    analyzed_rows: int
    analyzed_at: str
    request_id: str
    total_latency_ms: float
    suggestion_latency_ms: Optional[float] = None
    confidence: Optional[float] = None
    status_values: Optional[list[str]] = None
    dropped_issues: int = 0
    service: str = SERVICE_DETERMINISTIC


class AnalysisResponse(BaseModel):
    """
    Result of analyzing one table.

    ``records`` is set only when ``ok`` is true; callers must rely on ``ok``
    rather than on issue counts.
    """

    ok: bool
    issues: list[Issue] = Field(default_factory=list)
    records: Optional[list[ShipmentRecord]] = None
    mapping: FieldMapping = Field(default_factory=dict)
    mapping_meta: MappingMeta = Field(default_factory=MappingMeta)
    changes: Optional[list[ChangeRecord]] = None
    meta: RunMeta
