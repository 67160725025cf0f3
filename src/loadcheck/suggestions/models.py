"""Data models for externally suggested header mappings."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

AUTO_APPLY_THRESHOLD = 0.9
REVIEW_THRESHOLD = 0.6


class ConfidenceTier(str, Enum):
    """How a suggestion is treated, by confidence."""

    AUTO = "auto"  # >= 0.9, applied without review
    REVIEW = "review"  # [0.6, 0.9), surfaced as a warning
    REJECT = "reject"  # < 0.6, surfaced as an error


def confidence_tier(confidence: float) -> ConfidenceTier:
    if confidence >= AUTO_APPLY_THRESHOLD:
        return ConfidenceTier.AUTO
    if confidence >= REVIEW_THRESHOLD:
        return ConfidenceTier.REVIEW
    return ConfidenceTier.REJECT


class ConfidenceSuggestion(BaseModel):
    """A header -> field mapping proposed with a confidence score."""

    header: str
    field: str
    confidence: float = Field(ge=0.0, le=1.0)
    alternatives: Optional[list[str]] = None

    @property
    def tier(self) -> ConfidenceTier:
        return confidence_tier(self.confidence)


class SuggestionPayload(BaseModel):
    """Expected shape of the provider's JSON answer."""

    mapping: list[ConfidenceSuggestion] = Field(default_factory=list)


class SuggestionRequest(BaseModel):
    """Table excerpt submitted to a suggestion provider."""

    headers: list[str]
    sample_rows: list[list[str]] = Field(default_factory=list)
    assume_timezone: str = "UTC"
    locale: str = "en-US"


class SuggestionFailure(str, Enum):
    """Why suggestions could not be obtained."""

    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    UNPARSEABLE = "unparseable"


@dataclass
class SuggestionOutcome:
    """Suggestions returned by a provider, or the reason there are none."""

    suggestions: list[ConfidenceSuggestion] = field(default_factory=list)
    failure: Optional[SuggestionFailure] = None
    detail: Optional[str] = None
    latency_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.failure is not None


class SuggestionError(Exception):
    """Base exception for suggestion providers."""

    pass


class SuggestionUnavailableError(SuggestionError):
    """Raised when the provider cannot be reached or returns an error."""

    pass


class SuggestionTimeoutError(SuggestionError):
    """Raised when the provider's own transport times out."""

    pass


class SuggestionParseError(SuggestionError):
    """Raised when the provider's answer cannot be parsed."""

    pass
