"""Confidence-scored header mapping suggestions."""

from .models import (
    ConfidenceSuggestion,
    ConfidenceTier,
    SuggestionError,
    SuggestionFailure,
    SuggestionOutcome,
    SuggestionParseError,
    SuggestionRequest,
    SuggestionTimeoutError,
    SuggestionUnavailableError,
    confidence_tier,
)
from .provider import (
    LLMSuggestionProvider,
    SuggestionProvider,
    create_suggestion_provider,
    fetch_suggestions,
    parse_suggestions,
)
from .merger import MergeResult, SuggestionMerger

__all__ = [
    "ConfidenceSuggestion",
    "ConfidenceTier",
    "SuggestionError",
    "SuggestionFailure",
    "SuggestionOutcome",
    "SuggestionParseError",
    "SuggestionRequest",
    "SuggestionTimeoutError",
    "SuggestionUnavailableError",
    "confidence_tier",
    "LLMSuggestionProvider",
    "SuggestionProvider",
    "create_suggestion_provider",
    "fetch_suggestions",
    "parse_suggestions",
    "MergeResult",
    "SuggestionMerger",
]
