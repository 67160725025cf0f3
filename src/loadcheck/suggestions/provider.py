"""Suggestion providers and the deadline wrapper used by the analyzer."""

import json
import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

import anthropic
import httpx
from pydantic import ValidationError

from ..config import Settings
from ..llm import AnthropicClient, LLMClient, OpenRouterClient
from .models import (
    ConfidenceSuggestion,
    SuggestionError,
    SuggestionFailure,
    SuggestionOutcome,
    SuggestionParseError,
    SuggestionPayload,
    SuggestionRequest,
    SuggestionTimeoutError,
    SuggestionUnavailableError,
)
from .prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)


class SuggestionProvider(ABC):
    """Source of confidence-scored header mappings."""

    @abstractmethod
    def suggest(self, request: SuggestionRequest) -> list[ConfidenceSuggestion]:
        """
        Propose header -> field mappings for a table excerpt.

        Raises:
            SuggestionUnavailableError: The backend could not be reached
            SuggestionTimeoutError: The backend's transport timed out
            SuggestionParseError: The answer was not valid suggestion JSON
        """
        pass


def parse_suggestions(text: str) -> list[ConfidenceSuggestion]:
    """Parse a ``{"mapping": [...]}`` JSON answer, tolerating code fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
        cleaned = cleaned.strip()

    try:
        data = json.loads(cleaned)
        return SuggestionPayload.model_validate(data).mapping
    except (json.JSONDecodeError, ValidationError) as e:
        raise SuggestionParseError(f"Unparseable suggestion output: {e}") from e


class LLMSuggestionProvider(SuggestionProvider):
    """Asks an LLM for header mappings."""

    def __init__(
        self,
        client: LLMClient,
        model: str,
        max_tokens: int = 2000,
        sample_rows: int = 20,
    ):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.sample_rows = sample_rows

    def suggest(self, request: SuggestionRequest) -> list[ConfidenceSuggestion]:
        bounded = request.model_copy(
            update={"sample_rows": request.sample_rows[: self.sample_rows]}
        )

        try:
            response = self.client.complete(
                system=SYSTEM_PROMPT,
                prompt=build_user_prompt(bounded),
                max_tokens=self.max_tokens,
                model=self.model,
            )
        except (httpx.TimeoutException, anthropic.APITimeoutError) as e:
            raise SuggestionTimeoutError(str(e)) from e
        except (httpx.HTTPError, anthropic.APIError) as e:
            raise SuggestionUnavailableError(str(e)) from e

        if response.usage:
            logger.debug(
                f"Suggestion tokens ({self.client.provider}): "
                f"{response.usage.get('input_tokens', 0)} in, "
                f"{response.usage.get('output_tokens', 0)} out"
            )
        if response.truncated:
            logger.warning(f"Suggestion answer hit max_tokens={self.max_tokens}")
        return parse_suggestions(response.text)


def fetch_suggestions(
    provider: SuggestionProvider,
    request: SuggestionRequest,
    timeout_seconds: float,
) -> SuggestionOutcome:
    """
    Call a provider under a hard deadline.

    The call runs in a worker thread. When the deadline passes the future is
    cancelled and abandoned so the caller never waits longer than
    ``timeout_seconds``. Every failure is folded into the returned outcome.
    """
    start = time.monotonic()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="suggestions")
    future = executor.submit(provider.suggest, request)

    def elapsed_ms() -> float:
        return (time.monotonic() - start) * 1000

    try:
        suggestions = future.result(timeout=timeout_seconds)
        return SuggestionOutcome(suggestions=suggestions, latency_ms=elapsed_ms())
    except (FutureTimeoutError, SuggestionTimeoutError) as e:
        future.cancel()
        logger.warning(f"Suggestion call exceeded {timeout_seconds}s deadline")
        return SuggestionOutcome(
            failure=SuggestionFailure.TIMEOUT, detail=str(e) or None, latency_ms=elapsed_ms()
        )
    except SuggestionParseError as e:
        logger.warning(f"Suggestion output could not be parsed: {e}")
        return SuggestionOutcome(
            failure=SuggestionFailure.UNPARSEABLE, detail=str(e), latency_ms=elapsed_ms()
        )
    except SuggestionError as e:
        logger.warning(f"Suggestion provider unavailable: {e}")
        return SuggestionOutcome(
            failure=SuggestionFailure.UNAVAILABLE, detail=str(e), latency_ms=elapsed_ms()
        )
    except Exception as e:
        logger.exception(f"Suggestion provider failed: {e}")
        return SuggestionOutcome(
            failure=SuggestionFailure.UNAVAILABLE, detail=str(e), latency_ms=elapsed_ms()
        )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def create_suggestion_provider(settings: Settings) -> Optional[SuggestionProvider]:
    """
    Build the configured LLM-backed provider.

    Returns None when suggestions are disabled or the selected backend has
    no API key, in which case the analyzer runs deterministically.
    """
    if not settings.enable_suggestions:
        return None

    timeout = settings.suggestion_timeout_seconds
    if settings.llm_provider == "openrouter":
        if not settings.openrouter_api_key:
            logger.info("OPENROUTER_API_KEY not set, header suggestions disabled")
            return None
        client: LLMClient = OpenRouterClient(api_key=settings.openrouter_api_key, timeout=timeout)
        model = settings.openrouter_model
    else:
        if not settings.anthropic_api_key:
            logger.info("ANTHROPIC_API_KEY not set, header suggestions disabled")
            return None
        client = AnthropicClient(api_key=settings.anthropic_api_key, timeout=timeout)
        model = settings.model_name

    return LLMSuggestionProvider(
        client=client,
        model=model,
        max_tokens=settings.suggestion_max_tokens,
        sample_rows=settings.suggestion_sample_rows,
    )
