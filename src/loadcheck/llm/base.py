"""Base LLM client interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class LLMResponse:
    """Plain-text completion from a model."""

    text: str
    stop_reason: str
    usage: Optional[dict] = None

    @property
    def truncated(self) -> bool:
        return self.stop_reason == "max_tokens"


class LLMClient(ABC):
    """A backend that answers one system + user prompt with text."""

    provider: str = "unknown"

    @abstractmethod
    def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: int,
        model: str,
    ) -> LLMResponse:
        """
        Run a single-turn completion.

        Transport errors propagate as the backend library raises them
        (httpx or anthropic exception types).
        """
        pass
