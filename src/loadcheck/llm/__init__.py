"""LLM backends used for header suggestions."""

from .anthropic_client import AnthropicClient
from .base import LLMClient, LLMResponse
from .openrouter_client import OpenRouterClient

__all__ = ["AnthropicClient", "LLMClient", "LLMResponse", "OpenRouterClient"]
