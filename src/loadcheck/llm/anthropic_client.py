"""Anthropic LLM client."""

from anthropic import Anthropic

from .base import LLMClient, LLMResponse


class AnthropicClient(LLMClient):
    """Anthropic Messages API backend."""

    provider = "anthropic"

    def __init__(self, api_key: str, timeout: float = 60.0):
        self.client = Anthropic(api_key=api_key, timeout=timeout)

    def complete(self, system: str, prompt: str, max_tokens: int, model: str) -> LLMResponse:
        response = self.client.messages.create(
            model=model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        usage = None
        if response.usage is not None:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }
        return LLMResponse(text=text, stop_reason=response.stop_reason or "end_turn", usage=usage)
