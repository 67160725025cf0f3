"""OpenRouter LLM client."""

import httpx

from .base import LLMClient, LLMResponse

# OpenAI-style finish reasons -> Anthropic-style stop reasons
_STOP_REASONS = {
    "stop": "end_turn",
    "length": "max_tokens",
}


class OpenRouterClient(LLMClient):
    """OpenRouter chat-completions backend returning JSON objects."""

    provider = "openrouter"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def complete(self, system: str, prompt: str, max_tokens: int, model: str) -> LLMResponse:
        payload = {
            "model": model,
            "messages": self._build_messages(system, prompt),
            "max_tokens": max_tokens,
            "temperature": 0,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": "LoadCheck",
        }

        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        return self._parse_completion(data)

    def _build_messages(self, system: str, prompt: str) -> list[dict]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _parse_completion(self, data: dict) -> LLMResponse:
        """Flatten the first choice of a chat-completions body."""
        choices = data.get("choices") or []
        if not choices:
            return LLMResponse(text="", stop_reason="empty")

        choice = choices[0]
        finish_reason = choice.get("finish_reason") or "stop"

        usage = None
        if "usage" in data:
            usage = {
                "input_tokens": data["usage"].get("prompt_tokens", 0),
                "output_tokens": data["usage"].get("completion_tokens", 0),
            }

        return LLMResponse(
            text=(choice.get("message") or {}).get("content") or "",
            stop_reason=_STOP_REASONS.get(finish_reason, finish_reason),
            usage=usage,
        )
