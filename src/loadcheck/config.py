"""Configuration management for LoadCheck."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


def _parse_allowed_origins() -> list[str]:
    """Parse the request origin allow-list. Empty means unrestricted."""
    origins_env = os.getenv("ALLOWED_ORIGINS", "")
    return [o.strip() for o in origins_env.split(",") if o.strip()]


class Settings(BaseModel):
    """Application settings."""

    # LLM Provider settings ('anthropic' or 'openrouter')
    llm_provider: str = os.getenv("LLM_PROVIDER", "anthropic")

    # Anthropic API key (required when LLM_PROVIDER=anthropic)
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")

    # OpenRouter API configuration (required when LLM_PROVIDER=openrouter)
    openrouter_api_key: Optional[str] = os.getenv("OPENROUTER_API_KEY")
    openrouter_model: str = os.getenv("OPENROUTER_MODEL", "anthropic/claude-3.5-sonnet")

    # Header mapping suggestions
    model_name: str = os.getenv("MODEL_NAME", "claude-sonnet-4-20250514")
    suggestion_max_tokens: int = int(os.getenv("SUGGESTION_MAX_TOKENS", "2000"))
    enable_suggestions: bool = os.getenv("ENABLE_SUGGESTIONS", "true").lower() == "true"
    suggestion_timeout_seconds: float = float(os.getenv("SUGGESTION_TIMEOUT_SECONDS", "25"))
    suggestion_sample_rows: int = int(os.getenv("SUGGESTION_SAMPLE_ROWS", "20"))

    # Request signing (disabled when no secret is set)
    hmac_secret: Optional[str] = os.getenv("HMAC_SECRET") or None
    hmac_max_skew_seconds: int = int(os.getenv("HMAC_MAX_SKEW_SECONDS", "300"))

    # Rate limiting per caller
    rate_limit_rpm: int = int(os.getenv("RATE_LIMIT_RPM", "10"))
    rate_limit_window_seconds: float = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()
    allowed_origins: list[str] = _parse_allowed_origins()

    # Input bounds applied before analysis
    max_payload_bytes: int = int(os.getenv("MAX_PAYLOAD_BYTES", str(2 * 1024 * 1024)))
    max_columns: int = int(os.getenv("MAX_COLUMNS", "50"))
    max_rows: int = int(os.getenv("MAX_ROWS", "200"))
    max_header_chars: int = int(os.getenv("MAX_HEADER_CHARS", "120"))
    max_cell_chars: int = int(os.getenv("MAX_CELL_CHARS", "300"))
    max_issues: int = int(os.getenv("MAX_ISSUES", "100"))

    # Date interpretation
    default_timezone: str = os.getenv("DEFAULT_TIMEZONE", "UTC")
    day_first: bool = os.getenv("DAY_FIRST", "false").lower() == "true"  # 20/09/2025 style when true


settings = Settings()
