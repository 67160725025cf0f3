"""Logging helpers: configuration, request ids and PII scrubbing."""

import logging
import re
import secrets
from typing import Any

_PHONE_PATTERN = re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b")
_NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b")
_SCRUBBED_KEYS = ("phone", "driver")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI and server."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def new_request_id() -> str:
    """Generate a short request id for log correlation."""
    return secrets.token_hex(4)


def scrub_pii(value: Any) -> Any:
    """
    Mask personal data before it reaches a log line.

    Strings have phone numbers and "First Last" name patterns replaced;
    dict entries whose key mentions a phone or driver are blanked entirely.
    """
    if isinstance(value, str):
        value = _PHONE_PATTERN.sub("[PHONE]", value)
        return _NAME_PATTERN.sub("[NAME]", value)
    if isinstance(value, (list, tuple)):
        return [scrub_pii(v) for v in value]
    if isinstance(value, dict):
        scrubbed = {}
        for key, item in value.items():
            if any(marker in str(key).lower() for marker in _SCRUBBED_KEYS):
                scrubbed[key] = "[SCRUBBED]"
            else:
                scrubbed[key] = scrub_pii(item)
        return scrubbed
    return value
