"""API routes for LoadCheck."""

import asyncio
import json
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from ..logging_utils import new_request_id, scrub_pii
from ..pipeline import AnalysisRequest, AnalysisResponse, ShipmentAnalyzer, bound_request
from ..suggestions import create_suggestion_provider
from .security import TokenBucketLimiter, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter()

TIMESTAMP_HEADER = "x-ttc-timestamp"
SIGNATURE_HEADER = "x-ttc-signature"

# Global instances, built on first use
_analyzer: Optional[ShipmentAnalyzer] = None
_limiter: Optional[TokenBucketLimiter] = None


def get_analyzer() -> ShipmentAnalyzer:
    """Get the global analyzer instance."""
    global _analyzer
    if _analyzer is None:
        from ..config import settings

        _analyzer = ShipmentAnalyzer(
            settings=settings,
            suggestion_provider=create_suggestion_provider(settings),
        )
    return _analyzer


def get_rate_limiter() -> TokenBucketLimiter:
    """Get the global rate limiter instance."""
    global _limiter
    if _limiter is None:
        from ..config import settings

        _limiter = TokenBucketLimiter(
            capacity=settings.rate_limit_rpm,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _limiter


def _normalize_origin(origin: str) -> str:
    return origin.strip().lower().rstrip("/")


def _origin_allowed(origin: Optional[str], allowed: list[str]) -> bool:
    if not allowed:
        return True
    if not origin:
        return False
    return _normalize_origin(origin) in {_normalize_origin(o) for o in allowed}


def _caller_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "anon"


@router.get("/health")
async def health_check():
    """Health check endpoint with non-secret configuration."""
    from ..config import settings

    config = {
        "llm_provider": settings.llm_provider,
        "model_name": settings.model_name,
        "suggestions_enabled": settings.enable_suggestions,
        "anthropic_key_present": bool(settings.anthropic_api_key),
        "openrouter_key_present": bool(settings.openrouter_api_key),
        "signing_enabled": bool(settings.hmac_secret),
        "rate_limit_rpm": settings.rate_limit_rpm,
        "max_rows": settings.max_rows,
        "max_columns": settings.max_columns,
    }

    if settings.llm_provider == "openrouter":
        config["openrouter_model"] = settings.openrouter_model

    return {
        "status": "ok",
        "service": "loadcheck",
        "config": config,
    }


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
)
async def analyze(request: Request):
    """Analyze a shipment table."""
    from ..config import settings

    request_id = new_request_id()

    origin = request.headers.get("origin")
    if not _origin_allowed(origin, settings.allowed_origins):
        logger.info(f"[{request_id}] Origin not allowed: {scrub_pii(origin)}")
        raise HTTPException(status_code=403, detail="Origin not allowed")

    caller = _caller_key(request)
    decision = get_rate_limiter().acquire(caller)
    if not decision.allowed:
        logger.info(f"[{request_id}] Rate limit exceeded, retry after {decision.retry_after}s")
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded. Try again in a moment.",
            headers={"Retry-After": str(decision.retry_after)},
        )

    raw = await request.body()
    declared = request.headers.get("content-length", "0")
    declared_size = int(declared) if declared.isdigit() else 0
    if max(len(raw), declared_size) > settings.max_payload_bytes:
        logger.info(f"[{request_id}] Payload too large: {len(raw)} bytes")
        raise HTTPException(
            status_code=413,
            detail="Payload too large. Please reduce the number of rows.",
        )

    try:
        body = json.loads(raw or b"null")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Bad body: {e}")

    if settings.hmac_secret:
        valid = verify_signature(
            settings.hmac_secret,
            body,
            request.headers.get(TIMESTAMP_HEADER),
            request.headers.get(SIGNATURE_HEADER),
            max_skew_seconds=settings.hmac_max_skew_seconds,
        )
        if not valid:
            logger.info(f"[{request_id}] Signature validation failed")
            raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        analysis_request = AnalysisRequest.model_validate(body)
    except ValidationError as e:
        logger.info(f"[{request_id}] Invalid request body: {e.error_count()} errors")
        raise HTTPException(status_code=400, detail=f"Bad body: {e.errors()[0]['msg']}")

    bounded = bound_request(analysis_request, settings)
    return await asyncio.to_thread(get_analyzer().analyze, bounded, request_id)
