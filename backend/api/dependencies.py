"""Shared dependencies for API routes."""

from fastapi import Depends, HTTPException, Request

from config import settings
from services.errors import AnalysisError, RateLimitError
from services.gemini_client import GeminiClient, get_client
from services.rate_limiter import FixedWindowRateLimiter

_rate_limiter: FixedWindowRateLimiter | None = None


def http_error(error: AnalysisError) -> HTTPException:
    headers = None
    if isinstance(error, RateLimitError):
        headers = {"Retry-After": str(max(1, round(error.retry_after)))}
    return HTTPException(
        status_code=error.status_code,
        detail={"code": error.code, "message": error.message},
        headers=headers,
    )


def get_gemini_client() -> GeminiClient:
    return get_client()


def get_rate_limiter() -> FixedWindowRateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = FixedWindowRateLimiter(
            limit=settings.rate_limit_per_minute,
            window_seconds=settings.rate_limit_window_seconds,
            max_clients=settings.rate_limit_max_clients,
        )
    return _rate_limiter


def enforce_rate_limit(
    request: Request,
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> None:
    key = request.client.host if request.client else "unknown"
    try:
        limiter.check_and_increment(key)
    except RateLimitError as e:
        raise http_error(e) from e
