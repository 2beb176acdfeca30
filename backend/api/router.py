import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import enforce_rate_limit, get_gemini_client, http_error
from config import settings
from models.requests import AnalyzeProfileRequest
from models.responses import AIConnectionResponse, AnalyzeProfileResponse, HealthResponse
from services import profile_analyzer
from services.errors import AnalysisError
from services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

PROCEDURES = {
    "profile.health": "GET /trpc/profile.health - Health check",
    "profile.testAI": "GET /trpc/profile.testAI - Test AI connection",
    "profile.analyzeProfile": "POST /trpc/profile.analyzeProfile - Analyze CV against job description",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def index():
    return {
        "message": "Profile Analyzer Server",
        "version": "1.0.0",
        "status": "healthy",
        "timestamp": _now(),
        "endpoints": {
            "health": "GET /health",
            "procedures": PROCEDURES,
        },
    }


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": _now(),
        "server": "fastapi",
        "environment": settings.environment,
        "rateLimits": {
            "perMinute": settings.rate_limit_per_minute,
            "perHour": settings.rate_limit_per_hour,
        },
    }


@router.get("/trpc/profile.health", response_model=HealthResponse)
async def profile_health():
    return HealthResponse(timestamp=_now())


@router.get("/trpc/profile.testAI", response_model=AIConnectionResponse)
async def profile_test_ai(client: GeminiClient = Depends(get_gemini_client)):
    try:
        connected = await client.test_connection()
    except Exception as e:
        logger.exception("AI connection test crashed")
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_SERVER_ERROR", "message": "Failed to test AI connection"},
        ) from e
    return AIConnectionResponse(connected=connected, timestamp=_now(), api_url=client.api_url)


@router.post(
    "/trpc/profile.analyzeProfile",
    response_model=AnalyzeProfileResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
@limiter.limit(f"{settings.rate_limit_per_hour}/hour")
async def profile_analyze(
    request: Request,
    body: AnalyzeProfileRequest,
    client: GeminiClient = Depends(get_gemini_client),
):
    try:
        return await profile_analyzer.analyze_profile(
            body, client, max_file_size=settings.max_file_size
        )
    except AnalysisError as e:
        logger.warning("analyzeProfile failed: %s: %s", type(e).__name__, e.message)
        raise http_error(e) from e
