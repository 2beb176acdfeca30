"""Google Gemini REST gateway with error classification.

Google AI Studio authenticates with a ``?key=`` query parameter rather than an
Authorization header, so the call goes through httpx directly instead of the
SDK client. The request body is still built from the SDK's wire types.
"""

import logging

import httpx
from google.genai import types

from config import settings
from services.errors import (
    AuthenticationError,
    GatewayError,
    UpstreamBadRequestError,
    UpstreamError,
    UpstreamRateLimitError,
)

logger = logging.getLogger(__name__)

PROBE_PROMPT = "Hello"

_client: "GeminiClient | None" = None


def _mask(token: str) -> str:
    return f"{token[:6]}..." if token else "NONE"


def _error_detail(response: httpx.Response) -> str:
    """Pull the vendor's message out of an error body, e.g. {"error": {"message": ...}}."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class GeminiClient:
    def __init__(
        self,
        api_url: str,
        auth_token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.auth_token = auth_token
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def build_request(prompt: str) -> dict:
        """GenerateContentRequest body with a single user turn."""
        content = types.Content(role="user", parts=[types.Part(text=prompt)])
        return {"contents": [content.model_dump(mode="json", by_alias=True, exclude_none=True)]}

    async def generate(self, payload: dict) -> dict:
        """POST one generateContent request. No retries."""
        logger.info("Calling Gemini API %s (token %s)", self.api_url, _mask(self.auth_token))
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    params={"key": self.auth_token},
                    headers={"Content-Type": "application/json"},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._classify(e.response) from e
        except httpx.RequestError as e:
            logger.error("Gemini request error: %s", e)
            raise UpstreamError(f"API request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Empty response from Gemini API") from e
        if not data:
            raise UpstreamError("Empty response from Gemini API")
        if not isinstance(data, dict):
            raise UpstreamError("Unexpected response shape from Gemini API")

        logger.info("Gemini API response received (status %d)", response.status_code)
        return data

    def _classify(self, response: httpx.Response) -> GatewayError:
        status = response.status_code
        detail = _error_detail(response)
        logger.error("Gemini API error: HTTP %d: %s", status, response.text[:1000])

        if status == 401:
            return AuthenticationError("Authentication failed. Please check your API token.")
        if status == 429:
            return UpstreamRateLimitError("Rate limit exceeded. Please try again later.")
        if status == 400:
            return UpstreamBadRequestError(f"Bad request: {detail}")
        return UpstreamError(f"API request failed: {detail}")

    async def test_connection(self) -> bool:
        """Send a probe prompt; True if at least one candidate comes back."""
        try:
            response = await self.generate(self.build_request(PROBE_PROMPT))
        except Exception as e:
            logger.error("Gemini connection test failed: %s", e)
            return False

        connected = bool(response.get("candidates"))
        if connected:
            logger.info("Gemini connection test succeeded")
        else:
            logger.warning("Gemini connection test returned no candidates")
        return connected


def get_client() -> GeminiClient:
    global _client
    if _client is None:
        if not settings.gemini_auth_token:
            logger.warning("No GEMINI_AUTH_TOKEN set - Gemini requests will be rejected")
        _client = GeminiClient(
            api_url=settings.gemini_api_url,
            auth_token=settings.gemini_auth_token,
            timeout=settings.gemini_timeout_seconds,
        )
    return _client
