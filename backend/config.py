import os
from pydantic_settings import BaseSettings

DEFAULT_GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-1.5-flash-latest:generateContent"
)


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    # Gemini endpoint; the token travels as the ?key= query parameter
    gemini_api_url: str = DEFAULT_GEMINI_API_URL
    gemini_auth_token: str = ""
    gemini_timeout_seconds: float = 30.0

    max_file_size: int = 10 * 1024 * 1024  # bytes

    rate_limit_per_minute: int = 20
    rate_limit_per_hour: int = 300
    rate_limit_window_seconds: float = 60.0
    rate_limit_max_clients: int = 10_000
    rate_limit_sweep_interval_seconds: float = 300.0

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    log_level: str = "INFO"
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def max_file_size_mb(self) -> float:
        return self.max_file_size / 1024 / 1024


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
