import os
from pydantic_settings import BaseSettings


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
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.3

    # ESCO taxonomy API
    esco_api_url: str = "https://ec.europa.eu/esco/api"
    esco_language: str = "en"
    esco_search_limit: int = 10
    esco_max_retries: int = 3  # total attempts; only 5xx / connection errors are retried
    esco_retry_backoff_seconds: float = 1.0  # 1s, 2s, 3s ...
    esco_timeout_seconds: float = 15.0
    cooccurrence_max_workers: int = 8

    brave_search_api_key: str = ""
    brave_search_url: str = "https://api.search.brave.com/res/v1/web/search"

    database_url: str = "sqlite:///./talentbridge.db"

    max_upload_size_mb: int = 5
    max_cv_chars: int = 50000
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
