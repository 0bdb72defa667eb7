import os
from pydantic_settings import BaseSettings

from models.schemas.tuning import ParserTuning


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
    max_upload_size_mb: int = 5
    max_text_chars: int = 50000
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    # AI enhancement
    use_ai_by_default: bool = True
    ai_temperature: float = 0.1
    ai_max_tokens: int = 4096
    ai_timeout_seconds: float = 30.0

    # Thresholds and weights, e.g. TUNING__SKILL_CATEGORY_SIMILARITY=0.75
    tuning: ParserTuning = ParserTuning()

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_nested_delimiter": "__"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
