"""Service configuration, read from the environment and `.env`."""

from typing import Optional, Union
from pydantic_settings import BaseSettings
from pydantic import validator


class Settings(BaseSettings):
    """Environment-backed settings; admin-saved values fill unset keys at runtime."""

    # Generative AI
    openai_api_key: Optional[str] = None
    chat_model: str = "gpt-4o"
    structured_model: str = "gpt-4o-mini"
    search_model: str = "gpt-4o-mini"
    transcription_model: str = "whisper-1"
    speech_model: str = "tts-1"

    # Remote document store: JSON {"url": ..., "key": ...}
    remote_store_config: Optional[str] = None

    # Local key/value store (browser local storage equivalent)
    local_storage_path: str = ".reggenie/local_storage.json"

    # News cache / refresh
    news_cache_minutes: int = 30
    news_refresh_minutes: int = 30

    # Translation cost model
    token_factor: float = 1.35
    cost_per_million_tokens: float = 0.75

    # Service
    env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    port: int = 8000

    # CORS; a plain string is accepted so comma lists survive env parsing
    allowed_origins: Union[list[str], str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @validator("allowed_origins", pre=True)
    def split_origins(cls, v):
        """Accept "a, b" as well as a JSON list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @validator("debug", pre=True)
    def coerce_debug(cls, v):
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes", "on")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "hpack")


def is_production() -> bool:
    return settings.env.lower() == "production"


def get_log_config() -> dict:
    """dictConfig for the service: one console handler, terse in production."""
    level = settings.log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            },
            "detailed": {
                "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard" if is_production() else "detailed",
            },
        },
        "loggers": {
            name: {"level": "WARNING"} for name in QUIET_LOGGERS
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }
