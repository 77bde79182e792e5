"""
Configuration helpers for the blog API.

Settings is built once per process from environment variables and treated as
read-only afterwards. Tests change env vars and call
``get_settings.cache_clear()`` to force a re-read.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    app_name: str
    public_base_url: str
    database_url: str
    storage_root: str
    storage_url_prefix: str
    token_ttl_seconds: int
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    weather_api_key: str
    weather_base_url: str
    weather_cache_ttl: int
    weather_rate_limit: int
    weather_timeout: float
    celery_broker_url: str
    celery_task_always_eager: bool
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str | None, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    prefix = "/" + (os.getenv("STORAGE_URL_PREFIX") or "/storage").strip("/")
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        app_name=os.getenv("APP_NAME", "Blog API"),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./blog_api.db"),
        storage_root=os.getenv("STORAGE_ROOT", os.path.join(".", "storage", "public")),
        storage_url_prefix=prefix,
        token_ttl_seconds=_int(os.getenv("TOKEN_TTL_SECONDS", "0"), 0),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        weather_api_key=os.getenv("WEATHER_API_KEY", ""),
        weather_base_url=os.getenv(
            "WEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5/weather"
        ),
        weather_cache_ttl=_int(os.getenv("WEATHER_CACHE_TTL", "900"), 900),
        weather_rate_limit=_int(os.getenv("WEATHER_RATE_LIMIT", "60"), 60),
        weather_timeout=_float(os.getenv("WEATHER_TIMEOUT", "10"), 10.0),
        celery_broker_url=os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0"),
        celery_task_always_eager=_bool(os.getenv("CELERY_TASK_ALWAYS_EAGER"), False),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
