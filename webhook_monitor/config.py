"""Application configuration via pydantic-settings."""

import re
from functools import lru_cache

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

KNOWN_ENVIRONMENTS = ("development", "staging", "production")

_ENVIRONMENT_LOG_LEVELS = {
    "development": "DEBUG",
    "staging": "INFO",
    "production": "WARNING",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = ""  # empty: derived from environment
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "https://localhost:3000",
    ]
    # API key (optional): if set, required on /api read and test routes.
    # Never applied to webhook delivery.
    api_key: str = ""

    # Rate limiting (/api/*)
    rate_limit_enabled: bool = True
    rate_limit_window_minutes: int = 15
    rate_limit_max: int = 100

    # Outbound webhook testing
    webhook_url: str = "http://localhost:3000/api/webhook"
    api_timeout_seconds: float = 10.0

    # GitHub (reported only, signatures are not verified)
    github_webhook_secret: str = ""

    # Feature flags
    feature_webhook_testing: bool = True
    feature_metrics_collection: bool = True

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return _ENVIRONMENT_LOG_LEVELS.get(self.environment, "INFO")

    @property
    def rate_limit(self) -> str:
        return f"{self.rate_limit_max}/{self.rate_limit_window_minutes} minutes"


class ConfigValidation(BaseModel):
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_config(settings: Settings) -> ConfigValidation:
    """Check settings for values that would break the service or look wrong.

    Errors make the configuration unusable; warnings are logged at startup.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not 1 <= settings.port <= 65535:
        errors.append("Invalid port number. Must be between 1 and 65535.")

    if settings.environment not in KNOWN_ENVIRONMENTS:
        warnings.append(
            f"Unknown environment '{settings.environment}'. "
            f"Expected: {', '.join(KNOWN_ENVIRONMENTS)}"
        )

    if settings.api_timeout_seconds < 1:
        warnings.append("API timeout is less than 1 second. This may cause issues.")

    if settings.rate_limit_max < 1:
        errors.append("Rate limit max must be at least 1 request.")
    if settings.rate_limit_window_minutes < 1:
        errors.append("Rate limit window must be at least 1 minute.")

    if settings.webhook_url and not settings.webhook_url.startswith("http"):
        warnings.append("Webhook URL should start with http:// or https://")

    if settings.environment == "production":
        if not settings.github_webhook_secret:
            warnings.append("GitHub webhook secret not configured for production.")
        if "*" in settings.allowed_origins:
            warnings.append("CORS allows all origins in production. Consider restricting.")

    return ConfigValidation(valid=not errors, errors=errors, warnings=warnings)


def _redact_url(url: str) -> str:
    return re.sub(r"//[^/@]*@", "//***@", url)


def config_summary(settings: Settings) -> dict:
    """Non-secret view of the settings for logs and the status endpoint."""
    return {
        "environment": settings.environment,
        "port": settings.port,
        "log_level": settings.effective_log_level,
        "webhook_url": _redact_url(settings.webhook_url) if settings.webhook_url else None,
        "features": {
            "webhook_testing": settings.feature_webhook_testing,
            "metrics_collection": settings.feature_metrics_collection,
        },
        "rate_limiting": {
            "enabled": settings.rate_limit_enabled,
            "window_minutes": settings.rate_limit_window_minutes,
            "max_requests": settings.rate_limit_max,
        },
        "cors_origins": len(settings.allowed_origins),
    }


def is_feature_enabled(settings: Settings, name: str) -> bool:
    return getattr(settings, f"feature_{name}", False) is True


@lru_cache
def get_settings() -> Settings:
    return Settings()
