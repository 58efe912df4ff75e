# ─────────────────────────────────────────────────────────────────────────────
# Settings — Pydantic v2 BaseSettings
# ─────────────────────────────────────────────────────────────────────────────


from functools import lru_cache

from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MISSING_API_KEY_MESSAGE = "GEMINI_API_KEY is not set. Please configure it before starting the server."


class Settings(BaseSettings):
    """Server configuration sourced from environment variables (and .env).

    Uses pydantic-settings v2 (separate package from pydantic).
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ── Generation service ───────────────────────────────────────────────────
    # Required. SecretStr keeps the key out of logs, repr(), and model_dump().
    gemini_api_key: SecretStr

    # ── Server ───────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000

    # Comma-separated origins for CORS. "*" = any origin.
    allowed_origins: str = "*"

    # ── Tracing ──────────────────────────────────────────────────────────────
    otel_exporter: str = ""  # "", "console" or "gcp"

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("gemini_api_key")
    @classmethod
    def api_key_must_not_be_blank(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("GEMINI_API_KEY must not be empty")
        return v


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()  # type: ignore[call-arg]


def is_missing_api_key(exc: ValidationError) -> bool:
    """True when settings failed to load because of the Gemini API key."""
    return any("gemini_api_key" in error.get("loc", ()) for error in exc.errors())
