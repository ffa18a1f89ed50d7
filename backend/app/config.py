"""
Postboard Backend: Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "change-me-postboard-development-secret"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST
    override DATABASE_URL, JWT_SECRET and CORS_ORIGINS.
    """

    # ── Application ───────────────────────────────────────────────────────
    app_env: str = Field(default="development")

    # ── Database ──────────────────────────────────────────────────────────
    # Async SQLAlchemy URL. SQLite (aiosqlite) for development and tests,
    # MySQL (aiomysql) for deployments: mysql+aiomysql://user:pw@host:3306/db
    database_url: str = Field(
        default="sqlite+aiosqlite:///./postboard.db",
        description="Async SQLAlchemy connection URL",
    )

    # Pool sizing only applies to server databases; SQLite ignores it.
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # ── Authentication ────────────────────────────────────────────────────
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_minutes: int = Field(default=60 * 24, ge=1)

    # bcrypt cost factor; tests drop it to the minimum of 4
    bcrypt_rounds: int = Field(default=10, ge=4, le=16)

    # ── Cache ─────────────────────────────────────────────────────────────
    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_entries: int = Field(default=1024, ge=1)

    # ── Rate Limiting (per client IP, /api/ paths only) ─────────────────────
    rate_limit_requests: int = Field(default=100, ge=1)
    rate_limit_window: int = Field(default=15 * 60, ge=1, description="Window in seconds")

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that security-critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if self.is_production and self.jwt_secret == DEFAULT_JWT_SECRET:
            errors.append("JWT_SECRET is still the development default.")
        if self.is_production and self.database_url.startswith("sqlite"):
            errors.append("DATABASE_URL points at SQLite in production.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()
