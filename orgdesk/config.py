"""OrgDesk configuration loaded from environment variables."""

from __future__ import annotations

import json
from pydantic_settings import BaseSettings
from pydantic import Field

DEFAULT_JWT_SECRET = "change-me-in-production-orgdesk"


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./orgdesk.db",
        alias="DATABASE_URL",
    )
    auto_create_schema: bool = Field(default=True, alias="AUTO_CREATE_SCHEMA")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=2022, alias="PORT")
    cors_origins: str = Field(default='["http://localhost:3000"]', alias="CORS_ORIGINS")
    app_env: str = Field(default="development", alias="APP_ENV")
    strict_startup_validation: bool = Field(default=False, alias="STRICT_STARTUP_VALIDATION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    rate_limit_default: str = Field(default="300/minute", alias="RATE_LIMIT_DEFAULT")

    # Caller identity (bearer tokens minted by the surrounding auth service)
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET, alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in {"production", "prod"}

    @property
    def cors_origins_list(self) -> list[str]:
        raw = (self.cors_origins or "").strip()
        if not raw:
            return []

        # Supports JSON list format and comma-separated format.
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    return [str(origin).strip() for origin in parsed if str(origin).strip()]
            except json.JSONDecodeError:
                pass

        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
