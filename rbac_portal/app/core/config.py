"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "RBAC Enterprise Portal"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api"
    allowed_origins: list[str] = ["http://localhost:5173"]

    # Session tokens. The signing secret MUST come from the environment (JWT_SECRET_KEY).
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60

    # Account lockout
    max_login_attempts: int = 5
    lockout_minutes: int = 15

    # Password reset / hashing
    reset_token_expire_minutes: int = 60
    bcrypt_rounds: int = 12

    # Database
    database_url: str = "sqlite+aiosqlite:///./rbac_portal.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Bootstrap
    seed_on_startup: bool = False
    bootstrap_admin_email: str = "superadmin@system.com"
    bootstrap_admin_password: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
