"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

DEV_SESSION_SECRET = "dev-only-secret-change-me-0123456789abcdef"
MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_prefix="SECURE_APP_",
        extra="ignore",
    )

    app_name: str = "Secure App"
    production: bool = False
    log_level: str = "INFO"

    # Session
    session_secret: str = DEV_SESSION_SECRET
    session_cookie_name: str = "secure_app_session"
    session_max_age_seconds: int = 60 * 60 * 24 * 7  # 7 days

    # Database
    database_host: str = "localhost"
    database_port: int = 3306
    database_user: str = "root"
    database_password: str = ""
    database_name: str = "secure_web_app"
    database_url: str | None = None
    database_pool_size: int = 10

    # Password hashing (argon2 cost parameters)
    password_time_cost: int = 3
    password_memory_cost: int = 65536

    # Admin seeding
    admin_email: str = "admin@example.com"
    admin_password: str = "Admin123!"

    @field_validator("session_secret")
    @classmethod
    def _check_secret_length(cls, value: str) -> str:
        if len(value) < MIN_SECRET_LENGTH:
            raise ValueError(f"session_secret must be at least {MIN_SECRET_LENGTH} characters")
        return value

    @model_validator(mode="after")
    def _refuse_dev_secret_in_production(self) -> "Settings":
        if self.production and self.session_secret == DEV_SESSION_SECRET:
            raise ValueError("session_secret must be set explicitly in production")
        return self

    @property
    def cookie_secure(self) -> bool:
        return self.production

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        url = URL.create(
            "mysql+aiomysql",
            username=self.database_user,
            password=self.database_password or None,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
        )
        return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
