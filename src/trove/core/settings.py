"""Application settings and configuration.

This module defines all configuration options for the Trove service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Trove", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Secret phrase digests (Argon2id cost parameters)
    argon2_time_cost: int = Field(default=3, alias="ARGON2_TIME_COST")
    argon2_memory_cost: int = Field(default=65_536, alias="ARGON2_MEMORY_COST")
    argon2_parallelism: int = Field(default=4, alias="ARGON2_PARALLELISM")

    # Network address privacy: only salted digests are ever stored
    ip_hash_salt: str | None = Field(default=None, alias="IP_HASH_SALT")
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")

    # Document store
    store_backend: Literal["sql", "memory"] = Field(default="sql", alias="STORE_BACKEND")
    database_url: str = Field(
        default="sqlite+aiosqlite:///./trove.db",
        alias="DATABASE_URL",
    )
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Blob store and signed download links
    blob_backend: Literal["local", "memory"] = Field(default="local", alias="BLOB_BACKEND")
    blob_root: str = Field(default="./blobs", alias="BLOB_ROOT")
    public_base_url: str = Field(default="http://localhost:8000", alias="PUBLIC_BASE_URL")
    signed_url_ttl_seconds: int = Field(default=15 * 60, alias="SIGNED_URL_TTL_SECONDS")

    # Unlock attempt throttling
    rate_limit_backend: Literal["store", "redis"] = Field(
        default="store",
        alias="RATE_LIMIT_BACKEND",
    )
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    rate_limit_max_attempts: int = Field(default=5, ge=1, alias="RATE_LIMIT_MAX_ATTEMPTS")
    rate_limit_window_seconds: int = Field(default=60, ge=1, alias="RATE_LIMIT_WINDOW_SECONDS")

    # CORS configuration for web and mobile clients
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_ip_hash_salt(self) -> str:
        """Return the salt used for network address digests.

        Returns:
            The dedicated salt when configured, otherwise the application secret key
        """
        return self.ip_hash_salt or self.secret_key


settings = Settings()  # type: ignore[call-arg]
