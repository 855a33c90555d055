"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field
from sqlalchemy.engine import make_url


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class JWTConfig(BaseModel):
    """Access token generation and validation configuration."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["HS256"],
        description="JWT algorithms allowed for token validation",
    )
    gen_issuer: str = Field(
        default="library-api", description="Issuer name to use when generating tokens"
    )
    audiences: list[str] = Field(
        default_factory=lambda: ["library-api"],
        description="JWT audiences that this API accepts",
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")
    access_token_expire_minutes: int = Field(
        default=60, description="Lifetime of issued access tokens in minutes"
    )
    max_stored_tokens: int = Field(
        default=5,
        description="Number of most recent session tokens kept per user",
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/app.log", description="Log file path; empty disables file logging")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./library.db",
        description="Database connection URL",
    )
    environment_mode: str = Field(
        default="development", description="Environment mode: development or production"
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @computed_field
    @property
    def password(self) -> str | None:
        """
        Get the database password from the appropriate source.
        1. In development or test mode, parse it from the URL if present
        2. In production mode, read it from the secrets file named by
            `password_file` or the environment variable named by `password_env_var`
        """
        if self.environment_mode in ("development", "test"):
            return make_url(self.url).password
        elif self.environment_mode == "production":
            if self.password_file:
                try:
                    with open(self.password_file) as f:
                        return f.read().strip()
                except OSError as e:
                    raise ValueError(
                        "Failed to read database password from file."
                    ) from e
            elif self.password_env_var:
                password = os.getenv(self.password_env_var)
                if password:
                    return password
                raise ValueError(
                    f"Environment variable {self.password_env_var} not set"
                )
            # SQLite and password-less URLs are allowed in production
            return make_url(self.url).password
        else:
            raise ValueError(
                "Invalid environment_mode; must be 'development', 'production', or 'test'"
            )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string with password if provided."""
        base_url = make_url(self.url)

        if base_url.password:
            if self.environment_mode == "production":
                logger.warning(
                    "Database URL contains a password in production mode; "
                    "consider using a secrets file or environment variable."
                )
            return base_url.render_as_string(hide_password=False)

        resolved_password = self.password
        if resolved_password:
            return base_url.set(password=resolved_password).render_as_string(
                hide_password=False
            )
        return base_url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == "sqlite"


class PaginationConfig(BaseModel):
    """Defaults applied to list endpoints."""

    default_page: int = Field(default=1, description="Page used when none is given")
    default_limit: int = Field(default=10, description="Page size used when none is given")
    max_limit: int = Field(default=100, description="Largest accepted page size")


class SecurityConfig(BaseModel):
    """Password storage configuration."""

    password_schemes: list[str] = Field(
        default_factory=lambda: ["pbkdf2_sha256"],
        description="passlib schemes; the first one hashes new passwords",
    )


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    session_signing_secret: str | None = Field(
        default=None, description="Secret for signing access tokens"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="JWT configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    pagination: PaginationConfig = Field(
        default_factory=PaginationConfig, description="Pagination defaults"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
