"""
Unified configuration management for ProcessHub.

This module provides a single, environment-aware configuration system that
consolidates all configuration sources into a clean, validated approach.
"""

import os
import secrets
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported environments."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


def generate_secure_secret() -> str:
    """Generate a cryptographically secure secret key for development."""
    return secrets.token_urlsafe(32)


class LoggingConfig(BaseSettings):
    """Configuration for logging system."""

    level: str = Field(default="INFO", description="Logging level")
    json_output: bool = Field(default=True, description="Output logs in JSON format")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    model_config = SettingsConfigDict(env_prefix="LOG_")


class DatabaseConfig(BaseSettings):
    """Configuration for database connection."""

    url: Optional[str] = Field(
        default=None, description="Full Tortoise database URL (overrides parts)"
    )
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    username: str = Field(default="postgres", description="Database username")
    password: str = Field(default="", description="Database password")
    database: str = Field(default="processhub", description="Database name")
    pool_size: int = Field(default=10, description="Connection pool size")
    generate_schemas: bool = Field(
        default=True, description="Create missing tables on startup"
    )

    model_config = SettingsConfigDict(env_prefix="DB_")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate database password is not empty in production."""
        if not v and os.getenv("ENVIRONMENT", "development") == "production":
            if not os.getenv("DB_URL"):
                raise ValueError("Database password is required in production")
        return v

    @property
    def connection_url(self) -> str:
        """Get Tortoise connection URL."""
        if self.url:
            return self.url
        credentials = self.username
        if self.password:
            credentials = f"{self.username}:{self.password}"
        return (
            f"postgres://{credentials}@{self.host}:{self.port}/{self.database}"
            f"?maxsize={self.pool_size}"
        )


class SecurityConfig(BaseSettings):
    """Configuration for security settings."""

    secret_key: str = Field(
        default_factory=lambda: (
            generate_secure_secret()
            if os.getenv("ENVIRONMENT", "development") != "production"
            else os.getenv("SECURITY_SECRET_KEY", "")
        ),
        description="Secret key for JWT tokens (required in production)",
    )
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    token_lifetime_seconds: int = Field(
        default=60 * 60 * 24, description="Session token lifetime in seconds"
    )
    cookie_name: str = Field(default="token", description="Session cookie name")
    reset_token_lifetime_seconds: int = Field(
        default=60 * 60, description="Password reset token lifetime in seconds"
    )
    otp_lifetime_seconds: int = Field(
        default=5 * 60, description="Sign-up OTP lifetime in seconds"
    )
    bcrypt_rounds: int = Field(default=12, description="bcrypt cost factor")

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Validate secret key meets security requirements."""
        if not v:
            raise ValueError("Secret key is required")

        if len(v) < 32:
            raise ValueError("Secret key must be at least 32 characters long")

        weak_patterns = [
            "your-secret-key",
            "secret",
            "password",
            "123456",
            "admin",
            "test",
        ]

        if any(pattern in v.lower() for pattern in weak_patterns):
            raise ValueError("Secret key contains weak patterns and is not secure")

        return v


class APIConfig(BaseSettings):
    """Configuration for the API server."""

    host: str = Field(default="127.0.0.1", description="API server host")
    port: int = Field(default=8000, description="API server port")
    reload: bool = Field(default=True, description="Enable auto-reload in development")
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web client, used in email links",
    )
    cors_origins: List[str] = Field(
        default_factory=list, description="Allowed CORS origins"
    )
    cors_credentials: bool = Field(default=True, description="Allow CORS credentials")
    cors_methods: List[str] = Field(
        default_factory=list, description="Allowed CORS methods"
    )
    cors_headers: List[str] = Field(
        default_factory=list, description="Allowed CORS headers"
    )
    cors_max_age: int = Field(
        default=600, description="CORS preflight cache time in seconds"
    )
    auth_rate_limit_requests: int = Field(
        default=10, description="Requests per window allowed on auth endpoints"
    )
    auth_rate_limit_window: int = Field(
        default=60, description="Auth rate limit window in seconds"
    )
    upload_dir: str = Field(
        default="uploads", description="Directory for uploaded profile pictures"
    )
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024, description="Largest accepted profile picture"
    )

    model_config = SettingsConfigDict(env_prefix="API_")

    def cors_origins_resolved(self, environment: str = "development") -> List[str]:
        """Get CORS origins based on environment."""
        if self.cors_origins:
            return self.cors_origins

        if environment in ("development", "testing"):
            return [
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost:8000",
                "http://127.0.0.1:8000",
            ]
        return []

    def cors_methods_resolved(self, environment: str = "development") -> List[str]:
        """Get CORS methods based on environment."""
        if self.cors_methods:
            return self.cors_methods

        if environment == "production":
            return ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
        return ["*"]

    @property
    def cors_headers_resolved(self) -> List[str]:
        """Get allowed CORS headers."""
        if self.cors_headers:
            return self.cors_headers

        return [
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "X-Requested-With",
        ]


class RedisConfig(BaseSettings):
    """Configuration for Redis connection."""

    host: str = Field(default="127.0.0.1", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[str] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=10, description="Maximum Redis connections")
    socket_timeout: float = Field(default=5.0, description="Redis socket timeout")
    socket_connect_timeout: float = Field(
        default=5.0, description="Redis connection timeout"
    )
    retry_on_timeout: bool = Field(default=True, description="Retry on Redis timeout")

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class EmailConfig(BaseSettings):
    """Configuration for outgoing email."""

    enabled: bool = Field(default=True, description="Deliver email over SMTP")
    host: str = Field(default="smtp.gmail.com", description="SMTP host")
    port: int = Field(default=465, description="SMTP port")
    username: str = Field(default="", description="SMTP username")
    password: str = Field(default="", description="SMTP password or app password")
    use_tls: bool = Field(default=True, description="Use implicit TLS")
    sender: Optional[str] = Field(
        default=None, description="From address (defaults to username)"
    )
    timeout: float = Field(default=10.0, description="SMTP timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="EMAIL_")

    @property
    def from_address(self) -> str:
        """Get the address used in the From header."""
        return self.sender or self.username


class GoogleOAuthConfig(BaseSettings):
    """Configuration for Google sign-in."""

    client_id: str = Field(default="", description="OAuth client id")
    client_secret: str = Field(default="", description="OAuth client secret")
    redirect_uri: str = Field(
        default="http://localhost:8000/api/auth/google/callback",
        description="Callback URL registered with Google",
    )
    auth_url: str = Field(
        default="https://accounts.google.com/o/oauth2/v2/auth",
        description="Consent screen URL",
    )
    token_url: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="Code exchange URL",
    )
    userinfo_url: str = Field(
        default="https://www.googleapis.com/oauth2/v2/userinfo",
        description="Profile URL",
    )
    timeout: float = Field(default=10.0, description="HTTP timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="GOOGLE_")


class TestConfig(BaseSettings):
    """Configuration for testing environment."""

    database_url: str = Field(
        default="sqlite://:memory:", description="Test database URL"
    )

    model_config = SettingsConfigDict(env_prefix="TEST_")


class ProcessHubConfig(BaseSettings):
    """Main unified configuration class for ProcessHub."""

    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Current environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    google: GoogleOAuthConfig = Field(default_factory=GoogleOAuthConfig)
    test: TestConfig = Field(default_factory=TestConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Union[str, Environment]) -> Environment:
        """Validate and convert environment string to enum."""
        if isinstance(v, Environment):
            return v
        if isinstance(v, str):
            try:
                return Environment(v.lower())
            except ValueError:
                raise ValueError(
                    f"Invalid environment: {v}. "
                    f"Must be one of: {[e.value for e in Environment]}"
                )
        raise ValueError(f"Invalid environment type: {type(v)}")

    @field_validator("debug")
    @classmethod
    def validate_debug(cls, v: bool, info: Any) -> bool:
        """Ensure debug is False in production."""
        if v and info.data.get("environment") == Environment.PRODUCTION:
            raise ValueError("Debug mode cannot be enabled in production")
        return v

    def model_post_init(self, __context: Any) -> None:
        """Post-initialization validation."""
        super().model_post_init(__context)
        self._validate_production_cors_config()

    @property
    def cors_origins_resolved(self) -> List[str]:
        """Get resolved CORS origins for this environment."""
        return self.api.cors_origins_resolved(self.environment.value)

    @property
    def cors_methods_resolved(self) -> List[str]:
        """Get resolved CORS methods for this environment."""
        return self.api.cors_methods_resolved(self.environment.value)

    @property
    def cors_headers_resolved(self) -> List[str]:
        """Get resolved CORS headers for this environment."""
        return self.api.cors_headers_resolved

    def _validate_production_cors_config(self) -> None:
        """Validate production CORS configuration security."""
        if self.environment != Environment.PRODUCTION:
            return

        cors_origins = self.api.cors_origins
        if not cors_origins:
            raise ValueError(
                "Production environment must specify allowed CORS origins. "
                "Set API_CORS_ORIGINS environment variable."
            )

        if "*" in cors_origins:
            raise ValueError(
                "Production environment cannot allow all CORS origins (*). "
                "Please specify allowed origins explicitly."
            )

        for origin in cors_origins:
            if not origin.startswith("https://"):
                raise ValueError(
                    f"Production CORS origin must use HTTPS: {origin}. "
                    "All production origins must be secure."
                )

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING

    def get_database_url(self) -> str:
        """Get the appropriate database URL for the current environment."""
        if self.is_testing():
            return self.test.database_url
        return self.database.connection_url


# Global configuration instance
_config: Optional[ProcessHubConfig] = None


def get_config() -> ProcessHubConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ProcessHubConfig()
    return _config


def set_config(config: ProcessHubConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reload_config() -> ProcessHubConfig:
    """Reload configuration from environment variables."""
    global _config
    _config = ProcessHubConfig()
    return _config


def get_environment() -> Environment:
    """Get the current environment."""
    return get_config().environment


def is_development() -> bool:
    """Check if running in development environment."""
    return get_config().is_development()


def is_production() -> bool:
    """Check if running in production environment."""
    return get_config().is_production()


def is_testing() -> bool:
    """Check if running in testing environment."""
    return get_config().is_testing()
