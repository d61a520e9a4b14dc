"""
Configuration package for ProcessHub.

This package provides centralized configuration management for the API,
database, Redis, email, security and logging settings.
"""

from .settings import (
    APIConfig,
    DatabaseConfig,
    EmailConfig,
    Environment,
    GoogleOAuthConfig,
    LoggingConfig,
    ProcessHubConfig,
    RedisConfig,
    SecurityConfig,
    TestConfig,
    get_config,
    get_environment,
    is_development,
    is_production,
    is_testing,
    reload_config,
    set_config,
)

__all__ = [
    # Main configuration classes
    "ProcessHubConfig",
    "Environment",
    # Component configurations
    "APIConfig",
    "DatabaseConfig",
    "EmailConfig",
    "GoogleOAuthConfig",
    "LoggingConfig",
    "RedisConfig",
    "SecurityConfig",
    "TestConfig",
    # Configuration functions
    "get_config",
    "get_environment",
    "is_development",
    "is_production",
    "is_testing",
    "reload_config",
    "set_config",
]
