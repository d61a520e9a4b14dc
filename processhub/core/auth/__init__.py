"""
Authentication module for ProcessHub.

This module provides the user model, password and session token utilities,
sign-up codes, Google sign-in and role checks.
"""

from .decorators import (
    ROLE_HIERARCHY,
    check_user_role,
    get_user_role_level,
    is_admin,
    is_supervisor_or_admin,
)
from .google import GoogleOAuthClient, GoogleOAuthError
from .password import (
    generate_otp,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from .tokens import (
    InvalidTokenError,
    build_claims,
    clear_auth_cookie,
    create_access_token,
    decode_access_token,
    set_auth_cookie,
)
from .tortoise_models import AuthType, User, UserRole

__all__ = [
    "User",
    "UserRole",
    "AuthType",
    "hash_password",
    "verify_password",
    "generate_otp",
    "generate_reset_token",
    "hash_reset_token",
    "InvalidTokenError",
    "build_claims",
    "create_access_token",
    "decode_access_token",
    "set_auth_cookie",
    "clear_auth_cookie",
    "GoogleOAuthClient",
    "GoogleOAuthError",
    "ROLE_HIERARCHY",
    "check_user_role",
    "get_user_role_level",
    "is_admin",
    "is_supervisor_or_admin",
]
