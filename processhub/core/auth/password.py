"""
Password utilities for ProcessHub authentication.

This module provides password hashing and verification functionality
using passlib with bcrypt for secure password storage, plus the helpers
used for one-time codes and password-reset tokens.
"""

import hashlib
import secrets
from typing import Optional

from passlib.context import CryptContext

from ..config import get_config

# Create password context with bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=get_config().security.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    result: str = pwd_context.hash(password)
    return result


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a plain text password against a hashed password.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to check against

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    result: bool = pwd_context.verify(plain_password, hashed_password)
    return result


def generate_otp(length: int = 6) -> str:
    """Generate a numeric one-time code without a leading zero."""
    first = str(secrets.randbelow(9) + 1)
    rest = "".join(str(secrets.randbelow(10)) for _ in range(length - 1))
    return first + rest


def generate_reset_token() -> str:
    """Generate a random 32-byte password reset token as hex."""
    return secrets.token_hex(32)


def hash_reset_token(token: str) -> str:
    """Return the sha256 hex digest stored for a reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
