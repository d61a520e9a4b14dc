"""
Session token handling for ProcessHub.

Sessions are HS256 JWTs carried in an HTTP-only cookie. The token holds the
user's public profile so read-only endpoints can answer from the claims.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Response

from ..config import get_config
from ..logging import get_logger
from .tortoise_models import User

logger = get_logger(__name__)


class InvalidTokenError(Exception):
    """Raised when a session token cannot be decoded or has expired."""


def build_claims(user: User) -> Dict[str, Any]:
    """
    Build the public claims stored in a session token.

    Args:
        user: Authenticated user

    Returns:
        Claims dictionary with camelCase keys
    """
    role = user.role.value if hasattr(user.role, "value") else str(user.role)
    return {
        "userId": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": role,
        "phoneNumber": user.phone_number,
        "address": user.address,
        "state": user.state,
        "country": user.country,
        "zipCode": user.zip_code,
        "profilePicture": user.profile_picture,
    }


def create_access_token(
    user: User, expires_in: Optional[int] = None
) -> str:
    """
    Create a signed session token for a user.

    Args:
        user: Authenticated user
        expires_in: Lifetime in seconds, defaults to the configured lifetime

    Returns:
        Encoded JWT
    """
    security = get_config().security
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else security.token_lifetime_seconds

    payload = build_claims(user)
    payload["iat"] = now
    payload["exp"] = now + timedelta(seconds=lifetime)

    return jwt.encode(payload, security.secret_key, algorithm=security.algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a session token.

    Args:
        token: Encoded JWT

    Returns:
        Token claims

    Raises:
        InvalidTokenError: If the signature is wrong or the token expired
    """
    security = get_config().security
    try:
        claims: Dict[str, Any] = jwt.decode(
            token, security.secret_key, algorithms=[security.algorithm]
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError("Invalid token") from e

    if "userId" not in claims:
        raise InvalidTokenError("Invalid token")
    return claims


def set_auth_cookie(response: Response, token: str, samesite: str = "strict") -> None:
    """Attach the session cookie to a response."""
    config = get_config()
    response.set_cookie(
        key=config.security.cookie_name,
        value=token,
        max_age=config.security.token_lifetime_seconds,
        path="/",
        httponly=True,
        secure=config.is_production(),
        samesite=samesite,  # type: ignore[arg-type]
    )


def clear_auth_cookie(response: Response) -> None:
    """Remove the session cookie."""
    config = get_config()
    response.delete_cookie(
        key=config.security.cookie_name,
        path="/",
        httponly=True,
        secure=config.is_production(),
        samesite="strict",
    )
