"""
Google OAuth client for ProcessHub sign-in.

Only the authorization code flow is used: the browser is sent to the consent
screen, Google redirects back with a code, and the code is exchanged for an
access token that reads the user's profile.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from ..config import GoogleOAuthConfig, get_config
from ..logging import get_logger

logger = get_logger(__name__)


class GoogleOAuthError(Exception):
    """Raised when Google rejects a code or a profile request.

    ``reason`` is the short code reported back to the sign-in page.
    """

    def __init__(self, reason: str, message: str = "") -> None:
        super().__init__(message or reason)
        self.reason = reason


class GoogleOAuthClient:
    """Talks to the Google OAuth and userinfo endpoints."""

    def __init__(self, config: Optional[GoogleOAuthConfig] = None) -> None:
        """
        Initialize the client.

        Args:
            config: Google settings, defaults to the application config
        """
        self.config = config or get_config().google

    def authorization_url(self, state: str) -> str:
        """
        Build the consent screen URL.

        Args:
            state: Random value echoed back to the callback

        Returns:
            URL to redirect the browser to
        """
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{self.config.auth_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for an access token.

        Raises:
            GoogleOAuthError: If Google refuses the code
        """
        data = {
            "code": code,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "redirect_uri": self.config.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.post(self.config.token_url, data=data)
        except httpx.HTTPError as e:
            raise GoogleOAuthError("token_exchange_failed", str(e)) from e

        if response.status_code != 200:
            logger.warning(
                "Google token exchange failed",
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise GoogleOAuthError("token_exchange_failed")

        access_token = response.json().get("access_token")
        if not access_token:
            raise GoogleOAuthError("token_exchange_failed")
        return str(access_token)

    async def fetch_profile(self, access_token: str) -> Dict[str, Any]:
        """
        Read the signed-in user's Google profile.

        Returns:
            Profile with ``id``, ``email``, ``name`` and ``picture``

        Raises:
            GoogleOAuthError: If the profile cannot be read
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.get(self.config.userinfo_url, headers=headers)
        except httpx.HTTPError as e:
            raise GoogleOAuthError("user_info_failed", str(e)) from e

        if response.status_code != 200:
            logger.warning(
                "Google profile request failed", status_code=response.status_code
            )
            raise GoogleOAuthError("user_info_failed")

        profile: Dict[str, Any] = response.json()
        if not profile.get("id") or not profile.get("email"):
            raise GoogleOAuthError("user_info_failed")
        return profile
