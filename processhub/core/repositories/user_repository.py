"""
User repository for ProcessHub.

This module provides user-specific data access operations
extending the base repository pattern.
"""

from datetime import datetime
from typing import List, Optional

from ..auth.tortoise_models import User, UserRole
from .base import BaseRepository


def normalize_email(email: str) -> str:
    """Lower-case and trim an email address."""
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """
    User repository providing user-specific data access operations.

    Emails are stored lower-cased, so every lookup normalizes its input.
    """

    def __init__(self) -> None:
        """Initialize user repository."""
        super().__init__(User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: User's email address

        Returns:
            User instance or None if not found
        """
        return await self.find_one_by(email=normalize_email(email))

    async def get_by_google_id(self, google_id: str) -> Optional[User]:
        """
        Get the user linked to a Google account.

        Args:
            google_id: Google profile id

        Returns:
            User instance or None if not linked
        """
        return await self.find_one_by(google_id=google_id)

    async def email_exists(self, email: str) -> bool:
        """
        Check if email address already exists.

        Args:
            email: Email address to check

        Returns:
            True if a user with this email exists
        """
        return await self.model.filter(email=normalize_email(email)).exists()

    async def get_by_reset_token(
        self, email: str, token_hash: str, now: datetime
    ) -> Optional[User]:
        """
        Find the user holding an unexpired password reset token.

        Args:
            email: User's email address
            token_hash: sha256 hex digest of the reset token
            now: Current time

        Returns:
            User instance or None
        """
        return await self.find_one_by(
            email=normalize_email(email),
            reset_password_token=token_hash,
            reset_password_expire__gt=now,
        )

    async def get_by_role(self, role: UserRole) -> List[User]:
        """
        Get all users holding a role.

        Args:
            role: Role to filter by

        Returns:
            List of users
        """
        return await self.find_by(role=role)

    async def list_users(self) -> List[User]:
        """Get all users, newest first."""
        return await self.get_all(order_by=["-created_at"])

    async def search_by_name(self, query: str, limit: int = 10) -> List[User]:
        """
        Search users by name, case-insensitively.

        Args:
            query: Substring to look for in the name
            limit: Maximum number of users to return

        Returns:
            Matching users sorted by name
        """
        return (
            await self.model.filter(name__icontains=query)
            .order_by("name")
            .limit(limit)
        )
