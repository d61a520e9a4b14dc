"""
Tortoise ORM user model for ProcessHub authentication.
"""

from enum import Enum
from uuid import uuid4

from tortoise import fields
from tortoise.models import Model


class UserRole(str, Enum):
    """Roles a user account can hold."""

    USER = "user"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"


class AuthType(str, Enum):
    """How the account authenticates."""

    EMAIL = "email"
    GOOGLE = "google"


class User(Model):
    """User model using Tortoise ORM."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    email = fields.CharField(max_length=255, unique=True)
    hashed_password = fields.CharField(max_length=255, null=True)
    name = fields.CharField(max_length=255)
    role = fields.CharEnumField(UserRole, default=UserRole.USER, db_index=True)

    # Profile fields
    phone_number = fields.CharField(max_length=50, null=True)
    address = fields.CharField(max_length=500, null=True)
    state = fields.CharField(max_length=100, null=True)
    country = fields.CharField(max_length=100, null=True)
    zip_code = fields.CharField(max_length=20, null=True)
    profile_picture = fields.TextField(null=True)

    # Sign-in provider
    auth_type = fields.CharEnumField(AuthType, default=AuthType.EMAIL)
    google_id = fields.CharField(max_length=255, null=True)
    picture = fields.TextField(null=True)

    # Password reset (sha256 hex of the emailed token)
    reset_password_token = fields.CharField(max_length=64, null=True, db_index=True)
    reset_password_expire = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for User model."""

        table = "users"

    def __str__(self) -> str:
        """Return string representation of User."""
        return f"User({self.email})"
