"""
User service for ProcessHub.

This module contains business logic for profile changes, profile picture
uploads and the user management operations available to supervisors and
admins.
"""

import secrets
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from ..auth.decorators import is_admin, is_supervisor_or_admin
from ..auth.password import hash_password, verify_password
from ..auth.tortoise_models import User, UserRole
from ..config import get_config
from ..database.tortoise_schemas import (
    ChangePasswordRequest,
    ProfileUpdateRequest,
    SessionUser,
    UserCreateRequest,
    UserUpdateRequest,
)
from ..errors import BadRequestError, ForbiddenError, NotFoundError
from ..logging import (
    SecurityEventType,
    SecuritySeverity,
    get_logger,
    security_logger,
)
from ..repositories.user_repository import UserRepository, normalize_email

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6

PROFILE_PICTURE_SUBDIR = "profile-pictures"
PROFILE_PICTURE_URL_PREFIX = f"/uploads/{PROFILE_PICTURE_SUBDIR}/"

PROFILE_FIELDS = (
    "name",
    "phone_number",
    "address",
    "state",
    "country",
    "zip_code",
    "profile_picture",
)


def _parse_role(value: Optional[str]) -> UserRole:
    try:
        return UserRole(value or UserRole.USER.value)
    except ValueError:
        raise BadRequestError("Invalid role") from None


def _profile_picture_dir() -> Path:
    return Path(get_config().api.upload_dir) / PROFILE_PICTURE_SUBDIR


def _image_extension(filename: Optional[str]) -> str:
    suffix = Path(filename or "").suffix.lower()
    if not suffix or not suffix[1:].isalnum() or len(suffix) > 6:
        return ".img"
    return suffix


def _write_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


def _remove_uploaded_picture(url: Optional[str]) -> None:
    """Delete a picture file that was uploaded here; other URLs are kept."""
    if not url or not url.startswith(PROFILE_PICTURE_URL_PREFIX):
        return
    path = _profile_picture_dir() / Path(url).name
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove profile picture", path=str(path), error=str(e))


class UserService:
    """Service for user profile and user management operations."""

    def __init__(self, user_repository: UserRepository) -> None:
        """
        Initialize user service.

        Args:
            user_repository: User repository instance
        """
        self.user_repository = user_repository

    async def _get_user(self, user_id: str) -> User:
        user = await self.user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _require_manager(caller: SessionUser) -> None:
        if not is_supervisor_or_admin(caller.role):
            security_logger.log_access_denied(
                user_id=caller.user_id, resource="users", reason="role"
            )
            raise ForbiddenError("Unauthorized access")

    async def update_profile(
        self, caller: SessionUser, data: ProfileUpdateRequest
    ) -> User:
        """
        Update the caller's own profile.

        Fields left out of the request keep their current value.

        Returns:
            Updated user

        Raises:
            NotFoundError: If the caller's account no longer exists
        """
        user = await self._get_user(caller.user_id)
        changes = data.model_dump(include=set(PROFILE_FIELDS), exclude_none=True)
        user = await self.user_repository.update(user, **changes)
        logger.info(
            "Profile updated",
            user_id=caller.user_id,
            fields=sorted(changes),
            event_type="profile_updated",
        )
        return user

    async def change_password(
        self, caller: SessionUser, data: ChangePasswordRequest
    ) -> None:
        """
        Change the caller's password after checking the current one.

        Raises:
            BadRequestError: If a field is missing, the new password is too
                short or the current password is wrong
            NotFoundError: If the caller's account no longer exists
        """
        if not data.current_password or not data.new_password:
            raise BadRequestError("Current password and new password are required")
        if len(data.new_password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        user = await self._get_user(caller.user_id)
        if not verify_password(data.current_password, user.hashed_password):
            raise BadRequestError("Current password is incorrect")

        await self.user_repository.update(
            user, hashed_password=hash_password(data.new_password)
        )
        security_logger.log_security_event(
            SecurityEventType.PASSWORD_CHANGED,
            user_id=caller.user_id,
            severity=SecuritySeverity.LOW,
        )

    async def set_profile_picture(
        self,
        caller: SessionUser,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> User:
        """
        Store an uploaded image as the caller's profile picture.

        The image is written under the upload directory and the profile keeps
        its public URL. A previously uploaded picture is removed.

        Returns:
            Updated user

        Raises:
            BadRequestError: If the upload is not an image or is too large
            NotFoundError: If the caller's account no longer exists
        """
        if not content_type or not content_type.startswith("image/"):
            raise BadRequestError("Invalid file type. Only images are allowed.")
        max_bytes = get_config().api.max_upload_bytes
        if len(content) > max_bytes:
            raise BadRequestError(
                "File size too large. "
                f"Maximum size is {max_bytes // (1024 * 1024)}MB."
            )

        user = await self._get_user(caller.user_id)
        file_name = (
            f"profile_{user.id}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"
            f"{_image_extension(filename)}"
        )
        directory = _profile_picture_dir()
        await run_in_threadpool(_write_file, directory / file_name, content)

        previous = user.profile_picture
        user = await self.user_repository.update(
            user, profile_picture=f"{PROFILE_PICTURE_URL_PREFIX}{file_name}"
        )
        _remove_uploaded_picture(previous)
        logger.info(
            "Profile picture updated",
            user_id=caller.user_id,
            size=len(content),
            event_type="profile_picture_updated",
        )
        return user

    async def remove_profile_picture(self, caller: SessionUser) -> User:
        """
        Clear the caller's profile picture.

        Raises:
            NotFoundError: If the caller's account no longer exists
        """
        user = await self._get_user(caller.user_id)
        previous = user.profile_picture
        user = await self.user_repository.update(user, profile_picture=None)
        _remove_uploaded_picture(previous)
        logger.info(
            "Profile picture removed",
            user_id=caller.user_id,
            event_type="profile_picture_removed",
        )
        return user

    async def list_users(self, caller: SessionUser) -> List[User]:
        """
        List all users.

        Raises:
            ForbiddenError: If the caller is not a supervisor or admin
        """
        self._require_manager(caller)
        return await self.user_repository.list_users()

    async def create_user(self, caller: SessionUser, data: UserCreateRequest) -> User:
        """
        Create an account on behalf of another person.

        Raises:
            ForbiddenError: If the caller is not a supervisor or admin
            BadRequestError: If required fields are missing or the email is taken
        """
        self._require_manager(caller)
        if not data.name or not data.email or not data.password:
            raise BadRequestError("Name, email and password are required")
        if await self.user_repository.email_exists(data.email):
            raise BadRequestError("User already exists")

        extra = data.model_dump(
            include={"phone_number", "address", "state", "country", "zip_code"},
            exclude_none=True,
        )
        user = await self.user_repository.create(
            name=data.name,
            email=normalize_email(data.email),
            hashed_password=hash_password(data.password),
            role=_parse_role(data.role),
            **extra,
        )
        security_logger.log_security_event(
            SecurityEventType.USER_CREATED,
            user_id=caller.user_id,
            details={"created_user_id": str(user.id)},
            severity=SecuritySeverity.LOW,
        )
        return user

    async def update_user(
        self, caller: SessionUser, user_id: str, data: UserUpdateRequest
    ) -> User:
        """
        Update an account.

        Supervisors and admins may edit anyone; other users only themselves,
        and a plain user may not give themselves another role.

        Raises:
            ForbiddenError: If the caller may not make this change
            NotFoundError: If the user does not exist
        """
        is_self = caller.user_id == user_id
        if not is_supervisor_or_admin(caller.role) and not is_self:
            security_logger.log_access_denied(
                user_id=caller.user_id, resource=f"users/{user_id}", reason="role"
            )
            raise ForbiddenError("Unauthorized access")

        if (
            is_self
            and caller.role == UserRole.USER.value
            and data.role
            and data.role != UserRole.USER.value
        ):
            raise ForbiddenError("Not allowed to change role")

        user = await self._get_user(user_id)
        changes: Dict[str, Any] = data.model_dump(
            include=set(PROFILE_FIELDS), exclude_none=True
        )
        if data.email:
            email = normalize_email(data.email)
            existing = await self.user_repository.get_by_email(email)
            if existing is not None and existing.id != user.id:
                raise BadRequestError("User already exists")
            changes["email"] = email
        if data.role:
            role = _parse_role(data.role)
            if role != user.role:
                security_logger.log_security_event(
                    SecurityEventType.ROLE_CHANGED,
                    user_id=caller.user_id,
                    details={"target_user_id": user_id, "role": role.value},
                )
            changes["role"] = role

        return await self.user_repository.update(user, **changes)

    async def delete_user(self, caller: SessionUser, user_id: str) -> None:
        """
        Delete an account.

        Raises:
            ForbiddenError: If the caller is not an admin
            NotFoundError: If the user does not exist
        """
        if not is_admin(caller.role):
            security_logger.log_access_denied(
                user_id=caller.user_id, resource=f"users/{user_id}", reason="role"
            )
            raise ForbiddenError(
                "Unauthorized access - admin rights required for deletion"
            )

        if not await self.user_repository.delete(user_id):
            raise NotFoundError("User not found")

        security_logger.log_security_event(
            SecurityEventType.USER_DELETED,
            user_id=caller.user_id,
            details={"deleted_user_id": user_id},
        )

    async def search(self, query: str, limit: int = 10) -> List[User]:
        """
        Search users by name.

        Returns:
            Matching users, or an empty list for a blank query
        """
        query = (query or "").strip()
        if not query:
            return []
        return await self.user_repository.search_by_name(query, limit=limit)
