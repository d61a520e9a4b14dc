"""
User profile and user management endpoints for the ProcessHub API.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from ...core.auth.tokens import create_access_token, set_auth_cookie
from ...core.database.tortoise_schemas import (
    ChangePasswordRequest,
    ProfileUpdateRequest,
    SessionUser,
    UserCreateRequest,
    UserResponse,
    UserSummary,
    UserUpdateRequest,
)
from ...core.dependencies import get_session_user, get_user_service
from ...core.errors import BadRequestError
from ...core.services import UserService

profile_router = APIRouter(prefix="/user", tags=["users"])
router = APIRouter(prefix="/users", tags=["users"])


@profile_router.put("/profile")
async def update_profile(
    data: ProfileUpdateRequest,
    response: Response,
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """
    Update the caller's profile.

    The session cookie is reissued so its claims carry the new profile.
    """
    user = await service.update_profile(caller, data)
    set_auth_cookie(response, create_access_token(user))
    return {
        "message": "Profile updated successfully",
        "user": UserResponse.model_validate(user).to_json(),
    }


@profile_router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Change the caller's password."""
    await service.change_password(caller, data)
    return {"message": "Password changed successfully", "success": True}


@profile_router.post("/profile-picture")
async def upload_profile_picture(
    response: Response,
    profile_picture: Optional[UploadFile] = File(None, alias="profilePicture"),
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """
    Upload an image as the caller's profile picture.

    The multipart field is ``profilePicture``. The session cookie is reissued
    with the new picture URL.
    """
    if profile_picture is None:
        raise BadRequestError("No file provided")
    content = await profile_picture.read()
    user = await service.set_profile_picture(
        caller, content, profile_picture.filename, profile_picture.content_type
    )
    set_auth_cookie(response, create_access_token(user))
    return {
        "message": "Profile picture updated successfully",
        "profilePicture": user.profile_picture,
        "user": UserResponse.model_validate(user).to_json(),
    }


@profile_router.delete("/profile-picture")
async def delete_profile_picture(
    response: Response,
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Remove the caller's profile picture."""
    user = await service.remove_profile_picture(caller)
    set_auth_cookie(response, create_access_token(user))
    return {
        "message": "Profile picture removed successfully",
        "user": UserResponse.model_validate(user).to_json(),
    }


@router.get("/search")
async def search_users(
    q: str = "",
    limit: int = Query(10, ge=1, le=100),
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Find users whose name contains the query, sorted by name."""
    if not q.strip():
        return {"users": []}
    users = await service.search(q, limit=limit)
    return {
        "success": True,
        "users": [UserSummary.model_validate(u).to_json() for u in users],
    }


@router.get("")
async def list_users(
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """List all users (supervisors and admins)."""
    users = await service.list_users(caller)
    return {"users": [UserResponse.model_validate(u).to_json() for u in users]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreateRequest,
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Create an account (supervisors and admins)."""
    user = await service.create_user(caller, data)
    return UserResponse.model_validate(user).to_json()


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    data: UserUpdateRequest,
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Update an account."""
    user = await service.update_user(caller, user_id, data)
    return UserResponse.model_validate(user).to_json()


@router.delete(
    "/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response
)
async def delete_user(
    user_id: str,
    caller: SessionUser = Depends(get_session_user),
    service: UserService = Depends(get_user_service),
) -> Response:
    """Delete an account (admins only)."""
    await service.delete_user(caller, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
