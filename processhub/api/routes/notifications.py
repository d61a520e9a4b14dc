"""
Approval notification endpoints for the ProcessHub API.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core.database.tortoise_schemas import (
    CheckDuplicateRequest,
    CreateNotificationRequest,
    DeleteNotificationRequest,
    NotificationResponse,
    ProcessNotificationRequest,
    SessionUser,
)
from ...core.dependencies import get_notification_service, get_session_user
from ...core.services import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    caller: SessionUser = Depends(get_session_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    """List the notifications visible to the caller, newest first."""
    notifications = await service.list_notifications(caller)
    return {
        "notifications": [
            NotificationResponse.model_validate(n).to_json() for n in notifications
        ]
    }


@router.get("/count")
async def count_notifications(
    caller: SessionUser = Depends(get_session_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    """Count the caller's notifications by status."""
    return await service.count(caller)


@router.post("/create")
async def create_notification(
    data: CreateNotificationRequest,
    caller: SessionUser = Depends(get_session_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    """Send a diagram to every supervisor for approval."""
    sent = await service.create(caller, data)
    return {
        "success": True,
        "message": "Notification created successfully",
        "notificationsSent": sent,
    }


@router.post("/delete")
async def delete_notification(
    data: DeleteNotificationRequest,
    caller: SessionUser = Depends(get_session_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    """Delete a notification the caller sent or received."""
    await service.delete(caller, data)
    return {"success": True, "message": "Notification deleted successfully"}


@router.post("/process")
async def process_notification(
    data: ProcessNotificationRequest,
    caller: SessionUser = Depends(get_session_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    """Approve or reject an approval request."""
    decision = await service.process(caller, data)
    return {"success": True, "message": f"Notification {decision} successfully"}


@router.post("/check-duplicate")
async def check_duplicate(
    data: CheckDuplicateRequest,
    caller: SessionUser = Depends(get_session_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    """Look for a pending submission of the same diagram."""
    return await service.check_duplicate(caller, data)
