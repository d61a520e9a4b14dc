"""
Dashboard endpoint for the ProcessHub API.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core.database.tortoise_schemas import SessionUser
from ...core.dependencies import get_dashboard_service, get_session_user
from ...core.services import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def get_stats(
    caller: SessionUser = Depends(get_session_user),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """Get the caller's dashboard counters."""
    return {"success": True, "stats": await service.stats(caller)}
