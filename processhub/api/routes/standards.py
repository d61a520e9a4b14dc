"""
Compliance standards endpoint for the ProcessHub API.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core.database.tortoise_schemas import StandardResponse
from ...core.dependencies import get_standard_service
from ...core.services import StandardService

router = APIRouter(prefix="/standards", tags=["standards"])


@router.get("")
async def list_standards(
    service: StandardService = Depends(get_standard_service),
) -> Dict[str, Any]:
    """List active standards sorted by name (public endpoint)."""
    standards = await service.list_active()
    return {
        "success": True,
        "standards": [StandardResponse.model_validate(s).to_json() for s in standards],
    }
