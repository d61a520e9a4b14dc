"""
KPI endpoints for the ProcessHub API.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ...core.database.tortoise_schemas import KPIResponse, KPIWriteRequest
from ...core.dependencies import get_kpi_service
from ...core.services import KPIService

router = APIRouter(prefix="/kpis", tags=["kpis"])


@router.get("")
async def list_kpis(service: KPIService = Depends(get_kpi_service)) -> Dict[str, Any]:
    """List KPIs sorted by order, then creation time."""
    kpis = await service.list_kpis()
    return {
        "success": True,
        "kpis": [KPIResponse.model_validate(k).to_json() for k in kpis],
    }


@router.post("")
async def create_kpi(
    data: KPIWriteRequest, service: KPIService = Depends(get_kpi_service)
) -> Dict[str, Any]:
    """Create a KPI."""
    kpi = await service.create_kpi(data)
    return {
        "success": True,
        "message": "KPI created successfully",
        "kpi": KPIResponse.model_validate(kpi).to_json(),
    }


@router.put("")
async def update_kpi(
    data: KPIWriteRequest, service: KPIService = Depends(get_kpi_service)
) -> Dict[str, Any]:
    """Update the KPI selected by ``id``."""
    kpi = await service.update_kpi(data)
    return {
        "success": True,
        "message": "KPI updated successfully",
        "kpi": KPIResponse.model_validate(kpi).to_json(),
    }


@router.delete("")
async def delete_kpi(
    id: Optional[str] = None, service: KPIService = Depends(get_kpi_service)
) -> Dict[str, Any]:
    """Delete a KPI."""
    await service.delete_kpi(id or "")
    return {"success": True, "message": "KPI deleted successfully"}


@router.post("/seed")
async def seed_kpis(service: KPIService = Depends(get_kpi_service)) -> Dict[str, Any]:
    """Replace all KPIs with the sample set."""
    kpis = await service.seed()
    return {
        "success": True,
        "message": f"Successfully seeded {len(kpis)} KPIs",
        "count": len(kpis),
    }
