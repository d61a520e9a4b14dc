"""
Admin endpoints for the ProcessHub API.

Every route requires the admin role. Static paths under ``/bpmn-files`` are
declared before ``/bpmn-files/{file_id}`` so they are not captured as ids.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response

from ...core.bpmn import EXPORT_FILENAME
from ...core.database.tortoise_schemas import (
    BpmnFilePatchRequest,
    SessionUser,
    StandardResponse,
)
from ...core.dependencies import (
    get_admin_bpmn_service,
    get_standard_service,
    require_admin,
)
from ...core.logging import SecurityEventType, security_logger
from ...core.services import AdminBpmnService, StandardService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/seed-standards")
async def seed_standards(
    caller: SessionUser = Depends(require_admin),
    service: StandardService = Depends(get_standard_service),
) -> Dict[str, Any]:
    """Replace all standards with the built-in catalogue."""
    standards = await service.seed()
    security_logger.log_security_event(
        SecurityEventType.ADMIN_ACTION,
        user_id=caller.user_id,
        details={"action": "seed_standards", "count": len(standards)},
    )
    return {
        "success": True,
        "message": f"Successfully seeded {len(standards)} standards",
        "standards": [StandardResponse.model_validate(s).to_json() for s in standards],
    }


@router.get("/bpmn-files")
async def list_bpmn_files(
    format: Optional[str] = None,
    caller: SessionUser = Depends(require_admin),
    service: AdminBpmnService = Depends(get_admin_bpmn_service),
) -> Dict[str, Any]:
    """
    List every BPMN file, or the whole node tree with ``format=tree``.
    """
    if format == "tree":
        return {"success": True, "tree": await service.tree()}
    return {"success": True, "files": await service.list_files()}


@router.get("/bpmn-files/archived")
async def list_archived_files(
    caller: SessionUser = Depends(require_admin),
    service: AdminBpmnService = Depends(get_admin_bpmn_service),
) -> Dict[str, Any]:
    """List archived BPMN files, most recently updated first."""
    return {"success": True, "files": await service.list_archived()}


@router.get("/bpmn-files/export", response_class=Response)
async def export_bpmn_files(
    ids: Optional[str] = None,
    caller: SessionUser = Depends(require_admin),
    service: AdminBpmnService = Depends(get_admin_bpmn_service),
) -> Response:
    """Download the selected files as a zip archive."""
    content = await service.export(ids)
    return Response(
        content=content,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'
        },
    )


@router.get("/bpmn-files/{file_id}")
async def get_bpmn_file(
    file_id: str,
    caller: SessionUser = Depends(require_admin),
    service: AdminBpmnService = Depends(get_admin_bpmn_service),
) -> Dict[str, Any]:
    """Get one BPMN file with all of its fields."""
    return {"success": True, "file": await service.get_file(file_id)}


@router.delete("/bpmn-files/{file_id}")
async def delete_bpmn_file(
    file_id: str,
    caller: SessionUser = Depends(require_admin),
    service: AdminBpmnService = Depends(get_admin_bpmn_service),
) -> Dict[str, Any]:
    """Delete a BPMN file."""
    await service.delete_file(caller, file_id)
    return {"success": True}


@router.patch("/bpmn-files/{file_id}")
async def patch_bpmn_file(
    file_id: str,
    data: BpmnFilePatchRequest,
    caller: SessionUser = Depends(require_admin),
    service: AdminBpmnService = Depends(get_admin_bpmn_service),
) -> Dict[str, Any]:
    """Rename, reassign or (un)archive a BPMN file."""
    return {"success": True, "file": await service.patch_file(caller, file_id, data)}
