"""
LaTeX document endpoints for the ProcessHub API.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ...core.database.tortoise_schemas import (
    LatexFileCreateRequest,
    LatexFileRenameRequest,
    LatexFileResponse,
    SessionUser,
)
from ...core.dependencies import get_latex_file_service, get_session_user
from ...core.services import LatexFileService

router = APIRouter(prefix="/latexfiles", tags=["latex"])


@router.get("")
async def list_files(
    userId: Optional[str] = None,
    caller: SessionUser = Depends(get_session_user),
    service: LatexFileService = Depends(get_latex_file_service),
) -> Dict[str, Any]:
    """List a user's documents, most recently updated first."""
    files = await service.list_files(caller, userId)
    return {"files": [LatexFileResponse.model_validate(f).to_json() for f in files]}


@router.post("")
async def create_file(
    data: LatexFileCreateRequest,
    caller: SessionUser = Depends(get_session_user),
    service: LatexFileService = Depends(get_latex_file_service),
) -> Dict[str, Any]:
    """Store a new document."""
    latex_file = await service.create_file(caller, data)
    return {"file": LatexFileResponse.model_validate(latex_file).to_json()}


@router.put("")
async def rename_file(
    data: LatexFileRenameRequest,
    caller: SessionUser = Depends(get_session_user),
    service: LatexFileService = Depends(get_latex_file_service),
) -> Dict[str, Any]:
    """Rename a document."""
    latex_file = await service.rename_file(caller, data)
    return {"file": LatexFileResponse.model_validate(latex_file).to_json()}


@router.delete("")
async def delete_file(
    fileId: Optional[str] = None,
    caller: SessionUser = Depends(get_session_user),
    service: LatexFileService = Depends(get_latex_file_service),
) -> Dict[str, bool]:
    """Delete a document."""
    await service.delete_file(caller, fileId)
    return {"success": True}
