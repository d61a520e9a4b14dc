"""
Decision rule endpoints for the ProcessHub API.

Rule management is per user. Execution, spreadsheet import and export, and
workflow triggering work on the data sent with the request and need no
session, except for saving an export.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from ...core.database.tortoise_schemas import (
    DecisionExportFileDetail,
    DecisionExportFileResponse,
    DecisionRuleResponse,
    DecisionRuleWriteRequest,
    ExecuteRulesRequest,
    ExportRequest,
    SessionUser,
    TriggerWorkflowRequest,
)
from ...core.dependencies import (
    get_decision_service,
    get_optional_session_user,
    get_session_user,
)
from ...core.errors import BadRequestError
from ...core.services import DecisionService

router = APIRouter(prefix="/decision", tags=["decision"])


@router.get("/rules")
async def list_rules(
    caller: SessionUser = Depends(get_session_user),
    service: DecisionService = Depends(get_decision_service),
) -> Dict[str, Any]:
    """List the caller's rules, newest first."""
    rules = await service.list_rules(caller)
    return {"rules": [DecisionRuleResponse.model_validate(r).to_json() for r in rules]}


@router.post("/rules", status_code=status.HTTP_201_CREATED)
async def create_rule(
    data: DecisionRuleWriteRequest,
    caller: SessionUser = Depends(get_session_user),
    service: DecisionService = Depends(get_decision_service),
) -> Dict[str, Any]:
    """Create a rule owned by the caller."""
    rule = await service.create_rule(caller, data)
    return {"rule": DecisionRuleResponse.model_validate(rule).to_json()}


@router.put("/rules")
async def update_rule(
    data: DecisionRuleWriteRequest,
    caller: SessionUser = Depends(get_session_user),
    service: DecisionService = Depends(get_decision_service),
) -> Dict[str, Any]:
    """Update one of the caller's rules."""
    rule = await service.update_rule(caller, data)
    return {"rule": DecisionRuleResponse.model_validate(rule).to_json()}


@router.delete("/rules")
async def delete_rule(
    id: Optional[str] = None,
    caller: SessionUser = Depends(get_session_user),
    service: DecisionService = Depends(get_decision_service),
) -> Dict[str, str]:
    """Delete one of the caller's rules."""
    await service.delete_rule(caller, id)
    return {"message": "Rule deleted successfully"}


@router.post("/execute")
async def execute_rules(
    data: ExecuteRulesRequest,
    service: DecisionService = Depends(get_decision_service),
) -> Dict[str, Any]:
    """Run the active rules over the submitted rows."""
    return {"results": await service.execute(data)}


@router.post("/import")
async def import_spreadsheet(file: Optional[UploadFile] = File(None)) -> Dict[str, Any]:
    """
    Parse an uploaded xlsx or CSV file.

    Returns:
        Rows keyed by header, inferred column types and the row count
    """
    if file is None:
        raise BadRequestError("No file provided")
    content = await file.read()
    result = DecisionService.import_file(content, file.filename)
    return {"success": True, **result}


@router.post("/export")
async def export_spreadsheet(
    data: ExportRequest,
    caller: Optional[SessionUser] = Depends(get_optional_session_user),
    service: DecisionService = Depends(get_decision_service),
) -> Dict[str, Any]:
    """Write rows to an xlsx workbook, saving it when ``save`` is set."""
    return await service.export(data, caller)


@router.get("/export")
async def get_exports(
    id: Optional[str] = None,
    caller: SessionUser = Depends(get_session_user),
    service: DecisionService = Depends(get_decision_service),
) -> Dict[str, Any]:
    """
    Get one saved export with its content, or list the caller's exports.
    """
    if id:
        saved = await service.get_export(caller, id)
        detail = DecisionExportFileDetail.model_validate(saved)
        return {
            "success": True,
            "data": detail.data_base64,
            "filename": detail.name,
            "mimeType": detail.mime_type,
            "size": detail.size,
        }

    files = await service.list_exports(caller)
    return {
        "success": True,
        "files": [
            DecisionExportFileResponse.model_validate(f).to_json() for f in files
        ],
    }


@router.post("/trigger-workflow")
async def trigger_workflow(data: TriggerWorkflowRequest) -> Dict[str, Any]:
    """Start a workflow with decision results."""
    return {"success": True, "workflow": DecisionService.trigger_workflow(data)}
