"""
BPMN folder and file tree endpoints for the ProcessHub API.

The tree is addressed by ``userId``; callers may only work on their own tree
unless they are admins.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ...core.database.tortoise_schemas import BpmnNodeWriteRequest, SessionUser
from ...core.dependencies import get_bpmn_node_service, get_session_user
from ...core.errors import BadRequestError
from ...core.services import BpmnNodeService

router = APIRouter(prefix="/bpmn-nodes", tags=["bpmn"])


@router.get("")
async def get_nodes(
    userId: Optional[str] = None,
    nodeId: Optional[str] = None,
    caller: SessionUser = Depends(get_session_user),
    service: BpmnNodeService = Depends(get_bpmn_node_service),
) -> Dict[str, Any]:
    """
    Get a user's node tree, or a single node when ``nodeId`` is given.
    """
    if not userId:
        raise BadRequestError("userId is required")
    service.check_access(caller, userId)

    if nodeId:
        return {"success": True, "node": await service.get_node(userId, nodeId)}
    return {"success": True, "tree": await service.get_tree(userId)}


@router.post("")
async def create_node(
    data: BpmnNodeWriteRequest,
    caller: SessionUser = Depends(get_session_user),
    service: BpmnNodeService = Depends(get_bpmn_node_service),
) -> Dict[str, Any]:
    """Create a folder or file."""
    if data.user_id:
        service.check_access(caller, data.user_id)
    return {"success": True, "node": await service.create_node(data)}


@router.put("")
async def update_node(
    data: BpmnNodeWriteRequest,
    caller: SessionUser = Depends(get_session_user),
    service: BpmnNodeService = Depends(get_bpmn_node_service),
) -> Dict[str, Any]:
    """Update a node's fields, advanced details or parent."""
    if data.user_id:
        service.check_access(caller, data.user_id)
    return {"success": True, "node": await service.update_node(data)}


@router.delete("")
async def delete_node(
    nodeId: Optional[str] = None,
    userId: Optional[str] = None,
    caller: SessionUser = Depends(get_session_user),
    service: BpmnNodeService = Depends(get_bpmn_node_service),
) -> Dict[str, Any]:
    """Delete a node and everything below it."""
    if userId:
        service.check_access(caller, userId)
    await service.delete_node(nodeId, userId)
    return {"success": True}
