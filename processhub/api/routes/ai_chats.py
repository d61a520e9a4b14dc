"""
AI chat history endpoints for the ProcessHub API.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status

from ...core.database.tortoise_schemas import (
    AiChatResponse,
    AiChatSummary,
    AiChatWriteRequest,
    SessionUser,
)
from ...core.dependencies import get_ai_chat_service, get_session_user
from ...core.services import AiChatService

router = APIRouter(prefix="/ai-chats", tags=["ai-chats"])


@router.get("")
async def list_chats(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str = "",
    category: str = "",
    archived: bool = False,
    caller: SessionUser = Depends(get_session_user),
    service: AiChatService = Depends(get_ai_chat_service),
) -> Dict[str, Any]:
    """List the caller's chats without their messages."""
    chats, pagination = await service.list_chats(
        caller,
        page=page,
        limit=limit,
        search=search,
        category=category,
        archived=archived,
    )
    return {
        "chats": [AiChatSummary.model_validate(c).to_json() for c in chats],
        "pagination": pagination,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_chat(
    data: AiChatWriteRequest,
    caller: SessionUser = Depends(get_session_user),
    service: AiChatService = Depends(get_ai_chat_service),
) -> Dict[str, Any]:
    """Save a chat."""
    chat = await service.create_chat(caller, data)
    return AiChatResponse.model_validate(chat).to_json()


@router.get("/{chat_id}")
async def get_chat(
    chat_id: str,
    caller: SessionUser = Depends(get_session_user),
    service: AiChatService = Depends(get_ai_chat_service),
) -> Dict[str, Any]:
    """Get one of the caller's chats with its messages."""
    chat = await service.get_chat(caller, chat_id)
    return AiChatResponse.model_validate(chat).to_json()


@router.put("/{chat_id}")
async def update_chat(
    chat_id: str,
    data: AiChatWriteRequest,
    caller: SessionUser = Depends(get_session_user),
    service: AiChatService = Depends(get_ai_chat_service),
) -> Dict[str, Any]:
    """Update one of the caller's chats."""
    chat = await service.update_chat(caller, chat_id, data)
    return AiChatResponse.model_validate(chat).to_json()


@router.delete("/{chat_id}")
async def delete_chat(
    chat_id: str,
    caller: SessionUser = Depends(get_session_user),
    service: AiChatService = Depends(get_ai_chat_service),
) -> Dict[str, str]:
    """Delete one of the caller's chats."""
    await service.delete_chat(caller, chat_id)
    return {"message": "Chat deleted successfully"}
