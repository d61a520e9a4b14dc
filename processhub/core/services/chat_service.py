"""
AI chat history service for ProcessHub.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from ..database.tortoise_schemas import AiChatWriteRequest, SessionUser
from ..errors import BadRequestError, NotFoundError
from ..logging import get_logger
from ..models.tortoise_models import AiChat
from ..repositories.chat_repository import AiChatRepository

logger = get_logger(__name__)


class AiChatService:
    """Saved AI assistant conversations, scoped to their owner."""

    def __init__(self, chat_repository: AiChatRepository) -> None:
        """Initialize the service with its repository."""
        self.chat_repository = chat_repository

    async def list_chats(
        self,
        caller: SessionUser,
        page: int = 1,
        limit: int = 20,
        search: str = "",
        category: str = "",
        archived: bool = False,
    ) -> Tuple[List[AiChat], Dict[str, int]]:
        """
        Get one page of the caller's chats.

        Returns:
            Tuple of chats and pagination info (``page``, ``limit``,
            ``total``, ``pages``)
        """
        page = max(page, 1)
        limit = max(limit, 1)
        chats, total = await self.chat_repository.page_for_user(
            caller.user_id,
            page=page,
            limit=limit,
            search=search,
            category=category,
            archived=archived,
        )
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        }
        return chats, pagination

    async def create_chat(
        self, caller: SessionUser, data: AiChatWriteRequest
    ) -> AiChat:
        """
        Save a new chat.

        Raises:
            BadRequestError: If the title or messages are missing
        """
        if not data.title or data.messages is None:
            raise BadRequestError("Title and messages are required")

        now = datetime.now(timezone.utc)
        chat = await self.chat_repository.create(
            user_id=caller.user_id,
            title=data.title,
            messages=data.messages,
            category=data.category or "General",
            tags=data.tags or [],
            timestamp=now,
            last_modified=now,
        )
        logger.info("Chat saved", chat_id=str(chat.id), user_id=caller.user_id)
        return chat

    async def get_chat(self, caller: SessionUser, chat_id: str) -> AiChat:
        """
        Get one of the caller's chats.

        Raises:
            NotFoundError: If the chat does not exist for the caller
        """
        chat = await self.chat_repository.get_owned(chat_id, caller.user_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    async def update_chat(
        self, caller: SessionUser, chat_id: str, data: AiChatWriteRequest
    ) -> AiChat:
        """
        Update one of the caller's chats.

        Empty values leave a field unchanged; ``isArchived`` is applied
        whenever it is a boolean. The modification time is always stamped.
        """
        chat = await self.get_chat(caller, chat_id)

        changes: Dict[str, Any] = {
            name: value
            for name, value in (
                ("title", data.title),
                ("messages", data.messages),
                ("category", data.category),
                ("tags", data.tags),
            )
            if value
        }
        if isinstance(data.is_archived, bool):
            changes["is_archived"] = data.is_archived
        changes["last_modified"] = datetime.now(timezone.utc)

        return await self.chat_repository.update(chat, **changes)

    async def delete_chat(self, caller: SessionUser, chat_id: str) -> None:
        """Delete one of the caller's chats."""
        chat = await self.get_chat(caller, chat_id)
        await self.chat_repository.delete(chat.id)
