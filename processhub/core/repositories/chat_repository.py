"""
AI chat and LaTeX file repositories for ProcessHub.
"""

from typing import List, Optional, Tuple, Union
from uuid import UUID

from ..models.tortoise_models import AiChat, LatexFile
from .base import BaseRepository, parse_uuid


class AiChatRepository(BaseRepository[AiChat]):
    """Data access for saved AI chats."""

    def __init__(self) -> None:
        """Initialize chat repository."""
        super().__init__(AiChat)

    async def page_for_user(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        search: str = "",
        category: str = "",
        archived: bool = False,
    ) -> Tuple[List[AiChat], int]:
        """
        Get one page of a user's chats.

        Args:
            user_id: Owning user id
            page: 1-based page number
            limit: Page size
            search: Case-insensitive title filter
            category: Category filter; empty or ``All`` disables it
            archived: Whether to list archived chats

        Returns:
            Tuple of the chats on the page and the total match count
        """
        query = self.model.filter(user_id=user_id, is_archived=archived)
        if search:
            query = query.filter(title__icontains=search)
        if category and category != "All":
            query = query.filter(category=category)

        total = await query.count()
        chats = (
            await query.order_by("-last_modified")
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return chats, total

    async def get_owned(
        self, chat_id: Union[str, UUID, None], user_id: str
    ) -> Optional[AiChat]:
        """Get a chat if it belongs to a user."""
        pk = parse_uuid(chat_id)
        if pk is None:
            return None
        return await self.find_one_by(id=pk, user_id=user_id)


class LatexFileRepository(BaseRepository[LatexFile]):
    """Data access for LaTeX documents."""

    def __init__(self) -> None:
        """Initialize LaTeX file repository."""
        super().__init__(LatexFile)

    async def get_for_user(self, user_id: str) -> List[LatexFile]:
        """Get a user's documents, most recently updated first."""
        return await self.find_by(order_by=["-updated_at"], user_id=user_id)
