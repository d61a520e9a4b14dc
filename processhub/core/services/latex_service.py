"""
LaTeX document service for ProcessHub.
"""

from typing import List, Optional

from ..auth.decorators import is_admin
from ..database.tortoise_schemas import (
    LatexFileCreateRequest,
    LatexFileRenameRequest,
    SessionUser,
)
from ..errors import BadRequestError, ForbiddenError, NotFoundError
from ..models.tortoise_models import LatexFile
from ..repositories.chat_repository import LatexFileRepository


class LatexFileService:
    """LaTeX documents generated from process projects."""

    def __init__(self, latex_repository: LatexFileRepository) -> None:
        """Initialize the service with its repository."""
        self.latex_repository = latex_repository

    @staticmethod
    def _check_owner(caller: SessionUser, user_id: str) -> None:
        if caller.user_id != user_id and not is_admin(caller.role):
            raise ForbiddenError("Access denied")

    async def _get_file(self, caller: SessionUser, file_id: str) -> LatexFile:
        latex_file = await self.latex_repository.get_by_id(file_id)
        if latex_file is None:
            raise NotFoundError("File not found")
        self._check_owner(caller, latex_file.user_id)
        return latex_file

    async def list_files(
        self, caller: SessionUser, user_id: Optional[str]
    ) -> List[LatexFile]:
        """
        Get a user's documents, most recently updated first.

        Raises:
            BadRequestError: If no user id is given
            ForbiddenError: If a non-admin asks for another user's documents
        """
        if not user_id:
            raise BadRequestError("Missing userId")
        self._check_owner(caller, user_id)
        return await self.latex_repository.get_for_user(user_id)

    async def create_file(
        self, caller: SessionUser, data: LatexFileCreateRequest
    ) -> LatexFile:
        """
        Store a new document.

        Raises:
            BadRequestError: If user id, name or content are missing
        """
        if not data.user_id or not data.name or not data.content:
            raise BadRequestError("Missing required fields")
        self._check_owner(caller, data.user_id)

        selected_tables = data.selected_tables
        return await self.latex_repository.create(
            user_id=data.user_id,
            name=data.name,
            content=data.content,
            source_project_id=data.source_project_id,
            process_metadata=data.process_metadata or {},
            additional_details=data.additional_details or {},
            selected_tables=(
                selected_tables if isinstance(selected_tables, list) else []
            ),
        )

    async def rename_file(
        self, caller: SessionUser, data: LatexFileRenameRequest
    ) -> LatexFile:
        """
        Rename a document.

        Raises:
            BadRequestError: If the id or name is missing
            NotFoundError: If the document does not exist
        """
        if not data.file_id or not data.name:
            raise BadRequestError("Missing fileId or name")
        latex_file = await self._get_file(caller, data.file_id)
        return await self.latex_repository.update(latex_file, name=data.name)

    async def delete_file(self, caller: SessionUser, file_id: Optional[str]) -> None:
        """
        Delete a document.

        Raises:
            BadRequestError: If no id is given
            NotFoundError: If the document does not exist
        """
        if not file_id:
            raise BadRequestError("Missing fileId")
        latex_file = await self._get_file(caller, file_id)
        await self.latex_repository.delete(latex_file.id)
