"""
Standard repository for ProcessHub.
"""

from typing import Any, Dict, List

from tortoise.transactions import in_transaction

from ..models.tortoise_models import Standard
from .base import BaseRepository


class StandardRepository(BaseRepository[Standard]):
    """Data access for compliance standards."""

    def __init__(self) -> None:
        """Initialize standard repository."""
        super().__init__(Standard)

    async def get_active(self) -> List[Standard]:
        """
        Get active standards sorted by name.

        Returns:
            List of active standards
        """
        return await self.find_by(order_by=["name"], is_active=True)

    async def replace_all(self, standards: List[Dict[str, Any]]) -> List[Standard]:
        """
        Replace every stored standard with a new set.

        Args:
            standards: Attribute dictionaries of the new standards

        Returns:
            Created standards
        """
        async with in_transaction():
            await self.delete_all()
            created = [await self.create(**data) for data in standards]
        return created
