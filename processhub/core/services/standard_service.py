"""
Standards service for ProcessHub.
"""

from typing import List

from ..logging import get_logger
from ..models.tortoise_models import Standard
from ..repositories.standard_repository import StandardRepository
from ..seed_data import STANDARDS

logger = get_logger(__name__)


class StandardService:
    """Lists and seeds compliance standards."""

    def __init__(self, standard_repository: StandardRepository) -> None:
        """Initialize the service with its repository."""
        self.standard_repository = standard_repository

    async def list_active(self) -> List[Standard]:
        """Get active standards sorted by name."""
        return await self.standard_repository.get_active()

    async def seed(self) -> List[Standard]:
        """
        Replace all standards with the built-in catalogue.

        Returns:
            The seeded standards
        """
        standards = await self.standard_repository.replace_all(STANDARDS)
        logger.info("Seeded standards", count=len(standards), event_type="seed")
        return standards
