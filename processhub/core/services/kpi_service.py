"""
KPI service for ProcessHub.
"""

from typing import List

from ..database.tortoise_schemas import KPIWriteRequest
from ..errors import BadRequestError, NotFoundError
from ..logging import get_logger
from ..models.tortoise_models import KPI
from ..repositories.kpi_repository import KPIRepository
from ..seed_data import SAMPLE_KPI_PARENTS, SAMPLE_KPIS

logger = get_logger(__name__)

REQUIRED_FIELDS = (
    "type_of_kpi",
    "kpi",
    "kpi_direction",
    "target_value",
    "frequency",
    "receiver",
    "source",
    "mode",
    "tag",
    "category",
)


class KPIService:
    """CRUD and seeding for KPIs."""

    def __init__(self, kpi_repository: KPIRepository) -> None:
        """Initialize the service with its repository."""
        self.kpi_repository = kpi_repository

    async def list_kpis(self) -> List[KPI]:
        """Get all KPIs sorted by order, then creation time."""
        return await self.kpi_repository.list_ordered()

    async def create_kpi(self, data: KPIWriteRequest) -> KPI:
        """
        Create a KPI.

        Raises:
            BadRequestError: If a required field is missing
        """
        values = data.model_dump(exclude={"id"}, exclude_none=True)
        missing = [name for name in REQUIRED_FIELDS if values.get(name) in (None, "")]
        if missing:
            fields = KPIWriteRequest.model_fields
            raise BadRequestError(
                "Missing required fields",
                context={"fields": [fields[name].alias or name for name in missing]},
            )
        values.setdefault("created_by", "system")
        kpi = await self.kpi_repository.create(**values)
        logger.info("KPI created", kpi_id=str(kpi.id))
        return kpi

    async def update_kpi(self, data: KPIWriteRequest) -> KPI:
        """
        Update the KPI selected by ``data.id``.

        Raises:
            BadRequestError: If no id is given
            NotFoundError: If the KPI does not exist
        """
        if not data.id:
            raise BadRequestError("KPI ID is required")
        kpi = await self.kpi_repository.get_by_id(data.id)
        if kpi is None:
            raise NotFoundError("KPI not found")

        submitted = data.model_dump(exclude={"id"}, exclude_unset=True)
        changes = {
            name: value
            for name, value in submitted.items()
            if value is not None or name == "parent_id"
        }
        return await self.kpi_repository.update(kpi, **changes)

    async def delete_kpi(self, kpi_id: str) -> None:
        """
        Delete a KPI.

        Raises:
            BadRequestError: If no id is given
            NotFoundError: If the KPI does not exist
        """
        if not kpi_id:
            raise BadRequestError("KPI ID is required")
        if not await self.kpi_repository.delete(kpi_id):
            raise NotFoundError("KPI not found")

    async def seed(self) -> List[KPI]:
        """
        Replace all KPIs with the sample set and link the child KPIs.

        Returns:
            The seeded KPIs
        """
        kpis = await self.kpi_repository.replace_all(SAMPLE_KPIS)
        for child, parent in SAMPLE_KPI_PARENTS:
            if child < len(kpis) and parent < len(kpis):
                await self.kpi_repository.update(
                    kpis[child], parent_id=str(kpis[parent].id)
                )
        logger.info("Seeded KPIs", count=len(kpis), event_type="seed")
        return kpis
