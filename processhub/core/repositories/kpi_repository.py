"""
KPI repository for ProcessHub.

Besides plain CRUD this repository maintains the list of BPMN processes
each KPI is associated with.
"""

from typing import Any, Dict, Iterable, List

from tortoise.transactions import in_transaction

from ..logging import get_logger
from ..models.tortoise_models import KPI
from .base import BaseRepository

logger = get_logger(__name__)


class KPIRepository(BaseRepository[KPI]):
    """Data access for KPIs."""

    def __init__(self) -> None:
        """Initialize KPI repository."""
        super().__init__(KPI)

    async def list_ordered(self) -> List[KPI]:
        """
        Get all KPIs sorted by order, then creation time.

        Returns:
            List of KPIs
        """
        return await self.get_all(order_by=["order", "created_at"])

    async def add_process(self, kpi_ids: Iterable[str], process_id: str) -> None:
        """
        Associate a BPMN process with KPIs.

        Unknown or malformed KPI ids are skipped.

        Args:
            kpi_ids: KPIs to update
            process_id: BPMN node id
        """
        for kpi_id in kpi_ids:
            kpi = await self.get_by_id(kpi_id)
            if kpi is None:
                logger.debug("Skipping unknown KPI", kpi_id=kpi_id)
                continue
            processes = list(kpi.associated_bpmn_processes or [])
            if process_id not in processes:
                processes.append(process_id)
                await self.update(kpi, associated_bpmn_processes=processes)

    async def remove_process(self, kpi_ids: Iterable[str], process_id: str) -> None:
        """
        Remove a BPMN process from KPIs.

        Args:
            kpi_ids: KPIs to update
            process_id: BPMN node id
        """
        for kpi_id in kpi_ids:
            kpi = await self.get_by_id(kpi_id)
            if kpi is None:
                continue
            processes = [
                p for p in kpi.associated_bpmn_processes or [] if p != process_id
            ]
            await self.update(kpi, associated_bpmn_processes=processes)

    async def replace_all(self, kpis: List[Dict[str, Any]]) -> List[KPI]:
        """
        Replace every stored KPI with a new set.

        Args:
            kpis: Attribute dictionaries of the new KPIs

        Returns:
            Created KPIs in input order
        """
        async with in_transaction():
            await self.delete_all()
            created = [await self.create(**data) for data in kpis]
        return created
