"""
Dashboard statistics for ProcessHub.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict

from ..database.tortoise_schemas import SessionUser
from ..repositories.bpmn_repository import BpmnNodeRepository
from ..repositories.kpi_repository import KPIRepository

RECENT_ACTIVITY_DAYS = 7


class DashboardService:
    """Aggregates the counters shown on the dashboard."""

    def __init__(
        self, node_repository: BpmnNodeRepository, kpi_repository: KPIRepository
    ) -> None:
        """Initialize the service with its repositories."""
        self.node_repository = node_repository
        self.kpi_repository = kpi_repository

    async def stats(self, caller: SessionUser) -> Dict[str, int]:
        """
        Compute the caller's dashboard counters.

        Returns:
            ``bpmnDiagrams`` (the caller's files), ``kpiTracked`` (all KPIs)
            and ``recentActivity`` (the caller's nodes updated in the last
            seven days)
        """
        since = datetime.now(timezone.utc) - timedelta(days=RECENT_ACTIVITY_DAYS)
        return {
            "bpmnDiagrams": await self.node_repository.count_user_files(caller.user_id),
            "kpiTracked": await self.kpi_repository.count(),
            "recentActivity": await self.node_repository.count(
                user_id=caller.user_id, updated_at__gte=since
            ),
        }
