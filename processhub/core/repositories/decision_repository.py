"""
Decision rule and export file repositories for ProcessHub.
"""

from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from ..models.tortoise_models import DecisionExportFile, DecisionRule, RuleStatus
from .base import BaseRepository, parse_uuid


class DecisionRuleRepository(BaseRepository[DecisionRule]):
    """Data access for decision rules."""

    def __init__(self) -> None:
        """Initialize decision rule repository."""
        super().__init__(DecisionRule)

    async def get_for_owner(self, email: str) -> List[DecisionRule]:
        """Get rules created by a user, newest first."""
        return await self.find_by(order_by=["-created_at"], created_by=email)

    async def get_owned(
        self, rule_id: Union[str, UUID, None], email: str
    ) -> Optional[DecisionRule]:
        """
        Get a rule if it belongs to a user.

        Args:
            rule_id: Rule identifier
            email: Owner's email

        Returns:
            Rule instance or None when missing or owned by someone else
        """
        pk = parse_uuid(rule_id)
        if pk is None:
            return None
        return await self.find_one_by(id=pk, created_by=email)

    async def get_active(
        self, rule_ids: Optional[List[str]] = None
    ) -> List[DecisionRule]:
        """
        Get active rules, optionally restricted to a set of ids.

        Args:
            rule_ids: Rule identifiers to keep; malformed ids are ignored

        Returns:
            Active rules in creation order
        """
        filters: Dict[str, Any] = {"status": RuleStatus.ACTIVE}
        if rule_ids:
            filters["id__in"] = [pk for pk in map(parse_uuid, rule_ids) if pk]
        return await self.find_by(order_by=["created_at"], **filters)


class DecisionExportRepository(BaseRepository[DecisionExportFile]):
    """Data access for saved decision exports."""

    def __init__(self) -> None:
        """Initialize export file repository."""
        super().__init__(DecisionExportFile)

    async def get_for_owner(self, email: str) -> List[DecisionExportFile]:
        """Get exports saved by a user, newest first."""
        return await self.find_by(order_by=["-created_at"], created_by=email)

    async def get_owned(
        self, file_id: Union[str, UUID, None], email: str
    ) -> Optional[DecisionExportFile]:
        """Get an export if it belongs to a user."""
        pk = parse_uuid(file_id)
        if pk is None:
            return None
        return await self.find_one_by(id=pk, created_by=email)
