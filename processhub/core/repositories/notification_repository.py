"""
Notification repository for ProcessHub.

Which notifications a user sees depends on their role: regular users see
status updates addressed to them and one summary per submission they sent,
while supervisors and admins see what was addressed to them plus the status
updates they issued.
"""

import re
from typing import List, Optional

from tortoise.expressions import Q

from ..auth.tortoise_models import UserRole
from ..models.tortoise_models import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from .base import BaseRepository

REVIEWER_ROLES = (UserRole.SUPERVISOR.value, UserRole.ADMIN.value)


def _title_mentions(word: str) -> Q:
    return Q(title__icontains=word)


class NotificationRepository(BaseRepository[Notification]):
    """Data access for notifications."""

    def __init__(self) -> None:
        """Initialize notification repository."""
        super().__init__(Notification)

    @staticmethod
    def visible_to(role: str, email: str) -> Q:
        """
        Build the filter of notifications a user may list.

        Args:
            role: User's role
            email: User's email

        Returns:
            Tortoise Q expression
        """
        if role == UserRole.USER.value:
            return Q(
                recipient_email=email, type=NotificationType.STATUS_UPDATE
            ) | Q(
                sender_email=email,
                type=NotificationType.APPROVAL_REQUEST,
                is_user_summary=True,
            )
        if role in REVIEWER_ROLES:
            return Q(recipient_email=email) | Q(
                sender_email=email, type=NotificationType.STATUS_UPDATE
            )
        return Q(recipient_email=email)

    async def list_for(self, role: str, email: str) -> List[Notification]:
        """Get the notifications a user may see, newest first."""
        return await self.model.filter(self.visible_to(role, email)).order_by(
            "-created_at"
        )

    @staticmethod
    def _status_filter(role: str, email: str, status: NotificationStatus) -> Q:
        word = status.value
        if role == UserRole.USER.value:
            summaries = Q(
                sender_email=email,
                type=NotificationType.APPROVAL_REQUEST,
                status=status,
                is_user_summary=True,
            )
            updates = Q(recipient_email=email, type=NotificationType.STATUS_UPDATE)
            if status == NotificationStatus.PENDING:
                updates &= (
                    Q(status=status)
                    & ~_title_mentions("approved")
                    & ~_title_mentions("rejected")
                )
            else:
                updates &= Q(status=status) | _title_mentions(word)
            return updates | summaries

        if role in REVIEWER_ROLES:
            requests = Q(
                recipient_email=email,
                type=NotificationType.APPROVAL_REQUEST,
                status=status,
            )
            if status == NotificationStatus.PENDING:
                return requests
            issued = Q(sender_email=email, type=NotificationType.STATUS_UPDATE) & (
                Q(status=status) | _title_mentions(word)
            )
            return requests | issued

        return Q(recipient_email=email, status=status)

    async def count_by_status(self, role: str, email: str) -> dict:
        """
        Count a user's notifications per status.

        Args:
            role: User's role
            email: User's email

        Returns:
            Dictionary with ``pending``, ``approved``, ``rejected`` and
            ``total`` counts
        """
        counts = {}
        for status in NotificationStatus:
            counts[status.value] = await self.model.filter(
                self._status_filter(role, email, status)
            ).count()
        counts["total"] = sum(counts.values())
        return counts

    async def find_summary(
        self, sender_email: str, base_title: str
    ) -> Optional[Notification]:
        """
        Find the summary a sender holds for a submission.

        The summary title is either the base title or the base title followed
        by `` (Pending Approval)``, compared case-insensitively.
        """
        pattern = re.compile(
            rf"^{re.escape(base_title)}( \(Pending Approval\))?$", re.IGNORECASE
        )
        candidates = await self.find_by(
            order_by=["created_at"],
            sender_email=sender_email,
            type=NotificationType.APPROVAL_REQUEST,
            is_user_summary=True,
        )
        for candidate in candidates:
            if pattern.match(candidate.title):
                return candidate
        return None

    async def find_status_update(
        self, recipient_email: str, related_notification_id: str
    ) -> Optional[Notification]:
        """Find the status update sent for a processed request."""
        return await self.find_one_by(
            recipient_email=recipient_email,
            type=NotificationType.STATUS_UPDATE,
            related_notification_id=related_notification_id,
        )

    async def pending_requests_from(self, sender_email: str) -> List[Notification]:
        """Get a sender's pending approval requests in creation order."""
        return await self.find_by(
            order_by=["created_at"],
            sender_email=sender_email,
            type=NotificationType.APPROVAL_REQUEST,
            status=NotificationStatus.PENDING,
        )
