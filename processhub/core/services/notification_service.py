"""
Notification service for ProcessHub.

Submitting a diagram sends one approval request to every supervisor plus a
summary the submitter keeps. When a supervisor decides, the submitter's
summary is retitled with the outcome; submitters without a summary get a
status update instead. Emails accompany each step, and delivery failures
never undo the database changes.
"""

import re
from typing import Any, Dict, List, Optional

from ..auth.tortoise_models import User, UserRole
from ..bpmn import isoformat
from ..config import get_config
from ..database.tortoise_schemas import (
    CheckDuplicateRequest,
    CreateNotificationRequest,
    DeleteNotificationRequest,
    ProcessNotificationRequest,
    SessionUser,
)
from ..email import EmailSender
from ..errors import BadRequestError, ForbiddenError, NotFoundError
from ..logging import get_logger, security_logger
from ..models.tortoise_models import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from ..repositories.notification_repository import NotificationRepository
from ..repositories.user_repository import UserRepository

logger = get_logger(__name__)

PENDING_SUFFIX = "(Pending Approval)"
_OUTCOME_SUFFIX = re.compile(r"\((Pending Approval|Approved|Rejected)\)$")
_WHITESPACE = re.compile(r"\s+")


def base_title(title: str) -> str:
    """Strip a trailing approval state such as ``(Approved)`` from a title."""
    return _OUTCOME_SUFFIX.sub("", title).strip()


def normalize_xml(xml: str) -> str:
    """Collapse whitespace runs so formatting differences do not matter."""
    return _WHITESPACE.sub(" ", xml).strip()


def _decision_message(prefix: str, decision: str, reviewer: str, feedback: str) -> str:
    message = f"{prefix} has been {decision} by {reviewer}. "
    if feedback:
        message += f"Feedback: {feedback}"
    return message


def _reference(notification: Notification) -> Dict[str, Any]:
    return {
        "title": notification.title,
        "createdAt": isoformat(notification.created_at),
        "id": str(notification.id),
    }


class NotificationService:
    """Approval requests and status updates between users."""

    def __init__(
        self,
        notification_repository: NotificationRepository,
        user_repository: UserRepository,
        email_sender: EmailSender,
        app_url: Optional[str] = None,
    ) -> None:
        """
        Initialize the notification service.

        Args:
            notification_repository: Notification data access
            user_repository: User data access
            email_sender: Outgoing email
            app_url: Client application URL used in email links
        """
        self.notification_repository = notification_repository
        self.user_repository = user_repository
        self.email_sender = email_sender
        self.app_url = app_url or get_config().api.app_url

    async def _get_user(self, caller: SessionUser) -> User:
        user = await self.user_repository.get_by_email(caller.email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _role(user: User) -> str:
        return user.role.value if hasattr(user.role, "value") else str(user.role)

    async def list_notifications(self, caller: SessionUser) -> List[Notification]:
        """Get the notifications the caller may see, newest first."""
        user = await self._get_user(caller)
        return await self.notification_repository.list_for(self._role(user), user.email)

    async def count(self, caller: SessionUser) -> Dict[str, Any]:
        """
        Count the caller's notifications by status.

        Returns:
            Dictionary with ``count`` (pending) and ``counts`` per status
        """
        user = await self._get_user(caller)
        counts = await self.notification_repository.count_by_status(
            self._role(user), user.email
        )
        return {"count": counts["pending"], "counts": counts}

    async def create(
        self, caller: SessionUser, data: CreateNotificationRequest
    ) -> int:
        """
        Send a diagram to every supervisor for approval.

        Returns:
            Number of supervisors notified

        Raises:
            BadRequestError: If title, message or diagram are missing
            NotFoundError: If the caller is unknown or there are no supervisors
        """
        user = await self._get_user(caller)
        if not data.title or not data.message or not data.bpmn_xml:
            raise BadRequestError("Title, message, and BPMN XML are required")

        supervisors = await self.user_repository.get_by_role(UserRole.SUPERVISOR)
        if not supervisors:
            raise NotFoundError("No supervisors found to send approval request")

        sender = {
            "sender_name": user.name or "",
            "sender_email": user.email,
            "sender_role": self._role(user),
        }
        for supervisor in supervisors:
            await self.notification_repository.create(
                type=NotificationType.APPROVAL_REQUEST,
                title=data.title,
                message=data.message,
                status=NotificationStatus.PENDING,
                bpmn_xml=data.bpmn_xml,
                recipient_email=supervisor.email,
                **sender,
            )
        await self.notification_repository.create(
            type=NotificationType.APPROVAL_REQUEST,
            title=f"{data.title} {PENDING_SUFFIX}",
            message=(
                "You sent this diagram for approval. "
                f"{len(supervisors)} supervisor(s) have been notified."
            ),
            status=NotificationStatus.PENDING,
            bpmn_xml=data.bpmn_xml,
            recipient_email=user.email,
            is_user_summary=True,
            **sender,
        )

        await self.email_sender.send_submission_confirmation_email(
            user.email, data.title, len(supervisors), self.app_url
        )
        for supervisor in supervisors:
            await self.email_sender.send_approval_request_email(
                supervisor.email,
                data.title,
                data.message,
                user.name or user.email,
                self.app_url,
            )

        logger.info(
            "Approval requested",
            sender=user.email,
            supervisors=len(supervisors),
            event_type="approval_requested",
        )
        return len(supervisors)

    async def delete(
        self, caller: SessionUser, data: DeleteNotificationRequest
    ) -> None:
        """
        Delete a notification the caller sent or received.

        Raises:
            BadRequestError: If no id is given
            NotFoundError: If the notification does not exist
            ForbiddenError: If the caller is neither sender nor recipient
        """
        if not data.notification_id:
            raise BadRequestError("Notification ID is required")

        notification = await self.notification_repository.get_by_id(
            data.notification_id
        )
        if notification is None:
            raise NotFoundError("Notification not found")

        participants = (notification.sender_email, notification.recipient_email)
        if caller.email not in participants:
            security_logger.log_access_denied(
                user_id=caller.user_id,
                resource=f"notifications/{notification.id}",
                reason="not_participant",
            )
            raise ForbiddenError("You are not authorized to delete this notification")

        await self.notification_repository.delete(notification.id)

    async def process(
        self, caller: SessionUser, data: ProcessNotificationRequest
    ) -> str:
        """
        Approve or reject an approval request addressed to the caller.

        Returns:
            The decision that was applied

        Raises:
            BadRequestError: If fields are missing or the decision is unknown
            NotFoundError: If the caller or notification does not exist
            ForbiddenError: If the caller is not the recipient
        """
        reviewer = await self._get_user(caller)
        if not data.notification_id or not data.decision:
            raise BadRequestError("Notification ID and decision are required")
        if data.decision not in (
            NotificationStatus.APPROVED.value,
            NotificationStatus.REJECTED.value,
        ):
            raise BadRequestError('Decision must be either "approved" or "rejected"')

        notification = await self.notification_repository.get_by_id(
            data.notification_id
        )
        if notification is None:
            raise NotFoundError("Notification not found")
        if notification.recipient_email != reviewer.email:
            raise ForbiddenError("You are not authorized to process this notification")

        decision = NotificationStatus(data.decision)
        feedback = data.feedback or ""
        reviewer_name = reviewer.name or reviewer.email
        notification_id = str(notification.id)

        await self.notification_repository.update(
            notification, status=decision, feedback=feedback
        )

        title = base_title(notification.title)
        summary = await self.notification_repository.find_summary(
            notification.sender_email, title
        )
        status_update = await self.notification_repository.find_status_update(
            notification.sender_email, notification_id
        )

        if summary is not None:
            await self.notification_repository.update(
                summary,
                status=decision,
                title=f"{title} ({decision.value.capitalize()})",
                message=_decision_message(
                    "Your diagram", decision.value, reviewer_name, feedback
                ),
            )
            if status_update is not None:
                await self.notification_repository.delete(status_update.id)
        else:
            values = {
                "title": f"Your BPMN has been {decision.value}",
                "message": _decision_message(
                    "Your BPMN diagram", decision.value, reviewer_name, feedback
                ),
                "status": decision,
            }
            if status_update is not None:
                await self.notification_repository.update(status_update, **values)
            else:
                await self.notification_repository.create(
                    type=NotificationType.STATUS_UPDATE,
                    sender_name=reviewer.name or "",
                    sender_email=reviewer.email,
                    sender_role=self._role(reviewer),
                    recipient_email=notification.sender_email,
                    related_notification_id=notification_id,
                    bpmn_xml=notification.bpmn_xml,
                    **values,
                )

        await self.email_sender.send_status_update_email(
            notification.sender_email,
            decision.value,
            notification.title,
            feedback,
            reviewer_name,
            self.app_url,
        )
        logger.info(
            "Approval request processed",
            notification_id=notification_id,
            decision=decision.value,
            reviewer=reviewer.email,
            event_type="approval_processed",
        )
        return decision.value

    async def check_duplicate(
        self, caller: SessionUser, data: CheckDuplicateRequest
    ) -> Dict[str, Any]:
        """
        Look for a pending submission of the same diagram.

        Diagrams match when they are equal after whitespace normalization.
        Separately, a pending submission whose title or message contains the
        project name is reported as a name match.

        Raises:
            BadRequestError: If no diagram is given
            NotFoundError: If the caller does not exist
        """
        if not data.bpmn_xml:
            raise BadRequestError("BPMN XML is required")
        user = await self._get_user(caller)

        pending = await self.notification_repository.pending_requests_from(user.email)
        wanted = normalize_xml(data.bpmn_xml)

        duplicate = next(
            (n for n in pending if n.bpmn_xml and normalize_xml(n.bpmn_xml) == wanted),
            None,
        )
        name_match = None
        if data.project_name:
            name_match = next(
                (
                    n
                    for n in pending
                    if data.project_name in n.title or data.project_name in n.message
                ),
                None,
            )

        return {
            "duplicateFound": duplicate is not None,
            "duplicateInfo": _reference(duplicate) if duplicate else None,
            "projectNameMatch": _reference(name_match) if name_match else None,
        }
