"""
Unit tests for the notification service.

The approval workflow is exercised against mocked repositories and a mocked
email sender.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from processhub.core.auth.tortoise_models import UserRole
from processhub.core.database.tortoise_schemas import (
    CheckDuplicateRequest,
    CreateNotificationRequest,
    DeleteNotificationRequest,
    ProcessNotificationRequest,
    SessionUser,
)
from processhub.core.email import EmailSender
from processhub.core.errors import BadRequestError, ForbiddenError, NotFoundError
from processhub.core.models.tortoise_models import (
    NotificationStatus,
    NotificationType,
)
from processhub.core.repositories.notification_repository import (
    NotificationRepository,
)
from processhub.core.repositories.user_repository import UserRepository
from processhub.core.services.notification_service import (
    NotificationService,
    base_title,
    normalize_xml,
)

SUBMITTER = SimpleNamespace(
    id=uuid4(), email="sam@example.com", name="Sam", role=UserRole.USER
)
SUPERVISOR = SimpleNamespace(
    id=uuid4(), email="sue@example.com", name="Sue", role=UserRole.SUPERVISOR
)


def _session(user) -> SessionUser:
    return SessionUser(
        user_id=str(user.id), email=user.email, name=user.name, role=user.role.value
    )


def _notification(**values):
    defaults = {
        "id": uuid4(),
        "type": NotificationType.APPROVAL_REQUEST,
        "title": "Invoice flow",
        "message": "Please review",
        "status": NotificationStatus.PENDING,
        "bpmn_xml": "<definitions/>",
        "sender_name": SUBMITTER.name,
        "sender_email": SUBMITTER.email,
        "sender_role": "user",
        "recipient_email": SUPERVISOR.email,
        "is_user_summary": False,
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
    }
    defaults.update(values)
    return SimpleNamespace(**defaults)


@pytest.fixture
def mock_notification_repository():
    """Create a mock notification repository."""
    repository = AsyncMock(spec=NotificationRepository)
    repository.find_summary.return_value = None
    repository.find_status_update.return_value = None
    return repository


@pytest.fixture
def mock_user_repository():
    """Create a mock user repository that knows both users."""
    repository = AsyncMock(spec=UserRepository)
    users = {SUBMITTER.email: SUBMITTER, SUPERVISOR.email: SUPERVISOR}
    repository.get_by_email.side_effect = lambda email: users.get(email)
    repository.get_by_role.return_value = [SUPERVISOR]
    return repository


@pytest.fixture
def mock_email_sender():
    """Create a mock email sender."""
    return AsyncMock(spec=EmailSender)


@pytest.fixture
def service(mock_notification_repository, mock_user_repository, mock_email_sender):
    """Create a notification service instance."""
    return NotificationService(
        mock_notification_repository,
        mock_user_repository,
        mock_email_sender,
        app_url="https://hub.example.com",
    )


class TestHelpers:
    """Test title and XML helpers."""

    def test_base_title(self) -> None:
        """Trailing approval states are stripped."""
        assert base_title("Invoice (Pending Approval)") == "Invoice"
        assert base_title("Invoice (Approved)") == "Invoice"
        assert base_title("Invoice (Draft)") == "Invoice (Draft)"

    def test_normalize_xml(self) -> None:
        """Whitespace runs collapse to single spaces."""
        assert normalize_xml("<a>\n   <b/>\t</a> ") == "<a> <b/> </a>"


class TestCreate:
    """Test submitting diagrams for approval."""

    @pytest.mark.asyncio
    async def test_create_notifies_every_supervisor(
        self, service, mock_notification_repository, mock_email_sender
    ):
        """One request per supervisor plus a summary for the submitter."""
        sent = await service.create(
            _session(SUBMITTER),
            CreateNotificationRequest(
                title="Invoice flow", message="Please review", bpmnXml="<x/>"
            ),
        )

        assert sent == 1
        calls = mock_notification_repository.create.call_args_list
        assert len(calls) == 2
        request, summary = calls[0].kwargs, calls[1].kwargs
        assert request["recipient_email"] == SUPERVISOR.email
        assert request["status"] == NotificationStatus.PENDING
        assert summary["is_user_summary"] is True
        assert summary["recipient_email"] == SUBMITTER.email
        assert summary["title"] == "Invoice flow (Pending Approval)"
        mock_email_sender.send_approval_request_email.assert_called_once()
        mock_email_sender.send_submission_confirmation_email.assert_called_once_with(
            SUBMITTER.email, "Invoice flow", 1, "https://hub.example.com"
        )

    @pytest.mark.asyncio
    async def test_create_requires_fields(self, service):
        """Title, message and diagram are all required."""
        with pytest.raises(BadRequestError, match="are required"):
            await service.create(
                _session(SUBMITTER), CreateNotificationRequest(title="Only title")
            )

    @pytest.mark.asyncio
    async def test_create_without_supervisors(self, service, mock_user_repository):
        """There must be someone to approve."""
        mock_user_repository.get_by_role.return_value = []
        with pytest.raises(NotFoundError, match="No supervisors found"):
            await service.create(
                _session(SUBMITTER),
                CreateNotificationRequest(title="T", message="M", bpmnXml="<x/>"),
            )

    @pytest.mark.asyncio
    async def test_unknown_caller(self, service):
        """Callers without an account are rejected."""
        ghost = SessionUser(user_id="x", email="ghost@example.com")
        with pytest.raises(NotFoundError, match="User not found"):
            await service.list_notifications(ghost)


class TestDelete:
    """Test deleting notifications."""

    @pytest.mark.asyncio
    async def test_participant_may_delete(
        self, service, mock_notification_repository
    ):
        """Sender and recipient may delete."""
        notification = _notification()
        mock_notification_repository.get_by_id.return_value = notification

        await service.delete(
            _session(SUPERVISOR),
            DeleteNotificationRequest(notificationId=str(notification.id)),
        )

        mock_notification_repository.delete.assert_called_once_with(notification.id)

    @pytest.mark.asyncio
    async def test_outsider_may_not_delete(
        self, service, mock_notification_repository
    ):
        """Anyone else gets a 403."""
        notification = _notification()
        mock_notification_repository.get_by_id.return_value = notification
        outsider = SessionUser(user_id="o", email="olga@example.com")

        with pytest.raises(ForbiddenError):
            await service.delete(
                outsider,
                DeleteNotificationRequest(notificationId=str(notification.id)),
            )
        mock_notification_repository.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_missing(self, service, mock_notification_repository):
        """Missing ids and unknown notifications are reported."""
        with pytest.raises(BadRequestError):
            await service.delete(_session(SUBMITTER), DeleteNotificationRequest())

        mock_notification_repository.get_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await service.delete(
                _session(SUBMITTER), DeleteNotificationRequest(notificationId="nope")
            )


class TestProcess:
    """Test approving and rejecting requests."""

    @pytest.mark.asyncio
    async def test_approve_updates_summary(
        self, service, mock_notification_repository, mock_email_sender
    ):
        """The submitter's summary is retitled with the outcome."""
        request = _notification()
        summary = _notification(
            title="Invoice flow (Pending Approval)",
            recipient_email=SUBMITTER.email,
            is_user_summary=True,
        )
        mock_notification_repository.get_by_id.return_value = request
        mock_notification_repository.find_summary.return_value = summary

        decision = await service.process(
            _session(SUPERVISOR),
            ProcessNotificationRequest(
                notificationId=str(request.id), decision="approved", feedback="Nice"
            ),
        )

        assert decision == "approved"
        mock_notification_repository.find_summary.assert_called_once_with(
            SUBMITTER.email, "Invoice flow"
        )
        updates = mock_notification_repository.update.call_args_list
        assert updates[0].args[0] is request
        assert updates[0].kwargs == {
            "status": NotificationStatus.APPROVED,
            "feedback": "Nice",
        }
        assert updates[1].args[0] is summary
        assert updates[1].kwargs["title"] == "Invoice flow (Approved)"
        assert updates[1].kwargs["message"] == (
            "Your diagram has been approved by Sue. Feedback: Nice"
        )
        mock_notification_repository.create.assert_not_called()
        mock_email_sender.send_status_update_email.assert_called_once()

    @pytest.mark.asyncio
    async def test_reject_without_summary_creates_status_update(
        self, service, mock_notification_repository
    ):
        """Submitters without a summary receive a status update."""
        request = _notification()
        mock_notification_repository.get_by_id.return_value = request

        await service.process(
            _session(SUPERVISOR),
            ProcessNotificationRequest(
                notificationId=str(request.id), decision="rejected"
            ),
        )

        created = mock_notification_repository.create.call_args.kwargs
        assert created["type"] == NotificationType.STATUS_UPDATE
        assert created["recipient_email"] == SUBMITTER.email
        assert created["related_notification_id"] == str(request.id)
        assert created["title"] == "Your BPMN has been rejected"
        assert created["message"] == "Your BPMN diagram has been rejected by Sue. "

    @pytest.mark.asyncio
    async def test_process_validation(self, service, mock_notification_repository):
        """Bad decisions and foreign requests are refused."""
        with pytest.raises(BadRequestError, match="are required"):
            await service.process(
                _session(SUPERVISOR), ProcessNotificationRequest(decision="approved")
            )
        with pytest.raises(BadRequestError, match="either"):
            await service.process(
                _session(SUPERVISOR),
                ProcessNotificationRequest(notificationId="n", decision="maybe"),
            )

        mock_notification_repository.get_by_id.return_value = _notification(
            recipient_email="other@example.com"
        )
        with pytest.raises(ForbiddenError):
            await service.process(
                _session(SUPERVISOR),
                ProcessNotificationRequest(notificationId="n", decision="approved"),
            )


class TestCheckDuplicate:
    """Test duplicate submission detection."""

    @pytest.mark.asyncio
    async def test_whitespace_insensitive_match(
        self, service, mock_notification_repository
    ):
        """Diagrams that differ only in whitespace are duplicates."""
        pending = _notification(bpmn_xml="<a>\n  <b/>\n</a>", title="Payroll")
        mock_notification_repository.pending_requests_from.return_value = [pending]

        result = await service.check_duplicate(
            _session(SUBMITTER),
            CheckDuplicateRequest(bpmnXml="<a> <b/> </a>", projectName="Payroll"),
        )

        assert result["duplicateFound"] is True
        assert result["duplicateInfo"]["id"] == str(pending.id)
        assert result["projectNameMatch"]["title"] == "Payroll"

    @pytest.mark.asyncio
    async def test_no_duplicate(self, service, mock_notification_repository):
        """Different diagrams and no project name give empty results."""
        mock_notification_repository.pending_requests_from.return_value = [
            _notification(bpmn_xml="<other/>")
        ]

        result = await service.check_duplicate(
            _session(SUBMITTER), CheckDuplicateRequest(bpmnXml="<mine/>")
        )

        assert result == {
            "duplicateFound": False,
            "duplicateInfo": None,
            "projectNameMatch": None,
        }
