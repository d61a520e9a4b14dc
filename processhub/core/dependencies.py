"""
Dependency injection for ProcessHub.

This module provides the FastAPI dependencies used by the route handlers:
the session user read from the auth cookie, role guards, and services built
by direct instantiation over their repositories.
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Request

from .auth.decorators import is_admin
from .auth.google import GoogleOAuthClient
from .auth.otp import OTPStore
from .auth.tokens import InvalidTokenError, decode_access_token
from .config import get_config
from .database.tortoise_schemas import SessionUser
from .email import EmailSender
from .email import get_email_sender as _shared_email_sender
from .errors import UnauthorizedError
from .logging import get_logger, security_logger
from .redis import redis_manager
from .repositories import (
    AiChatRepository,
    BpmnArchivedNodeRepository,
    BpmnNodeRepository,
    DecisionExportRepository,
    DecisionRuleRepository,
    KPIRepository,
    LatexFileRepository,
    NotificationRepository,
    StandardRepository,
    UserRepository,
)
from .services import (
    AdminBpmnService,
    AiChatService,
    AuthService,
    BpmnNodeService,
    DashboardService,
    DecisionService,
    KPIService,
    LatexFileService,
    NotificationService,
    StandardService,
    UserService,
)

logger = get_logger(__name__)


def read_session_claims(request: Request) -> Optional[Dict[str, Any]]:
    """
    Decode the session cookie of a request.

    Returns:
        Token claims, or None when there is no cookie

    Raises:
        InvalidTokenError: If the cookie does not hold a valid token
    """
    token = request.cookies.get(get_config().security.cookie_name)
    if not token:
        return None
    return decode_access_token(token)


async def get_session_user(request: Request) -> SessionUser:
    """
    Get the authenticated caller.

    Raises:
        UnauthorizedError: If the cookie is missing or the token is invalid
    """
    try:
        claims = read_session_claims(request)
    except InvalidTokenError as e:
        logger.info("Rejected session token", reason=str(e), path=request.url.path)
        raise UnauthorizedError("Invalid token")
    if claims is None:
        raise UnauthorizedError("Authentication required")
    return SessionUser.model_validate(claims)


async def get_optional_session_user(request: Request) -> Optional[SessionUser]:
    """Get the caller when a valid session exists, otherwise None."""
    try:
        claims = read_session_claims(request)
    except InvalidTokenError:
        return None
    if claims is None:
        return None
    return SessionUser.model_validate(claims)


async def require_admin(
    request: Request, user: SessionUser = Depends(get_session_user)
) -> SessionUser:
    """
    Require the caller to be an admin.

    Raises:
        UnauthorizedError: If the caller is not an admin
    """
    if not is_admin(user.role):
        security_logger.log_access_denied(
            user_id=user.user_id,
            resource=request.url.path,
            reason="admin role required",
            request=request,
        )
        raise UnauthorizedError("Unauthorized")
    return user


# Infrastructure


def get_otp_store() -> OTPStore:
    """Get the sign-up code store."""
    return OTPStore(redis_manager)


def get_email_sender() -> EmailSender:
    """Get the outgoing email sender."""
    return _shared_email_sender()


def get_google_client() -> GoogleOAuthClient:
    """Get the Google OAuth client."""
    return GoogleOAuthClient()


# Services


def get_auth_service(
    otp_store: OTPStore = Depends(get_otp_store),
    email_sender: EmailSender = Depends(get_email_sender),
) -> AuthService:
    """Get authentication service dependency."""
    return AuthService(UserRepository(), otp_store, email_sender)


def get_user_service() -> UserService:
    """Get user service dependency."""
    return UserService(UserRepository())


def get_standard_service() -> StandardService:
    """Get standard service dependency."""
    return StandardService(StandardRepository())


def get_kpi_service() -> KPIService:
    """Get KPI service dependency."""
    return KPIService(KPIRepository())


def get_bpmn_node_service() -> BpmnNodeService:
    """Get BPMN node tree service dependency."""
    return BpmnNodeService(BpmnNodeRepository(), KPIRepository(), UserRepository())


def get_admin_bpmn_service() -> AdminBpmnService:
    """Get admin BPMN file service dependency."""
    return AdminBpmnService(BpmnNodeRepository(), BpmnArchivedNodeRepository())


def get_decision_service() -> DecisionService:
    """Get decision rule service dependency."""
    return DecisionService(DecisionRuleRepository(), DecisionExportRepository())


def get_notification_service(
    email_sender: EmailSender = Depends(get_email_sender),
) -> NotificationService:
    """Get notification service dependency."""
    return NotificationService(NotificationRepository(), UserRepository(), email_sender)


def get_ai_chat_service() -> AiChatService:
    """Get AI chat service dependency."""
    return AiChatService(AiChatRepository())


def get_latex_file_service() -> LatexFileService:
    """Get LaTeX file service dependency."""
    return LatexFileService(LatexFileRepository())


def get_dashboard_service() -> DashboardService:
    """Get dashboard service dependency."""
    return DashboardService(BpmnNodeRepository(), KPIRepository())
