"""
Service layer for ProcessHub.

This module contains business logic services that coordinate
between the API layer and the data access layer.
"""

from .auth_service import AuthService
from .bpmn_service import AdminBpmnService, BpmnNodeService
from .chat_service import AiChatService
from .dashboard_service import DashboardService
from .decision_service import DecisionService
from .kpi_service import KPIService
from .latex_service import LatexFileService
from .notification_service import NotificationService
from .standard_service import StandardService
from .user_service import UserService

__all__ = [
    "AuthService",
    "UserService",
    "StandardService",
    "KPIService",
    "BpmnNodeService",
    "AdminBpmnService",
    "DecisionService",
    "NotificationService",
    "AiChatService",
    "LatexFileService",
    "DashboardService",
]
