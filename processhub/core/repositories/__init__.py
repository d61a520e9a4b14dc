"""
Repository layer for ProcessHub.

This module provides data access abstractions using the repository pattern
over Tortoise ORM models.
"""

from .base import BaseRepository, parse_uuid
from .bpmn_repository import BpmnArchivedNodeRepository, BpmnNodeRepository
from .chat_repository import AiChatRepository, LatexFileRepository
from .decision_repository import DecisionExportRepository, DecisionRuleRepository
from .kpi_repository import KPIRepository
from .notification_repository import NotificationRepository
from .standard_repository import StandardRepository
from .user_repository import UserRepository, normalize_email

__all__ = [
    "BaseRepository",
    "parse_uuid",
    "normalize_email",
    "UserRepository",
    "StandardRepository",
    "KPIRepository",
    "DecisionRuleRepository",
    "DecisionExportRepository",
    "BpmnNodeRepository",
    "BpmnArchivedNodeRepository",
    "NotificationRepository",
    "AiChatRepository",
    "LatexFileRepository",
]
