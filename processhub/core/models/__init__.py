"""
Domain models for ProcessHub.
"""

from .tortoise_models import (
    KPI,
    AiChat,
    BpmnArchivedNode,
    BpmnNode,
    DecisionExportFile,
    DecisionRule,
    KPIDirection,
    LatexFile,
    NodeType,
    Notification,
    NotificationStatus,
    NotificationType,
    RuleStatus,
    Standard,
)

__all__ = [
    "AiChat",
    "BpmnArchivedNode",
    "BpmnNode",
    "DecisionExportFile",
    "DecisionRule",
    "KPI",
    "KPIDirection",
    "LatexFile",
    "NodeType",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "RuleStatus",
    "Standard",
]
