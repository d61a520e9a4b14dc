"""
Tortoise ORM models for the ProcessHub domain.

Records are flat: nested document parts (process metadata, rule items, chat
messages and the like) live in JSON columns.
"""

from enum import Enum
from uuid import uuid4

from tortoise import fields
from tortoise.models import Model


class KPIDirection(str, Enum):
    """Whether a KPI improves going up or down."""

    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class RuleStatus(str, Enum):
    """Decision rule lifecycle states."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class NodeType(str, Enum):
    """Kinds of entries in a BPMN node tree."""

    FOLDER = "folder"
    FILE = "file"


class NotificationType(str, Enum):
    """Kinds of notifications."""

    APPROVAL_REQUEST = "approval_request"
    STATUS_UPDATE = "status_update"


class NotificationStatus(str, Enum):
    """Approval state carried by a notification."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Standard(Model):
    """Compliance standard or framework a process can reference."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    name = fields.CharField(max_length=255, unique=True)
    code = fields.CharField(max_length=50, unique=True)
    description = fields.TextField(default="")
    category = fields.CharField(max_length=100, default="General")
    is_active = fields.BooleanField(default=True, db_index=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for Standard model."""

        table = "standards"

    def __str__(self) -> str:
        """Return string representation of Standard."""
        return f"Standard({self.code})"


class KPI(Model):
    """Key performance indicator, optionally nested under a parent KPI."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    type_of_kpi = fields.CharField(max_length=100)
    kpi = fields.CharField(max_length=500)
    formula = fields.TextField(default="")
    kpi_direction = fields.CharEnumField(KPIDirection)
    target_value = fields.CharField(max_length=255)
    frequency = fields.CharField(max_length=100)
    receiver = fields.CharField(max_length=255)
    source = fields.CharField(max_length=255)
    active = fields.BooleanField(default=False)
    mode = fields.CharField(max_length=100)
    tag = fields.CharField(max_length=100)
    category = fields.CharField(max_length=100)
    parent_id = fields.CharField(max_length=36, null=True)
    level = fields.IntField(default=0)
    order = fields.FloatField(default=0, source_field="sort_order")
    associated_bpmn_processes = fields.JSONField(default=list)
    created_by = fields.CharField(max_length=255, default="system")

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for KPI model."""

        table = "kpis"
        ordering = ["order", "created_at"]

    def __str__(self) -> str:
        """Return string representation of KPI."""
        return f"KPI({self.kpi})"


class DecisionRule(Model):
    """Named set of rule items evaluated against tabular data."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    name = fields.CharField(max_length=255)
    description = fields.TextField(default="")
    rules = fields.JSONField(default=list)
    status = fields.CharEnumField(RuleStatus, default=RuleStatus.ACTIVE, db_index=True)
    created_by = fields.CharField(max_length=255, db_index=True)
    associated_bpmn_processes = fields.JSONField(default=list)
    version = fields.IntField(default=1)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for DecisionRule model."""

        table = "decision_rules"

    def __str__(self) -> str:
        """Return string representation of DecisionRule."""
        return f"DecisionRule({self.name})"


class DecisionExportFile(Model):
    """Saved spreadsheet export of decision results."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    name = fields.CharField(max_length=255)
    mime_type = fields.CharField(max_length=255)
    size = fields.IntField(default=0)
    data_base64 = fields.TextField()
    created_by = fields.CharField(max_length=255, db_index=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Meta class for DecisionExportFile model."""

        table = "decision_export_files"


class BpmnNode(Model):
    """Folder or BPMN diagram file in a user's process tree."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    user_id = fields.CharField(max_length=255, db_index=True)
    owner_user_id = fields.CharField(max_length=255, default="")
    type = fields.CharEnumField(NodeType)
    name = fields.CharField(max_length=500)
    parent_id = fields.CharField(max_length=36, null=True, db_index=True)
    children = fields.JSONField(default=list)

    # File-only content
    content = fields.TextField(null=True)
    process_metadata = fields.JSONField(null=True)
    advanced_details = fields.JSONField(null=True)
    sign_off_data = fields.JSONField(null=True)
    history_data = fields.JSONField(null=True)
    trigger_data = fields.JSONField(null=True)
    selected_standards = fields.JSONField(null=True)
    selected_kpis = fields.JSONField(null=True)

    archived = fields.BooleanField(default=False)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for BpmnNode model."""

        table = "bpmn_nodes"

    def __str__(self) -> str:
        """Return string representation of BpmnNode."""
        return f"BpmnNode({self.type}:{self.name})"


class BpmnArchivedNode(Model):
    """Archived copy of a BPMN file node, keyed by the node id."""

    id = fields.UUIDField(primary_key=True)
    user_id = fields.CharField(max_length=255, db_index=True)
    owner_user_id = fields.CharField(max_length=255, default="")
    type = fields.CharEnumField(NodeType, default=NodeType.FILE)
    name = fields.CharField(max_length=500)
    parent_id = fields.CharField(max_length=36, null=True)
    content = fields.TextField(null=True)
    process_metadata = fields.JSONField(null=True)
    advanced_details = fields.JSONField(null=True)
    archived = fields.BooleanField(default=True)

    created_at = fields.DatetimeField(null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for BpmnArchivedNode model."""

        table = "bpmn_archived_nodes"


class Notification(Model):
    """Approval request or status update exchanged between users."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    type = fields.CharEnumField(NotificationType, db_index=True)
    title = fields.CharField(max_length=500)
    message = fields.TextField()
    status = fields.CharEnumField(
        NotificationStatus, default=NotificationStatus.PENDING, db_index=True
    )
    bpmn_xml = fields.TextField(default="")
    sender_name = fields.CharField(max_length=255)
    sender_email = fields.CharField(max_length=255, db_index=True)
    sender_role = fields.CharField(max_length=50, default="user")
    recipient_email = fields.CharField(max_length=255, db_index=True)
    is_user_summary = fields.BooleanField(default=False)
    related_notification_id = fields.CharField(max_length=36, null=True)
    feedback = fields.TextField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for Notification model."""

        table = "notifications"

    def __str__(self) -> str:
        """Return string representation of Notification."""
        return f"Notification({self.type}:{self.title})"


class AiChat(Model):
    """Saved AI assistant conversation."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    user_id = fields.CharField(max_length=255, db_index=True)
    title = fields.CharField(max_length=500)
    messages = fields.JSONField(default=list)
    timestamp = fields.DatetimeField(auto_now_add=True)
    last_modified = fields.DatetimeField(auto_now_add=True)
    is_archived = fields.BooleanField(default=False)
    tags = fields.JSONField(default=list)
    category = fields.CharField(max_length=100, default="General")

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for AiChat model."""

        table = "ai_chats"


class LatexFile(Model):
    """LaTeX document generated from a process project."""

    id = fields.UUIDField(primary_key=True, default=uuid4)
    user_id = fields.CharField(max_length=255, db_index=True)
    name = fields.CharField(max_length=500)
    content = fields.TextField()
    source_project_id = fields.CharField(max_length=255, null=True)
    process_metadata = fields.JSONField(null=True)
    additional_details = fields.JSONField(null=True)
    selected_tables = fields.JSONField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Meta class for LatexFile model."""

        table = "latex_files"
