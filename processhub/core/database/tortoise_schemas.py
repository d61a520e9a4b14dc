"""
Pydantic schemas for Tortoise ORM models.

These schemas provide request/response models for FastAPI endpoints. Wire
names are camelCase; Python attributes keep snake_case.

Request fields are optional where the API answers a missing field with its
own 400 message instead of a generic validation error.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..auth.tortoise_models import AuthType, UserRole
from ..models.tortoise_models import (
    KPIDirection,
    NotificationStatus,
    NotificationType,
    RuleStatus,
)


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json(self, **kwargs: Any) -> Dict[str, Any]:
        """Dump the model using wire names and JSON-safe values."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


# Users


class UserResponse(CamelModel):
    """Public view of a user account."""

    id: UUID
    name: str
    email: str
    role: UserRole
    phone_number: str = ""
    address: str = ""
    state: str = ""
    country: str = ""
    zip_code: str = ""
    profile_picture: str = ""
    auth_type: AuthType = AuthType.EMAIL
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator(
        "phone_number",
        "address",
        "state",
        "country",
        "zip_code",
        "profile_picture",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: Optional[str]) -> str:
        """Render unset profile fields as empty strings."""
        return v or ""


class UserSummary(CamelModel):
    """Compact user entry returned by search."""

    id: UUID
    name: str
    email: str
    role: UserRole


class SignInRequest(CamelModel):
    """Credentials for password sign-in."""

    email: Optional[str] = None
    password: Optional[str] = None


class SendOTPRequest(CamelModel):
    """Request a sign-up verification code."""

    email: Optional[str] = None


class VerifyOTPRequest(CamelModel):
    """Complete sign-up with a verification code."""

    email: Optional[str] = None
    otp: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

    @field_validator("otp", mode="before")
    @classmethod
    def otp_as_text(cls, v: Any) -> Any:
        """Accept codes sent as numbers."""
        return str(v) if isinstance(v, int) else v


class ForgotPasswordRequest(CamelModel):
    """Request a password reset email."""

    email: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    """Set a new password with a reset token."""

    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(CamelModel):
    """Fields a user may change on their own profile."""

    name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    profile_picture: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    """Change password while signed in."""

    current_password: Optional[str] = None
    new_password: Optional[str] = None


class UserCreateRequest(CamelModel):
    """Account created by a supervisor or admin."""

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class UserUpdateRequest(ProfileUpdateRequest):
    """Account changes made through the user management API."""

    email: Optional[str] = None
    role: Optional[str] = None


# Standards


class StandardResponse(CamelModel):
    """Compliance standard as listed to clients."""

    id: UUID
    name: str
    code: str
    description: str = ""
    category: str = "General"


# KPIs


class KPIResponse(CamelModel):
    """Key performance indicator."""

    id: UUID
    type_of_kpi: str = Field(alias="typeOfKPI")
    kpi: str
    formula: str = ""
    kpi_direction: KPIDirection
    target_value: str
    frequency: str
    receiver: str
    source: str
    active: bool
    mode: str
    tag: str
    category: str
    parent_id: Optional[str] = None
    level: int = 0
    order: float = 0
    associated_bpmn_processes: List[str] = Field(
        default_factory=list, alias="associatedBPMNProcesses"
    )
    created_by: str = "system"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KPIWriteRequest(CamelModel):
    """Create or update a KPI; ``id`` selects the KPI on update."""

    id: Optional[str] = None
    type_of_kpi: Optional[str] = Field(default=None, alias="typeOfKPI")
    kpi: Optional[str] = None
    formula: Optional[str] = None
    kpi_direction: Optional[KPIDirection] = None
    target_value: Optional[str] = None
    frequency: Optional[str] = None
    receiver: Optional[str] = None
    source: Optional[str] = None
    active: Optional[bool] = None
    mode: Optional[str] = None
    tag: Optional[str] = None
    category: Optional[str] = None
    parent_id: Optional[str] = None
    level: Optional[int] = None
    order: Optional[float] = None
    associated_bpmn_processes: Optional[List[str]] = Field(
        default=None, alias="associatedBPMNProcesses"
    )
    created_by: Optional[str] = None


# Decision rules


class DecisionRuleResponse(CamelModel):
    """Stored decision rule."""

    id: UUID
    name: str
    description: str = ""
    rules: List[Dict[str, Any]] = Field(default_factory=list)
    status: RuleStatus
    created_by: str
    associated_bpmn_processes: List[str] = Field(
        default_factory=list, alias="associatedBPMNProcesses"
    )
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DecisionRuleWriteRequest(CamelModel):
    """Create or update a decision rule."""

    id: Optional[str] = None
    legacy_id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = None
    description: Optional[str] = None
    rules: Optional[List[Dict[str, Any]]] = None
    status: Optional[RuleStatus] = None
    associated_bpmn_processes: Optional[List[str]] = Field(
        default=None, alias="associatedBPMNProcesses"
    )

    @property
    def rule_id(self) -> Optional[str]:
        """Identifier of the rule to update."""
        return self.legacy_id or self.id


class ExecuteRulesRequest(CamelModel):
    """Run decision rules over rows of data."""

    data: Any = None
    rule_ids: Optional[List[str]] = None


class ExportRequest(CamelModel):
    """Export rows of data as a spreadsheet."""

    data: Any = None
    filename: Optional[str] = None
    save: bool = False


class DecisionExportFileResponse(CamelModel):
    """Saved export without its payload."""

    id: UUID
    name: str
    mime_type: str
    size: int
    created_by: str
    created_at: Optional[datetime] = None


class DecisionExportFileDetail(DecisionExportFileResponse):
    """Saved export including its base64 payload."""

    data_base64: str


class TriggerWorkflowRequest(CamelModel):
    """Start a workflow with decision results."""

    bpmn_process_id: Optional[str] = None
    execution_result: Any = None


# BPMN nodes


class BpmnNodeWriteRequest(CamelModel):
    """Create or update a node in a user's BPMN tree."""

    node_id: Optional[str] = None
    user_id: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    parent_id: Optional[str] = None
    content: Optional[str] = None
    process_metadata: Optional[Dict[str, Any]] = None
    advanced_details: Optional[Dict[str, Any]] = None
    sign_off_data: Optional[Any] = None
    history_data: Optional[Any] = None
    trigger_data: Optional[Any] = None
    selected_standards: Optional[List[Any]] = None
    selected_kpis: Optional[List[str]] = Field(default=None, alias="selectedKPIs")


class BpmnFilePatchRequest(BaseModel):
    """Admin changes to a BPMN file; wrongly typed values are ignored."""

    model_config = ConfigDict(extra="ignore")

    name: Any = None
    ownerUserId: Any = None
    userId: Any = None
    archived: Any = None


# Notifications


class NotificationResponse(CamelModel):
    """Notification as shown to its sender or recipient."""

    id: UUID
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    bpmn_xml: str = ""
    sender_name: str
    sender_email: str
    sender_role: str
    recipient_email: str
    is_user_summary: bool = False
    related_notification_id: Optional[str] = None
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreateNotificationRequest(CamelModel):
    """Submit a diagram for approval."""

    title: Optional[str] = None
    message: Optional[str] = None
    bpmn_xml: Optional[str] = None


class DeleteNotificationRequest(CamelModel):
    """Delete a notification by id."""

    notification_id: Optional[str] = None


class ProcessNotificationRequest(CamelModel):
    """Approve or reject an approval request."""

    notification_id: Optional[str] = None
    decision: Optional[str] = None
    feedback: Optional[str] = None


class CheckDuplicateRequest(CamelModel):
    """Look for an identical pending submission."""

    bpmn_xml: Optional[str] = None
    project_name: Optional[str] = None


# AI chats


class AiChatSummary(CamelModel):
    """Chat listing entry without messages."""

    id: UUID
    user_id: str
    title: str
    timestamp: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    is_archived: bool = False
    tags: List[str] = Field(default_factory=list)
    category: str = "General"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AiChatResponse(AiChatSummary):
    """Full chat including its messages."""

    messages: List[Dict[str, Any]] = Field(default_factory=list)


class AiChatWriteRequest(CamelModel):
    """Create or update a chat."""

    title: Optional[str] = None
    messages: Optional[List[Dict[str, Any]]] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    is_archived: Optional[bool] = None


# LaTeX files


class LatexFileResponse(CamelModel):
    """Stored LaTeX document."""

    id: UUID
    user_id: str
    name: str
    content: str
    source_project_id: Optional[str] = None
    process_metadata: Optional[Dict[str, Any]] = None
    additional_details: Optional[Dict[str, Any]] = None
    selected_tables: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LatexFileCreateRequest(CamelModel):
    """Store a new LaTeX document."""

    user_id: Optional[str] = None
    name: Optional[str] = None
    content: Optional[str] = None
    source_project_id: Optional[str] = None
    process_metadata: Optional[Dict[str, Any]] = None
    additional_details: Optional[Dict[str, Any]] = None
    selected_tables: Optional[Any] = None


class LatexFileRenameRequest(CamelModel):
    """Rename a LaTeX document."""

    file_id: Optional[str] = None
    name: Optional[str] = None


# Session


class SessionUser(CamelModel):
    """Caller identity read from the session token claims."""

    user_id: str
    email: str
    name: str = ""
    role: str = UserRole.USER.value
    phone_number: Optional[str] = None
    address: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    profile_picture: Optional[str] = None
