"""
Audit log data models.

Entries are written once by the administrative collaborators (user,
company, job and CV lifecycle) and never updated or deleted afterwards.
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobboard_ats.utils.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_AUDIT_LOG_PAGE_SIZE,
    AuditAction,
    AuditEntityType,
)

from .base import BaseDocument, EmbeddedModel, PyObjectId


class ActorInfo(EmbeddedModel):
    """
    Who performed the action.

    Name and email are copied at write time so the entry stays readable
    after the account is deleted.
    """

    actor_id: PyObjectId
    actor_email: str
    actor_name: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class AuditChanges(EmbeddedModel):
    """Before/after snapshots of the affected entity."""

    before: Optional[dict[str, Any]] = None
    after: Optional[dict[str, Any]] = None
    fields: Optional[list[str]] = None


class AuditLog(BaseDocument):
    """Append-only audit trail entry."""

    action: AuditAction
    entity_type: AuditEntityType
    entity_id: Optional[PyObjectId] = None

    actor: ActorInfo
    changes: Optional[AuditChanges] = None

    reason: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    class Settings:
        """MongoDB collection settings."""

        name = "audit_logs"


class AuditLogCreate(BaseModel):
    """Schema for recording an audit entry; the actor is resolved on write."""

    model_config = ConfigDict(use_enum_values=True)

    action: AuditAction
    entity_type: AuditEntityType
    entity_id: Optional[str] = None
    actor_id: str
    changes: Optional[AuditChanges] = None
    reason: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class AuditLogQuery(BaseModel):
    """Query parameters for forensic review of audit logs."""

    model_config = ConfigDict(use_enum_values=True)

    action: Optional[AuditAction] = None
    entity_type: Optional[AuditEntityType] = None
    entity_id: Optional[str] = None
    actor_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_AUDIT_LOG_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)

    @field_validator("entity_id", "actor_id")
    @classmethod
    def valid_object_id(cls, v: Optional[str]) -> Optional[str]:
        """Identifier filters must be ObjectId hex strings."""
        if v is not None and not ObjectId.is_valid(v):
            raise ValueError(f"Not a valid identifier: {v!r}")
        return v
