"""Audit trail writer and audited administrative operations."""

from jobboard_ats.core.audit.audit_logger import AuditLogger, changed_fields
from jobboard_ats.core.audit.entity_admin import AdminEntityService

__all__ = ["AdminEntityService", "AuditLogger", "changed_fields"]
