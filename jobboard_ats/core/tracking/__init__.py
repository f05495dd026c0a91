"""Interaction record state machine and tracking service."""

from jobboard_ats.core.tracking.application_service import ApplicationService
from jobboard_ats.core.tracking.state_machine import (
    ALLOWED_TRANSITIONS,
    archive_field_for_role,
    can_transition,
    initial_status,
    status_change_fields,
    validate_status_change,
    validate_withdrawal,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "ApplicationService",
    "archive_field_for_role",
    "can_transition",
    "initial_status",
    "status_change_fields",
    "validate_status_change",
    "validate_withdrawal",
]
