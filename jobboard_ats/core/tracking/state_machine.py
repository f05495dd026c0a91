"""
Status rules for interaction records.

Pure functions: they validate a requested change against the current state
and the caller's role, and say which fields the change writes. Persisting
the change, with the terminal check repeated at write time, is the
service's job.
"""

from datetime import datetime
from typing import Any

from jobboard_ats.core.exceptions import (
    AlreadyTerminalError,
    AlreadyWithdrawnError,
    ForbiddenError,
    InvalidArgumentError,
)
from jobboard_ats.data.models import Application, ArchiveRequest
from jobboard_ats.utils.constants import (
    ALREADY_WITHDRAWN_MESSAGE,
    TERMINAL_STATUS_MESSAGE,
    ApplicationStatus,
    InteractionOrigin,
    UserRole,
)

NON_TERMINAL_STATUSES = frozenset(s for s in ApplicationStatus if not s.is_terminal)

# Any non-terminal status may move to any other status; withdrawn is final
ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    status: frozenset(ApplicationStatus) - {status}
    for status in NON_TERMINAL_STATUSES
}
ALLOWED_TRANSITIONS[ApplicationStatus.WITHDRAWN] = frozenset()

ARCHIVE_FIELD_BY_ROLE = {
    UserRole.JOB_SEEKER: "archived_by_job_seeker",
    UserRole.RECRUITER: "archived_by_recruiter",
    UserRole.ADMIN: "archived_by_recruiter",
}


def initial_status(origin: InteractionOrigin | str) -> ApplicationStatus:
    """Status a record starts in, by creation path."""
    if InteractionOrigin(origin) == InteractionOrigin.CONTACT:
        return ApplicationStatus.CONTACTED
    return ApplicationStatus.NEW


def can_transition(current: ApplicationStatus | str, new: ApplicationStatus | str) -> bool:
    current, new = ApplicationStatus(current), ApplicationStatus(new)
    if current == new:
        return not current.is_terminal
    return new in ALLOWED_TRANSITIONS[current]


def validate_status_change(
    current: ApplicationStatus | str,
    new: ApplicationStatus | str,
    role: UserRole | str,
) -> None:
    """
    Check a recruiter-side status change.

    Raises:
        ForbiddenError: Job seekers never set status directly
        AlreadyTerminalError: The record is withdrawn
    """
    if not UserRole(role).is_staff:
        raise ForbiddenError("Only recruiters can update application status")
    if not can_transition(current, new):
        raise AlreadyTerminalError(TERMINAL_STATUS_MESSAGE)


def status_change_fields(new: ApplicationStatus | str, now: datetime) -> dict[str, Any]:
    """Fields written by a status change."""
    new = ApplicationStatus(new)
    fields: dict[str, Any] = {"status": new.value, "last_activity_at": now}
    if new == ApplicationStatus.WITHDRAWN:
        fields["withdrawn_at"] = now
    return fields


def validate_withdrawal(application: Application) -> None:
    """Both markers are checked; either one means the record is already withdrawn."""
    if application.is_withdrawn or application.withdrawn_at is not None:
        raise AlreadyWithdrawnError(ALREADY_WITHDRAWN_MESSAGE)


def archive_field_for_role(role: UserRole | str, request: ArchiveRequest) -> tuple[str, bool]:
    """
    Resolve which archive flag an archive request sets.

    Raises:
        ForbiddenError: The request names the other party's flag
        InvalidArgumentError: The request names no flag
    """
    own_field = ARCHIVE_FIELD_BY_ROLE[UserRole(role)]
    requested = {
        name: value
        for name, value in request.model_dump(exclude_none=True).items()
    }

    foreign = [name for name in requested if name != own_field]
    if foreign:
        raise ForbiddenError(f"You may only set {own_field}", field=foreign[0])
    if own_field not in requested:
        raise InvalidArgumentError(f"{own_field} must be a boolean", field=own_field)

    return own_field, requested[own_field]
