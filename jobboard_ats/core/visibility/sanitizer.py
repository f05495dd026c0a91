"""
Role-based visibility for interaction records.

Two independent layers keep recruiter-private fields away from job seekers:

1. project_for_role() builds the outbound view of a record for a role.
2. assert_no_leak() walks a finished payload, at any depth, and fails hard
   if a private key is still present when the consumer is a job seeker.

The second layer does not trust the first one; every job-seeker response
path runs through it, error payloads included.
"""

from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

from jobboard_ats.core.exceptions import ApplicantTrackingError, SecurityViolationError
from jobboard_ats.data.models import CV, Application, JobPosting, User
from jobboard_ats.utils.constants import RECRUITER_PRIVATE_FIELDS, UserRole
from jobboard_ats.utils.logger import get_logger, log_security_event

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Record fields a job seeker may see, besides the identifier
JOB_SEEKER_RECORD_FIELDS = (
    "status",
    "applied_at",
    "last_activity_at",
    "withdrawn_at",
    "viewed_at",
    "archived_by_job_seeker",
    "created_at",
    "updated_at",
)

NOTE_FIELDS = ("recruiter_notes", "internal_notes")


# =============================================================================
# Related-entity views
# =============================================================================


def _id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def job_view(job: JobPosting) -> dict[str, Any]:
    """Display fields of a job posting."""
    return {
        "id": _id(job.id),
        "title": job.title,
        "company": job.company,
        "location": job.location,
    }


def person_view(user: User) -> dict[str, Any]:
    """Display fields of a candidate or recruiter account."""
    return {"id": _id(user.id), "name": user.name, "email": user.email}


# =============================================================================
# Layer 1: projection
# =============================================================================


def project_for_role(
    application: Application,
    role: UserRole | str,
    *,
    job: Optional[JobPosting] = None,
    candidate: Optional[User] = None,
    recruiter: Optional[User] = None,
    cv: Optional[CV] = None,
    include_notes: bool = True,
) -> dict[str, Any]:
    """
    Build the outbound representation of a record for a role.

    Args:
        application: The stored record
        role: Role of the consumer
        job, candidate, recruiter: Related entities to embed as
            field-limited views, when the caller has them at hand
        cv: Candidate CV; its summary is embedded for staff only
        include_notes: Staff only. False drops the notes and marks the
            response with notes_enabled=False

    Returns:
        JSON-safe dictionary
    """
    role = UserRole(role)
    dumped = application.model_dump(mode="json")

    if role.is_staff:
        data = dict(dumped)
        data["id"] = _id(application.id)
        if not include_notes:
            for field_name in NOTE_FIELDS:
                data.pop(field_name, None)
            data["notes_enabled"] = False
        if cv is not None:
            data["cv"] = cv.summary_view()
    else:
        data = {"id": _id(application.id)}
        data.update({f: dumped.get(f) for f in JOB_SEEKER_RECORD_FIELDS})

    if job is not None:
        data["job"] = job_view(job)
    if candidate is not None:
        data["candidate"] = person_view(candidate)
    if recruiter is not None:
        data["recruiter"] = person_view(recruiter)

    return data


# =============================================================================
# Layer 2: leak guard
# =============================================================================


def _find_leak(value: Any, path: str) -> Optional[str]:
    """Return the path of the first forbidden key under value, if any."""
    if isinstance(value, BaseModel):
        value = value.model_dump()

    if isinstance(value, dict):
        for key, item in value.items():
            item_path = f"{path}.{key}"
            if key in RECRUITER_PRIVATE_FIELDS:
                return item_path
            found = _find_leak(item, item_path)
            if found:
                return found
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            found = _find_leak(item, f"{path}[{index}]")
            if found:
                return found
    return None


def assert_no_leak(payload: Any, role: UserRole | str) -> None:
    """
    Raise SecurityViolationError if a job-seeker payload carries a private key.

    Staff payloads pass through unchecked.
    """
    role = UserRole(role)
    if role.is_staff:
        return

    path = _find_leak(payload, "$")
    if path is None:
        return

    log_security_event(
        "recruiter_notes_leak",
        {"path": path, "role": role.value},
    )
    raise SecurityViolationError(
        f"Recruiter-private field reached a job-seeker response at {path}",
        path=path,
    )


def guard_response(payload: Any, role: UserRole | str) -> Any:
    """Run the leak guard and hand the payload back unchanged."""
    assert_no_leak(payload, role)
    return payload


def error_response(exc: ApplicantTrackingError, role: UserRole | str) -> dict[str, Any]:
    """Outbound body for a failed operation, guarded like any other response."""
    return guard_response(exc.to_payload(), role)


def guarded(func: F) -> F:
    """
    Guard every exit of a service method taking the caller as first argument.

    Successful results and error payloads are both checked. A missing caller
    is treated as the most restricted role.
    """

    @wraps(func)
    def wrapper(self: Any, caller: Any, *args: Any, **kwargs: Any) -> Any:
        role = caller.role if caller is not None else UserRole.JOB_SEEKER
        try:
            result = func(self, caller, *args, **kwargs)
        except SecurityViolationError:
            raise
        except ApplicantTrackingError as exc:
            assert_no_leak(exc.to_payload(), role)
            raise
        return guard_response(result, role)

    return wrapper  # type: ignore[return-value]
