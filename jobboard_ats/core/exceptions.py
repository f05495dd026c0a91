"""Exception hierarchy for the Jobboard ATS."""

from typing import Any, Optional


class ApplicantTrackingError(Exception):
    """Base exception for all Jobboard ATS errors."""

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Build the outbound error body."""
        payload: dict[str, Any] = {"error": self.message}
        payload.update(self.details)
        return payload


class UnauthenticatedError(ApplicantTrackingError):
    """Raised when no caller identity can be resolved."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", **details: Any) -> None:
        super().__init__(message, **details)


class ForbiddenError(ApplicantTrackingError):
    """Raised when the caller's role or ownership check fails."""

    status_code = 403

    def __init__(self, message: str = "Forbidden", **details: Any) -> None:
        super().__init__(message, **details)


class NotFoundError(ApplicantTrackingError):
    """Raised when a referenced entity does not exist or is not visible to the caller."""

    status_code = 404


class InvalidArgumentError(ApplicantTrackingError):
    """Raised when an input fails field-level validation."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, **details: Any) -> None:
        if field is not None:
            details["field"] = field
        super().__init__(message, **details)
        self.field = field


class DuplicateInteractionError(ApplicantTrackingError):
    """Raised when a candidate/job or recruiter/candidate relationship already exists."""

    status_code = 409


class AmbiguousJobError(ApplicantTrackingError):
    """Raised when a contact names no job and the recruiter has several published postings."""

    status_code = 400

    def __init__(self, message: str, jobs: list[dict[str, Any]]) -> None:
        super().__init__(message, jobs=jobs)
        self.jobs = jobs


class AlreadyTerminalError(ApplicantTrackingError):
    """Raised when a status change targets a record in a terminal state."""

    status_code = 400


class AlreadyWithdrawnError(AlreadyTerminalError):
    """Raised when a record that is already withdrawn is withdrawn again."""


class PreconditionFailedError(ApplicantTrackingError):
    """Raised when an operation's business precondition does not hold."""

    status_code = 400


class InvalidStateError(ApplicantTrackingError):
    """Raised when referenced data is in a state the operation cannot use."""

    status_code = 400


class SecurityViolationError(ApplicantTrackingError):
    """
    Raised when a recruiter-private field is about to reach a job seeker.

    This is a programming error, never an operational one: callers must
    let it propagate and abort the response.
    """

    status_code = 500

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path

    def to_payload(self) -> dict[str, Any]:
        # The offending path stays in the logs, not in the response
        return {"error": "Internal server error"}


class UnavailableError(ApplicantTrackingError):
    """Raised when storage or a downstream dependency times out or is unreachable."""

    status_code = 503
    retryable = True
