"""
Application-wide constants for the Jobboard ATS.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "jobboard-ats"
APP_DISPLAY_NAME: Final[str] = "Jobboard Applicant Tracking"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Collections
# =============================================================================

APPLICATIONS_COLLECTION: Final[str] = "applications"
AUDIT_LOGS_COLLECTION: Final[str] = "audit_logs"
JOBS_COLLECTION: Final[str] = "jobs"
COMPANIES_COLLECTION: Final[str] = "companies"
USERS_COLLECTION: Final[str] = "users"
CVS_COLLECTION: Final[str] = "cvs"
SAVED_SEARCHES_COLLECTION: Final[str] = "saved_searches"


# =============================================================================
# Visibility
# =============================================================================

# Keys that must never reach a job seeker, in either naming convention
RECRUITER_PRIVATE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "recruiter_notes",
        "internal_notes",
        "recruiterNotes",
        "internalNotes",
    }
)


# =============================================================================
# Messages
# =============================================================================

ALREADY_APPLIED_MESSAGE: Final[str] = "You have already applied to this job"
ALREADY_CONTACTED_MESSAGE: Final[str] = "You have already contacted this candidate"
ALREADY_WITHDRAWN_MESSAGE: Final[str] = "Application is already withdrawn"
TERMINAL_STATUS_MESSAGE: Final[str] = (
    "Cannot change status of a withdrawn application. "
    "Withdrawn applications cannot be modified."
)
NO_PUBLISHED_JOBS_MESSAGE: Final[str] = (
    "You need at least one published job to contact candidates"
)
SELECT_JOB_MESSAGE: Final[str] = "Please select a job"


# =============================================================================
# Query Limits
# =============================================================================

MAX_AUDIT_LOG_PAGE_SIZE: Final[int] = 1000
DEFAULT_PAGE_SIZE: Final[int] = 100


# =============================================================================
# Enums
# =============================================================================


class UserRole(str, Enum):
    """Role of the caller, resolved by the authentication collaborator."""

    JOB_SEEKER = "job-seeker"
    RECRUITER = "recruiter"
    ADMIN = "admin"

    @property
    def is_staff(self) -> bool:
        """Recruiters and admins see recruiter-private fields."""
        return self in (UserRole.RECRUITER, UserRole.ADMIN)


class ApplicationStatus(str, Enum):
    """Status of an interaction record."""

    NEW = "new"
    CONTACTED = "contacted"
    INTERVIEWED = "interviewed"
    OFFERED = "offered"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_terminal(self) -> bool:
        """Check whether the status has no outgoing transitions."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: Final[frozenset[ApplicationStatus]] = frozenset(
    {ApplicationStatus.WITHDRAWN}
)


class InteractionOrigin(str, Enum):
    """How an interaction record came into existence."""

    APPLICATION = "application"  # candidate applied to a posting
    CONTACT = "contact"  # recruiter reached out to a candidate


class AuditAction(str, Enum):
    """Types of actions that can be audited."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    REGISTER = "register"


class AuditEntityType(str, Enum):
    """Kinds of entity an audit entry can describe."""

    USER = "user"
    COMPANY = "company"
    JOB = "job"
    CV = "cv"


class AlertFrequency(str, Enum):
    """How often a saved search is turned into a job alert."""

    DAILY = "daily"
    WEEKLY = "weekly"
    NEVER = "never"


class JobType(str, Enum):
    """Contract type of a job posting."""

    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    FREELANCE = "freelance"


class NotificationEvent(str, Enum):
    """Events that produce an outbound notification."""

    CANDIDATE_APPLIED = "candidate_applied"
    RECRUITER_CONTACTED = "recruiter_contacted"
    STATUS_CHANGED = "status_changed"
    APPLICATION_WITHDRAWN = "application_withdrawn"
    JOB_ALERT = "job_alert"
