"""
Interaction record ("application") data models.

One record describes one candidate's relationship to a job posting and/or
a recruiter, whether the candidate applied or the recruiter reached out.
"""

from datetime import datetime
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    model_validator,
)

from jobboard_ats.utils.constants import ApplicationStatus, InteractionOrigin

from .base import BaseDocument, PyObjectId


class Application(BaseDocument):
    """
    Interaction record between a candidate and a recruiter.

    Invariants:
    - withdrawn_at is set if and only if status is "withdrawn"
    - recruiter_notes / internal_notes are recruiter-private
    """

    # Relationship
    job_id: Optional[PyObjectId] = None  # absent for contacts outside any posting
    recruiter_id: PyObjectId
    candidate_id: PyObjectId
    origin: InteractionOrigin = InteractionOrigin.APPLICATION

    # State
    status: ApplicationStatus = ApplicationStatus.NEW
    applied_at: datetime = Field(default_factory=datetime.utcnow)
    last_activity_at: datetime = Field(default_factory=datetime.utcnow)
    viewed_at: Optional[datetime] = None
    withdrawn_at: Optional[datetime] = None

    # Per-party archive flags, independent of status
    archived_by_job_seeker: bool = False
    archived_by_recruiter: bool = False

    # Recruiter-private
    recruiter_notes: str = ""
    internal_notes: Optional[str] = None

    @model_validator(mode="after")
    def check_withdrawal_consistency(self) -> "Application":
        withdrawn = self.status == ApplicationStatus.WITHDRAWN
        if withdrawn != (self.withdrawn_at is not None):
            raise ValueError("withdrawn_at must be set exactly when status is 'withdrawn'")
        return self

    @property
    def is_withdrawn(self) -> bool:
        return self.status == ApplicationStatus.WITHDRAWN

    class Settings:
        """MongoDB collection settings."""

        name = "applications"


# -----------------------------------------------------------------------------
# Input schemas, validated before any mutation is attempted
# -----------------------------------------------------------------------------


class ApplyRequest(BaseModel):
    """A job seeker applying to a posting."""

    model_config = ConfigDict(extra="forbid")

    job_id: PyObjectId


class ContactRequest(BaseModel):
    """A recruiter reaching out to a candidate, optionally about a posting."""

    model_config = ConfigDict(extra="forbid")

    candidate_id: PyObjectId
    job_id: Optional[PyObjectId] = None


class ApplicationUpdate(BaseModel):
    """Recruiter-side update of status and/or notes."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    status: Optional[ApplicationStatus] = None
    recruiter_notes: Optional[StrictStr] = None

    @model_validator(mode="after")
    def require_one_field(self) -> "ApplicationUpdate":
        if self.status is None and self.recruiter_notes is None:
            raise ValueError("Either status or recruiter_notes must be provided")
        return self


class ArchiveRequest(BaseModel):
    """Archive/unarchive request; each party may only send its own flag."""

    model_config = ConfigDict(extra="forbid")

    archived_by_job_seeker: Optional[StrictBool] = None
    archived_by_recruiter: Optional[StrictBool] = None
