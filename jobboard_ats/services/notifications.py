"""
Outbound notification sink for the Jobboard ATS.

Delivery (email provider, templating) is an external collaborator. The
core hands it a plain Notification and treats delivery as fire-and-forget:
a failed send is logged and never undoes the business operation, except
where the send *is* the operation (contacting a candidate by email).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from jobboard_ats.data.models import JobPosting, SavedSearch, User
from jobboard_ats.utils.constants import NotificationEvent
from jobboard_ats.utils.logger import LoggerMixin, get_logger

logger = get_logger(__name__)


@dataclass
class Notification:
    """A message for one recipient."""

    to: str
    subject: str
    text: str
    event: NotificationEvent
    reply_to: Optional[str] = None
    tags: dict[str, str] = field(default_factory=dict)


@dataclass
class DeliveryResult:
    """Outcome reported by a sender."""

    success: bool
    error: Optional[str] = None


class NotificationSender(ABC):
    """Interface implemented by delivery backends."""

    # False for sinks that accept a message without delivering it
    delivers: bool = True

    @abstractmethod
    def send(self, notification: Notification) -> DeliveryResult:
        """Deliver a notification and report the outcome."""


class LoggingNotificationSender(NotificationSender, LoggerMixin):
    """
    Dry-run sender that only writes the notification to the log.

    Sends report success so the calling operation carries on. Nothing is
    delivered, so the job-alert runner leaves saved searches due.
    """

    delivers = False

    def send(self, notification: Notification) -> DeliveryResult:
        self.logger.info(
            f"Notification [{notification.event}] to {notification.to}: {notification.subject}"
        )
        return DeliveryResult(success=True)


def dispatch_safely(sender: NotificationSender, notification: Notification) -> bool:
    """
    Send without letting a delivery problem escape.

    Returns:
        True if the sender reported success
    """
    try:
        result = sender.send(notification)
    except Exception:
        logger.exception(f"Failed to send {notification.event} notification to {notification.to}")
        return False

    if not result.success:
        logger.error(
            f"Failed to send {notification.event} notification to {notification.to}: {result.error}"
        )
    return result.success


# =============================================================================
# Message builders
# =============================================================================


def _job_phrase(job: Optional[JobPosting]) -> str:
    if job is None:
        return ""
    if job.company:
        return f" for {job.title} at {job.company}"
    return f" for {job.title}"


def candidate_applied(
    candidate: User, recruiter: User, job: JobPosting, applied_at: datetime
) -> Notification:
    """Tell a recruiter that a candidate applied to their posting."""
    location = f" ({job.location})" if job.location else ""
    return Notification(
        to=recruiter.email,
        subject=f"New application: {candidate.name} applied{_job_phrase(job)}",
        text=(
            f"Hello {recruiter.name},\n\n"
            f"{candidate.name} ({candidate.email}) applied{_job_phrase(job)}{location} "
            f"on {applied_at:%Y-%m-%d %H:%M} UTC."
        ),
        event=NotificationEvent.CANDIDATE_APPLIED,
        tags={"type": "application", "event": NotificationEvent.CANDIDATE_APPLIED.value},
    )


def recruiter_contacted(
    candidate: User, recruiter: User, job: Optional[JobPosting] = None
) -> Notification:
    """Tell a candidate that a recruiter wants to get in touch."""
    return Notification(
        to=candidate.email,
        subject=f"{recruiter.name} would like to contact you{_job_phrase(job)}",
        text=(
            f"Hello {candidate.name},\n\n"
            f"{recruiter.name} is interested in your profile{_job_phrase(job)}. "
            f"Reply to this message to get in touch."
        ),
        event=NotificationEvent.RECRUITER_CONTACTED,
        reply_to=recruiter.email,
        tags={"type": "application", "event": NotificationEvent.RECRUITER_CONTACTED.value},
    )


def status_changed(
    candidate: User, recruiter: User, status: str, job: Optional[JobPosting] = None
) -> Notification:
    """Tell a candidate that their application moved to a new status."""
    return Notification(
        to=candidate.email,
        subject=f"Your application{_job_phrase(job)} was updated",
        text=(
            f"Hello {candidate.name},\n\n"
            f"The status of your application{_job_phrase(job)} is now: {status}."
        ),
        event=NotificationEvent.STATUS_CHANGED,
        reply_to=recruiter.email,
        tags={
            "type": "application",
            "event": NotificationEvent.STATUS_CHANGED.value,
            "status": status,
        },
    )


def application_withdrawn(
    candidate: User, recruiter: User, job: Optional[JobPosting] = None
) -> Notification:
    """Tell a recruiter that a candidate withdrew."""
    return Notification(
        to=recruiter.email,
        subject=f"{candidate.name} withdrew their application{_job_phrase(job)}",
        text=(
            f"Hello {recruiter.name},\n\n"
            f"{candidate.name} ({candidate.email}) has withdrawn their application"
            f"{_job_phrase(job)}."
        ),
        event=NotificationEvent.APPLICATION_WITHDRAWN,
        tags={"type": "application", "event": NotificationEvent.APPLICATION_WITHDRAWN.value},
    )


def job_alert(
    user: User,
    search: SavedSearch,
    jobs: list[dict[str, Any]],
    base_url: str,
) -> Notification:
    """Digest of postings that matched a saved search."""
    search_name = search.name or "your saved search"
    if jobs:
        lines = [
            f"- {job['title']} at {job['company']} ({job['location']}): "
            f"{base_url}/jobs/{job['id']}"
            for job in jobs
        ]
        body = f"{len(jobs)} new job(s) match {search_name}:\n\n" + "\n".join(lines)
    else:
        body = f"No new jobs matched {search_name} this time. Your alert is still active."

    return Notification(
        to=user.email,
        subject=f"Job alert: {len(jobs)} new job(s) for {search_name}",
        text=f"Hello {user.name},\n\n{body}",
        event=NotificationEvent.JOB_ALERT,
        tags={
            "type": "job_alert",
            "frequency": str(search.frequency),
            "job_count": str(len(jobs)),
        },
    )


def recruiter_message(
    candidate: User,
    recruiter: User,
    message: str,
    subject: Optional[str] = None,
    job: Optional[JobPosting] = None,
) -> Notification:
    """Direct email from a recruiter to a candidate; replies go to the recruiter."""
    return Notification(
        to=candidate.email,
        subject=subject or f"Message from {recruiter.name}{_job_phrase(job)}",
        text=f"Hello {candidate.name},\n\n{message}\n\n{recruiter.name}",
        event=NotificationEvent.RECRUITER_CONTACTED,
        reply_to=recruiter.email,
        tags={"type": "contact", "event": NotificationEvent.RECRUITER_CONTACTED.value},
    )
