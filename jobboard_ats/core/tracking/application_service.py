"""
Application tracking service.

Role-gated operations on interaction records: applying, contacting,
listing, reading, status changes, withdrawal, archiving and direct email.
Every operation takes the resolved caller identity first and returns a
role-projected dictionary that has been through the leak guard.
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from jobboard_ats.core.exceptions import (
    AlreadyTerminalError,
    AlreadyWithdrawnError,
    AmbiguousJobError,
    DuplicateInteractionError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
    UnauthenticatedError,
    UnavailableError,
)
from jobboard_ats.core.identity import CallerIdentity, require_identity, require_role
from jobboard_ats.core.inputs import parse_input
from jobboard_ats.core.tracking.state_machine import (
    archive_field_for_role,
    initial_status,
    status_change_fields,
    validate_status_change,
    validate_withdrawal,
)
from jobboard_ats.core.visibility.sanitizer import guarded, job_view, project_for_role
from jobboard_ats.data.database import DatabaseManager
from jobboard_ats.data.models import (
    Application,
    ApplicationUpdate,
    ApplyRequest,
    ArchiveRequest,
    ContactRequest,
    JobPosting,
    User,
)
from jobboard_ats.data.repositories import (
    ApplicationRepository,
    BaseRepository,
    CVRepository,
    JobRepository,
    UserRepository,
)
from jobboard_ats.services import notifications
from jobboard_ats.services.notifications import (
    Notification,
    NotificationSender,
    dispatch_safely,
)
from jobboard_ats.utils.config import NotificationSettings, get_settings
from jobboard_ats.utils.constants import (
    ALREADY_APPLIED_MESSAGE,
    ALREADY_CONTACTED_MESSAGE,
    ALREADY_WITHDRAWN_MESSAGE,
    NO_PUBLISHED_JOBS_MESSAGE,
    SELECT_JOB_MESSAGE,
    TERMINAL_STATUS_MESSAGE,
    ApplicationStatus,
    InteractionOrigin,
    UserRole,
)
from jobboard_ats.utils.logger import LoggerMixin


class ApplicationService(LoggerMixin):
    """
    Operations on interaction records.

    Uniqueness is enforced by the storage indexes; the lookups done before
    each insert only exist to answer the common case without a failed write.
    Conditional writes re-check the terminal state on the server.
    """

    def __init__(
        self,
        applications: ApplicationRepository,
        jobs: JobRepository,
        users: UserRepository,
        cvs: CVRepository,
        notifier: Optional[NotificationSender] = None,
        settings: Optional[NotificationSettings] = None,
    ):
        self._applications = applications
        self._jobs = jobs
        self._users = users
        self._cvs = cvs
        self._notifier = notifier
        self._settings = settings or get_settings().notifications

    @classmethod
    def from_database(
        cls,
        db_manager: DatabaseManager,
        notifier: Optional[NotificationSender] = None,
    ) -> "ApplicationService":
        """Build the service with repositories bound to one database manager."""
        return cls(
            applications=ApplicationRepository(db_manager),
            jobs=JobRepository(db_manager),
            users=UserRepository(db_manager),
            cvs=CVRepository(db_manager),
            notifier=notifier,
        )

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    @guarded
    def apply(self, caller: Optional[CallerIdentity], payload: Any) -> dict[str, Any]:
        """
        A job seeker applies to a published posting.

        Raises:
            NotFoundError: The job does not exist or is unpublished
            InvalidStateError: The job has no recruiter assigned
            DuplicateInteractionError: The candidate already applied
        """
        caller = require_role(caller, UserRole.JOB_SEEKER)
        request = parse_input(ApplyRequest, payload)
        candidate_id = self._caller_object_id(caller)

        job = self._jobs.get_by_id(request.job_id)
        if job is None or not job.is_published:
            raise NotFoundError("Job not found")
        if job.recruiter is None:
            raise InvalidStateError("Job has no recruiter assigned")

        if self._applications.find_by_job_and_candidate(job.id, candidate_id):
            raise DuplicateInteractionError(ALREADY_APPLIED_MESSAGE)

        now = datetime.utcnow()
        application = Application(
            job_id=job.id,
            recruiter_id=job.recruiter,
            candidate_id=candidate_id,
            origin=InteractionOrigin.APPLICATION,
            status=initial_status(InteractionOrigin.APPLICATION),
            applied_at=now,
            last_activity_at=now,
        )
        try:
            application = self._applications.create(application)
        except DuplicateKeyError as e:
            raise self._duplicate_error(
                caller, InteractionOrigin.APPLICATION, candidate_id, job_id=job.id
            ) from e

        self.logger.info(f"Candidate {candidate_id} applied to job {job.id}")

        candidate = self._users.get_by_id(candidate_id)
        recruiter = self._users.get_by_id(job.recruiter)
        if candidate and recruiter:
            self._notify(notifications.candidate_applied(candidate, recruiter, job, now))

        return project_for_role(application, caller.role, job=job, recruiter=recruiter)

    @guarded
    def contact(self, caller: Optional[CallerIdentity], payload: Any) -> dict[str, Any]:
        """
        A recruiter reaches out to a discoverable candidate.

        Without a job_id the recruiter's single published posting is used.

        Raises:
            NotFoundError: Unknown candidate, candidate without a CV, or unknown job
            ForbiddenError: The named job belongs to another recruiter
            AmbiguousJobError: Several published postings, none named
            PreconditionFailedError: No published postings at all
            DuplicateInteractionError: The recruiter already contacted the candidate
        """
        caller = require_role(caller, UserRole.RECRUITER, UserRole.ADMIN)
        request = parse_input(ContactRequest, payload)
        recruiter_id = self._caller_object_id(caller)

        candidate = self._users.get_by_id(request.candidate_id)
        cv = self._cvs.get_by_job_seeker(request.candidate_id)
        if candidate is None or cv is None:
            raise NotFoundError("Candidate not found")

        job = self._resolve_contact_job(caller, request.job_id)

        if self._applications.find_by_recruiter_and_candidate(recruiter_id, candidate.id):
            raise DuplicateInteractionError(ALREADY_CONTACTED_MESSAGE)

        now = datetime.utcnow()
        application = Application(
            job_id=job.id,
            recruiter_id=recruiter_id,
            candidate_id=candidate.id,
            origin=InteractionOrigin.CONTACT,
            status=initial_status(InteractionOrigin.CONTACT),
            applied_at=now,
            last_activity_at=now,
        )
        try:
            application = self._applications.create(application)
        except DuplicateKeyError as e:
            raise self._duplicate_error(
                caller,
                InteractionOrigin.CONTACT,
                candidate.id,
                recruiter_id=recruiter_id,
            ) from e

        self.logger.info(f"Recruiter {recruiter_id} contacted candidate {candidate.id}")

        recruiter = self._users.get_by_id(recruiter_id)
        if recruiter:
            self._notify(notifications.recruiter_contacted(candidate, recruiter, job))

        return project_for_role(
            application,
            caller.role,
            job=job,
            candidate=candidate,
            cv=cv,
            include_notes=self._notes_enabled(caller),
        )

    def _resolve_contact_job(
        self, caller: CallerIdentity, job_id: Optional[ObjectId]
    ) -> JobPosting:
        """The posting a contact is about, named or inferred."""
        if job_id is not None:
            job = self._jobs.get_by_id(job_id)
            if job is None:
                raise NotFoundError("Job not found")
            if not caller.owns(job.recruiter):
                raise ForbiddenError("You can only contact candidates about your own jobs")
            return job

        published = self._jobs.list_published_by_recruiter(caller.user_id)
        if not published:
            raise PreconditionFailedError(NO_PUBLISHED_JOBS_MESSAGE)
        if len(published) > 1:
            raise AmbiguousJobError(SELECT_JOB_MESSAGE, jobs=[job_view(j) for j in published])
        return published[0]

    def _duplicate_error(
        self,
        caller: CallerIdentity,
        origin: InteractionOrigin,
        candidate_id: ObjectId,
        job_id: Optional[ObjectId] = None,
        recruiter_id: Optional[ObjectId] = None,
    ) -> DuplicateInteractionError:
        """Report a lost creation race as the duplicate it is."""
        existing = self._applications.find_existing(
            origin, candidate_id, job_id=job_id, recruiter_id=recruiter_id
        )
        message = ALREADY_CONTACTED_MESSAGE if caller.is_staff else ALREADY_APPLIED_MESSAGE
        self.logger.info(f"Duplicate {origin.value} rejected by unique index for {candidate_id}")
        if existing is not None and existing.id is not None:
            return DuplicateInteractionError(message, application_id=str(existing.id))
        return DuplicateInteractionError(message)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @guarded
    def list_for_recruiter(self, caller: Optional[CallerIdentity]) -> list[dict[str, Any]]:
        """Records owned by the recruiter and not archived by them, newest first."""
        caller = require_role(caller, UserRole.RECRUITER, UserRole.ADMIN)
        include_notes = self._notes_enabled(caller)
        records = self._applications.list_for_recruiter(self._caller_object_id(caller))
        cache: dict[tuple[str, str], Any] = {}
        return [
            self._present(caller, application, include_notes=include_notes, cache=cache)
            for application in records
        ]

    @guarded
    def list_for_job_seeker(self, caller: Optional[CallerIdentity]) -> list[dict[str, Any]]:
        """The candidate's own records, not archived by them, newest first."""
        caller = require_role(caller, UserRole.JOB_SEEKER)
        records = self._applications.list_for_candidate(self._caller_object_id(caller))
        cache: dict[tuple[str, str], Any] = {}
        return [self._present(caller, application, cache=cache) for application in records]

    @guarded
    def check_applied(
        self, caller: Optional[CallerIdentity], job_id: Optional[str]
    ) -> dict[str, Any]:
        """Whether the job seeker already has a record for a posting."""
        caller = require_role(caller, UserRole.JOB_SEEKER)
        if not job_id:
            raise InvalidArgumentError("job_id is required", field="job_id")
        if not BaseRepository.is_valid_id(job_id):
            raise InvalidArgumentError("job_id is not a valid identifier", field="job_id")

        existing = self._applications.find_by_job_and_candidate(
            job_id, self._caller_object_id(caller)
        )
        if existing is None:
            return {"applied": False, "application": None}
        return {"applied": True, "application": self._present(caller, existing)}

    @guarded
    def get_application(
        self, caller: Optional[CallerIdentity], application_id: str
    ) -> dict[str, Any]:
        """
        Read one record.

        The first read by the owning recruiter stamps viewed_at. Staff views
        carry the candidate's CV summary.
        """
        caller = require_identity(caller)
        application = self._load_owned(caller, application_id)

        if caller.role == UserRole.RECRUITER and application.viewed_at is None:
            application = self._mark_viewed(application)

        return self._present(
            caller,
            application,
            include_notes=self._notes_enabled(caller),
            with_cv=True,
        )

    # -------------------------------------------------------------------------
    # State changes
    # -------------------------------------------------------------------------

    @guarded
    def mark_viewed(self, caller: Optional[CallerIdentity], application_id: str) -> dict[str, Any]:
        """Stamp viewed_at once; later calls leave the first value in place."""
        caller = require_role(caller, UserRole.RECRUITER, UserRole.ADMIN)
        application = self._load_owned(caller, application_id)
        if application.viewed_at is None:
            application = self._mark_viewed(application)
        return self._present(caller, application, include_notes=self._notes_enabled(caller))

    def _mark_viewed(self, application: Application) -> Application:
        updated = self._applications.mark_viewed(application.id, datetime.utcnow())
        if updated is not None:
            return updated
        # Another read won the race; return what it stored
        return self._applications.get_by_id(application.id) or application

    @guarded
    def set_status(
        self,
        caller: Optional[CallerIdentity],
        application_id: str,
        status: ApplicationStatus | str,
    ) -> dict[str, Any]:
        """
        Move a record to a new status.

        Raises:
            ForbiddenError: Job-seeker caller, or a record owned by another recruiter
            AlreadyTerminalError: The record is withdrawn, checked again at write time
        """
        caller = require_role(caller, UserRole.RECRUITER, UserRole.ADMIN)
        new_status = self._parse_status(status)
        return self._change(caller, application_id, new_status, None)

    @guarded
    def update_application(
        self, caller: Optional[CallerIdentity], application_id: str, payload: Any
    ) -> dict[str, Any]:
        """Change status and/or recruiter notes in one call."""
        caller = require_role(caller, UserRole.RECRUITER, UserRole.ADMIN)
        request = parse_input(ApplicationUpdate, payload)

        if request.recruiter_notes is not None and not self._notes_enabled(caller):
            raise ForbiddenError(
                "Notes are disabled for this account", field="recruiter_notes"
            )

        new_status = ApplicationStatus(request.status) if request.status else None
        return self._change(caller, application_id, new_status, request.recruiter_notes)

    def _change(
        self,
        caller: CallerIdentity,
        application_id: str,
        new_status: Optional[ApplicationStatus],
        recruiter_notes: Optional[str],
    ) -> dict[str, Any]:
        application = self._load_owned(caller, application_id)
        previous_status = ApplicationStatus(application.status)
        now = datetime.utcnow()

        fields: dict[str, Any] = {}
        if new_status is not None:
            validate_status_change(previous_status, new_status, caller.role)
            fields.update(status_change_fields(new_status, now))
        if recruiter_notes is not None:
            fields["recruiter_notes"] = recruiter_notes

        if new_status is not None:
            updated = self._applications.set_fields_unless_withdrawn(application.id, fields)
            if updated is None:
                raise AlreadyTerminalError(TERMINAL_STATUS_MESSAGE)
        else:
            updated = self._applications.update(application.id, fields)
            if updated is None:
                raise NotFoundError("Application not found")

        if new_status is not None and new_status != previous_status:
            self.logger.info(
                f"Application {application.id} status {previous_status.value} -> {new_status.value}"
            )
            self._notify_status_change(updated, new_status)

        return self._present(caller, updated, include_notes=self._notes_enabled(caller))

    def _notify_status_change(self, application: Application, status: ApplicationStatus) -> None:
        candidate = self._users.get_by_id(application.candidate_id)
        recruiter = self._users.get_by_id(application.recruiter_id)
        if candidate is None or recruiter is None:
            return
        job = self._jobs.get_by_id(application.job_id) if application.job_id else None
        self._notify(notifications.status_changed(candidate, recruiter, status.value, job))

    @guarded
    def withdraw(self, caller: Optional[CallerIdentity], application_id: str) -> dict[str, Any]:
        """
        The candidate withdraws; irreversible.

        The write only matches a record that is still not withdrawn, so of
        two racing withdrawals exactly one succeeds and notifies.

        Raises:
            AlreadyWithdrawnError: The record is already withdrawn
        """
        caller = require_role(caller, UserRole.JOB_SEEKER)
        application = self._load_owned(caller, application_id)
        validate_withdrawal(application)

        updated = self._applications.withdraw(application.id, caller.user_id, datetime.utcnow())
        if updated is None:
            raise AlreadyWithdrawnError(ALREADY_WITHDRAWN_MESSAGE)

        self.logger.info(f"Application {application.id} withdrawn by candidate")

        candidate = self._users.get_by_id(updated.candidate_id)
        recruiter = self._users.get_by_id(updated.recruiter_id)
        job = self._jobs.get_by_id(updated.job_id) if updated.job_id else None
        if candidate and recruiter:
            self._notify(notifications.application_withdrawn(candidate, recruiter, job))

        return project_for_role(updated, caller.role, job=job, recruiter=recruiter)

    @guarded
    def set_archive_flag(
        self, caller: Optional[CallerIdentity], application_id: str, payload: Any
    ) -> dict[str, Any]:
        """
        Archive or unarchive a record for the caller's own party.

        Raises:
            ForbiddenError: The request names the other party's flag
            InvalidArgumentError: The request names no flag or a non-boolean value
        """
        caller = require_identity(caller)
        request = parse_input(ArchiveRequest, payload)
        field_name, value = archive_field_for_role(caller.role, request)

        application = self._load_owned(caller, application_id)
        updated = self._applications.set_archive_flag(application.id, field_name, value)
        if updated is None:
            raise NotFoundError("Application not found")

        return self._present(caller, updated, include_notes=self._notes_enabled(caller))

    @guarded
    def send_contact_email(
        self,
        caller: Optional[CallerIdentity],
        application_id: str,
        message: str,
        subject: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Email the candidate of a record on the recruiter's behalf.

        Here the delivery is the operation: a failed send raises
        UnavailableError and last_activity_at is left alone.
        """
        caller = require_role(caller, UserRole.RECRUITER, UserRole.ADMIN)
        if not message or not message.strip():
            raise InvalidArgumentError("message is required", field="message")

        application = self._load_owned(caller, application_id)
        candidate = self._users.get_by_id(application.candidate_id)
        if candidate is None:
            raise NotFoundError("Candidate not found")
        recruiter = self._users.get_by_id(caller.user_id)
        if recruiter is None:
            raise UnauthenticatedError()
        job = self._jobs.get_by_id(application.job_id) if application.job_id else None

        notification = notifications.recruiter_message(
            candidate, recruiter, message.strip(), subject=subject, job=job
        )
        if self._notifier is None or not self._settings.enabled:
            raise UnavailableError("Email delivery is not available")
        try:
            result = self._notifier.send(notification)
        except Exception as e:
            self.logger.exception(f"Contact email for application {application.id} failed")
            raise UnavailableError("Failed to send email, please retry") from e
        if not result.success:
            self.logger.error(
                f"Contact email for application {application.id} failed: {result.error}"
            )
            raise UnavailableError("Failed to send email, please retry")

        updated = self._applications.touch(application.id, datetime.utcnow()) or application
        return {
            "sent": True,
            "application": self._present(
                caller, updated, job=job, include_notes=self._notes_enabled(caller)
            ),
        }

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _caller_object_id(caller: CallerIdentity) -> ObjectId:
        if not BaseRepository.is_valid_id(caller.user_id):
            raise UnauthenticatedError()
        return ObjectId(caller.user_id)

    @staticmethod
    def _parse_status(status: ApplicationStatus | str) -> ApplicationStatus:
        try:
            return ApplicationStatus(status)
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid status: {status}", field="status") from e

    def _load_owned(self, caller: CallerIdentity, application_id: str) -> Application:
        """Load a record the caller is a party to."""
        application = self._applications.get_by_id(application_id)
        if application is None:
            raise NotFoundError("Application not found")

        owner = (
            application.candidate_id
            if caller.role == UserRole.JOB_SEEKER
            else application.recruiter_id
        )
        if not caller.owns(owner):
            raise ForbiddenError("You do not have access to this application")
        return application

    def _notes_enabled(self, caller: CallerIdentity) -> bool:
        """Admins always see notes; recruiters unless they switched the feature off."""
        if caller.role != UserRole.RECRUITER:
            return True
        recruiter: Optional[User] = self._users.get_by_id(caller.user_id)
        return recruiter is None or recruiter.has_notes_enabled

    def _present(
        self,
        caller: CallerIdentity,
        application: Application,
        *,
        job: Optional[JobPosting] = None,
        include_notes: bool = True,
        with_cv: bool = False,
        cache: Optional[dict[tuple[str, str], Any]] = None,
    ) -> dict[str, Any]:
        """Project a record for the caller with its related entities."""
        cache = cache if cache is not None else {}
        if job is None:
            job = self._cached(self._jobs, application.job_id, cache)

        if caller.is_staff:
            candidate = self._cached(self._users, application.candidate_id, cache)
            cv = self._cvs.get_by_job_seeker(application.candidate_id) if with_cv else None
            return project_for_role(
                application,
                caller.role,
                job=job,
                candidate=candidate,
                cv=cv,
                include_notes=include_notes,
            )

        recruiter = self._cached(self._users, application.recruiter_id, cache)
        return project_for_role(application, caller.role, job=job, recruiter=recruiter)

    @staticmethod
    def _cached(
        repository: BaseRepository, id_value: Any, cache: dict[tuple[str, str], Any]
    ) -> Any:
        if id_value is None:
            return None
        key = (repository.collection_name, str(id_value))
        if key not in cache:
            cache[key] = repository.get_by_id(id_value)
        return cache[key]

    def _notify(self, notification: Notification) -> None:
        """Fire-and-forget delivery; failures are logged by dispatch_safely."""
        if self._notifier is None or not self._settings.enabled:
            self.logger.debug(f"Notifications disabled, skipping {notification.event}")
            return
        dispatch_safely(self._notifier, notification)
