"""
Administrative entity lifecycle with audit trail.

Deletes cascade by hand and in a fixed order: read the entity and resolve
the acting admin, count and delete the dependents, delete the entity, then
write one audit entry summarizing the cascade.

MongoDB gives no multi-document atomicity here. If the process dies
between the cascade and the audit write, the data is gone without an
audit entry; a failed audit write is logged on the error channel. Interaction
records of deleted jobs are kept.
"""

from typing import Any, Callable, Optional

from jobboard_ats.core.audit.audit_logger import AuditLogger, changed_fields
from jobboard_ats.core.exceptions import NotFoundError
from jobboard_ats.core.identity import CallerIdentity, RequestContext, require_role
from jobboard_ats.core.inputs import parse_input
from jobboard_ats.data.database import DatabaseManager
from jobboard_ats.data.models import AuditLogQuery, JobUpdate
from jobboard_ats.data.repositories import (
    AuditRepository,
    CompanyRepository,
    CVRepository,
    JobRepository,
    UserRepository,
)
from jobboard_ats.utils.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_AUDIT_LOG_PAGE_SIZE,
    AuditEntityType,
    UserRole,
)
from jobboard_ats.utils.logger import LoggerMixin


class AdminEntityService(LoggerMixin):
    """Admin-only deletes and edits of companies, jobs, users and CVs."""

    def __init__(
        self,
        companies: CompanyRepository,
        jobs: JobRepository,
        users: UserRepository,
        cvs: CVRepository,
        audit_repository: AuditRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._companies = companies
        self._jobs = jobs
        self._users = users
        self._cvs = cvs
        self._audit_repository = audit_repository
        self._audit = audit_logger or AuditLogger(audit_repository, users)

    @classmethod
    def from_database(cls, db_manager: DatabaseManager) -> "AdminEntityService":
        return cls(
            companies=CompanyRepository(db_manager),
            jobs=JobRepository(db_manager),
            users=UserRepository(db_manager),
            cvs=CVRepository(db_manager),
            audit_repository=AuditRepository(db_manager),
        )

    # -------------------------------------------------------------------------
    # Deletes
    # -------------------------------------------------------------------------

    def delete_company(
        self,
        caller: Optional[CallerIdentity],
        company_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> dict[str, Any]:
        """Delete a company and every job attached to it."""
        caller = require_role(caller, UserRole.ADMIN)
        company = self._companies.get_by_id(company_id)
        if company is None:
            raise NotFoundError("Company not found")

        before = company.snapshot()
        actor = self._audit.resolve_actor(caller.user_id, context)
        jobs_deleted = self._cascade(
            "jobs", company.id, self._jobs.count_by_company, self._jobs.delete_by_company
        )
        self._companies.delete(company.id)

        self.logger.info(f"Company {company.id} deleted with {jobs_deleted} job(s)")
        self._audit.record_delete(
            AuditEntityType.COMPANY,
            str(company.id),
            caller.user_id,
            before=before,
            reason=reason,
            metadata={"jobs_deleted": jobs_deleted},
            context=context,
            actor=actor,
        )
        return {"deleted": True, "jobs_deleted": jobs_deleted}

    def delete_job(
        self,
        caller: Optional[CallerIdentity],
        job_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> dict[str, Any]:
        caller = require_role(caller, UserRole.ADMIN)
        job = self._jobs.get_by_id(job_id)
        if job is None:
            raise NotFoundError("Job not found")

        before = job.snapshot()
        actor = self._audit.resolve_actor(caller.user_id, context)
        self._jobs.delete(job.id)

        self.logger.info(f"Job {job.id} deleted")
        self._audit.record_delete(
            AuditEntityType.JOB,
            str(job.id),
            caller.user_id,
            before=before,
            reason=reason,
            context=context,
            actor=actor,
        )
        return {"deleted": True}

    def delete_user(
        self,
        caller: Optional[CallerIdentity],
        user_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> dict[str, Any]:
        """
        Delete an account and what it owns.

        Recruiters take their posted jobs with them, job seekers their CVs.
        """
        caller = require_role(caller, UserRole.ADMIN)
        user = self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        before = user.snapshot()
        actor = self._audit.resolve_actor(caller.user_id, context)
        metadata: dict[str, Any] = {}
        if user.role == UserRole.RECRUITER:
            metadata["jobs_deleted"] = self._cascade(
                "jobs", user.id, self._jobs.count_by_recruiter, self._jobs.delete_by_recruiter
            )
        elif user.role == UserRole.JOB_SEEKER:
            metadata["cvs_deleted"] = self._cascade(
                "cvs", user.id, self._cvs.count_by_job_seeker, self._cvs.delete_by_job_seeker
            )
        self._users.delete(user.id)

        self.logger.info(f"User {user.id} ({user.role}) deleted: {metadata}")
        self._audit.record_delete(
            AuditEntityType.USER,
            str(user.id),
            caller.user_id,
            before=before,
            reason=reason,
            metadata=metadata,
            context=context,
            actor=actor,
        )
        return {"deleted": True, **metadata}

    def delete_cv(
        self,
        caller: Optional[CallerIdentity],
        cv_id: str,
        reason: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> dict[str, Any]:
        caller = require_role(caller, UserRole.ADMIN)
        cv = self._cvs.get_by_id(cv_id)
        if cv is None:
            raise NotFoundError("CV not found")

        before = cv.snapshot()
        actor = self._audit.resolve_actor(caller.user_id, context)
        self._cvs.delete(cv.id)

        self.logger.info(f"CV {cv.id} deleted")
        self._audit.record_delete(
            AuditEntityType.CV,
            str(cv.id),
            caller.user_id,
            before=before,
            reason=reason,
            context=context,
            actor=actor,
        )
        return {"deleted": True}

    def _cascade(
        self,
        label: str,
        owner_id: Any,
        count: Callable[[Any], int],
        delete: Callable[[Any], int],
    ) -> int:
        """Count then delete the dependents of an owner; returns the number deleted."""
        expected = count(owner_id)
        deleted = delete(owner_id)
        if deleted != expected:
            # Concurrent writes between the count and the delete
            self.logger.warning(f"{owner_id}: counted {expected} {label}, deleted {deleted}")
        return deleted

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def update_job(
        self,
        caller: Optional[CallerIdentity],
        job_id: str,
        payload: Any,
        context: Optional[RequestContext] = None,
    ) -> dict[str, Any]:
        """Edit any job; only the fields present in the payload are written."""
        caller = require_role(caller, UserRole.ADMIN)
        update = parse_input(JobUpdate, payload)
        job = self._jobs.get_by_id(job_id)
        if job is None:
            raise NotFoundError("Job not found")

        fields = update.model_dump(exclude_unset=True)
        before = job.snapshot()
        updated = self._jobs.update(job.id, fields) if fields else job
        if updated is None:
            raise NotFoundError("Job not found")
        after = updated.snapshot()

        self._audit.record_update(
            AuditEntityType.JOB,
            str(job.id),
            caller.user_id,
            before=before,
            after=after,
            fields=changed_fields(before, after),
            context=context,
        )
        return after

    # -------------------------------------------------------------------------
    # Forensics
    # -------------------------------------------------------------------------

    def list_audit_logs(
        self,
        caller: Optional[CallerIdentity],
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> dict[str, Any]:
        """Audit entries newest first, with the total count for paging."""
        require_role(caller, UserRole.ADMIN)
        query = parse_input(
            AuditLogQuery,
            {
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "actor_id": actor_id,
                "limit": min(max(limit, 1), MAX_AUDIT_LOG_PAGE_SIZE),
                "offset": max(offset, 0),
            },
        )
        entries, total = self._audit_repository.search(query)
        return {
            "audit_logs": [entry.model_dump(mode="json", exclude_none=True) for entry in entries],
            "total": total,
            "limit": query.limit,
            "offset": query.offset,
        }
