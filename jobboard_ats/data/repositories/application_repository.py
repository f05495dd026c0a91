"""
Interaction record repository.

Every state-affecting write is a single conditional update so that the
condition (not withdrawn, not yet viewed, ...) is checked by the server at
write time rather than on a previously read copy.
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId

from jobboard_ats.data.models.application import Application
from jobboard_ats.utils.constants import (
    APPLICATIONS_COLLECTION,
    ApplicationStatus,
    InteractionOrigin,
)
from jobboard_ats.utils.logger import get_logger

from .base import MutableRepository

logger = get_logger(__name__)

NOT_WITHDRAWN = {"$ne": ApplicationStatus.WITHDRAWN.value}


class ApplicationRepository(MutableRepository[Application]):
    """Repository for interaction record operations."""

    @property
    def collection_name(self) -> str:
        return APPLICATIONS_COLLECTION

    @property
    def model_class(self) -> type[Application]:
        return Application

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_by_job_and_candidate(
        self, job_id: str | ObjectId, candidate_id: str | ObjectId
    ) -> Optional[Application]:
        """Find the record for a (job, candidate) pair, whatever its status."""
        return self.find_one(
            {
                "job_id": self._to_object_id(job_id),
                "candidate_id": self._to_object_id(candidate_id),
            }
        )

    def find_by_recruiter_and_candidate(
        self, recruiter_id: str | ObjectId, candidate_id: str | ObjectId
    ) -> Optional[Application]:
        """Find any record linking a recruiter and a candidate, whatever the job."""
        return self.find_one(
            {
                "recruiter_id": self._to_object_id(recruiter_id),
                "candidate_id": self._to_object_id(candidate_id),
            }
        )

    def find_existing(
        self,
        origin: InteractionOrigin,
        candidate_id: str | ObjectId,
        job_id: Optional[str | ObjectId] = None,
        recruiter_id: Optional[str | ObjectId] = None,
    ) -> Optional[Application]:
        """Find the record that would block a creation on the given path."""
        if origin == InteractionOrigin.APPLICATION and job_id is not None:
            return self.find_by_job_and_candidate(job_id, candidate_id)
        if origin == InteractionOrigin.CONTACT and recruiter_id is not None:
            return self.find_by_recruiter_and_candidate(recruiter_id, candidate_id)
        return None

    def list_for_recruiter(
        self, recruiter_id: str | ObjectId, include_archived: bool = False
    ) -> list[Application]:
        """Records owned by a recruiter, newest application first."""
        query: dict[str, Any] = {"recruiter_id": self._to_object_id(recruiter_id)}
        if not include_archived:
            query["archived_by_recruiter"] = {"$ne": True}
        return self.find(query, sort_by="applied_at", sort_order=-1)

    def list_for_candidate(
        self, candidate_id: str | ObjectId, include_archived: bool = False
    ) -> list[Application]:
        """Records of a candidate, newest application first."""
        query: dict[str, Any] = {"candidate_id": self._to_object_id(candidate_id)}
        if not include_archived:
            query["archived_by_job_seeker"] = {"$ne": True}
        return self.find(query, sort_by="applied_at", sort_order=-1)

    # -------------------------------------------------------------------------
    # Conditional Writes
    # -------------------------------------------------------------------------

    def set_fields_unless_withdrawn(
        self, id_value: str | ObjectId, fields: dict[str, Any]
    ) -> Optional[Application]:
        """Apply a $set only while the record is not withdrawn; None otherwise."""
        return self.find_one_and_set(
            {"_id": self._to_object_id(id_value), "status": NOT_WITHDRAWN},
            fields,
        )

    def withdraw(
        self,
        id_value: str | ObjectId,
        candidate_id: str | ObjectId,
        now: datetime,
    ) -> Optional[Application]:
        """
        Withdraw a candidate's record in one conditional write.

        Matches only while status is not withdrawn and withdrawn_at is unset,
        so two racing withdrawals produce exactly one success.
        """
        return self.find_one_and_set(
            {
                "_id": self._to_object_id(id_value),
                "candidate_id": self._to_object_id(candidate_id),
                "status": NOT_WITHDRAWN,
                "withdrawn_at": None,
            },
            {
                "status": ApplicationStatus.WITHDRAWN.value,
                "withdrawn_at": now,
                "last_activity_at": now,
            },
        )

    def mark_viewed(self, id_value: str | ObjectId, now: datetime) -> Optional[Application]:
        """Set viewed_at if it is still unset; None when it was already set."""
        return self.find_one_and_set(
            {"_id": self._to_object_id(id_value), "viewed_at": None},
            {"viewed_at": now},
        )

    def set_archive_flag(
        self, id_value: str | ObjectId, field_name: str, value: bool
    ) -> Optional[Application]:
        """Set one of the per-party archive flags."""
        if field_name not in ("archived_by_job_seeker", "archived_by_recruiter"):
            raise ValueError(f"Not an archive flag: {field_name}")
        return self.update(id_value, {field_name: value})

    def touch(self, id_value: str | ObjectId, now: datetime) -> Optional[Application]:
        """Bump last_activity_at."""
        return self.update(id_value, {"last_activity_at": now})
