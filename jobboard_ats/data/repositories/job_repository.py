"""
Job posting repository.

Covers the reads the tracking core and the matcher need plus the
administrative deletes; posting CRUD lives elsewhere.
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId

from jobboard_ats.data.models.job import JobPosting
from jobboard_ats.utils.constants import JOBS_COLLECTION

from .base import MutableRepository


class JobRepository(MutableRepository[JobPosting]):
    """Repository for job posting document operations."""

    @property
    def collection_name(self) -> str:
        return JOBS_COLLECTION

    @property
    def model_class(self) -> type[JobPosting]:
        return JobPosting

    def list_published_by_recruiter(self, recruiter_id: str | ObjectId) -> list[JobPosting]:
        """Postings a recruiter has explicitly published, oldest first."""
        return self.find(
            {"recruiter": self._to_object_id(recruiter_id), "published": True},
            sort_by="created_at",
            sort_order=1,
        )

    def list_open(self, since: Optional[datetime] = None) -> list[JobPosting]:
        """
        Postings not explicitly unpublished, newest first.

        Args:
            since: Only include postings created on or after this time
        """
        query: dict[str, Any] = {"published": {"$ne": False}}
        if since is not None:
            query["created_at"] = {"$gte": since}
        return self.find(query, sort_by="created_at", sort_order=-1)

    def count_by_company(self, company_id: str | ObjectId) -> int:
        return self.count({"company_id": self._to_object_id(company_id)})

    def delete_by_company(self, company_id: str | ObjectId) -> int:
        return self.delete_many({"company_id": self._to_object_id(company_id)})

    def count_by_recruiter(self, recruiter_id: str | ObjectId) -> int:
        return self.count({"recruiter": self._to_object_id(recruiter_id)})

    def delete_by_recruiter(self, recruiter_id: str | ObjectId) -> int:
        return self.delete_many({"recruiter": self._to_object_id(recruiter_id)})
