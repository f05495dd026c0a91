"""CV repository."""

from typing import Optional

from bson import ObjectId

from jobboard_ats.data.models.cv import CV
from jobboard_ats.utils.constants import CVS_COLLECTION

from .base import MutableRepository


class CVRepository(MutableRepository[CV]):
    """Repository for CV document operations."""

    @property
    def collection_name(self) -> str:
        return CVS_COLLECTION

    @property
    def model_class(self) -> type[CV]:
        return CV

    def get_by_job_seeker(self, job_seeker_id: str | ObjectId) -> Optional[CV]:
        """The CV that makes a job seeker discoverable, if any."""
        if not self.is_valid_id(job_seeker_id):
            return None
        return self.find_one({"job_seeker": self._to_object_id(job_seeker_id)})

    def count_by_job_seeker(self, job_seeker_id: str | ObjectId) -> int:
        return self.count({"job_seeker": self._to_object_id(job_seeker_id)})

    def delete_by_job_seeker(self, job_seeker_id: str | ObjectId) -> int:
        return self.delete_many({"job_seeker": self._to_object_id(job_seeker_id)})
