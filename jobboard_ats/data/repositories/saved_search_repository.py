"""Saved search repository."""

from datetime import datetime
from typing import Optional

from bson import ObjectId

from jobboard_ats.data.models.saved_search import SavedSearch
from jobboard_ats.utils.constants import SAVED_SEARCHES_COLLECTION

from .base import MutableRepository


class SavedSearchRepository(MutableRepository[SavedSearch]):
    """Repository for saved search operations."""

    @property
    def collection_name(self) -> str:
        return SAVED_SEARCHES_COLLECTION

    @property
    def model_class(self) -> type[SavedSearch]:
        return SavedSearch

    def list_active(self) -> list[SavedSearch]:
        """All active saved searches, oldest first."""
        return self.find({"active": True}, sort_by="created_at", sort_order=1)

    def mark_sent(self, id_value: str | ObjectId, sent_at: datetime) -> Optional[SavedSearch]:
        """Record that an alert was dispatched for this search."""
        return self.update(id_value, {"last_sent": sent_at})
