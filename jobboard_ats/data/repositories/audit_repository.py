"""
Audit log repository.

Append-only: it extends BaseRepository, which exposes create and read
operations but no update or delete.
"""

from typing import Any

from jobboard_ats.data.models.audit import AuditLog, AuditLogQuery
from jobboard_ats.utils.constants import AUDIT_LOGS_COLLECTION, DEFAULT_PAGE_SIZE

from .base import BaseRepository


class AuditRepository(BaseRepository[AuditLog]):
    """Repository for audit log entries."""

    @property
    def collection_name(self) -> str:
        return AUDIT_LOGS_COLLECTION

    @property
    def model_class(self) -> type[AuditLog]:
        return AuditLog

    def append(self, entry: AuditLog) -> AuditLog:
        """Persist a new entry."""
        return self.create(entry)

    # -------------------------------------------------------------------------
    # Query Operations
    # -------------------------------------------------------------------------

    def _build_query(self, query: AuditLogQuery) -> dict[str, Any]:
        """Translate query parameters into a MongoDB filter."""
        mongo_query: dict[str, Any] = {}

        if query.action:
            mongo_query["action"] = query.action
        if query.entity_type:
            mongo_query["entity_type"] = query.entity_type
        if query.entity_id:
            mongo_query["entity_id"] = self._to_object_id(query.entity_id)
        if query.actor_id:
            mongo_query["actor.actor_id"] = self._to_object_id(query.actor_id)

        if query.start_date or query.end_date:
            date_query: dict[str, Any] = {}
            if query.start_date:
                date_query["$gte"] = query.start_date
            if query.end_date:
                date_query["$lte"] = query.end_date
            mongo_query["created_at"] = date_query

        return mongo_query

    def search(self, query: AuditLogQuery) -> tuple[list[AuditLog], int]:
        """Entries matching the query, newest first, plus the total match count."""
        mongo_query = self._build_query(query)
        entries = self.find(
            mongo_query,
            skip=query.offset,
            limit=query.limit,
            sort_by="created_at",
            sort_order=-1,
        )
        return entries, self.count(mongo_query)

    def get_by_entity(
        self, entity_type: str, entity_id: str, limit: int = DEFAULT_PAGE_SIZE
    ) -> list[AuditLog]:
        """History of one entity, newest first."""
        if not self.is_valid_id(entity_id):
            return []
        entries, _ = self.search(
            AuditLogQuery(entity_type=entity_type, entity_id=entity_id, limit=limit)
        )
        return entries
