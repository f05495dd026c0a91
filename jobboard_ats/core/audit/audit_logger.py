"""
Audit trail writer.

Records administrative create/update/delete actions performed on users,
companies, jobs and CVs. The actor's name and email are copied into the
entry, so the trail stays readable after the actor's account is gone.
Deletes resolve the actor before the destructive step and pass it in.

Writing an entry never fails the action it describes: any error is logged
and the caller carries on.
"""

from typing import Any, Optional

from jobboard_ats.core.identity import RequestContext
from jobboard_ats.data.models import ActorInfo, AuditChanges, AuditLog, AuditLogCreate
from jobboard_ats.data.repositories import AuditRepository, UserRepository
from jobboard_ats.utils.constants import AuditAction, AuditEntityType
from jobboard_ats.utils.logger import get_logger

logger = get_logger(__name__)

# Bookkeeping fields that change on every write and say nothing about the edit
IGNORED_CHANGE_FIELDS = frozenset({"updated_at"})


def changed_fields(before: dict[str, Any], after: dict[str, Any]) -> list[str]:
    """Names of the fields whose value differs between two snapshots."""
    keys = (set(before) | set(after)) - IGNORED_CHANGE_FIELDS
    return sorted(k for k in keys if before.get(k) != after.get(k))


class AuditLogger:
    """Append-only writer for audit entries."""

    def __init__(self, audit_repository: AuditRepository, user_repository: UserRepository):
        self._audit = audit_repository
        self._users = user_repository

    def resolve_actor(
        self, actor_id: str, context: Optional[RequestContext] = None
    ) -> Optional[ActorInfo]:
        """
        Look up the actor and copy the details an entry keeps.

        Deletes call this before touching anything, so an actor who removes
        their own account is still known when the entry is written.

        Returns:
            The actor details, or None if the account does not exist
        """
        try:
            user = self._users.get_by_id(actor_id)
        except Exception:
            logger.exception(f"Failed to resolve audit actor {actor_id}")
            return None
        if user is None:
            return None

        context = context or RequestContext()
        return ActorInfo(
            actor_id=user.id,
            actor_email=user.email,
            actor_name=user.name,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
        )

    def record(
        self,
        entry: AuditLogCreate,
        context: Optional[RequestContext] = None,
        actor: Optional[ActorInfo] = None,
    ) -> Optional[AuditLog]:
        """
        Write one audit entry.

        Args:
            entry: What happened and who did it
            context: Request provenance, when known
            actor: Actor details resolved earlier; looked up now when omitted

        Returns:
            The stored entry, or None if it could not be written
        """
        try:
            actor = actor or self.resolve_actor(entry.actor_id, context)
            if actor is None:
                logger.error(
                    f"Audit entry skipped: actor {entry.actor_id} not found "
                    f"({entry.action} {entry.entity_type} {entry.entity_id})"
                )
                return None

            audit_log = AuditLog(
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                actor=actor,
                changes=entry.changes,
                reason=entry.reason,
                metadata=entry.metadata,
            )
            stored = self._audit.append(audit_log)
            logger.debug(
                f"Audit: {entry.action} {entry.entity_type} {entry.entity_id} by {actor.actor_email}"
            )
            return stored
        except Exception:
            logger.exception(
                f"Failed to write audit entry for {entry.action} "
                f"{entry.entity_type} {entry.entity_id}"
            )
            return None

    def record_delete(
        self,
        entity_type: AuditEntityType,
        entity_id: str,
        actor_id: str,
        before: Optional[dict[str, Any]] = None,
        reason: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        context: Optional[RequestContext] = None,
        actor: Optional[ActorInfo] = None,
    ) -> Optional[AuditLog]:
        """Record a deletion with the entity's last state."""
        return self.record(
            AuditLogCreate(
                action=AuditAction.DELETE,
                entity_type=entity_type,
                entity_id=str(entity_id),
                actor_id=str(actor_id),
                changes=AuditChanges(before=before) if before is not None else None,
                reason=reason,
                metadata=metadata or {},
            ),
            context,
            actor,
        )

    def record_create(
        self,
        entity_type: AuditEntityType,
        entity_id: str,
        actor_id: str,
        after: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
        context: Optional[RequestContext] = None,
    ) -> Optional[AuditLog]:
        """Record a creation with the entity's initial state."""
        return self.record(
            AuditLogCreate(
                action=AuditAction.CREATE,
                entity_type=entity_type,
                entity_id=str(entity_id),
                actor_id=str(actor_id),
                changes=AuditChanges(after=after) if after is not None else None,
                metadata=metadata or {},
            ),
            context,
        )

    def record_update(
        self,
        entity_type: AuditEntityType,
        entity_id: str,
        actor_id: str,
        before: dict[str, Any],
        after: dict[str, Any],
        fields: Optional[list[str]] = None,
        reason: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        context: Optional[RequestContext] = None,
    ) -> Optional[AuditLog]:
        """Record an update with both states and the names of the changed fields."""
        return self.record(
            AuditLogCreate(
                action=AuditAction.UPDATE,
                entity_type=entity_type,
                entity_id=str(entity_id),
                actor_id=str(actor_id),
                changes=AuditChanges(
                    before=before,
                    after=after,
                    fields=fields if fields is not None else changed_fields(before, after),
                ),
                reason=reason,
                metadata=metadata or {},
            ),
            context,
        )
