"""
Tests for jobboard_ats.core.audit.audit_logger.
"""

import pytest
from bson import ObjectId

from jobboard_ats.core.audit import AuditLogger, changed_fields
from jobboard_ats.core.identity import RequestContext
from jobboard_ats.data.models import AuditLogCreate
from jobboard_ats.utils.constants import AuditAction, AuditEntityType, UserRole


@pytest.fixture
def audit_logger(repos):
    return AuditLogger(repos.audit, repos.users)


class TestChangedFields:
    def test_reports_differing_keys_sorted(self):
        before = {"title": "Coach", "location": "Lisbon", "salary": None}
        after = {"title": "Head Coach", "location": "Lisbon", "salary": "40k"}
        assert changed_fields(before, after) == ["salary", "title"]

    def test_added_and_removed_keys(self):
        assert changed_fields({"a": 1}, {"b": 2}) == ["a", "b"]

    def test_updated_at_is_ignored(self):
        assert changed_fields({"updated_at": "x"}, {"updated_at": "y"}) == []


class TestRecord:
    def test_actor_is_denormalized(self, audit_logger, admin, repos):
        entity_id = str(ObjectId())
        stored = audit_logger.record(
            AuditLogCreate(
                action=AuditAction.DELETE,
                entity_type=AuditEntityType.JOB,
                entity_id=entity_id,
                actor_id=str(admin.id),
                reason="Spam posting",
            ),
            RequestContext(ip_address="203.0.113.7", user_agent="pytest"),
        )

        assert stored is not None
        assert stored.actor.actor_email == "ada@jobboard.example.com"
        assert stored.actor.actor_name == "Ada Admin"
        assert stored.actor.ip_address == "203.0.113.7"
        assert stored.actor.user_agent == "pytest"
        assert str(stored.entity_id) == entity_id
        assert stored.reason == "Spam posting"
        assert repos.audit.count({}) == 1

    def test_entry_survives_actor_deletion(self, audit_logger, make_user, repos):
        actor = make_user(UserRole.ADMIN, name="Temp Admin", email="temp@example.com")
        stored = audit_logger.record_delete(AuditEntityType.CV, str(ObjectId()), str(actor.id))
        repos.users.delete(actor.id)

        reloaded = repos.audit.get_by_id(stored.id)
        assert reloaded.actor.actor_name == "Temp Admin"
        assert reloaded.actor.actor_email == "temp@example.com"

    def test_missing_actor_skips_entry(self, audit_logger, repos):
        result = audit_logger.record_delete(AuditEntityType.JOB, str(ObjectId()), str(ObjectId()))
        assert result is None
        assert repos.audit.count({}) == 0

    def test_storage_failure_is_swallowed(self, audit_logger, admin, repos, monkeypatch):
        def broken_append(entry):
            raise RuntimeError("disk full")

        monkeypatch.setattr(repos.audit, "append", broken_append)
        result = audit_logger.record_delete(AuditEntityType.JOB, str(ObjectId()), str(admin.id))
        assert result is None

    def test_record_create_keeps_after_state(self, audit_logger, admin):
        stored = audit_logger.record_create(
            AuditEntityType.COMPANY,
            str(ObjectId()),
            str(admin.id),
            after={"name": "Surf Co"},
        )
        assert stored.action == "create"
        assert stored.changes.after == {"name": "Surf Co"}
        assert stored.changes.before is None

    def test_record_update_derives_fields(self, audit_logger, admin):
        stored = audit_logger.record_update(
            AuditEntityType.JOB,
            str(ObjectId()),
            str(admin.id),
            before={"title": "Coach", "featured": False},
            after={"title": "Coach", "featured": True},
        )
        assert stored.action == "update"
        assert stored.changes.fields == ["featured"]

    def test_record_update_explicit_fields(self, audit_logger, admin):
        stored = audit_logger.record_update(
            AuditEntityType.USER,
            str(ObjectId()),
            str(admin.id),
            before={"name": "A"},
            after={"name": "B"},
            fields=["name", "email"],
        )
        assert stored.changes.fields == ["name", "email"]


class TestResolveActor:
    def test_copies_details_and_context(self, audit_logger, admin):
        actor = audit_logger.resolve_actor(str(admin.id), RequestContext(ip_address="198.51.100.2"))
        assert actor.actor_id == admin.id
        assert actor.actor_name == "Ada Admin"
        assert actor.ip_address == "198.51.100.2"

    def test_unknown_actor(self, audit_logger):
        assert audit_logger.resolve_actor(str(ObjectId())) is None

    def test_pre_resolved_actor_outlives_the_account(self, audit_logger, make_user, repos):
        actor_user = make_user(UserRole.ADMIN, name="Leaving Admin", email="leaving@example.com")
        actor = audit_logger.resolve_actor(str(actor_user.id))
        repos.users.delete(actor_user.id)

        stored = audit_logger.record_delete(
            AuditEntityType.USER, str(actor_user.id), str(actor_user.id), actor=actor
        )

        assert stored is not None
        assert stored.actor.actor_email == "leaving@example.com"
        assert repos.audit.count({}) == 1
