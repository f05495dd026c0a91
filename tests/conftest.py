"""
Shared test fixtures for the Jobboard ATS test suite.

Sets environment variables before any package imports to prevent config
failures, then provides an in-memory MongoDB double, repositories bound to
it, and factory fixtures for users, jobs, CVs, companies and saved searches.
"""

import os

# === Set environment BEFORE any package imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "jobboard_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")

import copy
import threading
from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Any, Optional

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from jobboard_ats.core.identity import CallerIdentity
from jobboard_ats.core.tracking import ApplicationService
from jobboard_ats.data.database import DatabaseManager
from jobboard_ats.data.models import CV, Company, JobPosting, SavedSearch, User
from jobboard_ats.data.repositories import (
    ApplicationRepository,
    AuditRepository,
    CompanyRepository,
    CVRepository,
    JobRepository,
    SavedSearchRepository,
    UserRepository,
)
from jobboard_ats.services.notifications import (
    DeliveryResult,
    Notification,
    NotificationSender,
)
from jobboard_ats.utils.config import (
    AppSettings,
    DatabaseSettings,
    NotificationSettings,
    SchedulerSettings,
)
from jobboard_ats.utils.constants import AlertFrequency, UserRole


# ---------------------------------------------------------------------------
# In-memory MongoDB double
# ---------------------------------------------------------------------------

_MISSING = object()


def _get_path(document: dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _matches_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
        for op, operand in condition.items():
            present = None if value is _MISSING else value
            if op == "$ne":
                if present == operand:
                    return False
            elif op == "$in":
                if present not in operand:
                    return False
            elif op == "$gte":
                if present is None or present < operand:
                    return False
            elif op == "$lte":
                if present is None or present > operand:
                    return False
            elif op == "$type":
                if operand != "objectId" or not isinstance(present, ObjectId):
                    return False
            else:
                raise NotImplementedError(f"Operator {op} not supported by the test double")
        return True

    if condition is None:
        return value is _MISSING or value is None
    if isinstance(value, list) and not isinstance(condition, list):
        return condition in value
    return value is not _MISSING and value == condition


def matches_query(document: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(
        _matches_condition(_get_path(document, key), condition)
        for key, condition in query.items()
    )


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]):
        self._documents = documents

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        def sort_key(doc: dict[str, Any]) -> tuple[bool, Any]:
            value = _get_path(doc, key)
            value = None if value is _MISSING else value
            return (value is not None, value if value is not None else 0)

        self._documents = sorted(self._documents, key=sort_key, reverse=direction < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._documents = self._documents[:count]
        return self

    def __iter__(self):
        return iter(self._documents)


class FakeCollection:
    """Collection double honouring unique (partial) indexes and conditional updates."""

    def __init__(self, name: str):
        self.name = name
        self.documents: list[dict[str, Any]] = []
        self.unique_indexes: list[tuple[list[str], dict[str, Any]]] = []
        self.index_names: list[str] = []
        self._lock = threading.RLock()

    def create_index(self, keys: Any, name: Optional[str] = None, unique: bool = False,
                     partialFilterExpression: Optional[dict[str, Any]] = None, **kwargs: Any) -> str:
        fields = [keys] if isinstance(keys, str) else [k for k, _ in keys]
        index_name = name or "_".join(fields)
        self.index_names.append(index_name)
        if unique:
            self.unique_indexes.append((fields, partialFilterExpression or {}))
        return index_name

    def _check_unique(self, candidate: dict[str, Any]) -> None:
        for existing in self.documents:
            if existing["_id"] == candidate["_id"]:
                raise DuplicateKeyError("E11000 duplicate key error: _id", 11000)
        for fields, partial in self.unique_indexes:
            if not matches_query(candidate, partial):
                continue
            key = [_get_path(candidate, f) for f in fields]
            for existing in self.documents:
                if matches_query(existing, partial) and [_get_path(existing, f) for f in fields] == key:
                    raise DuplicateKeyError(f"E11000 duplicate key error: {fields}", 11000)

    def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        with self._lock:
            stored = copy.deepcopy(document)
            stored.setdefault("_id", ObjectId())
            self._check_unique(stored)
            self.documents.append(stored)
            return SimpleNamespace(inserted_id=stored["_id"])

    def find(self, query: Optional[dict[str, Any]] = None) -> FakeCursor:
        with self._lock:
            return FakeCursor(
                [copy.deepcopy(d) for d in self.documents if matches_query(d, query or {})]
            )

    def find_one(self, query: Optional[dict[str, Any]] = None) -> Optional[dict[str, Any]]:
        with self._lock:
            for document in self.documents:
                if matches_query(document, query or {}):
                    return copy.deepcopy(document)
            return None

    def find_one_and_update(self, query: dict[str, Any], update: dict[str, Any],
                            return_document: Any = False, **kwargs: Any) -> Optional[dict[str, Any]]:
        with self._lock:
            for document in self.documents:
                if matches_query(document, query):
                    before = copy.deepcopy(document)
                    document.update(copy.deepcopy(update.get("$set", {})))
                    return copy.deepcopy(document) if return_document else before
            return None

    def count_documents(self, query: dict[str, Any], limit: int = 0) -> int:
        with self._lock:
            count = sum(1 for d in self.documents if matches_query(d, query))
            return min(count, limit) if limit else count

    def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        with self._lock:
            for index, document in enumerate(self.documents):
                if matches_query(document, query):
                    del self.documents[index]
                    return SimpleNamespace(deleted_count=1)
            return SimpleNamespace(deleted_count=0)

    def delete_many(self, query: dict[str, Any]) -> SimpleNamespace:
        with self._lock:
            kept = [d for d in self.documents if not matches_query(d, query)]
            deleted = len(self.documents) - len(kept)
            self.documents = kept
            return SimpleNamespace(deleted_count=deleted)


class FakeDatabase:
    def __init__(self):
        self._collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]


class FakeMongoClient:
    def __init__(self):
        self._databases: dict[str, FakeDatabase] = {}
        self.admin = SimpleNamespace(command=lambda *args, **kwargs: {"ok": 1.0})
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self._databases:
            self._databases[name] = FakeDatabase()
        return self._databases[name]

    def close(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Notification senders
# ---------------------------------------------------------------------------


class RecordingNotificationSender(NotificationSender):
    """Sender that accepts every notification and keeps it for assertions."""

    def __init__(self):
        self.sent: list[Notification] = []

    def send(self, notification: Notification) -> DeliveryResult:
        self.sent.append(notification)
        return DeliveryResult(success=True)


class FailingNotificationSender(NotificationSender):
    """Sender whose deliveries always fail, by result or by exception."""

    def __init__(self, raise_error: bool = False):
        self.raise_error = raise_error
        self.attempts: list[Notification] = []

    def send(self, notification: Notification) -> DeliveryResult:
        self.attempts.append(notification)
        if self.raise_error:
            raise ConnectionError("SMTP relay unreachable")
        return DeliveryResult(success=False, error="mailbox unavailable")


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db_settings():
    return DatabaseSettings(name="jobboard_test")


@pytest.fixture
def fake_client():
    return FakeMongoClient()


@pytest.fixture
def db_manager(db_settings, fake_client):
    """Database manager bound to the in-memory client, with indexes in place."""
    manager = DatabaseManager(settings=db_settings, client=fake_client)
    manager.ensure_indexes()
    return manager


@pytest.fixture
def repos(db_manager):
    return SimpleNamespace(
        applications=ApplicationRepository(db_manager),
        jobs=JobRepository(db_manager),
        users=UserRepository(db_manager),
        cvs=CVRepository(db_manager),
        companies=CompanyRepository(db_manager),
        saved_searches=SavedSearchRepository(db_manager),
        audit=AuditRepository(db_manager),
    )


@pytest.fixture
def notifier():
    return RecordingNotificationSender()


@pytest.fixture
def failing_sender():
    """Factory for senders whose deliveries fail."""
    return FailingNotificationSender


@pytest.fixture
def notification_settings():
    return NotificationSettings(enabled=True, base_url="https://jobs.example.com/")


@pytest.fixture
def app_settings(notification_settings):
    return AppSettings(
        environment="testing",
        notifications=notification_settings,
        scheduler=SchedulerSettings(cron_secret="s3cret-cron-token"),
    )


@pytest.fixture
def service(repos, notifier, notification_settings):
    return ApplicationService(
        applications=repos.applications,
        jobs=repos.jobs,
        users=repos.users,
        cvs=repos.cvs,
        notifier=notifier,
        settings=notification_settings,
    )


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


def caller_for(user: User) -> CallerIdentity:
    return CallerIdentity(user_id=str(user.id), role=user.role)


@pytest.fixture
def as_caller():
    """Factory turning a stored user into the caller identity it would authenticate as."""
    return caller_for


@pytest.fixture
def make_user(repos):
    counter = {"n": 0}

    def _factory(role: UserRole = UserRole.JOB_SEEKER, **kwargs: Any) -> User:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "email": f"user{n}@example.com",
            "name": f"User {n}",
            "role": role,
        }
        data.update(kwargs)
        return repos.users.create(User(**data))

    return _factory


@pytest.fixture
def make_job(repos):
    def _factory(recruiter: Optional[User] = None, **kwargs: Any) -> JobPosting:
        data: dict[str, Any] = {
            "title": "Kitesurf Instructor",
            "description": "Teach beginners and intermediates",
            "company": "Tarifa Kite Center",
            "location": "Tarifa, Andalusia",
            "country": "ES",
            "sports": ["Kitesurfing"],
            "languages": ["English", "Spanish"],
            "occupational_areas": ["Instruction"],
            "published": True,
            "recruiter": recruiter.id if recruiter is not None else None,
        }
        data.update(kwargs)
        created_at = data.pop("created_at", None)
        job = repos.jobs.create(JobPosting(**data))
        if created_at is not None:
            # create() stamps the current time; backdate for ordering tests
            job = repos.jobs.update(job.id, {"created_at": created_at})
        return job

    return _factory


@pytest.fixture
def make_cv(repos):
    def _factory(job_seeker: User, **kwargs: Any) -> CV:
        data: dict[str, Any] = {
            "job_seeker": job_seeker.id,
            "full_name": job_seeker.name,
            "summary": "Certified IKO instructor with five seasons of experience",
            "languages": ["English"],
        }
        data.update(kwargs)
        return repos.cvs.create(CV(**data))

    return _factory


@pytest.fixture
def make_company(repos):
    def _factory(owner: Optional[User] = None, **kwargs: Any) -> Company:
        data: dict[str, Any] = {
            "name": "Tarifa Kite Center",
            "website": "https://tarifa-kite.example.com",
            "owner": owner.id if owner is not None else None,
        }
        data.update(kwargs)
        return repos.companies.create(Company(**data))

    return _factory


@pytest.fixture
def make_search(repos):
    def _factory(user: User, **kwargs: Any) -> SavedSearch:
        data: dict[str, Any] = {
            "user_id": user.id,
            "name": "Kite jobs in Spain",
            "frequency": AlertFrequency.DAILY,
        }
        data.update(kwargs)
        last_sent = data.pop("last_sent", None)
        search = repos.saved_searches.create(SavedSearch(**data))
        if last_sent is not None:
            search = repos.saved_searches.update(search.id, {"last_sent": last_sent})
        return search

    return _factory


# ---------------------------------------------------------------------------
# Common scenario fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def recruiter(make_user):
    return make_user(UserRole.RECRUITER, name="Rita Recruiter", email="rita@kite.example.com")


@pytest.fixture
def candidate(make_user, make_cv):
    user = make_user(UserRole.JOB_SEEKER, name="Carlos Candidate", email="carlos@example.com")
    make_cv(user)
    return user


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, name="Ada Admin", email="ada@jobboard.example.com")


@pytest.fixture
def job(make_job, recruiter):
    return make_job(recruiter)


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def an_hour_ago(now):
    return now - timedelta(hours=1)
