"""
Database connection manager for the Jobboard ATS.

Provides MongoDB connection management on top of PyMongo. One manager is
created per process (or worker) and handed explicitly to every repository;
nothing in the data layer looks a connection up from module state.
"""

from contextlib import contextmanager
from typing import Any, Optional
from urllib.parse import quote_plus

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from jobboard_ats.utils.config import DatabaseSettings, get_settings
from jobboard_ats.utils.constants import (
    APPLICATIONS_COLLECTION,
    AUDIT_LOGS_COLLECTION,
    COMPANIES_COLLECTION,
    CVS_COLLECTION,
    JOBS_COLLECTION,
    SAVED_SEARCHES_COLLECTION,
    USERS_COLLECTION,
    InteractionOrigin,
)
from jobboard_ats.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """
    Owns the MongoDB client for one process.

    Lifecycle: construct once at startup, call check_connection() before
    serving, share the instance with every repository, close() on shutdown.
    """

    def __init__(
        self,
        settings: Optional[DatabaseSettings] = None,
        client: Optional[MongoClient] = None,
    ) -> None:
        """
        Initialize the manager.

        Args:
            settings: Database settings; defaults to the application settings
            client: Pre-built client (tests, or a caller-managed pool)
        """
        self._settings = settings or get_settings().database
        self._db_name = self._settings.name
        self._client: Optional[MongoClient] = client

    def _build_uri(self) -> str:
        """
        Build MongoDB connection URI from settings.

        Security: URL-encodes credentials to prevent injection attacks.
        """
        if self._settings.uri:
            return self._settings.uri.strip()

        # Validate host to prevent injection
        host = self._settings.host.strip()
        if not host or any(c in host for c in [";", "&", "|", "$", "`"]):
            raise ValueError(f"Invalid database host: {host}")

        auth = ""
        if self._settings.username and self._settings.password:
            encoded_user = quote_plus(self._settings.username)
            encoded_pass = quote_plus(self._settings.password)
            auth = f"{encoded_user}:{encoded_pass}@"

        return f"mongodb://{auth}{host}:{self._settings.port}"

    # -------------------------------------------------------------------------
    # Client Access
    # -------------------------------------------------------------------------

    @property
    def client(self) -> MongoClient:
        """Get or create the MongoDB client."""
        if self._client is None:
            logger.info("Creating MongoDB client")
            self._client = MongoClient(
                self._build_uri(),
                serverSelectionTimeoutMS=self._settings.server_selection_timeout_ms,
                connectTimeoutMS=self._settings.connect_timeout_ms,
                timeoutMS=self._settings.operation_timeout_ms,
                maxPoolSize=self._settings.max_pool_size,
                minPoolSize=self._settings.min_pool_size,
            )
        return self._client

    @property
    def database(self) -> Database:
        """Get the application database."""
        return self.client[self._db_name]

    def get_collection(self, collection_name: str) -> Collection:
        """Get a collection by name."""
        return self.database[collection_name]

    @contextmanager
    def session(self):
        """Context manager for a client session."""
        session: ClientSession = self.client.start_session()
        try:
            yield session
        finally:
            session.end_session()

    def check_connection(self) -> bool:
        """Ping the server; drop the client so the next call reconnects on failure."""
        try:
            self.client.admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Connection check failed: {e}")
            self.close()
            return False
        except PyMongoError as e:
            logger.error(f"Unexpected connection error: {e}")
            self.close()
            return False

    # -------------------------------------------------------------------------
    # Lifecycle Management
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the client connection pool."""
        if self._client is not None:
            logger.info("Closing MongoDB client")
            self._client.close()
            self._client = None

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Index Management
    # -------------------------------------------------------------------------

    def ensure_indexes(self) -> None:
        """Create indexes for all collections."""
        logger.info("Ensuring database indexes")

        applications = self.get_collection(APPLICATIONS_COLLECTION)
        # A candidate applies to a given posting at most once; records without
        # a job_id never take part in this constraint
        applications.create_index(
            [("job_id", ASCENDING), ("candidate_id", ASCENDING)],
            name="uniq_job_candidate",
            unique=True,
            partialFilterExpression={"job_id": {"$type": "objectId"}},
        )
        # A recruiter contacts a given candidate at most once, whatever the job
        applications.create_index(
            [("recruiter_id", ASCENDING), ("candidate_id", ASCENDING)],
            name="uniq_recruiter_candidate_contact",
            unique=True,
            partialFilterExpression={"origin": InteractionOrigin.CONTACT.value},
        )
        applications.create_index([("recruiter_id", ASCENDING), ("status", ASCENDING)])
        applications.create_index("candidate_id")
        applications.create_index([("status", ASCENDING), ("applied_at", DESCENDING)])
        applications.create_index([("last_activity_at", DESCENDING)])

        audit_logs = self.get_collection(AUDIT_LOGS_COLLECTION)
        audit_logs.create_index([("created_at", DESCENDING)])
        audit_logs.create_index([("actor.actor_id", ASCENDING), ("created_at", DESCENDING)])
        audit_logs.create_index([("entity_type", ASCENDING), ("entity_id", ASCENDING)])
        audit_logs.create_index([("action", ASCENDING), ("created_at", DESCENDING)])

        jobs = self.get_collection(JOBS_COLLECTION)
        jobs.create_index("recruiter")
        jobs.create_index("company_id")
        jobs.create_index([("published", ASCENDING), ("created_at", DESCENDING)])

        saved_searches = self.get_collection(SAVED_SEARCHES_COLLECTION)
        saved_searches.create_index([("user_id", ASCENDING), ("active", ASCENDING)])
        saved_searches.create_index(
            [("active", ASCENDING), ("frequency", ASCENDING), ("last_sent", ASCENDING)]
        )

        self.get_collection(CVS_COLLECTION).create_index("job_seeker")
        self.get_collection(COMPANIES_COLLECTION).create_index("owner")
        self.get_collection(USERS_COLLECTION).create_index("email", unique=True)

        logger.info("Database indexes created successfully")
