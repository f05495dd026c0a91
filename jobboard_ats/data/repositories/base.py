"""
Base repository classes providing common database operations.

All entity-specific repositories inherit from one of these. Read and create
operations live on BaseRepository; update and delete live on
MutableRepository so that append-only collections never expose them.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Generic, Optional, TypeVar

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, ExecutionTimeout, WTimeoutError
from pymongo.results import DeleteResult, InsertOneResult

from jobboard_ats.core.exceptions import UnavailableError
from jobboard_ats.data.database import DatabaseManager
from jobboard_ats.data.models.base import EPOCH, BaseDocument
from jobboard_ats.utils.logger import get_logger

logger = get_logger(__name__)

# Type variable for document models
T = TypeVar("T", bound=BaseDocument)
F = TypeVar("F", bound=Callable[..., Any])

# Timeouts and lost connections; DuplicateKeyError and other
# OperationFailures are left for the caller to interpret
TRANSIENT_STORAGE_ERRORS = (ConnectionFailure, ExecutionTimeout, WTimeoutError)


def translate_storage_errors(func: F) -> F:
    """Surface storage timeouts and connection loss as a retryable UnavailableError."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TRANSIENT_STORAGE_ERRORS as e:
            logger.warning(f"Storage unavailable during {func.__qualname__}: {e}")
            raise UnavailableError("Storage is temporarily unavailable, please retry") from e

    return wrapper  # type: ignore[return-value]


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing read and create operations.

    Subclasses must define the collection name and model class.
    """

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Name of the MongoDB collection."""
        pass

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Pydantic model class for this repository."""
        pass

    def __init__(self, db_manager: DatabaseManager) -> None:
        """Initialize repository with an explicitly passed database manager."""
        self._db_manager = db_manager

    # -------------------------------------------------------------------------
    # Collection Access
    # -------------------------------------------------------------------------

    def _get_collection(self) -> Collection:
        """Get collection instance."""
        return self._db_manager.get_collection(self.collection_name)

    # -------------------------------------------------------------------------
    # Document Conversion
    # -------------------------------------------------------------------------

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[T]:
        """Convert MongoDB document to Pydantic model."""
        if document is None:
            return None
        missing = {f: EPOCH for f in ("created_at", "updated_at") if document.get(f) is None}
        if missing:
            document = {**document, **missing}
        return self.model_class.model_validate(document)

    def _to_models(self, documents: list[dict[str, Any]]) -> list[T]:
        """Convert list of MongoDB documents to Pydantic models."""
        return [self._to_model(doc) for doc in documents if doc is not None]

    def _to_document(self, model: T) -> dict[str, Any]:
        """Convert Pydantic model to MongoDB document."""
        return model.model_dump_mongo()

    @staticmethod
    def _to_object_id(id_value: str | ObjectId) -> ObjectId:
        """Convert string to ObjectId if needed."""
        if isinstance(id_value, ObjectId):
            return id_value
        return ObjectId(id_value)

    @staticmethod
    def is_valid_id(id_value: Any) -> bool:
        return isinstance(id_value, ObjectId) or (
            isinstance(id_value, str) and ObjectId.is_valid(id_value)
        )

    # -------------------------------------------------------------------------
    # Create / Read Operations
    # -------------------------------------------------------------------------

    @translate_storage_errors
    def create(self, model: T) -> T:
        """Create a new document. Unique index violations propagate as DuplicateKeyError."""
        collection = self._get_collection()
        now = datetime.utcnow()
        model.created_at = now
        model.updated_at = now
        document = self._to_document(model)

        result: InsertOneResult = collection.insert_one(document)
        model.id = result.inserted_id
        logger.debug(f"Created {self.collection_name} document: {result.inserted_id}")
        return model

    @translate_storage_errors
    def get_by_id(self, id_value: str | ObjectId) -> Optional[T]:
        """Get a document by its ID; malformed IDs simply find nothing."""
        if not self.is_valid_id(id_value):
            return None
        collection = self._get_collection()
        document = collection.find_one({"_id": self._to_object_id(id_value)})
        return self._to_model(document)

    @translate_storage_errors
    def find(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 0,
        sort_by: Optional[str] = None,
        sort_order: int = -1,
    ) -> list[T]:
        """Find documents matching a query. A limit of 0 means no limit."""
        collection = self._get_collection()
        cursor = collection.find(query)
        cursor = cursor.sort(sort_by or "created_at", sort_order)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return self._to_models(list(cursor))

    @translate_storage_errors
    def find_one(self, query: dict[str, Any]) -> Optional[T]:
        """Find a single document matching a query."""
        collection = self._get_collection()
        document = collection.find_one(query)
        return self._to_model(document)

    @translate_storage_errors
    def count(self, query: Optional[dict[str, Any]] = None) -> int:
        """Count documents matching a query."""
        collection = self._get_collection()
        return collection.count_documents(query or {})

    @translate_storage_errors
    def exists(self, query: dict[str, Any]) -> bool:
        """Check if any document matches the query."""
        collection = self._get_collection()
        return collection.count_documents(query, limit=1) > 0


class MutableRepository(BaseRepository[T]):
    """Repository for collections whose documents may be updated or deleted."""

    @translate_storage_errors
    def find_one_and_set(
        self,
        query: dict[str, Any],
        fields: dict[str, Any],
    ) -> Optional[T]:
        """
        Atomically $set fields on the first document matching the query.

        The query is evaluated at write time, so any condition it carries
        holds for the write. Returns the updated document, or None when
        nothing matched.
        """
        collection = self._get_collection()
        update_data = dict(fields)
        update_data["updated_at"] = datetime.utcnow()

        document = collection.find_one_and_update(
            query,
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        if document is not None:
            logger.debug(f"Updated {self.collection_name} document: {document.get('_id')}")
        return self._to_model(document)

    def update(self, id_value: str | ObjectId, fields: dict[str, Any]) -> Optional[T]:
        """Update a document by ID."""
        if not self.is_valid_id(id_value):
            return None
        return self.find_one_and_set({"_id": self._to_object_id(id_value)}, fields)

    @translate_storage_errors
    def delete(self, id_value: str | ObjectId) -> bool:
        """Delete a document by ID."""
        if not self.is_valid_id(id_value):
            return False
        collection = self._get_collection()
        result: DeleteResult = collection.delete_one({"_id": self._to_object_id(id_value)})
        if result.deleted_count > 0:
            logger.debug(f"Deleted {self.collection_name} document: {id_value}")
            return True
        return False

    @translate_storage_errors
    def delete_many(self, query: dict[str, Any]) -> int:
        """Delete every document matching the query; returns the number removed."""
        collection = self._get_collection()
        result: DeleteResult = collection.delete_many(query)
        logger.debug(f"Deleted {result.deleted_count} {self.collection_name} documents")
        return result.deleted_count
