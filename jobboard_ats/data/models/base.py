"""
Shared building blocks for stored documents.

Documents keep ObjectIds as ObjectIds in Python and in MongoDB, and
render them as strings whenever they are dumped in JSON mode (API
responses, audit snapshots).
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import core_schema

# Stands in for a creation or update time missing from a stored document
EPOCH = datetime(1970, 1, 1)


def _coerce_object_id(value: Any) -> ObjectId:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"Not a valid identifier: {value!r}")


class PyObjectId(ObjectId):
    """ObjectId field type: accepts an ObjectId or its 24-char hex string."""

    @classmethod
    def __get_pydantic_core_schema__(cls, _source_type: Any, _handler: Any) -> Any:
        from_string = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(_coerce_object_id),
            ]
        )
        return core_schema.union_schema(
            [core_schema.is_instance_schema(ObjectId), from_string],
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )


class BaseDocument(BaseModel):
    """
    A document stored in its own collection.

    The MongoDB _id is exposed as ``id``; creation and update times are
    stamped by the repositories. Stored documents that lack them load
    with EPOCH, never with the load time.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def model_dump_mongo(self) -> dict[str, Any]:
        """Document as written to MongoDB; unset fields and a missing _id are left out."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe copy of the document, used for audit before/after states."""
        return self.model_dump(mode="json", exclude_none=True)


class EmbeddedModel(BaseModel):
    """Subdocument or partial-update schema without an identity of its own."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )
