"""Input schema validation shared by the core services."""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from jobboard_ats.core.exceptions import InvalidArgumentError

M = TypeVar("M", bound=BaseModel)


def parse_input(schema: type[M], payload: Any) -> M:
    """
    Validate a request body against its schema before anything is mutated.

    Raises:
        InvalidArgumentError: Naming the first offending field
    """
    if isinstance(payload, schema):
        return payload
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InvalidArgumentError(f"Invalid input: {first['msg']}", field=field) from e
