from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import CreateBook, UpdateBook


class ValidationMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


SCHEMAS: dict[ValidationMode, type[BaseModel]] = {
    ValidationMode.CREATE: CreateBook,
    ValidationMode.UPDATE: UpdateBook,
}


def describe_errors(errors: Iterable[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into JSON-safe ``{field, type, message}`` entries."""
    described = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        described.append(
            {
                "field": ".".join(loc),
                "type": str(error.get("type", "value_error")),
                "message": str(error.get("msg", "Invalid value")),
            }
        )
    return described


def validate(payload: Any, mode: ValidationMode) -> dict[str, Any]:
    """Check a book payload against the schema for ``mode``.

    Returns only the validated fields. Raises ``ValidationError`` carrying every
    violation (missing, mistyped, out of range or unknown fields).
    """
    schema = SCHEMAS[ValidationMode(mode)]
    if not isinstance(payload, dict):
        raise ValidationError(
            "Book payload must be a JSON object",
            details=[{"field": "", "type": "dict_type", "message": "Input should be an object"}],
        )
    try:
        model = schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(details=describe_errors(exc.errors())) from exc
    return model.model_dump(exclude_unset=True)
