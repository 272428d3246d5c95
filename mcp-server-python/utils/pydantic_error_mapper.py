"""Convert Pydantic validation errors to the project ToolError contract."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from models.errors import ToolError, create_validation_error

ModelT = TypeVar("ModelT", bound=BaseModel)


def _loc_to_field(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part != "__root__"]
    return ".".join(parts)


def _clean_pydantic_message(message: str) -> str:
    if message.startswith("Value error, "):
        return message[len("Value error, ") :]
    return message


def _describe_issue(issue: dict[str, Any]) -> str:
    field = _loc_to_field(issue.get("loc", ()))
    message = _clean_pydantic_message(issue.get("msg", "Invalid input"))

    if issue.get("type") == "extra_forbidden":
        return f"Unknown field: {field}"
    # Custom validators already name the field ("Invalid logoUrl: ...").
    if not field or message.startswith("Invalid "):
        return message
    return f"Invalid {field}: {message}"


def map_pydantic_validation_error(error: ValidationError) -> ToolError:
    """
    Map a Pydantic ValidationError to a VALIDATION_ERROR ToolError.

    Every issue is reported, joined with "; ", in the order Pydantic found
    them.
    """
    issues = error.errors()
    if not issues:
        return create_validation_error("Invalid input")

    return create_validation_error("; ".join(_describe_issue(issue) for issue in issues))


def validate_request(model_cls: type[ModelT], args: dict[str, Any]) -> ModelT:
    """Validate tool arguments, raising a VALIDATION_ERROR ToolError on failure."""
    try:
        return model_cls.model_validate(args)
    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e
