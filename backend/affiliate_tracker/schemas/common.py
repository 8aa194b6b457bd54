"""
Affiliate Tracker Backend: Shared Response Envelopes
====================================================

What:  Envelope and error models shared by every route, plus the helper that
       turns Pydantic validation errors into the uniform violation list.

Envelope contract:
    success → {"success": true, "message"?: str, <payload name>: ...}
    failure → {"success": false, "error": str}
    invalid → {"success": false, "errors": [{"field": str, "message": str}]}
"""

from typing import Any, Dict, Iterable, List

from pydantic import AliasChoices, BaseModel, Field


class FieldViolation(BaseModel):
    """One failed rule: which field, and what was wrong with it."""
    field: str = Field(description="Dotted path of the offending field ('body' for the whole payload)")
    message: str = Field(description="Human-readable description of the violation")


class ErrorResponse(BaseModel):
    """
    Standard failure body.

    Example:
        {"success": false, "error": "Platform not found"}
    """
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error description")


class ValidationErrorResponse(BaseModel):
    """
    Failure body for rejected input. Lists every violation, not just the first.

    Example:
        {"success": false, "errors": [{"field": "password", "message": "..."}]}
    """
    success: bool = Field(default=False)
    errors: List[FieldViolation]


class MessageResponse(BaseModel):
    """Success body carrying only a message (e.g. after a delete)."""
    success: bool = Field(default=True)
    message: str


class HealthResponse(BaseModel):
    """Returned by GET /health for container probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


def violations_from_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten Pydantic error dicts into `[{"field", "message"}]`.

    The leading location segment ("body", "query", "path") is dropped so the
    field name matches what the client sent. A location made only of
    positions (a JSON decode error) is reported as "body". Messages from
    custom validators lose Pydantic's "Value error, " prefix.
    """
    violations: List[Dict[str, str]] = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in {"body", "query", "path", "header"}:
            loc = loc[1:]
        # Malformed JSON reports a character offset, not a field
        if all(isinstance(part, int) for part in loc):
            loc = []
        loc = [str(part) for part in loc]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        violations.append({"field": ".".join(loc) or "body", "message": message})
    return violations


def wire_name(python_name: str, camel_name: str, **kwargs: Any) -> Any:
    """
    Field whose JSON name is camelCase but which is also readable by its
    Python name (ORM attributes, keyword construction).

    FastAPI dumps response models by alias and validates the result again,
    so response fields must accept the camelCase name on input too.
    """
    return Field(
        validation_alias=AliasChoices(python_name, camel_name),
        serialization_alias=camel_name,
        **kwargs,
    )
