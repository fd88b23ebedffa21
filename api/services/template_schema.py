"""Candidate data validation against a template schema.

A template schema is an ordered list of field definitions. Job templates own
one, job vacancies carry a copy of it, and every candidate's data must
conform to its vacancy's copy.

Validation stops at the first problem found: required/type checks in schema
order first, then unknown keys in record order.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from api.middleware.error_handler import ValidationAPIError


class FieldType(str, Enum):
    """Closed set of candidate data field kinds."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class FieldDefinition:
    """One candidate data field."""

    key: str
    type: str
    required: bool = False
    label: Optional[str] = None
    options: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_raw(cls, raw: "FieldDefinition | Mapping[str, Any] | Any") -> "FieldDefinition":
        """Build from a stored dict, a Pydantic model or another definition."""
        if isinstance(raw, FieldDefinition):
            return raw
        if not isinstance(raw, Mapping):
            raw = raw.model_dump()
        field_type = raw.get("type")
        if isinstance(field_type, FieldType):
            field_type = field_type.value
        return cls(
            key=raw.get("key", ""),
            type=field_type,
            required=bool(raw.get("required", False)),
            label=raw.get("label"),
            options=tuple(raw.get("options") or ()),
        )


# =====================
# Errors
# =====================


class CandidateDataError(ValidationAPIError):
    """Candidate data does not conform to the vacancy schema."""

    def __init__(self, message: str, key: str, **details: Any):
        self.key = key
        super().__init__(message, field=key, details=details)


class MissingRequiredField(CandidateDataError):
    def __init__(self, key: str):
        super().__init__(f"Field '{key}' is required", key, reason="required")


class InvalidType(CandidateDataError):
    def __init__(self, key: str, expected: str):
        self.expected = expected
        super().__init__(f"Field '{key}' must be a {expected}", key, reason="type", expected=expected)


class InvalidFormat(CandidateDataError):
    def __init__(self, key: str, expected: str):
        self.expected = expected
        super().__init__(
            f"Field '{key}' must be a valid {expected}",
            key,
            reason="format",
            expected=expected,
        )


class InvalidEnum(CandidateDataError):
    def __init__(self, key: str, allowed: Iterable[str]):
        self.allowed = list(allowed)
        super().__init__(
            f"Field '{key}' must be one of: {', '.join(self.allowed)}",
            key,
            reason="enum",
            allowed=self.allowed,
        )


class UnknownFieldType(CandidateDataError):
    def __init__(self, key: str, field_type: Any):
        self.field_type = field_type
        super().__init__(
            f"Unknown field type '{field_type}' for field '{key}'",
            key,
            reason="unknown_type",
            type=str(field_type),
        )


class UnknownField(CandidateDataError):
    def __init__(self, key: str):
        super().__init__(f"Field '{key}' is not defined in the schema", key, reason="unknown_field")


# =====================
# Per-type checks
# =====================


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _check_string(definition: FieldDefinition, value: Any) -> None:
    if not isinstance(value, str):
        raise InvalidType(definition.key, "string")


def _check_email(definition: FieldDefinition, value: Any) -> None:
    if not isinstance(value, str) or not EMAIL_PATTERN.fullmatch(value):
        raise InvalidFormat(definition.key, "email")


def _check_number(definition: FieldDefinition, value: Any) -> None:
    # bool is an int subclass but not a number here
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise InvalidType(definition.key, "number")


def parse_date(value: str) -> datetime | date:
    """Parse an ISO-8601 date or datetime string, accepting a trailing Z."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return date.fromisoformat(text)


def _check_date(definition: FieldDefinition, value: Any) -> None:
    if isinstance(value, (date, datetime)):
        return
    if isinstance(value, str):
        try:
            parse_date(value)
            return
        except ValueError:
            pass
    raise InvalidFormat(definition.key, "date")


def _check_select(definition: FieldDefinition, value: Any) -> None:
    if not definition.options or value not in definition.options:
        raise InvalidEnum(definition.key, definition.options)


TYPE_CHECKS = {
    FieldType.TEXT.value: _check_string,
    FieldType.TEXTAREA.value: _check_string,
    FieldType.EMAIL.value: _check_email,
    FieldType.NUMBER.value: _check_number,
    FieldType.DATE.value: _check_date,
    FieldType.SELECT.value: _check_select,
}


def validate_field_value(definition: FieldDefinition, value: Any) -> None:
    """Type-check one present value against its definition."""
    check = TYPE_CHECKS.get(definition.type)
    if check is None:
        raise UnknownFieldType(definition.key, definition.type)
    check(definition, value)


def validate_candidate_data(record: Mapping[str, Any], schema: Iterable[Any]) -> None:
    """
    Validate a candidate data record against a template schema.

    Args:
        record: Field key -> value mapping submitted for a candidate
        schema: Ordered field definitions (dicts, Pydantic models or FieldDefinition)

    Raises:
        CandidateDataError: The first failure found (see module docstring)
    """
    definitions = [FieldDefinition.from_raw(raw) for raw in (schema or [])]
    if not definitions:
        return

    for definition in definitions:
        value = record.get(definition.key)
        if _is_blank(value):
            if definition.required:
                raise MissingRequiredField(definition.key)
            continue
        validate_field_value(definition, value)

    known_keys = {definition.key for definition in definitions}
    for key in record:
        if key not in known_keys:
            raise UnknownField(key)


def snapshot_schema(schema: Iterable[Any]) -> list[dict[str, Any]]:
    """
    Copy a schema by value into plain dicts for storage on a vacancy.

    The result shares no objects with the input, so later edits to the
    source template cannot leak into the copy.
    """
    snapshot = []
    for raw in schema or []:
        definition = FieldDefinition.from_raw(raw)
        entry: dict[str, Any] = {
            "key": definition.key,
            "type": definition.type,
            "required": definition.required,
        }
        if definition.label is not None:
            entry["label"] = definition.label
        if definition.options:
            entry["options"] = list(definition.options)
        snapshot.append(entry)
    return snapshot
