"""
Base model and shared field types for the chat completion wire format.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    ValidationInfo,
    ValidationError,
)

from chatwire.errors import DecodeError


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC, never host-local time
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _from_epoch(value: Any) -> Any:
    """Convert a Unix timestamp in whole seconds to an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.microsecond:
            raise ValueError("timestamp must be whole seconds")
        return _as_utc(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("expected a Unix timestamp in whole seconds")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"timestamp out of range: {value}") from e


def _to_epoch(value: datetime) -> int:
    return int(_as_utc(value).timestamp())


# Unix epoch seconds on the wire, datetime in memory
EpochDatetime = Annotated[
    datetime,
    BeforeValidator(_from_epoch),
    PlainSerializer(_to_epoch, return_type=int),
]


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


# Validation context marking data decoded through from_wire or from_json
WIRE_CONTEXT = {"wire": True}


def from_the_wire(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get("wire"))


class WireModel(BaseModel):
    """
    Base class for every entity exchanged with the chat completion API.

    Encoding omits optional fields that are unset and applies wire aliases.
    Decoding failures are reported as DecodeError instead of pydantic's
    ValidationError so callers only deal with one error family.
    """

    model_config = ConfigDict(populate_by_name=True)

    def check_invariants(self) -> None:
        """Raise InvariantViolation when the entity cannot be put on the wire."""
        for name in type(self).model_fields:
            _check_nested(getattr(self, name))

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-compatible dict sent over the wire."""
        self.check_invariants()
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        """Return the wire form as JSON text."""
        self.check_invariants()
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    @classmethod
    def from_wire(cls, data: Any):
        """Decode an already-parsed JSON value."""
        try:
            return cls.model_validate(data, context=WIRE_CONTEXT)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid {cls.__name__}: {_format_validation_error(e)}",
                context=_error_context(cls, e),
            ) from e

    @classmethod
    def from_json(cls, text: Union[str, bytes]):
        """Decode JSON text."""
        try:
            return cls.model_validate_json(text, context=WIRE_CONTEXT)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid {cls.__name__}: {_format_validation_error(e)}",
                context=_error_context(cls, e),
            ) from e


def _error_context(cls: type, error: ValidationError) -> str:
    errors = error.errors()
    if errors and errors[0]["loc"]:
        return ".".join(str(loc) for loc in errors[0]["loc"])
    return cls.__name__


def _check_nested(value: Any) -> None:
    if isinstance(value, WireModel):
        value.check_invariants()
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_nested(item)
    elif isinstance(value, dict):
        for item in value.values():
            _check_nested(item)
