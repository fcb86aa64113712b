"""Base model and enum for VDA 5050 messages.

Every message model inherits from :class:`VdaBaseModel` which provides:

* ``alias_generator=to_camel`` so the lowerCamelCase wire keys map
  automatically to snake_case fields.
* ``extra="ignore"`` so unknown optional fields from newer protocol
  revisions are dropped instead of failing the message.
* ``frozen=True``: a message is immutable once built.
* :meth:`VdaBaseModel.to_wire` producing the canonical wire dict.

Enumerations inherit from :class:`VdaEnum`.  Unlike the tolerant reader
used for unknown fields, an unknown enum token is a hard failure; it is
never coerced to a default member.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import Annotated, Any, Self

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from pyvda5050._constants import UINT32_MAX, UINT64_MAX
from pyvda5050.exceptions import VdaInvalidEnumError

# ---------------------------------------------------------------------------
# Shared scalar types
# ---------------------------------------------------------------------------

UInt64 = Annotated[int, Field(ge=0, le=UINT64_MAX)]
"""Unsigned 64-bit integer (``headerId``, ``sequenceId``, ``orderUpdateId``)."""

UInt32 = Annotated[int, Field(ge=0, le=UINT32_MAX)]

HeaderId = UInt64


def ensure_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:mm:ss.sssZ``."""
    return ensure_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


VdaTimestamp = Annotated[
    datetime,
    AfterValidator(ensure_utc),
    PlainSerializer(format_timestamp, return_type=str),
]
"""ISO-8601 UTC timestamp, serialized with millisecond precision and ``Z``."""


class VdaEnum(enum.StrEnum):
    """Base for closed protocol enumerations.

    Members carry their SCREAMING_SNAKE_CASE wire token as value.
    """

    @classmethod
    def parse(cls, token: str) -> Self:
        """Return the member for *token* or raise :class:`VdaInvalidEnumError`."""
        try:
            return cls(token)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise VdaInvalidEnumError(f"{token!r} is not a valid {cls.__name__} (expected one of {allowed})") from None


class VdaBaseModel(BaseModel):
    """Base for all VDA 5050 message models and their nested objects."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-compatible wire dict.

        Keys are lowerCamelCase, absent optionals are omitted and enums
        are emitted as their tokens.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
