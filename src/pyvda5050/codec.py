"""Whole-message decode/encode.

Payloads are parsed with :func:`json.loads` (exact big integers, so
64-bit overflow is detectable) and validated with pydantic.  Every
failure is raised as a :class:`~pyvda5050.exceptions.VdaDecodeError`
subclass carrying the dotted JSON location of the offending field.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pyvda5050._constants import UINT32_MAX, UINT64_MAX
from pyvda5050.exceptions import (
    VdaDecodeError,
    VdaInvalidEnumError,
    VdaMissingFieldError,
    VdaOverflowError,
    VdaTypeMismatchError,
)
from pyvda5050.models.connection import Connection
from pyvda5050.models.factsheet import Factsheet
from pyvda5050.models.header import MessageKind, VdaMessage
from pyvda5050.models.instant_actions import InstantActions
from pyvda5050.models.order import Order
from pyvda5050.models.state import State
from pyvda5050.models.visualization import Visualization

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

MESSAGE_MODELS: dict[MessageKind, type[VdaMessage]] = {
    MessageKind.ORDER: Order,
    MessageKind.INSTANT_ACTIONS: InstantActions,
    MessageKind.STATE: State,
    MessageKind.VISUALIZATION: Visualization,
    MessageKind.CONNECTION: Connection,
    MessageKind.FACTSHEET: Factsheet,
}

# Upper bounds of the unsigned integer field types.
_UNSIGNED_LIMITS = frozenset({UINT64_MAX, UINT32_MAX})


# ------------------------------------------------------------------
# Error translation
# ------------------------------------------------------------------


def _format_location(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _translate_error(error: Mapping[str, Any]) -> VdaDecodeError:
    """Map one pydantic error entry to the matching decode error."""
    location = _format_location(tuple(error.get("loc", ())))
    err_type = error.get("type", "")
    ctx = error.get("ctx") or {}
    message = error.get("msg", "invalid value")

    if err_type == "missing":
        return VdaMissingFieldError("required field is missing", location=location)
    if err_type == "enum":
        return VdaInvalidEnumError(f"{error.get('input')!r} is not a valid token", location=location)
    if err_type == "value_error":
        cause = ctx.get("error")
        if isinstance(cause, VdaDecodeError):
            return type(cause)(str(cause), location=location)
    if err_type == "less_than_equal" and ctx.get("le") in _UNSIGNED_LIMITS:
        return VdaOverflowError(f"{error.get('input')!r} exceeds {ctx['le']}", location=location)
    if err_type == "greater_than_equal" and ctx.get("ge") == 0 and isinstance(error.get("input"), int):
        return VdaOverflowError(f"{error.get('input')!r} is negative for an unsigned field", location=location)
    return VdaTypeMismatchError(message, location=location)


def _translate_validation_error(exc: ValidationError) -> VdaDecodeError:
    """Return the decode error for the first reported problem.

    The remaining problems are only logged; the message is rejected as
    a whole either way.
    """
    errors = exc.errors()
    if len(errors) > 1:
        _logger.debug("%s: %d validation errors, reporting the first", exc.title, len(errors))
    return _translate_error(errors[0])


# ------------------------------------------------------------------
# Decode
# ------------------------------------------------------------------


def _reject_constant(token: str) -> Any:
    raise VdaTypeMismatchError(f"{token} is not a JSON value")


def load_json(payload: bytes | str) -> Any:
    """Parse a JSON document, rejecting ``NaN``/``Infinity`` literals."""
    try:
        return json.loads(payload, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise VdaTypeMismatchError(f"invalid JSON: {exc.msg} (pos {exc.pos})") from exc
    except UnicodeDecodeError as exc:
        raise VdaTypeMismatchError(f"payload is not valid UTF-8: {exc.reason}") from exc


def decode_model(model_cls: type[ModelT], payload: bytes | str | Mapping[str, Any]) -> ModelT:
    """Decode *payload* into *model_cls*.

    Works for message models and for nested objects alike (an
    ``Action`` taken on its own, for example).
    """
    data = load_json(payload) if isinstance(payload, bytes | str) else payload
    if not isinstance(data, Mapping):
        raise VdaTypeMismatchError(f"expected a JSON object, got {type(data).__name__}")
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise _translate_validation_error(exc) from exc


def model_for(kind: MessageKind | str) -> type[VdaMessage]:
    """Return the model class for a message kind (topic name)."""
    try:
        return MESSAGE_MODELS[MessageKind(kind)]
    except ValueError:
        allowed = ", ".join(member.value for member in MessageKind)
        raise VdaInvalidEnumError(f"{kind!r} is not a message kind (expected one of {allowed})") from None


def decode_message(kind: MessageKind | str, payload: bytes | str | Mapping[str, Any]) -> VdaMessage:
    """Decode one message of the given *kind*.

    Unknown optional fields are ignored; an unknown enum token, a
    missing required field, a mistyped or out-of-range value rejects
    the message.
    """
    return decode_model(model_for(kind), payload)


# ------------------------------------------------------------------
# Encode
# ------------------------------------------------------------------


def encode_message(message: BaseModel) -> bytes:
    """Encode a message (or nested model) as compact UTF-8 JSON."""
    wire = message.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(wire, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
