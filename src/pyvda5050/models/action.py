"""Action model and the untagged action parameter value codec.

An action parameter value is "any JSON scalar" without a declared type,
so the receiver infers the variant from the wire value itself:

* boolean literal → :attr:`ValueKind.BOOLEAN`
* integral number that fits a signed 64-bit integer → :attr:`ValueKind.INTEGER`
* any other finite number → :attr:`ValueKind.FLOAT`
* string → :attr:`ValueKind.STRING`
* absent or ``null`` → :attr:`ValueKind.NULL`

Integral numbers outside the signed 64-bit range and non-finite floats
raise :class:`~pyvda5050.exceptions.VdaOverflowError`; arrays and objects
raise :class:`~pyvda5050.exceptions.VdaTypeMismatchError`.  Encoding
writes the natural JSON scalar with no wrapper or type tag.
"""

from __future__ import annotations

import enum
import json
import math
import numbers
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import Field, PlainSerializer, PlainValidator

from pyvda5050._constants import INT64_MAX, INT64_MIN
from pyvda5050.exceptions import VdaOverflowError, VdaTypeMismatchError
from pyvda5050.models._base import VdaBaseModel, VdaEnum

# ------------------------------------------------------------------
# Value codec
# ------------------------------------------------------------------


class ValueKind(enum.StrEnum):
    """Variant of an :class:`ActionParameterValue`."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"


_PYTHON_TYPES: dict[ValueKind, type | None] = {
    ValueKind.NULL: None,
    ValueKind.BOOLEAN: bool,
    ValueKind.INTEGER: int,
    ValueKind.FLOAT: float,
    ValueKind.STRING: str,
}


@dataclass(frozen=True, slots=True)
class ActionParameterValue:
    """Closed sum type over null, boolean, int64, float64 and string.

    Two values are equal only when both kind and payload are equal, so
    ``Integer(1)``, ``Float(1.0)`` and ``Boolean(True)`` are distinct.
    """

    kind: ValueKind
    value: bool | int | float | str | None = None

    def __post_init__(self) -> None:
        expected = _PYTHON_TYPES[self.kind]
        if expected is None:
            if self.value is not None:
                raise VdaTypeMismatchError(f"null value must not carry a payload, got {self.value!r}")
            return
        # bool is an int subclass; compare exact types.
        if type(self.value) is not expected:
            raise VdaTypeMismatchError(f"{self.kind} value must be {expected.__name__}, got {self.value!r}")
        if self.kind == ValueKind.INTEGER and not INT64_MIN <= self.value <= INT64_MAX:  # type: ignore[operator]
            raise VdaOverflowError(f"integer {self.value} does not fit in 64 bits signed")
        if self.kind == ValueKind.FLOAT and not math.isfinite(self.value):  # type: ignore[arg-type]
            raise VdaOverflowError(f"float {self.value!r} is not representable as a finite 64-bit float")

    @classmethod
    def null(cls) -> ActionParameterValue:
        return cls(ValueKind.NULL)

    @classmethod
    def from_bool(cls, value: bool) -> ActionParameterValue:
        return cls(ValueKind.BOOLEAN, value)

    @classmethod
    def from_int(cls, value: int) -> ActionParameterValue:
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def from_float(cls, value: float) -> ActionParameterValue:
        return cls(ValueKind.FLOAT, value)

    @classmethod
    def from_str(cls, value: str) -> ActionParameterValue:
        return cls(ValueKind.STRING, value)

    @property
    def is_null(self) -> bool:
        return self.kind == ValueKind.NULL

    def __repr__(self) -> str:
        if self.kind == ValueKind.NULL:
            return "ActionParameterValue.null()"
        return f"ActionParameterValue({self.kind.name}, {self.value!r})"


NULL_VALUE = ActionParameterValue.null()


def decode_value(wire: Any) -> ActionParameterValue:
    """Classify an already-parsed wire scalar into an :class:`ActionParameterValue`.

    The probe is structural: a Python ``str`` holding ``"42"`` stays a
    string.  Narrower numeric types (e.g. numpy ``int32``/``float32``)
    are widened to the 64-bit canonical form.
    """
    if isinstance(wire, ActionParameterValue):
        return wire
    if wire is None:
        return NULL_VALUE
    if isinstance(wire, bool):
        return ActionParameterValue.from_bool(wire)
    if isinstance(wire, numbers.Integral):
        as_int = int(wire)
        if not INT64_MIN <= as_int <= INT64_MAX:
            raise VdaOverflowError(f"integer literal {as_int} does not fit in 64 bits signed")
        return ActionParameterValue.from_int(as_int)
    if isinstance(wire, numbers.Real):
        return ActionParameterValue.from_float(float(wire))
    if isinstance(wire, str):
        return ActionParameterValue.from_str(wire)
    raise VdaTypeMismatchError(
        f"expected null, boolean, integer, float or string, got {type(wire).__name__}",
    )


def _reject_constant(token: str) -> Any:
    raise VdaTypeMismatchError(f"{token} is not a JSON value")


def decode_json_value(text: str | bytes) -> ActionParameterValue:
    """Parse a single JSON scalar literal and classify it.

    ``decode_json_value("42")`` is ``Integer(42)`` while
    ``decode_json_value('"42"')`` is ``String("42")``.
    """
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise VdaTypeMismatchError(f"not a JSON scalar literal: {exc.msg}") from exc
    return decode_value(parsed)


def encode_value(value: ActionParameterValue) -> bool | int | float | str | None:
    """Return the untagged wire scalar for *value*."""
    return value.value


def encode_json_value(value: ActionParameterValue) -> str:
    """Return the JSON literal for *value*."""
    return json.dumps(value.value)


WireValue = Annotated[
    ActionParameterValue,
    PlainValidator(decode_value),
    PlainSerializer(encode_value),
]
"""Field type for an untagged action parameter value."""

# ------------------------------------------------------------------
# Action
# ------------------------------------------------------------------


class BlockingType(VdaEnum):
    """Concurrency class of an action.

    The model only carries the classification; an execution engine on
    the vehicle enforces it.
    """

    NONE = "NONE"
    """May run while driving and in parallel with other actions."""
    SOFT = "SOFT"
    """May run in parallel with other actions, but not while driving."""
    HARD = "HARD"
    """No driving and no other action while running."""

    @property
    def allows_driving(self) -> bool:
        return self is BlockingType.NONE

    @property
    def allows_parallel_actions(self) -> bool:
        return self is not BlockingType.HARD


class ActionParameter(VdaBaseModel):
    """Key/value parameter of an action, e.g. ``duration``, ``direction``."""

    key: str
    value: WireValue = NULL_VALUE


class Action(VdaBaseModel):
    """An operation to execute on a node, on an edge or instantly.

    ``action_parameters`` keeps wire order and may contain duplicate
    keys; resolving duplicates is left to the consumer.
    """

    action_type: str
    """Name of the action, e.g. ``pick``, ``startCharging``."""
    action_id: str
    """Unique among the actions the sender is currently tracking."""
    action_description: str | None = None
    blocking_type: BlockingType
    action_parameters: list[ActionParameter] = Field(default_factory=list)

    def parameter(self, key: str) -> ActionParameterValue | None:
        """Return the value of the first parameter named *key*, if any."""
        for param in self.action_parameters:
            if param.key == key:
                return param.value
        return None
