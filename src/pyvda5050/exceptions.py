"""Custom exception hierarchy for pyvda5050."""

from __future__ import annotations


class VdaError(Exception):
    """Base exception for all pyvda5050 errors."""


class VdaConfigError(VdaError):
    """Invalid or missing configuration."""


class VdaTransportError(VdaError):
    """MQTT-level failure (connect, publish)."""

    def __init__(
        self,
        message: str,
        *,
        topic: str = "",
        reason_code: int | None = None,
    ) -> None:
        self.topic = topic
        self.reason_code = reason_code
        super().__init__(message)


class VdaDecodeError(VdaError, ValueError):
    """A message or value could not be decoded.

    Subclasses ``ValueError`` so that raising it from inside a pydantic
    validator is reported as a ``value_error`` carrying this instance.
    """

    def __init__(self, message: str, *, location: str = "") -> None:
        self.location = location
        super().__init__(f"{location}: {message}" if location else message)


class VdaTypeMismatchError(VdaDecodeError):
    """A wire value has a shape the field cannot hold."""


class VdaOverflowError(VdaDecodeError):
    """A numeric literal exceeds the 64-bit range of its target."""


class VdaMissingFieldError(VdaDecodeError):
    """A non-optional field is absent."""


class VdaInvalidEnumError(VdaDecodeError):
    """Unrecognized token where a closed enumeration is expected."""


class VdaGraphError(VdaError):
    """Order graph is inconsistent.

    Raised for edges referencing unknown nodes, duplicate or
    non-monotonic ``sequenceId`` values, a broken base/horizon split,
    or released elements reverted or dropped across an order update.
    """


class VdaStateRegressionError(VdaError):
    """A state report moves progress backwards.

    Covers ``lastNodeSequenceId`` regressing within one order, action
    states disappearing from the cumulative log, and ``actionStatus``
    transitions the action lifecycle does not allow.
    """
