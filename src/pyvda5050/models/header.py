"""Message envelope shared by every VDA 5050 message kind."""

from __future__ import annotations

import enum
from typing import ClassVar

from pyvda5050.models._base import HeaderId, VdaBaseModel, VdaTimestamp


class MessageKind(enum.StrEnum):
    """Message kinds, valued by their topic name."""

    ORDER = "order"
    INSTANT_ACTIONS = "instantActions"
    STATE = "state"
    VISUALIZATION = "visualization"
    CONNECTION = "connection"
    FACTSHEET = "factsheet"


class VdaMessage(VdaBaseModel):
    """Header fields present on every message.

    ``header_id`` is scoped to (topic, manufacturer, serial number).  A
    sender increments it by exactly one per message on a topic; a
    receiver may observe gaps but never a decrease.
    """

    KIND: ClassVar[MessageKind]

    header_id: HeaderId
    timestamp: VdaTimestamp
    version: str
    """Protocol version ``MAJOR.MINOR.PATCH``, e.g. ``2.0.0``."""
    manufacturer: str
    serial_number: str

    @property
    def vehicle(self) -> tuple[str, str]:
        """``(manufacturer, serial_number)`` identifying the vehicle."""
        return self.manufacturer, self.serial_number
