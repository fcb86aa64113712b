"""Connection message."""

from __future__ import annotations

from typing import ClassVar

from pyvda5050.models._base import VdaEnum
from pyvda5050.models.header import MessageKind, VdaMessage


class ConnectionState(VdaEnum):
    ONLINE = "ONLINE"
    """Connection between vehicle and broker is active."""
    OFFLINE = "OFFLINE"
    """Vehicle went offline in a coordinated way."""
    CONNECTIONBROKEN = "CONNECTIONBROKEN"
    """Connection ended unexpectedly; published as the broker's last will."""


class Connection(VdaMessage):
    """Connection lifecycle of a vehicle, published retained."""

    KIND: ClassVar[MessageKind] = MessageKind.CONNECTION

    connection_state: ConnectionState
