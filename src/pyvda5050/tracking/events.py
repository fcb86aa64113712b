"""Messages as seen by the tracking store.

Inbound deliveries and locally sent messages are recorded the same way;
only the source differs.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pyvda5050.models.header import MessageKind, VdaMessage


class MessageSource(StrEnum):
    MQTT = "mqtt"
    """Received from the broker."""
    LOCAL = "local"
    """Sent by this process."""


class TrackedMessage(BaseModel):
    """The last accepted message of one kind for one vehicle."""

    model_config = ConfigDict(frozen=True)

    message: VdaMessage
    source: MessageSource
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def kind(self) -> MessageKind:
        return self.message.KIND
