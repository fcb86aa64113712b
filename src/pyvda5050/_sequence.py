"""Sender-side header construction.

Header ids are counted per (message kind, manufacturer, serial number),
starting at 0 and incremented by exactly one per message.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from pyvda5050._constants import PROTOCOL_VERSION, UINT64_MAX
from pyvda5050.models.header import MessageKind, VdaMessage

MessageT = TypeVar("MessageT", bound=VdaMessage)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class HeaderSequencer:
    """Hands out header ids and builds messages with a fresh header.

    Parameters
    ----------
    version : str
        Protocol version stamped into every header.
    clock : callable
        Returns the timestamp for new headers. Defaults to UTC now.
    """

    def __init__(
        self,
        version: str = PROTOCOL_VERSION,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._version = version
        self._clock = clock
        self._next: dict[tuple[MessageKind, str, str], int] = {}

    @property
    def version(self) -> str:
        return self._version

    def next_header_id(self, kind: MessageKind, manufacturer: str, serial_number: str) -> int:
        """Return the next header id for the topic and advance the counter.

        The counter wraps to 0 after the largest unsigned 64-bit value.
        """
        key = (kind, manufacturer, serial_number)
        header_id = self._next.get(key, 0)
        self._next[key] = 0 if header_id == UINT64_MAX else header_id + 1
        return header_id

    def peek(self, kind: MessageKind, manufacturer: str, serial_number: str) -> int:
        """Header id the next message on the topic will get."""
        return self._next.get((kind, manufacturer, serial_number), 0)

    def reset(self, manufacturer: str | None = None, serial_number: str | None = None) -> None:
        """Restart counting from 0, for one vehicle or for all of them."""
        if manufacturer is None and serial_number is None:
            self._next.clear()
            return
        for key in [k for k in self._next if (k[1], k[2]) == (manufacturer, serial_number)]:
            del self._next[key]

    def build(
        self,
        model_cls: type[MessageT],
        manufacturer: str,
        serial_number: str,
        *,
        check: Callable[[MessageT], None] | None = None,
        **fields: Any,
    ) -> MessageT:
        """Build a *model_cls* message with the next header for its topic.

        *fields* are the payload fields, by name or wire alias.  *check*
        may raise to reject the built message.  The counter only
        advances when the message validates and passes *check*.
        """
        header = {
            "header_id": self.peek(model_cls.KIND, manufacturer, serial_number),
            "timestamp": self._clock(),
            "version": self._version,
            "manufacturer": manufacturer,
            "serial_number": serial_number,
        }
        message = model_cls.model_validate({**fields, **header})
        if check is not None:
            check(message)
        self.next_header_id(model_cls.KIND, manufacturer, serial_number)
        return message
