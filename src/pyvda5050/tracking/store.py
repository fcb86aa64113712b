"""Deterministic in-memory vehicle store.

This is the only component allowed to merge decoded messages.  Given the
same sequence of messages it produces the same records, and a message
that fails a check leaves the store exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyvda5050.models.action import Action
from pyvda5050.models.connection import Connection, ConnectionState
from pyvda5050.models.factsheet import Factsheet
from pyvda5050.models.header import MessageKind, VdaMessage
from pyvda5050.models.instant_actions import InstantActions
from pyvda5050.models.order import Order
from pyvda5050.models.state import ActionState, State
from pyvda5050.models.visualization import Visualization
from pyvda5050.tracking.events import MessageSource, TrackedMessage
from pyvda5050.tracking.policy import (
    HeaderDecision,
    classify_header,
    merge_action_log,
    resets_watermarks,
    settle_instant_actions,
)
from pyvda5050.validation.order import is_repeated_update, validate_order
from pyvda5050.validation.state import validate_progress, validate_state, validate_state_against_order

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VehicleRecord(BaseModel):
    """Everything known about one vehicle.

    Records are immutable; every accepted message produces a new record
    which replaces the old one in a single assignment.
    """

    model_config = ConfigDict(frozen=True)

    manufacturer: str
    serial_number: str
    watermarks: dict[MessageKind, int] = Field(default_factory=dict)
    """Highest accepted header id per message kind."""
    latest: dict[MessageKind, TrackedMessage] = Field(default_factory=dict)
    action_log: dict[str, ActionState] = Field(default_factory=dict)
    """Cumulative action states of ``action_log_order_id``."""
    action_log_order_id: str | None = None
    pending_instant_actions: dict[str, Action] = Field(default_factory=dict)
    updated_at: datetime | None = None

    def _message(self, kind: MessageKind) -> Any:
        tracked = self.latest.get(kind)
        return tracked.message if tracked is not None else None

    @property
    def order(self) -> Order | None:
        return self._message(MessageKind.ORDER)

    @property
    def state(self) -> State | None:
        return self._message(MessageKind.STATE)

    @property
    def visualization(self) -> Visualization | None:
        return self._message(MessageKind.VISUALIZATION)

    @property
    def factsheet(self) -> Factsheet | None:
        return self._message(MessageKind.FACTSHEET)

    @property
    def connection_state(self) -> ConnectionState | None:
        connection: Connection | None = self._message(MessageKind.CONNECTION)
        return connection.connection_state if connection is not None else None


class VehicleStore:
    """In-memory store of per-vehicle records, keyed by (manufacturer, serial number)."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._records: dict[tuple[str, str], VehicleRecord] = {}

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def apply(self, message: VdaMessage, *, source: MessageSource = MessageSource.MQTT) -> bool:
        """Apply a decoded message.

        Returns ``True`` when the record changed.  Stale and repeated
        messages return ``False``.  Validation errors propagate and
        leave the record untouched.
        """
        key = message.vehicle
        record = self._records.get(key)
        if record is None:
            record = VehicleRecord(manufacturer=key[0], serial_number=key[1])

        kind = message.KIND
        last = record.latest.get(kind)
        decision = classify_header(
            watermark=record.watermarks.get(kind),
            last=last.message if last is not None else None,
            incoming=message,
        )
        if decision == HeaderDecision.DUPLICATE:
            _logger.debug("Duplicate %s header_id=%d vehicle=%s/%s", kind, message.header_id, *key)
            return False

        watermarks = dict(record.watermarks)
        if resets_watermarks(message):
            _logger.debug("Vehicle %s/%s came online; resetting header watermarks and progress", *key)
            watermarks.clear()
            # A restarted vehicle reports progress from scratch and forgets
            # instant actions it had not settled.
            record = record.model_copy(
                update={
                    "latest": {k: v for k, v in record.latest.items() if k != MessageKind.STATE},
                    "action_log": {},
                    "action_log_order_id": None,
                    "pending_instant_actions": {},
                }
            )
        elif decision == HeaderDecision.STALE:
            _logger.debug(
                "Dropping stale %s header_id=%d < %d vehicle=%s/%s",
                kind,
                message.header_id,
                record.watermarks[kind],
                *key,
            )
            return False
        watermarks[kind] = message.header_id

        update: dict[str, Any] = {"watermarks": watermarks}
        tracked = TrackedMessage(message=message, source=source, observed_at=self._clock())
        if isinstance(message, Order):
            changed = self._merge_order(record, message, tracked, update)
        elif isinstance(message, State):
            changed = self._merge_state(record, message, tracked, update)
        elif isinstance(message, InstantActions):
            pending = dict(record.pending_instant_actions)
            pending.update((action.action_id, action) for action in message.instant_actions)
            update["pending_instant_actions"] = pending
            update["latest"] = {**record.latest, kind: tracked}
            changed = True
        else:
            update["latest"] = {**record.latest, kind: tracked}
            changed = True

        if changed:
            update["updated_at"] = tracked.observed_at
        self._records[key] = record.model_copy(update=update)
        return changed

    def _merge_order(self, record: VehicleRecord, order: Order, tracked: TrackedMessage, update: dict[str, Any]) -> bool:
        prior = record.order
        validate_order(order, prior)
        if is_repeated_update(order, prior):
            _logger.debug("Order %s/%d already applied", order.order_id, order.order_update_id)
            return False
        update["latest"] = {**record.latest, MessageKind.ORDER: tracked}
        return True

    def _merge_state(self, record: VehicleRecord, state: State, tracked: TrackedMessage, update: dict[str, Any]) -> bool:
        validate_state(state)
        prior = record.state
        if prior is not None:
            validate_progress(prior, state)
        order = record.order
        if order is not None and (order.order_id, order.order_update_id) == (state.order_id, state.order_update_id):
            validate_state_against_order(state, order)
        if prior is not None and prior.same_report(state):
            return False

        update["latest"] = {**record.latest, MessageKind.STATE: tracked}
        update["action_log"] = merge_action_log(record.action_log, record.action_log_order_id, state)
        update["action_log_order_id"] = state.order_id
        order_changed = record.action_log_order_id is not None and record.action_log_order_id != state.order_id
        update["pending_instant_actions"] = settle_instant_actions(
            record.pending_instant_actions, state, order_changed=order_changed
        )
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_record(self, manufacturer: str, serial_number: str) -> VehicleRecord | None:
        return self._records.get((manufacturer, serial_number))

    def vehicles(self) -> list[tuple[str, str]]:
        """(manufacturer, serial number) of every vehicle seen so far."""
        return sorted(self._records)

    def last_message(self, manufacturer: str, serial_number: str, kind: MessageKind) -> TrackedMessage | None:
        record = self._records.get((manufacturer, serial_number))
        return record.latest.get(kind) if record is not None else None

    def get_order(self, manufacturer: str, serial_number: str) -> Order | None:
        record = self._records.get((manufacturer, serial_number))
        return record.order if record is not None else None

    def get_state(self, manufacturer: str, serial_number: str) -> State | None:
        record = self._records.get((manufacturer, serial_number))
        return record.state if record is not None else None

    def action_states(self, manufacturer: str, serial_number: str) -> list[ActionState]:
        """Cumulative action log of the vehicle's current order, oldest first."""
        record = self._records.get((manufacturer, serial_number))
        return list(record.action_log.values()) if record is not None else []

    def pending_instant_actions(self, manufacturer: str, serial_number: str) -> list[Action]:
        """Instant actions sent or seen that have not reached a terminal status yet."""
        record = self._records.get((manufacturer, serial_number))
        return list(record.pending_instant_actions.values()) if record is not None else []
