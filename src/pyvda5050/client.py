"""High-level async client for the master-control side of VDA 5050."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pyvda5050._mqtt import MqttEvent, VdaMqttRuntime
from pyvda5050._sequence import HeaderSequencer
from pyvda5050.config import VdaConfig
from pyvda5050.exceptions import VdaError
from pyvda5050.models.action import Action
from pyvda5050.models.header import MessageKind, VdaMessage
from pyvda5050.models.instant_actions import InstantActions
from pyvda5050.models.order import Edge, Node, Order
from pyvda5050.models.state import ActionState, State
from pyvda5050.tracking.events import MessageSource
from pyvda5050.tracking.store import VehicleStore
from pyvda5050.validation.order import validate_order

_logger = logging.getLogger(__name__)

_DEFAULT_SUBSCRIPTIONS: tuple[MessageKind, ...] = (
    MessageKind.STATE,
    MessageKind.CONNECTION,
    MessageKind.VISUALIZATION,
    MessageKind.FACTSHEET,
)


@dataclass(slots=True)
class _StateWaiter:
    """A pending wait registered by :meth:`MasterControlClient.wait_for_state`.

    Resolved with the first accepted state of the vehicle that satisfies
    ``predicate``.
    """

    vehicle: tuple[str, str]
    predicate: Callable[[State], bool]
    future: asyncio.Future[State]
    created_at: float = field(default_factory=time.monotonic)


class MasterControlClient:
    """Async client that commands vehicles and tracks their reports.

    Usage::

        async with MasterControlClient(VdaConfig.from_env()) as client:
            order = await client.send_order("acme", "agv-1", order_id="o-1", nodes=[...])
            state = await client.wait_for_state("acme", "agv-1", lambda s: s.is_idle)
    """

    def __init__(
        self,
        config: VdaConfig,
        *,
        store: VehicleStore | None = None,
        sequencer: HeaderSequencer | None = None,
        subscriptions: Iterable[MessageKind] = _DEFAULT_SUBSCRIPTIONS,
        on_message: Callable[[VdaMessage], None] | None = None,
    ) -> None:
        self._config = config
        self._store = store or VehicleStore()
        self._sequencer = sequencer or HeaderSequencer(config.protocol_version)
        self._subscriptions = tuple(subscriptions)
        self._on_message_cb = on_message
        self._loop: asyncio.AbstractEventLoop | None = None
        self._mqtt_runtime: VdaMqttRuntime | None = None
        self._state_waiters: list[_StateWaiter] = []

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MasterControlClient:
        self._loop = asyncio.get_running_loop()
        runtime = VdaMqttRuntime(
            loop=self._loop,
            config=self._config,
            on_event=self._on_mqtt_event,
            subscriptions=self._subscriptions,
            logger=_logger,
        )
        await self._loop.run_in_executor(None, runtime.start)
        self._mqtt_runtime = runtime
        return self

    async def __aexit__(self, *exc: Any) -> None:
        runtime = self._mqtt_runtime
        self._mqtt_runtime = None
        if runtime is not None and self._loop is not None:
            await self._loop.run_in_executor(None, runtime.stop)
        # Cancel pending waiters so callers don't hang
        for waiter in self._state_waiters:
            if not waiter.future.done():
                waiter.future.cancel()
        self._state_waiters.clear()
        self._loop = None

    @property
    def store(self) -> VehicleStore:
        return self._store

    @property
    def sequencer(self) -> HeaderSequencer:
        return self._sequencer

    def _require_runtime(self) -> VdaMqttRuntime:
        runtime = self._mqtt_runtime
        if runtime is None or not runtime.is_running:
            raise VdaError("Client not started. Use 'async with MasterControlClient(...) as client:'")
        return runtime

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def send_order(
        self,
        manufacturer: str,
        serial_number: str,
        *,
        order_id: str,
        nodes: Sequence[Node | dict[str, Any]],
        edges: Sequence[Edge | dict[str, Any]] = (),
        order_update_id: int = 0,
        zone_set_id: str | None = None,
    ) -> Order:
        """Validate, publish and track an order (or an update of one).

        The order is checked against the order currently tracked for the
        vehicle before anything is published.
        """
        runtime = self._require_runtime()
        prior = self._store.get_order(manufacturer, serial_number)
        order = self._sequencer.build(
            Order,
            manufacturer,
            serial_number,
            check=lambda candidate: validate_order(candidate, prior),
            order_id=order_id,
            order_update_id=order_update_id,
            zone_set_id=zone_set_id,
            nodes=list(nodes),
            edges=list(edges),
        )
        runtime.publish(order)
        self._store.apply(order, source=MessageSource.LOCAL)
        _logger.debug(
            "Order sent order_id=%s update=%d vehicle=%s/%s",
            order.order_id,
            order.order_update_id,
            manufacturer,
            serial_number,
        )
        return order

    async def send_instant_actions(
        self,
        manufacturer: str,
        serial_number: str,
        actions: Sequence[Action | dict[str, Any]],
    ) -> InstantActions:
        """Publish instant actions and track them until they settle."""
        runtime = self._require_runtime()
        message = self._sequencer.build(
            InstantActions,
            manufacturer,
            serial_number,
            instant_actions=list(actions),
        )
        runtime.publish(message)
        self._store.apply(message, source=MessageSource.LOCAL)
        return message

    # ------------------------------------------------------------------
    # Tracked data
    # ------------------------------------------------------------------

    def get_state(self, manufacturer: str, serial_number: str) -> State | None:
        return self._store.get_state(manufacturer, serial_number)

    def get_order(self, manufacturer: str, serial_number: str) -> Order | None:
        return self._store.get_order(manufacturer, serial_number)

    def action_states(self, manufacturer: str, serial_number: str) -> list[ActionState]:
        return self._store.action_states(manufacturer, serial_number)

    def pending_instant_actions(self, manufacturer: str, serial_number: str) -> list[Action]:
        return self._store.pending_instant_actions(manufacturer, serial_number)

    # ------------------------------------------------------------------
    # Waiting for reports
    # ------------------------------------------------------------------

    async def wait_for_state(
        self,
        manufacturer: str,
        serial_number: str,
        predicate: Callable[[State], bool] | None = None,
        *,
        timeout: float = 10.0,
    ) -> State | None:
        """Wait for a state report satisfying *predicate*.

        Returns the already tracked state when it satisfies *predicate*
        (any state if *predicate* is None), else the first matching
        report to arrive, or None on timeout.
        """
        check = predicate or (lambda _state: True)
        current = self._store.get_state(manufacturer, serial_number)
        if current is not None and check(current):
            return current

        loop = self._loop or asyncio.get_running_loop()
        waiter = _StateWaiter(
            vehicle=(manufacturer, serial_number),
            predicate=check,
            future=loop.create_future(),
        )
        self._state_waiters.append(waiter)
        try:
            return await asyncio.wait_for(waiter.future, timeout)
        except TimeoutError:
            _logger.debug("No matching state for %s/%s within %.1fs", manufacturer, serial_number, timeout)
            return None
        finally:
            self._state_waiters = [w for w in self._state_waiters if w is not waiter]

    async def wait_for_action(
        self,
        manufacturer: str,
        serial_number: str,
        action_id: str,
        *,
        timeout: float = 10.0,
    ) -> ActionState | None:
        """Wait until *action_id* is reported finished or failed."""

        def _settled(state: State) -> bool:
            entry = state.action_state(action_id)
            return entry is not None and entry.action_status.is_terminal

        state = await self.wait_for_state(manufacturer, serial_number, _settled, timeout=timeout)
        return state.action_state(action_id) if state is not None else None

    # ------------------------------------------------------------------
    # MQTT
    # ------------------------------------------------------------------

    def _on_mqtt_event(self, event: MqttEvent) -> None:
        """Handle a decoded delivery (called on the loop via call_soon_threadsafe)."""
        message = event.message
        try:
            changed = self._store.apply(message, source=MessageSource.MQTT)
        except VdaError as exc:
            _logger.warning(
                "Rejected %s header_id=%d from %s/%s: %s",
                message.KIND,
                message.header_id,
                message.manufacturer,
                message.serial_number,
                exc,
            )
            return
        if not changed:
            return

        if self._on_message_cb is not None:
            try:
                self._on_message_cb(message)
            except Exception:
                _logger.debug("on_message callback failed", exc_info=True)

        if isinstance(message, State):
            self._notify_state_waiters(message)

    def _notify_state_waiters(self, state: State) -> None:
        for waiter in self._state_waiters:
            if waiter.future.done() or waiter.vehicle != state.vehicle:
                continue
            try:
                matched = waiter.predicate(state)
            except Exception as exc:
                waiter.future.set_exception(exc)
                continue
            if matched:
                waiter.future.set_result(state)
