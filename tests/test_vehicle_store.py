from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from pyvda5050.codec import decode_message, encode_message
from pyvda5050.exceptions import VdaGraphError, VdaStateRegressionError
from pyvda5050.models import (
    Action,
    ActionState,
    ActionStatus,
    BlockingType,
    Connection,
    ConnectionState,
    Edge,
    InstantActions,
    MessageKind,
    Node,
    NodeState,
    Order,
    State,
)
from pyvda5050.tracking import MessageSource, VehicleStore

VEHICLE = ("acme", "agv-1")


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _header(header_id: int) -> dict[str, Any]:
    return {
        "header_id": header_id,
        "timestamp": _dt(),
        "version": "2.0.0",
        "manufacturer": VEHICLE[0],
        "serial_number": VEHICLE[1],
    }


def _order(header_id: int = 0, *, order_id: str = "o1", update: int = 0, released_until: int = 4) -> Order:
    return Order(
        **_header(header_id),
        order_id=order_id,
        order_update_id=update,
        nodes=[Node(node_id=f"n{i}", sequence_id=i, released=i <= released_until) for i in (0, 2, 4)],
        edges=[
            Edge(edge_id=f"e{i}", sequence_id=i, released=i <= released_until, start_node_id=f"n{i - 1}", end_node_id=f"n{i + 1}")
            for i in (1, 3)
        ],
    )


def _state(
    header_id: int,
    *,
    order_id: str = "o1",
    last_node_sequence_id: int = 0,
    actions: dict[str, ActionStatus] | None = None,
    charge: float = 50.0,
    node_states: list[NodeState] | None = None,
) -> State:
    return State(
        **_header(header_id),
        order_id=order_id,
        order_update_id=0,
        last_node_id=f"n{last_node_sequence_id}",
        last_node_sequence_id=last_node_sequence_id,
        driving=False,
        operating_mode="AUTOMATIC",
        node_states=node_states or [],
        action_states=[ActionState(action_id=a, action_status=s) for a, s in (actions or {}).items()],
        battery_state={"battery_charge": charge, "charging": False},
        safety_state={"e_stop": "NONE", "field_violation": False},
    )


def _connection(header_id: int, state: ConnectionState) -> Connection:
    return Connection(**_header(header_id), connection_state=state)


def test_apply_and_query_state() -> None:
    store = VehicleStore(clock=_dt)
    assert store.apply(_state(0))
    assert store.get_state(*VEHICLE) == _state(0)
    assert store.vehicles() == [VEHICLE]
    record = store.get_record(*VEHICLE)
    assert record is not None
    assert record.updated_at == _dt()
    tracked = store.last_message(*VEHICLE, MessageKind.STATE)
    assert tracked is not None
    assert tracked.source == MessageSource.MQTT


def test_reapplying_same_snapshot_is_idempotent() -> None:
    store = VehicleStore(clock=_dt)
    raw = encode_message(_state(5, actions={"a": ActionStatus.RUNNING}))

    assert store.apply(decode_message("state", raw))
    before = store.get_record(*VEHICLE)

    assert not store.apply(decode_message("state", raw))
    assert store.get_record(*VEHICLE) == before


def test_stale_header_dropped() -> None:
    store = VehicleStore()
    store.apply(_state(10, charge=60.0))

    assert not store.apply(_state(9, charge=10.0))
    state = store.get_state(*VEHICLE)
    assert state is not None
    assert state.battery_state.battery_charge == 60.0


def test_header_gap_is_accepted() -> None:
    store = VehicleStore()
    store.apply(_state(1))
    assert store.apply(_state(7, charge=55.0))


def test_watermarks_are_per_kind() -> None:
    store = VehicleStore()
    store.apply(_state(100))
    assert store.apply(_connection(0, ConnectionState.OFFLINE))


def test_online_connection_resets_watermarks() -> None:
    store = VehicleStore()
    store.apply(_state(100))
    store.apply(_connection(5, ConnectionState.ONLINE))

    # Restarted vehicle counts from zero again.
    assert store.apply(_state(0, charge=70.0))
    record = store.get_record(*VEHICLE)
    assert record is not None
    assert record.connection_state == ConnectionState.ONLINE


def test_retained_online_redelivery_does_not_reset() -> None:
    store = VehicleStore()
    online = _connection(5, ConnectionState.ONLINE)
    store.apply(online)
    store.apply(_state(3))

    assert not store.apply(online)
    assert not store.apply(_state(2, charge=1.0))


def test_action_log_accumulates_and_resets_on_new_order() -> None:
    store = VehicleStore()
    store.apply(_state(0, actions={"a": ActionStatus.RUNNING}))
    store.apply(_state(1, actions={"a": ActionStatus.FINISHED, "b": ActionStatus.WAITING}))

    log = {entry.action_id: entry.action_status for entry in store.action_states(*VEHICLE)}
    assert log == {"a": ActionStatus.FINISHED, "b": ActionStatus.WAITING}

    store.apply(_state(2, order_id="o2", actions={"c": ActionStatus.WAITING}))
    assert [entry.action_id for entry in store.action_states(*VEHICLE)] == ["c"]


def test_rejected_state_leaves_store_untouched() -> None:
    store = VehicleStore()
    store.apply(_state(0, actions={"a": ActionStatus.FINISHED}))
    before = store.get_record(*VEHICLE)

    with pytest.raises(VdaStateRegressionError):
        store.apply(_state(1, actions={"a": ActionStatus.RUNNING}))

    assert store.get_record(*VEHICLE) == before
    # The rejected header id did not move the watermark.
    assert store.apply(_state(1, actions={"a": ActionStatus.FINISHED}, charge=40.0))


def test_state_checked_against_tracked_order() -> None:
    store = VehicleStore()
    store.apply(_order(), source=MessageSource.LOCAL)
    bad = _state(0, node_states=[NodeState(node_id="zz", sequence_id=2, released=True)])
    with pytest.raises(VdaGraphError):
        store.apply(bad)
    assert store.get_state(*VEHICLE) is None


def test_order_update_flow() -> None:
    store = VehicleStore()
    assert store.apply(_order(0, released_until=2), source=MessageSource.LOCAL)

    # Repeat with a new header: nothing to re-plan.
    assert not store.apply(_order(1, released_until=2))
    order = store.get_order(*VEHICLE)
    assert order is not None
    assert order.header_id == 0

    assert store.apply(_order(2, update=1, released_until=4))
    order = store.get_order(*VEHICLE)
    assert order is not None
    assert order.order_update_id == 1


def test_order_update_reverting_base_rejected() -> None:
    store = VehicleStore()
    store.apply(_order(0, released_until=4))
    before = store.get_record(*VEHICLE)

    with pytest.raises(VdaGraphError):
        store.apply(_order(1, update=1, released_until=2))
    assert store.get_record(*VEHICLE) == before


def test_instant_actions_pending_until_terminal() -> None:
    store = VehicleStore()
    message = InstantActions(
        **_header(0),
        instant_actions=[
            Action(action_type="startPause", action_id="ia-1", blocking_type=BlockingType.HARD),
            Action(action_type="factsheetRequest", action_id="ia-2", blocking_type=BlockingType.NONE),
        ],
    )
    store.apply(message, source=MessageSource.LOCAL)
    assert [a.action_id for a in store.pending_instant_actions(*VEHICLE)] == ["ia-1", "ia-2"]

    store.apply(_state(0, actions={"ia-1": ActionStatus.RUNNING, "ia-2": ActionStatus.FINISHED}))
    assert [a.action_id for a in store.pending_instant_actions(*VEHICLE)] == ["ia-1"]

    store.apply(_state(1, actions={"ia-1": ActionStatus.FAILED, "ia-2": ActionStatus.FINISHED}))
    assert store.pending_instant_actions(*VEHICLE) == []


def test_unknown_vehicle_queries_are_empty() -> None:
    store = VehicleStore()
    assert store.get_state("x", "y") is None
    assert store.get_order("x", "y") is None
    assert store.action_states("x", "y") == []
    assert store.pending_instant_actions("x", "y") == []
    assert store.last_message("x", "y", MessageKind.STATE) is None


def test_restart_resets_progress_baseline() -> None:
    store = VehicleStore()
    store.apply(_state(5, last_node_sequence_id=4, actions={"a": ActionStatus.FINISHED}))
    store.apply(_connection(0, ConnectionState.ONLINE))

    # Same order, progress and action log reported from scratch.
    assert store.apply(_state(0, last_node_sequence_id=0))
    assert store.apply(_state(1, last_node_sequence_id=0, charge=45.0))
    state = store.get_state(*VEHICLE)
    assert state is not None
    assert state.last_node_sequence_id == 0
    assert store.action_states(*VEHICLE) == []


def test_restart_drops_pending_instant_actions() -> None:
    store = VehicleStore()
    store.apply(
        InstantActions(
            **_header(0),
            instant_actions=[Action(action_type="startPause", action_id="ia-1", blocking_type=BlockingType.HARD)],
        )
    )
    store.apply(_connection(0, ConnectionState.ONLINE))
    assert store.pending_instant_actions(*VEHICLE) == []


def test_unacknowledged_instant_actions_dropped_on_new_order() -> None:
    store = VehicleStore()
    store.apply(
        InstantActions(
            **_header(0),
            instant_actions=[
                Action(action_type="startPause", action_id=f"ia-{i}", blocking_type=BlockingType.HARD) for i in range(50)
            ],
        ),
        source=MessageSource.LOCAL,
    )

    store.apply(_state(0, order_id="o1", actions={"ia-7": ActionStatus.RUNNING}))
    assert len(store.pending_instant_actions(*VEHICLE)) == 50

    store.apply(_state(1, order_id="o2", actions={"ia-7": ActionStatus.RUNNING}))
    assert [a.action_id for a in store.pending_instant_actions(*VEHICLE)] == ["ia-7"]

    store.apply(_state(2, order_id="o3"))
    assert store.pending_instant_actions(*VEHICLE) == []
