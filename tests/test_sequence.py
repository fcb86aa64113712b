from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pyvda5050._constants import UINT64_MAX
from pyvda5050._sequence import HeaderSequencer
from pyvda5050.exceptions import VdaGraphError
from pyvda5050.models import Connection, InstantActions, MessageKind, Order
from pyvda5050.validation import validate_order


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_header_ids_increment_per_topic() -> None:
    seq = HeaderSequencer()
    assert [seq.next_header_id(MessageKind.ORDER, "acme", "agv-1") for _ in range(3)] == [0, 1, 2]
    # Other kinds and other vehicles count independently.
    assert seq.next_header_id(MessageKind.INSTANT_ACTIONS, "acme", "agv-1") == 0
    assert seq.next_header_id(MessageKind.ORDER, "acme", "agv-2") == 0
    assert seq.peek(MessageKind.ORDER, "acme", "agv-1") == 3


def test_build_stamps_header() -> None:
    seq = HeaderSequencer("2.0.0", clock=_dt)
    message = seq.build(Connection, "acme", "agv-1", connection_state="ONLINE")
    assert message.header_id == 0
    assert message.timestamp == _dt()
    assert message.version == "2.0.0"
    assert message.vehicle == ("acme", "agv-1")

    second = seq.build(Connection, "acme", "agv-1", connection_state="OFFLINE")
    assert second.header_id == 1


def test_build_ignores_header_fields_from_caller() -> None:
    seq = HeaderSequencer(clock=_dt)
    message = seq.build(InstantActions, "acme", "agv-1", header_id=99, instant_actions=[])
    assert message.header_id == 0


def test_rejected_build_does_not_consume_header_id() -> None:
    seq = HeaderSequencer(clock=_dt)
    with pytest.raises(VdaGraphError):
        seq.build(Order, "acme", "agv-1", check=validate_order, order_id="o1", order_update_id=0, nodes=[], edges=[])
    assert seq.peek(MessageKind.ORDER, "acme", "agv-1") == 0

    order = seq.build(
        Order,
        "acme",
        "agv-1",
        check=validate_order,
        order_id="o1",
        order_update_id=0,
        nodes=[{"nodeId": "n0", "sequenceId": 0, "released": True}],
    )
    assert order.header_id == 0


def test_counter_wraps_after_uint64_max() -> None:
    seq = HeaderSequencer()
    seq._next[(MessageKind.STATE, "acme", "agv-1")] = UINT64_MAX  # type: ignore[attr-defined]
    assert seq.next_header_id(MessageKind.STATE, "acme", "agv-1") == UINT64_MAX
    assert seq.next_header_id(MessageKind.STATE, "acme", "agv-1") == 0


def test_reset_one_vehicle() -> None:
    seq = HeaderSequencer()
    seq.next_header_id(MessageKind.ORDER, "acme", "agv-1")
    seq.next_header_id(MessageKind.ORDER, "acme", "agv-2")
    seq.reset("acme", "agv-1")
    assert seq.peek(MessageKind.ORDER, "acme", "agv-1") == 0
    assert seq.peek(MessageKind.ORDER, "acme", "agv-2") == 1
    seq.reset()
    assert seq.peek(MessageKind.ORDER, "acme", "agv-2") == 0
