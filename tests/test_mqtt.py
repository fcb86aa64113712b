from __future__ import annotations

import asyncio
import json

import pytest

from pyvda5050._mqtt import (
    TopicAddress,
    VdaMqttRuntime,
    decode_delivery,
    parse_topic,
    subscription_topics,
    topic_for,
)
from pyvda5050.config import VdaConfig
from pyvda5050.exceptions import VdaDecodeError, VdaMissingFieldError, VdaTransportError
from pyvda5050.models import Connection, MessageKind


def _connection_payload(serial_number: str = "agv-1") -> bytes:
    return json.dumps(
        {
            "headerId": 1,
            "timestamp": "2026-01-01T00:00:00.000Z",
            "version": "2.0.0",
            "manufacturer": "acme",
            "serialNumber": serial_number,
            "connectionState": "ONLINE",
        }
    ).encode()


def test_topic_for_vehicle() -> None:
    config = VdaConfig()
    assert topic_for(config, "acme", "agv-1", MessageKind.INSTANT_ACTIONS) == "uagv/v2/acme/agv-1/instantActions"


def test_topic_for_custom_interface() -> None:
    config = VdaConfig(interface_name="plant7", protocol_version="1.1.0")
    assert topic_for(config, "acme", "agv-1", MessageKind.ORDER) == "plant7/v1/acme/agv-1/order"


@pytest.mark.parametrize("serial_number", ["", "a/b", "#"])
def test_topic_for_rejects_bad_levels(serial_number: str) -> None:
    with pytest.raises(ValueError):
        topic_for(VdaConfig(), "acme", serial_number, MessageKind.STATE)


def test_subscription_topics_use_vehicle_filter() -> None:
    config = VdaConfig(manufacturer="acme")
    assert subscription_topics(config, [MessageKind.STATE, MessageKind.CONNECTION]) == [
        "uagv/v2/acme/+/state",
        "uagv/v2/acme/+/connection",
    ]


def test_parse_topic() -> None:
    address = parse_topic("uagv/v2/acme/agv-1/state")
    assert address == TopicAddress("uagv", "v2", "acme", "agv-1", MessageKind.STATE)
    assert str(address) == "uagv/v2/acme/agv-1/state"


@pytest.mark.parametrize(
    "topic",
    [
        "uagv/v2/acme/state",
        "uagv/v2/acme//state",
        "uagv/v2/acme/agv-1/status",
    ],
)
def test_parse_topic_rejects(topic: str) -> None:
    with pytest.raises(ValueError):
        parse_topic(topic)


def test_decode_delivery() -> None:
    event = decode_delivery("uagv/v2/acme/agv-1/connection", _connection_payload(), retained=True)
    assert isinstance(event.message, Connection)
    assert event.retained
    assert event.address.kind == MessageKind.CONNECTION


def test_decode_delivery_header_must_match_topic() -> None:
    with pytest.raises(VdaDecodeError) as excinfo:
        decode_delivery("uagv/v2/acme/agv-2/connection", _connection_payload("agv-1"))
    assert excinfo.value.location == "header"


def test_decode_delivery_uses_topic_kind() -> None:
    # A connection payload on a state topic is missing state fields.
    with pytest.raises(VdaMissingFieldError):
        decode_delivery("uagv/v2/acme/agv-1/state", _connection_payload())


def test_runtime_publish_requires_start() -> None:
    loop = asyncio.new_event_loop()
    try:
        runtime = VdaMqttRuntime(
            loop=loop,
            config=VdaConfig(serial_number="agv-1"),
            on_event=lambda _event: None,
            subscriptions=[MessageKind.STATE],
        )
        assert runtime.subscriptions == ["uagv/v2/+/agv-1/state"]
        assert not runtime.is_running

        message = Connection.model_validate(json.loads(_connection_payload()))
        with pytest.raises(VdaTransportError) as excinfo:
            runtime.publish(message)
        assert excinfo.value.topic == "uagv/v2/acme/agv-1/connection"
        # Stopping a runtime that never started is a no-op.
        runtime.stop()
    finally:
        loop.close()
