"""Internal MQTT topic scheme, delivery decoding and runtime helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from pyvda5050._redact import summarize_for_log
from pyvda5050.codec import decode_message, encode_message, load_json
from pyvda5050.config import VdaConfig
from pyvda5050.exceptions import VdaDecodeError, VdaTransportError
from pyvda5050.models.header import MessageKind, VdaMessage

# ------------------------------------------------------------------
# Topics
# ------------------------------------------------------------------


@dataclass(frozen=True)
class TopicAddress:
    """The five levels of a ``interface/major/manufacturer/serial/kind`` topic."""

    interface_name: str
    major_version: str
    manufacturer: str
    serial_number: str
    kind: MessageKind

    def __str__(self) -> str:
        return f"{self.interface_name}/{self.major_version}/{self.manufacturer}/{self.serial_number}/{self.kind}"


def topic_for(config: VdaConfig, manufacturer: str, serial_number: str, kind: MessageKind) -> str:
    """Build the topic a message of *kind* for one vehicle is published on.

    ``+`` may be passed as manufacturer or serial number to build a
    subscription filter.
    """
    for label, level in (("manufacturer", manufacturer), ("serial_number", serial_number)):
        if not level or "/" in level or "#" in level:
            raise ValueError(f"invalid {label} topic level: {level!r}")
    return str(TopicAddress(config.interface_name, config.major_version, manufacturer, serial_number, MessageKind(kind)))


def subscription_topics(config: VdaConfig, kinds: Iterable[MessageKind]) -> list[str]:
    """Subscription filters for *kinds*, scoped by the configured vehicle filter."""
    return [topic_for(config, config.manufacturer, config.serial_number, kind) for kind in kinds]


def parse_topic(topic: str) -> TopicAddress:
    """Split a concrete topic into its levels.

    Raises :class:`ValueError` for topics outside the scheme.
    """
    levels = topic.split("/")
    if len(levels) != 5 or not all(levels):
        raise ValueError(f"not a VDA 5050 topic: {topic!r}")
    interface_name, major_version, manufacturer, serial_number, kind = levels
    try:
        message_kind = MessageKind(kind)
    except ValueError:
        raise ValueError(f"unknown message kind {kind!r} in topic {topic!r}") from None
    return TopicAddress(interface_name, major_version, manufacturer, serial_number, message_kind)


# ------------------------------------------------------------------
# Deliveries
# ------------------------------------------------------------------


@dataclass(frozen=True)
class MqttEvent:
    """A decoded delivery."""

    topic: str
    address: TopicAddress
    message: VdaMessage
    retained: bool = False


def decode_delivery(topic: str, payload: bytes, *, retained: bool = False) -> MqttEvent:
    """Decode one delivery, checking that its header matches the topic."""
    address = parse_topic(topic)
    message = decode_message(address.kind, payload)
    if message.vehicle != (address.manufacturer, address.serial_number):
        raise VdaDecodeError(
            f"header names vehicle {message.manufacturer}/{message.serial_number} "
            f"but topic is {address.manufacturer}/{address.serial_number}",
            location="header",
        )
    return MqttEvent(topic=topic, address=address, message=message, retained=retained)


def _payload_for_log(payload: bytes) -> Any:
    try:
        return summarize_for_log(load_json(payload))
    except VdaDecodeError:
        return summarize_for_log(payload)


# ------------------------------------------------------------------
# Runtime
# ------------------------------------------------------------------


class VdaMqttRuntime:
    """Threaded paho-mqtt runtime that emits decoded messages onto an asyncio loop."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        config: VdaConfig,
        on_event: Callable[[MqttEvent], None],
        subscriptions: Iterable[MessageKind] = (MessageKind.STATE, MessageKind.CONNECTION),
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._config = config
        self._on_event = on_event
        self._subscriptions = subscription_topics(config, subscriptions)
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    @property
    def subscriptions(self) -> list[str]:
        return list(self._subscriptions)

    def start(self) -> None:
        """Connect to the configured broker and subscribe."""
        self.stop()
        config = self._config
        self._logger.debug(
            "MQTT runtime start requested host=%s port=%s topics=%s client_id=%s",
            config.broker_host,
            config.broker_port,
            self._subscriptions,
            config.client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if config.username is not None:
            client.username_pw_set(config.username, config.password)
        if config.tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected successfully reason=%s", reason_code)
            for topic in self._subscriptions:
                self._logger.debug("MQTT subscribing topic=%s", topic)
                c.subscribe(topic, qos=config.qos)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                event = decode_delivery(msg.topic, msg.payload, retained=bool(msg.retain))
            except (VdaDecodeError, ValueError):
                self._logger.debug(
                    "Dropping undecodable PUBLISH topic=%s payload=%s",
                    msg.topic,
                    _payload_for_log(msg.payload),
                    exc_info=True,
                )
                return
            self._logger.debug(
                "Received PUBLISH topic=%s header_id=%d",
                msg.topic,
                event.message.header_id,
            )
            self._loop.call_soon_threadsafe(self._on_event, event)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(config.broker_host, config.broker_port, keepalive=config.keepalive)
        except OSError as exc:
            raise VdaTransportError(f"MQTT connect to {config.broker_host}:{config.broker_port} failed: {exc}") from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

    def topic_of(self, message: VdaMessage) -> str:
        return topic_for(self._config, message.manufacturer, message.serial_number, message.KIND)

    def publish(self, message: VdaMessage, *, retain: bool = False) -> str:
        """Encode and publish *message* on its topic; return the topic."""
        client = self._client
        topic = self.topic_of(message)
        if client is None or not self._running:
            raise VdaTransportError("MQTT runtime is not running", topic=topic)
        payload = encode_message(message)
        self._logger.debug("MQTT publish topic=%s header_id=%d bytes=%d", topic, message.header_id, len(payload))
        info = client.publish(topic, payload, qos=self._config.qos, retain=retain)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise VdaTransportError(f"MQTT publish failed: {mqtt.error_string(info.rc)}", topic=topic, reason_code=info.rc)
        return topic
