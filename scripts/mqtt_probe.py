#!/usr/bin/env python3
"""Passive MQTT probe for VDA 5050 traffic.

Subscribes to the vehicle topics selected by the ``VDA_*`` environment
variables, decodes every delivery with pyvda5050 and prints one line per
message.  Use this to check header sequencing and publish rates of a
vehicle, or to spot payloads the codec rejects.
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import paho.mqtt.client as mqtt  # noqa: E402

from pyvda5050 import MessageKind, VdaConfig, VdaDecodeError, VdaError  # noqa: E402
from pyvda5050._mqtt import decode_delivery, subscription_topics  # noqa: E402
from pyvda5050.validation import validate_progress, validate_state  # noqa: E402

_LOG = logging.getLogger("mqtt_probe")


@dataclass
class ProbeStats:
    started_at: float
    total_messages: int = 0
    decode_ok: int = 0
    decode_failed: int = 0
    header_gaps: int = 0
    per_kind: Counter[str] = field(default_factory=Counter)
    last_header: dict[str, int] = field(default_factory=dict)

    def track_header(self, topic: str, header_id: int) -> int | None:
        """Remember *header_id* for *topic*; return the gap to the previous one."""
        previous = self.last_header.get(topic)
        self.last_header[topic] = header_id
        if previous is None:
            return None
        gap = header_id - previous
        if gap != 1:
            self.header_gaps += 1
        return gap


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Passive MQTT probe for VDA 5050 vehicle topics.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--kind",
        action="append",
        choices=[kind.value for kind in MessageKind],
        help="Message kind to subscribe to (repeatable, default: all vehicle-sent kinds).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Pretty-print the decoded wire form.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Run state consistency and progress checks on state messages.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_summary(stats: ProbeStats) -> None:
    runtime = time.time() - stats.started_at
    print("[probe] Summary")
    print(f"[probe]   runtime_s      : {runtime:.1f}")
    print(f"[probe]   total_messages : {stats.total_messages}")
    print(f"[probe]   decode_ok      : {stats.decode_ok}")
    print(f"[probe]   decode_failed  : {stats.decode_failed}")
    print(f"[probe]   header_gaps    : {stats.header_gaps}")
    for kind, count in sorted(stats.per_kind.items()):
        print(f"[probe]   {kind:<15}: {count}")


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = VdaConfig.from_env()
    kinds = [MessageKind(kind) for kind in args.kind] if args.kind else [
        MessageKind.STATE,
        MessageKind.VISUALIZATION,
        MessageKind.CONNECTION,
        MessageKind.FACTSHEET,
    ]
    topics = subscription_topics(config, kinds)
    print(f"[probe] broker   : {config.broker_host}:{config.broker_port}")
    for topic in topics:
        print(f"[probe] topic    : {topic}")

    stats = ProbeStats(started_at=time.time())
    last_states: dict[tuple[str, str], Any] = {}
    should_stop = False

    def stop_handler(_signum: int, _frame: Any) -> None:
        nonlocal should_stop
        should_stop = True

    signal.signal(signal.SIGINT, stop_handler)
    signal.signal(signal.SIGTERM, stop_handler)

    mqtt_client = mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=config.client_id,
        protocol=mqtt.MQTTv311,
    )
    mqtt_client.enable_logger(_LOG)
    if config.username is not None:
        mqtt_client.username_pw_set(config.username, config.password)
    if config.tls:
        mqtt_client.tls_set()

    def on_connect(
        client: mqtt.Client,
        _userdata: Any,
        _flags: mqtt.ConnectFlags,
        reason_code: mqtt.ReasonCode,
        _properties: mqtt.Properties | None,
    ) -> None:
        if reason_code.value != 0:
            print(f"[probe] MQTT connect failed: {reason_code}", file=sys.stderr)
            client.disconnect()
            return
        print("[probe] Connected.")
        for topic in topics:
            client.subscribe(topic, qos=config.qos)

    def on_message(_client: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        stats.total_messages += 1
        try:
            event = decode_delivery(msg.topic, msg.payload, retained=bool(msg.retain))
        except (VdaDecodeError, ValueError) as exc:
            stats.decode_failed += 1
            print(f"[probe] msg#{stats.total_messages} topic={msg.topic} decode_failed: {exc}")
            return

        stats.decode_ok += 1
        message = event.message
        stats.per_kind[str(message.KIND)] += 1
        gap = stats.track_header(msg.topic, message.header_id)
        gap_text = "first" if gap is None else f"{gap:+d}"
        retained = " retained" if event.retained else ""
        print(
            f"[probe] msg#{stats.total_messages} {message.KIND} {message.manufacturer}/{message.serial_number} "
            f"header={message.header_id} gap={gap_text}{retained}",
        )
        if args.json:
            print(json.dumps(message.to_wire(), indent=2, ensure_ascii=False))

        if args.check and message.KIND == MessageKind.STATE:
            try:
                validate_state(message)
                previous = last_states.get(message.vehicle)
                if previous is not None:
                    validate_progress(previous, message)
            except VdaError as exc:
                print(f"[probe]   check_failed: {exc}")
            last_states[message.vehicle] = message

    mqtt_client.on_connect = on_connect
    mqtt_client.on_message = on_message

    print("[probe] Connecting...")
    try:
        mqtt_client.connect(config.broker_host, config.broker_port, keepalive=config.keepalive)
        mqtt_client.loop_start()

        while not should_stop:
            if args.duration > 0 and (time.time() - stats.started_at) >= args.duration:
                print(f"[probe] Reached --duration={args.duration}s, stopping.")
                break
            time.sleep(1.0)
    except KeyboardInterrupt:
        pass
    except OSError as exc:  # pragma: no cover - network/system interaction
        print(f"[probe] Connect failed: {exc}", file=sys.stderr)
        return 2
    finally:
        should_stop = True
        try:
            mqtt_client.disconnect()
        finally:
            mqtt_client.loop_stop()

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
