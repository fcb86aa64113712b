"""Client configuration for pyvda5050."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyvda5050._constants import INTERFACE_NAME, PROTOCOL_VERSION, major_version_of
from pyvda5050.exceptions import VdaConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class VdaConfig:
    """Client configuration.

    Parameters
    ----------
    broker_host : str
        MQTT broker host name.
    broker_port : int
        MQTT broker port.
    client_id : str
        MQTT client identifier. Empty lets the broker assign one.
    username : str or None
        Broker user name.
    password : str or None
        Broker password.
    tls : bool
        Connect with TLS using the system trust store.
    keepalive : int
        MQTT keepalive in seconds.
    qos : int
        Quality of service for subscriptions and publishes (0 or 1).
    interface_name : str
        First topic level, ``uagv`` by default.
    protocol_version : str
        Version string stamped into every outgoing header.
    manufacturer : str
        Manufacturer filter for subscriptions (``+`` = any vehicle).
    serial_number : str
        Serial number filter for subscriptions (``+`` = any vehicle).
    """

    broker_host: str = "localhost"
    broker_port: int = 1883
    client_id: str = ""
    username: str | None = None
    password: str | None = None
    tls: bool = False
    keepalive: int = 60
    qos: int = 0
    interface_name: str = INTERFACE_NAME
    protocol_version: str = PROTOCOL_VERSION
    manufacturer: str = "+"
    serial_number: str = "+"

    def __post_init__(self) -> None:
        if self.qos not in (0, 1):
            raise VdaConfigError(f"qos must be 0 or 1, got {self.qos}")
        if not 0 < self.broker_port < 65536:
            raise VdaConfigError(f"broker_port out of range: {self.broker_port}")
        if not self.interface_name or "/" in self.interface_name:
            raise VdaConfigError(f"invalid interface_name: {self.interface_name!r}")
        try:
            major_version_of(self.protocol_version)
        except ValueError as exc:
            raise VdaConfigError(str(exc)) from exc

    @property
    def major_version(self) -> str:
        """Topic major version derived from ``protocol_version`` (e.g. ``v2``)."""
        return major_version_of(self.protocol_version)

    @classmethod
    def from_env(cls, **overrides: Any) -> VdaConfig:
        """Create configuration from environment variables.

        Reads ``VDA_BROKER_HOST``, ``VDA_BROKER_PORT`` and the other
        ``VDA_*`` variables listed below. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        VdaConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VDA_BROKER_HOST": "broker_host",
            "VDA_CLIENT_ID": "client_id",
            "VDA_USERNAME": "username",
            "VDA_PASSWORD": "password",
            "VDA_INTERFACE_NAME": "interface_name",
            "VDA_PROTOCOL_VERSION": "protocol_version",
            "VDA_MANUFACTURER": "manufacturer",
            "VDA_SERIAL_NUMBER": "serial_number",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric values, handled separately
        for env_key, field_name in (
            ("VDA_BROKER_PORT", "broker_port"),
            ("VDA_KEEPALIVE", "keepalive"),
            ("VDA_QOS", "qos"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = int(val)
                except ValueError as exc:
                    raise VdaConfigError(f"{env_key} must be an integer, got {val!r}") from exc

        if "tls" not in overrides:
            config_kwargs["tls"] = _env_bool(env.get("VDA_TLS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
