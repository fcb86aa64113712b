"""Tracking layer.

This package is the single place where decoded messages are merged into
a per-vehicle view (latest order, latest state, cumulative action log,
pending instant actions).
"""

from pyvda5050.tracking.events import MessageSource, TrackedMessage
from pyvda5050.tracking.policy import HeaderDecision, classify_header
from pyvda5050.tracking.store import VehicleRecord, VehicleStore

__all__ = [
    "HeaderDecision",
    "MessageSource",
    "TrackedMessage",
    "VehicleRecord",
    "VehicleStore",
    "classify_header",
]
