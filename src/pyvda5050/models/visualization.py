"""Visualization message."""

from __future__ import annotations

from typing import ClassVar

from pyvda5050.models.common import AgvPosition, Velocity
from pyvda5050.models.header import MessageKind, VdaMessage


class Visualization(VdaMessage):
    """Position and velocity, published at a higher rate for display only."""

    KIND: ClassVar[MessageKind] = MessageKind.VISUALIZATION

    agv_position: AgvPosition | None = None
    velocity: Velocity | None = None
