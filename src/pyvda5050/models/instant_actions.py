"""Instant actions message."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from pyvda5050.models.action import Action
from pyvda5050.models.header import MessageKind, VdaMessage


class InstantActions(VdaMessage):
    """Actions the vehicle executes as soon as they arrive.

    They bypass the order graph; each one is later reflected by an
    ``ActionState`` with the same ``action_id``.
    """

    KIND: ClassVar[MessageKind] = MessageKind.INSTANT_ACTIONS

    instant_actions: list[Action] = Field(default_factory=list)
