"""Deterministic merge policy.

This module contains *no* payload parsing and no graph checks.  The
codec and :mod:`pyvda5050.validation` are responsible for producing
well-formed, consistent messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum

from pyvda5050.models.action import Action
from pyvda5050.models.connection import Connection, ConnectionState
from pyvda5050.models.header import VdaMessage
from pyvda5050.models.state import ActionState, State


class HeaderDecision(StrEnum):
    ACCEPT = "accept"
    DUPLICATE = "duplicate"
    """Same header and payload as the last accepted message."""
    STALE = "stale"
    """Header id below the watermark; delivered late or replayed."""


def classify_header(
    *,
    watermark: int | None,
    last: VdaMessage | None,
    incoming: VdaMessage,
) -> HeaderDecision:
    """Decide what to do with *incoming* given the (vehicle, kind) watermark.

    Policy:
    - Header ids are advisory: gaps are fine, a decrease is stale.
    - An equal header id with equal content is a redelivery.
    """
    if watermark is None:
        return HeaderDecision.ACCEPT
    if incoming.header_id < watermark:
        return HeaderDecision.STALE
    if incoming.header_id == watermark and last is not None and last == incoming:
        return HeaderDecision.DUPLICATE
    return HeaderDecision.ACCEPT


def resets_watermarks(message: VdaMessage) -> bool:
    """Whether *message* announces a (re)started vehicle.

    A restarted vehicle counts its header ids from zero again.
    """
    return isinstance(message, Connection) and message.connection_state == ConnectionState.ONLINE


def merge_action_log(
    log: Mapping[str, ActionState],
    log_order_id: str | None,
    state: State,
) -> dict[str, ActionState]:
    """Merge the action states of *state* into *log*.

    Last write wins per ``action_id``; the log starts over when the
    report belongs to a different order.
    """
    merged: dict[str, ActionState] = {} if log_order_id != state.order_id else dict(log)
    for entry in state.action_states:
        merged[entry.action_id] = entry
    return merged


def settle_instant_actions(
    pending: Mapping[str, Action],
    state: State,
    *,
    order_changed: bool = False,
) -> dict[str, Action]:
    """Drop pending instant actions that *state* reports as finished or failed.

    When *state* starts a new order the vehicle has cleared its action
    states, so pending actions it does not list any more are dropped as
    well (rejected or never acknowledged).
    """
    remaining: dict[str, Action] = {}
    for action_id, action in pending.items():
        entry = state.action_state(action_id)
        if entry is None and order_changed:
            continue
        if entry is not None and entry.action_status.is_terminal:
            continue
        remaining[action_id] = action
    return remaining
