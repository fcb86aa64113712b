"""State report checks: snapshot consistency and progress between reports."""

from __future__ import annotations

from pyvda5050.exceptions import VdaGraphError, VdaStateRegressionError
from pyvda5050.models.order import Order
from pyvda5050.models.state import ActionStatus, EdgeState, NodeState, State

# Position of each status along the action lifecycle.  RUNNING and PAUSED
# share a rank: they may alternate any number of times.
_STATUS_RANK: dict[ActionStatus, int] = {
    ActionStatus.WAITING: 0,
    ActionStatus.INITIALIZING: 1,
    ActionStatus.RUNNING: 2,
    ActionStatus.PAUSED: 2,
    ActionStatus.FINISHED: 3,
    ActionStatus.FAILED: 3,
}


def is_action_transition_allowed(old: ActionStatus, new: ActionStatus) -> bool:
    """Whether an action may move from *old* to *new* between two reports.

    Forward moves may skip steps (``WAITING`` straight to ``RUNNING``);
    backward moves are never allowed and a terminal status is final.
    """
    if old == new:
        return True
    if old.is_terminal:
        return False
    return _STATUS_RANK[new] >= _STATUS_RANK[old]


def _describe(element: NodeState | EdgeState) -> str:
    if isinstance(element, NodeState):
        return f"nodeState {element.node_id!r} (sequenceId {element.sequence_id})"
    return f"edgeState {element.edge_id!r} (sequenceId {element.sequence_id})"


def validate_state(state: State) -> None:
    """Check the internal consistency of one state snapshot.

    Node and edge states must be in ascending ``sequence_id`` order with
    unique ids, released ones before unreleased ones, and every
    ``action_id`` may appear only once in the action log.
    """
    for label, elements in (("nodeStates", state.node_states), ("edgeStates", state.edge_states)):
        for previous, current in zip(elements, elements[1:], strict=False):
            if current.sequence_id <= previous.sequence_id:
                raise VdaGraphError(f"{label} out of sequenceId order at {_describe(current)}")

    merged: list[NodeState | EdgeState] = sorted(
        [*state.node_states, *state.edge_states],
        key=lambda element: element.sequence_id,
    )
    for previous, current in zip(merged, merged[1:], strict=False):
        if current.sequence_id == previous.sequence_id:
            raise VdaGraphError(f"sequenceId {current.sequence_id} is used by {_describe(previous)} and {_describe(current)}")

    horizon_start: NodeState | EdgeState | None = None
    for element in merged:
        if not element.released:
            horizon_start = horizon_start or element
        elif horizon_start is not None:
            raise VdaGraphError(f"released {_describe(element)} follows unreleased {_describe(horizon_start)}")

    seen: set[str] = set()
    for entry in state.action_states:
        if entry.action_id in seen:
            raise VdaGraphError(f"actionId {entry.action_id!r} appears more than once in actionStates")
        seen.add(entry.action_id)


def validate_state_against_order(state: State, order: Order) -> None:
    """Check that *state* mirrors the remaining part of *order*.

    Every reported node/edge state must correspond to an element of the
    order (same id at the same ``sequence_id``) that has not been
    traversed yet.  The node at ``last_node_sequence_id`` counts as
    traversed, so a vehicle still standing before its first node must
    not list that node again.
    """
    if state.order_id != order.order_id:
        raise VdaGraphError(f"state reports order {state.order_id!r}, expected {order.order_id!r}")

    by_sequence = {element.sequence_id: element for element in order.elements()}
    for node_state in state.node_states:
        element = by_sequence.get(node_state.sequence_id)
        if element is None or getattr(element, "node_id", None) != node_state.node_id:
            raise VdaGraphError(f"{_describe(node_state)} is not part of order {order.order_id!r}")
    for edge_state in state.edge_states:
        element = by_sequence.get(edge_state.sequence_id)
        if element is None or getattr(element, "edge_id", None) != edge_state.edge_id:
            raise VdaGraphError(f"{_describe(edge_state)} is not part of order {order.order_id!r}")

    for element in [*state.node_states, *state.edge_states]:
        if element.sequence_id <= state.last_node_sequence_id:
            raise VdaGraphError(
                f"{_describe(element)} is reported as remaining but lastNodeSequenceId is {state.last_node_sequence_id}"
            )


def validate_progress(previous: State, current: State) -> None:
    """Check that *current* does not move progress backwards from *previous*.

    Only applies while both reports refer to the same ``order_id``; a new
    order starts a fresh log.
    """
    if previous.order_id != current.order_id:
        return

    if current.last_node_sequence_id < previous.last_node_sequence_id:
        raise VdaStateRegressionError(
            f"order {current.order_id!r}: lastNodeSequenceId regressed from "
            f"{previous.last_node_sequence_id} to {current.last_node_sequence_id}"
        )

    for old in previous.action_states:
        new = current.action_state(old.action_id)
        if new is None:
            raise VdaStateRegressionError(f"order {current.order_id!r}: action {old.action_id!r} disappeared from actionStates")
        if not is_action_transition_allowed(old.action_status, new.action_status):
            raise VdaStateRegressionError(
                f"action {old.action_id!r}: {old.action_status} -> {new.action_status} is not allowed"
            )
