"""State message: the vehicle's report of order progress.

Enum values and field meanings follow the VDA 5050 2.0 state topic.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from pyvda5050.models._base import UInt64, VdaBaseModel, VdaEnum
from pyvda5050.models.common import AgvPosition, BoundingBoxReference, LoadDimensions, NodePosition, Trajectory, Velocity
from pyvda5050.models.header import MessageKind, VdaMessage

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class ActionStatus(VdaEnum):
    """Lifecycle of a single action.

    ``WAITING → INITIALIZING → RUNNING ⇄ PAUSED → FINISHED | FAILED``.
    """

    WAITING = "WAITING"
    """Received, but the triggering node/edge was not reached yet."""
    INITIALIZING = "INITIALIZING"
    """Triggered; preparatory measures are initiated."""
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    """Paused by an instant action or an external trigger."""
    FINISHED = "FINISHED"
    """Finished; a result may be reported in ``result_description``."""
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (ActionStatus.FINISHED, ActionStatus.FAILED)


class OperatingMode(VdaEnum):
    """Current operating mode of the vehicle."""

    AUTOMATIC = "AUTOMATIC"
    SEMIAUTOMATIC = "SEMIAUTOMATIC"
    MANUAL = "MANUAL"
    SERVICE = "SERVICE"
    TEACHIN = "TEACHIN"


class ErrorLevel(VdaEnum):
    WARNING = "WARNING"
    """Degraded but operating (e.g. maintenance due)."""
    FATAL = "FATAL"
    """Not operational; user intervention required."""


class InfoLevel(VdaEnum):
    INFO = "INFO"
    """For visualization."""
    DEBUG = "DEBUG"
    """For debugging."""


class EStop(VdaEnum):
    """Acknowledge type of an emergency stop."""

    AUTOACK = "AUTOACK"
    """Auto-acknowledgeable, e.g. bumper or protective field."""
    MANUAL = "MANUAL"
    """Has to be acknowledged manually at the vehicle."""
    REMOTE = "REMOTE"
    """Facility e-stop, acknowledged remotely."""
    NONE = "NONE"


# ------------------------------------------------------------------
# Graph mirror
# ------------------------------------------------------------------


class NodeState(VdaBaseModel):
    """A node the vehicle still has to traverse."""

    node_id: str
    sequence_id: UInt64
    node_description: str | None = None
    node_position: NodePosition | None = None
    released: bool


class EdgeState(VdaBaseModel):
    """An edge the vehicle still has to traverse."""

    edge_id: str
    sequence_id: UInt64
    edge_description: str | None = None
    released: bool
    trajectory: Trajectory | None = None


class ActionState(VdaBaseModel):
    """Reported status of one action, keyed by ``action_id``."""

    action_id: str
    action_type: str | None = None
    action_description: str | None = None
    action_status: ActionStatus
    result_description: str | None = None


# ------------------------------------------------------------------
# Vehicle condition
# ------------------------------------------------------------------


class Load(VdaBaseModel):
    """A load the vehicle currently carries."""

    load_id: str | None = None
    """Barcode/RFID; empty when identifiable but not identified yet."""
    load_type: str | None = None
    load_position: str | None = None
    bounding_box_reference: BoundingBoxReference | None = None
    load_dimensions: LoadDimensions | None = None
    weight: float | None = Field(default=None, ge=0.0)
    """Weight in kg."""


class BatteryState(VdaBaseModel):
    battery_charge: float
    """State of charge in percent."""
    battery_voltage: float | None = None
    battery_health: int | None = Field(default=None, ge=0, le=100)
    charging: bool
    reach: float | None = Field(default=None, ge=0.0)
    """Estimated reach in meters."""


class ErrorReference(VdaBaseModel):
    reference_key: str
    """E.g. ``headerId``, ``orderId``, ``actionId``."""
    reference_value: str


class Error(VdaBaseModel):
    """An active error of the vehicle."""

    error_type: str
    error_references: list[ErrorReference] = Field(default_factory=list)
    error_description: str | None = None
    error_level: ErrorLevel


class InfoReference(VdaBaseModel):
    reference_key: str
    reference_value: str


class Information(VdaBaseModel):
    """Visualization/debugging information; never used for control logic."""

    info_type: str
    info_references: list[InfoReference] = Field(default_factory=list)
    info_description: str | None = None
    info_level: InfoLevel


class SafetyState(VdaBaseModel):
    e_stop: EStop
    field_violation: bool
    """Protective field violated."""


# ------------------------------------------------------------------
# State message
# ------------------------------------------------------------------


class State(VdaMessage):
    """Full snapshot of the vehicle state.

    ``node_states``/``edge_states`` list only the not yet traversed part
    of base and horizon.  ``action_states`` is cumulative for the active
    order and is cleared only when a new ``order_id`` begins.
    """

    KIND: ClassVar[MessageKind] = MessageKind.STATE

    order_id: str
    """Current or previous order; ``""`` if none."""
    order_update_id: UInt64
    zone_set_id: str | None = None
    last_node_id: str
    last_node_sequence_id: UInt64
    driving: bool
    """Driving and/or rotating; other movements (lift...) excluded."""
    paused: bool | None = None
    new_base_request: bool | None = None
    distance_since_last_node: float | None = None
    operating_mode: OperatingMode
    node_states: list[NodeState] = Field(default_factory=list)
    edge_states: list[EdgeState] = Field(default_factory=list)
    agv_position: AgvPosition | None = None
    velocity: Velocity | None = None
    loads: list[Load] | None = None
    """``None``: the vehicle cannot reason about loads.  ``[]``: no load."""
    action_states: list[ActionState] = Field(default_factory=list)
    battery_state: BatteryState
    errors: list[Error] = Field(default_factory=list)
    information: list[Information] = Field(default_factory=list)
    safety_state: SafetyState

    def action_state(self, action_id: str) -> ActionState | None:
        for entry in self.action_states:
            if entry.action_id == action_id:
                return entry
        return None

    @property
    def has_fatal_errors(self) -> bool:
        """Whether the vehicle reports itself as not operational.

        Advisory only; nothing in this library acts on it.
        """
        return any(error.error_level == ErrorLevel.FATAL for error in self.errors)

    @property
    def has_warnings(self) -> bool:
        return any(error.error_level == ErrorLevel.WARNING for error in self.errors)

    @property
    def is_idle(self) -> bool:
        """No remaining order graph and no running or waiting action."""
        return (
            not self.node_states
            and not self.edge_states
            and all(entry.action_status.is_terminal for entry in self.action_states)
        )

    def same_report(self, other: State) -> bool:
        """Whether *other* carries the same payload, ignoring the header."""
        exclude = {"header_id", "timestamp"}
        return self.model_dump(exclude=exclude) == other.model_dump(exclude=exclude)
