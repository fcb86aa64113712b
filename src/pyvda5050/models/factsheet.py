"""Factsheet message: static capability description of a vehicle type."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from pyvda5050.models._base import UInt32, UInt64, VdaBaseModel, VdaEnum
from pyvda5050.models.common import BoundingBoxReference, LoadDimensions
from pyvda5050.models.header import MessageKind, VdaMessage

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class AgvKinematic(VdaEnum):
    DIFF = "DIFF"
    OMNI = "OMNI"
    THREEWHEEL = "THREEWHEEL"


class AgvClass(VdaEnum):
    FORKLIFT = "FORKLIFT"
    CONVEYOR = "CONVEYOR"
    TUGGER = "TUGGER"
    CARRIER = "CARRIER"


class LocalizationType(VdaEnum):
    NATURAL = "NATURAL"
    REFLECTOR = "REFLECTOR"
    RFID = "RFID"
    DMC = "DMC"
    SPOT = "SPOT"
    GRID = "GRID"


class NavigationType(VdaEnum):
    PHYSICAL_LINE_GUIDED = "PHYSICAL_LINE_GUIDED"
    VIRTUAL_LINE_GUIDED = "VIRTUAL_LINE_GUIDED"
    AUTONOMOUS = "AUTONOMOUS"


class Support(VdaEnum):
    SUPPORTED = "SUPPORTED"
    """Optional parameter is supported as specified."""
    REQUIRED = "REQUIRED"
    """Optional parameter is required for proper operation."""


class ActionScope(VdaEnum):
    INSTANT = "INSTANT"
    NODE = "NODE"
    EDGE = "EDGE"


class ValueDataType(VdaEnum):
    BOOL = "BOOL"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    STRING = "STRING"
    OBJECT = "OBJECT"
    ARRAY = "ARRAY"


class WheelType(VdaEnum):
    DRIVE = "DRIVE"
    CASTER = "CASTER"
    FIXED = "FIXED"
    MECANUM = "MECANUM"


# ------------------------------------------------------------------
# Type specification / physical parameters
# ------------------------------------------------------------------


class TypeSpecification(VdaBaseModel):
    """Class and capabilities of the vehicle type series."""

    series_name: str
    series_description: str | None = None
    agv_kinematic: AgvKinematic
    agv_class: AgvClass
    max_load_mass: float
    """Maximum loadable mass in kg."""
    localization_types: list[LocalizationType]
    navigation_types: list[NavigationType]
    """Supported path planning types, sorted by priority."""


class PhysicalParameters(VdaBaseModel):
    speed_min: float
    speed_max: float
    acceleration_max: float
    deceleration_max: float
    height_min: float | None = None
    height_max: float
    width: float
    length: float


# ------------------------------------------------------------------
# Protocol limits
# ------------------------------------------------------------------


class MaxStringLens(VdaBaseModel):
    msg_len: UInt64 | None = None
    """Maximum MQTT message length."""
    topic_serial_len: UInt64 | None = None
    topic_elem_len: UInt64 | None = None
    id_len: UInt64 | None = None
    id_numerical_only: bool | None = None
    enum_len: UInt64 | None = None
    load_id_len: UInt64 | None = None


class MaxArrayLens(VdaBaseModel):
    """Maximum array lengths, keyed on the wire by dotted paths."""

    order_nodes: UInt32 | None = Field(default=None, alias="order.nodes")
    order_edges: UInt32 | None = Field(default=None, alias="order.edges")
    node_actions: UInt32 | None = Field(default=None, alias="node.actions")
    edge_actions: UInt32 | None = Field(default=None, alias="edge.actions")
    actions_actions_parameters: UInt32 | None = Field(default=None, alias="actions.actionsParameters")
    instant_actions: UInt32 | None = Field(default=None, alias="instantActions")
    trajectory_knot_vector: UInt32 | None = Field(default=None, alias="trajectory.knotVector")
    trajectory_control_points: UInt32 | None = Field(default=None, alias="trajectory.controlPoints")
    state_node_states: UInt32 | None = Field(default=None, alias="state.nodeStates")
    state_edge_states: UInt32 | None = Field(default=None, alias="state.edgeStates")
    state_loads: UInt32 | None = Field(default=None, alias="state.loads")
    state_action_states: UInt32 | None = Field(default=None, alias="state.actionStates")
    state_errors: UInt32 | None = Field(default=None, alias="state.errors")
    state_information: UInt32 | None = Field(default=None, alias="state.information")
    error_error_references: UInt32 | None = Field(default=None, alias="error.errorReferences")
    information_info_references: UInt32 | None = Field(default=None, alias="information.infoReferences")


class Timing(VdaBaseModel):
    min_order_interval: float
    """Minimum interval between order messages, in seconds."""
    min_state_interval: float
    default_state_interval: float | None = None
    visualization_interval: float | None = None


class ProtocolLimits(VdaBaseModel):
    """Protocol limitations; an unset or zero limit means unlimited."""

    max_string_lens: MaxStringLens
    max_array_lens: MaxArrayLens
    timing: Timing


# ------------------------------------------------------------------
# Protocol features
# ------------------------------------------------------------------


class OptionalParameter(VdaBaseModel):
    parameter: str
    """Full name, e.g. ``order.nodes.nodePosition.allowedDeviationTheta``."""
    support: Support
    description: str | None = None


class AgvActionParameter(VdaBaseModel):
    """Declared parameter of a supported action type."""

    key: str
    value_data_type: ValueDataType
    description: str | None = None
    is_optional: bool | None = None


class AgvAction(VdaBaseModel):
    """An action type the vehicle supports, with its allowed scopes."""

    action_type: str
    action_description: str | None = None
    action_scopes: list[ActionScope]
    action_parameters: list[AgvActionParameter] = Field(default_factory=list)
    result_description: str | None = None


class ProtocolFeatures(VdaBaseModel):
    optional_parameters: list[OptionalParameter] = Field(default_factory=list)
    agv_actions: list[AgvAction] = Field(default_factory=list)

    def supports_action(self, action_type: str, scope: ActionScope) -> bool:
        """Whether *action_type* is declared for *scope*."""
        return any(action.action_type == action_type and scope in action.action_scopes for action in self.agv_actions)


# ------------------------------------------------------------------
# Geometry
# ------------------------------------------------------------------


class Position(VdaBaseModel):
    """Position in vehicle coordinates."""

    x: float
    y: float
    theta: float | None = None


class WheelDefinition(VdaBaseModel):
    wheel_type: WheelType = Field(alias="type")
    is_active_driven: bool
    is_active_steered: bool
    position: Position
    diameter: float
    width: float
    center_displacement: float | None = None
    constraints: str | None = None


class PolygonPoint(VdaBaseModel):
    x: float
    y: float


class Envelopes2d(VdaBaseModel):
    set: str
    polygon_points: list[PolygonPoint]
    """Closed, non-self-intersecting polygon."""
    description: str | None = None


class Envelopes3d(VdaBaseModel):
    set: str
    format: str
    """Data format, e.g. ``DXF``."""
    data: dict[str, Any] | None = None
    url: str | None = None
    description: str | None = None


class AgvGeometry(VdaBaseModel):
    wheel_definitions: list[WheelDefinition] = Field(default_factory=list)
    envelopes2d: list[Envelopes2d] = Field(default_factory=list)
    envelopes3d: list[Envelopes3d] = Field(default_factory=list)


# ------------------------------------------------------------------
# Load specification
# ------------------------------------------------------------------


class LoadSet(VdaBaseModel):
    set_name: str
    load_type: str
    load_positions: list[str] = Field(default_factory=list)
    bounding_box_reference: BoundingBoxReference | None = None
    load_dimensions: LoadDimensions | None = None
    max_weight: float | None = None
    min_loadhandling_height: float | None = None
    max_loadhandling_height: float | None = None
    min_loadhandling_depth: float | None = None
    max_loadhandling_depth: float | None = None
    min_loadhandling_tilt: float | None = None
    max_loadhandling_tilt: float | None = None
    agv_speed_limit: float | None = None
    agv_acceleration_limit: float | None = None
    agv_deceleration_limit: float | None = None
    pick_time: float | None = None
    drop_time: float | None = None
    description: str | None = None


class LoadSpecification(VdaBaseModel):
    load_positions: list[str] = Field(default_factory=list)
    """Valid values for ``state.loads[].loadPosition``."""
    load_sets: list[LoadSet] = Field(default_factory=list)


# ------------------------------------------------------------------
# Factsheet message
# ------------------------------------------------------------------


class Factsheet(VdaMessage):
    """Capability description of a vehicle type series."""

    KIND: ClassVar[MessageKind] = MessageKind.FACTSHEET

    type_specification: TypeSpecification | None = None
    physical_parameters: PhysicalParameters | None = None
    protocol_limits: ProtocolLimits | None = None
    protocol_features: ProtocolFeatures | None = None
    agv_geometry: AgvGeometry | None = None
    load_specification: LoadSpecification | None = None
    localization_parameters: dict[str, Any] | None = None
