"""Data models for VDA 5050 messages."""

from pyvda5050.models._base import HeaderId, UInt32, UInt64, VdaBaseModel, VdaEnum, VdaTimestamp, format_timestamp
from pyvda5050.models.action import (
    NULL_VALUE,
    Action,
    ActionParameter,
    ActionParameterValue,
    BlockingType,
    ValueKind,
    WireValue,
    decode_json_value,
    decode_value,
    encode_json_value,
    encode_value,
)
from pyvda5050.models.common import (
    AgvPosition,
    BoundingBoxReference,
    ControlPoint,
    LoadDimensions,
    NodePosition,
    Trajectory,
    Velocity,
)
from pyvda5050.models.connection import Connection, ConnectionState
from pyvda5050.models.factsheet import (
    ActionScope,
    AgvAction,
    AgvActionParameter,
    AgvClass,
    AgvGeometry,
    AgvKinematic,
    Envelopes2d,
    Envelopes3d,
    Factsheet,
    LoadSet,
    LoadSpecification,
    LocalizationType,
    MaxArrayLens,
    MaxStringLens,
    NavigationType,
    OptionalParameter,
    PhysicalParameters,
    PolygonPoint,
    Position,
    ProtocolFeatures,
    ProtocolLimits,
    Support,
    Timing,
    TypeSpecification,
    ValueDataType,
    WheelDefinition,
    WheelType,
)
from pyvda5050.models.header import MessageKind, VdaMessage
from pyvda5050.models.instant_actions import InstantActions
from pyvda5050.models.order import Edge, Node, Order, OrientationType
from pyvda5050.models.state import (
    ActionState,
    ActionStatus,
    BatteryState,
    EdgeState,
    EStop,
    Error,
    ErrorLevel,
    ErrorReference,
    InfoLevel,
    Information,
    InfoReference,
    Load,
    NodeState,
    OperatingMode,
    SafetyState,
    State,
)
from pyvda5050.models.visualization import Visualization

__all__ = [
    "NULL_VALUE",
    "Action",
    "ActionParameter",
    "ActionParameterValue",
    "ActionScope",
    "ActionState",
    "ActionStatus",
    "AgvAction",
    "AgvActionParameter",
    "AgvClass",
    "AgvGeometry",
    "AgvKinematic",
    "AgvPosition",
    "BatteryState",
    "BlockingType",
    "BoundingBoxReference",
    "Connection",
    "ConnectionState",
    "ControlPoint",
    "EStop",
    "Edge",
    "EdgeState",
    "Envelopes2d",
    "Envelopes3d",
    "Error",
    "ErrorLevel",
    "ErrorReference",
    "Factsheet",
    "HeaderId",
    "InfoLevel",
    "InfoReference",
    "Information",
    "InstantActions",
    "Load",
    "LoadDimensions",
    "LoadSet",
    "LoadSpecification",
    "LocalizationType",
    "MaxArrayLens",
    "MaxStringLens",
    "MessageKind",
    "NavigationType",
    "Node",
    "NodePosition",
    "NodeState",
    "OperatingMode",
    "OptionalParameter",
    "Order",
    "OrientationType",
    "PhysicalParameters",
    "PolygonPoint",
    "Position",
    "ProtocolFeatures",
    "ProtocolLimits",
    "SafetyState",
    "State",
    "Support",
    "Timing",
    "Trajectory",
    "TypeSpecification",
    "UInt32",
    "UInt64",
    "ValueDataType",
    "ValueKind",
    "VdaBaseModel",
    "VdaEnum",
    "VdaMessage",
    "VdaTimestamp",
    "Velocity",
    "Visualization",
    "WheelDefinition",
    "WheelType",
    "WireValue",
    "decode_json_value",
    "decode_value",
    "encode_json_value",
    "encode_value",
    "format_timestamp",
]
