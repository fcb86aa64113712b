"""pyvda5050 - VDA 5050 message models, checks and an async MQTT client."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvda5050")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvda5050._sequence import HeaderSequencer
from pyvda5050.client import MasterControlClient
from pyvda5050.codec import decode_message, decode_model, encode_message
from pyvda5050.config import VdaConfig
from pyvda5050.exceptions import (
    VdaConfigError,
    VdaDecodeError,
    VdaError,
    VdaGraphError,
    VdaInvalidEnumError,
    VdaMissingFieldError,
    VdaOverflowError,
    VdaStateRegressionError,
    VdaTransportError,
    VdaTypeMismatchError,
)
from pyvda5050.models import (
    Action,
    ActionParameter,
    ActionParameterValue,
    ActionState,
    ActionStatus,
    BlockingType,
    Connection,
    ConnectionState,
    Edge,
    Factsheet,
    InstantActions,
    MessageKind,
    Node,
    Order,
    State,
    ValueKind,
    Visualization,
)
from pyvda5050.tracking import VehicleStore
from pyvda5050.validation import (
    is_repeated_update,
    validate_order,
    validate_progress,
    validate_state,
    validate_state_against_order,
)

__all__ = [
    "__version__",
    "Action",
    "ActionParameter",
    "ActionParameterValue",
    "ActionState",
    "ActionStatus",
    "BlockingType",
    "Connection",
    "ConnectionState",
    "Edge",
    "Factsheet",
    "HeaderSequencer",
    "InstantActions",
    "MasterControlClient",
    "MessageKind",
    "Node",
    "Order",
    "State",
    "ValueKind",
    "VdaConfig",
    "VdaConfigError",
    "VdaDecodeError",
    "VdaError",
    "VdaGraphError",
    "VdaInvalidEnumError",
    "VdaMissingFieldError",
    "VdaOverflowError",
    "VdaStateRegressionError",
    "VdaTransportError",
    "VdaTypeMismatchError",
    "VehicleStore",
    "Visualization",
    "decode_message",
    "decode_model",
    "encode_message",
    "is_repeated_update",
    "validate_order",
    "validate_progress",
    "validate_state",
    "validate_state_against_order",
]
