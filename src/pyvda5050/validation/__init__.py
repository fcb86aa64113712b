"""Invariant checks for orders and state reports.

All checks are pure: they raise on the first violation and never modify
their inputs.
"""

from pyvda5050.validation.order import is_repeated_update, validate_order
from pyvda5050.validation.state import (
    is_action_transition_allowed,
    validate_progress,
    validate_state,
    validate_state_against_order,
)

__all__ = [
    "is_action_transition_allowed",
    "is_repeated_update",
    "validate_order",
    "validate_progress",
    "validate_state",
    "validate_state_against_order",
]
