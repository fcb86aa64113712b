"""Helpers for compact, safe debug logging.

State and order payloads can be large (long node lists, NURBS
trajectories) and connection settings carry broker credentials.  Values
are shortened and credentials masked before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "token",
        "accesstoken",
        "authorization",
        "cookie",
        "secret",
    }
)

# Geometry arrays are noise in logs; only their length is kept.
_BULK_KEYS: frozenset[str] = frozenset({"controlpoints", "knotvector", "polygonpoints"})

_MAX_DEPTH = 20


def _shorten(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}…<truncated>"


def summarize_for_log(value: Any, *, max_string: int = 256, max_items: int = 20, _depth: int = 0) -> Any:
    """Return a masked, shortened copy of *value* suitable for debug logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _shorten(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    def nested(item: Any) -> Any:
        return summarize_for_log(item, max_string=max_string, max_items=max_items, _depth=_depth + 1)

    if isinstance(value, Mapping):
        summary: dict[str, Any] = {}
        for raw_key, item in value.items():
            key = str(raw_key)
            folded = key.lower()
            if folded in _CREDENTIAL_KEYS:
                summary[key] = "<redacted>"
            elif folded in _BULK_KEYS and isinstance(item, Sequence) and not isinstance(item, str):
                summary[key] = f"<{len(item)} items>"
            else:
                summary[key] = nested(item)
        return summary

    if isinstance(value, Sequence):
        head = [nested(item) for item in value[:max_items]]
        hidden = len(value) - len(head)
        if hidden > 0:
            head.append(f"…<+{hidden} items>")
        return head

    return repr(value)
