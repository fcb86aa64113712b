from __future__ import annotations

from pyvda5050._redact import summarize_for_log


def test_summarize_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "username": "fleet",
        "password": "pw",
        "nested": {"Token": "abc", "serialNumber": "agv-1"},
    }

    redacted = summarize_for_log(payload)
    assert redacted["username"] == "fleet"
    assert redacted["password"] == "<redacted>"
    assert redacted["nested"]["Token"] == "<redacted>"
    assert redacted["nested"]["serialNumber"] == "agv-1"


def test_summarize_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = summarize_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_summarize_for_log_shortens_long_lists() -> None:
    nodes = [{"nodeId": f"n{i}"} for i in range(30)]
    summary = summarize_for_log({"nodes": nodes}, max_items=5)
    assert len(summary["nodes"]) == 6
    assert summary["nodes"][-1] == "…<+25 items>"


def test_summarize_for_log_collapses_trajectory_arrays() -> None:
    trajectory = {"degree": 3, "knotVector": [0.0] * 8, "controlPoints": [{"x": 0.0, "y": 0.0}] * 4}
    summary = summarize_for_log(trajectory)
    assert summary == {"degree": 3, "knotVector": "<8 items>", "controlPoints": "<4 items>"}


def test_summarize_for_log_bytes() -> None:
    assert summarize_for_log(b"\x00\x01\x02") == "<bytes:3b>"
