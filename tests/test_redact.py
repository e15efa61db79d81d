from __future__ import annotations

from geobridge._redact import redact_for_log


def test_redact_for_log_masks_coordinates() -> None:
    payload = {
        "latitude": 12.34,
        "longitude": 56.78,
        "accuracy": 5.0,
        "nested": {"lat": 1.0, "lng": 2.0},
        "timestamp": "2026-01-01T00:00:00.000Z",
    }

    redacted = redact_for_log(payload)
    assert redacted["latitude"] == "<redacted>"
    assert redacted["longitude"] == "<redacted>"
    assert redacted["nested"] == {"lat": "<redacted>", "lng": "<redacted>"}
    assert redacted["accuracy"] == 5.0
    assert redacted["timestamp"] == "2026-01-01T00:00:00.000Z"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarizes_bytes() -> None:
    assert redact_for_log(b"\x00\x01\x02") == "<bytes:3b>"
