"""Mask coordinates before location payloads reach DEBUG logs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_COORDINATE_KEYS: frozenset[str] = frozenset({"latitude", "longitude", "lat", "lon", "lng"})


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Return *value* with coordinate fields masked and long text shortened.

    Handles the shapes seen on the wire: raw frames (``str``/``bytes``) and
    decoded JSON objects.  Other values are returned unchanged.
    """
    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, Mapping):
        return {
            str(key): "<redacted>"
            if str(key).lower() in _COORDINATE_KEYS
            else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    return value
