"""Event-channel message model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DeviceEvent:
    """Decoded event-channel message."""

    event: str
    payload: dict[str, Any]
