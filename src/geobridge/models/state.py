"""State enums shared by the supervisor, pipeline and probe."""

from __future__ import annotations

from enum import StrEnum


class ConnectionState(StrEnum):
    """Event-channel connection state."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class PipelinePhase(StrEnum):
    """Phase of the acquire-then-deliver pipeline."""

    IDLE = "idle"
    ACQUIRING = "acquiring"
    SENDING = "sending"


class ProbeResult(StrEnum):
    """Normalized outcome of a health probe."""

    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"


class AcquisitionFailure(StrEnum):
    """Why a location source could not produce a fix."""

    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
