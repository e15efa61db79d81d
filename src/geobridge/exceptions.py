"""Custom exception hierarchy for geobridge."""

from __future__ import annotations

from geobridge.models.state import AcquisitionFailure


class GeoBridgeError(Exception):
    """Base exception for all geobridge errors."""


class GeoBridgeConfigError(GeoBridgeError):
    """Invalid or missing configuration."""


class ChannelError(GeoBridgeError):
    """Event-channel open, close, or transport failure.

    Handled inside :class:`~geobridge.supervisor.ConnectionSupervisor`,
    which recovers by scheduling a reconnection.  Never escapes to callers.
    """


class DecodeError(GeoBridgeError):
    """Inbound event-channel message could not be decoded.

    Handled inside :class:`~geobridge.router.EventRouter`, which discards
    the message.
    """


class DeviceTransportError(GeoBridgeError):
    """HTTP-level failure talking to the Device (network, timeout, non-2xx)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class DeviceUnreachableError(GeoBridgeError):
    """The Device did not answer its status endpoint."""


class PipelineError(GeoBridgeError):
    """Base for failures reported by a location pipeline operation."""


class BusyError(PipelineError):
    """A pipeline operation is already in flight; the request was rejected."""


class PermissionDeniedError(PipelineError):
    """Location permission was not granted."""


class AcquisitionFailedError(PipelineError):
    """The location source could not produce a fix."""

    def __init__(self, message: str, *, reason: AcquisitionFailure = AcquisitionFailure.UNAVAILABLE) -> None:
        self.reason = reason
        super().__init__(message)


class DeliveryFailedError(PipelineError, DeviceTransportError):
    """The Device did not acknowledge a location delivery."""
