"""geobridge - Async session coordinator relaying location fixes to a fixed-address device."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("geobridge")
except PackageNotFoundError:
    __version__ = "0+local"
from geobridge.client import GeoBridgeClient
from geobridge.config import GeoBridgeConfig
from geobridge.delivery import DeliveryClient
from geobridge.exceptions import (
    AcquisitionFailedError,
    BusyError,
    ChannelError,
    DecodeError,
    DeliveryFailedError,
    DeviceTransportError,
    DeviceUnreachableError,
    GeoBridgeConfigError,
    GeoBridgeError,
    PermissionDeniedError,
    PipelineError,
)
from geobridge.location import AlwaysGranted, LocationSource, PermissionProvider, StaticLocationSource
from geobridge.models import (
    AcquisitionFailure,
    ConnectionState,
    DeliveryRecord,
    DeviceEvent,
    Fix,
    LocationRequestOptions,
    PipelinePhase,
    ProbeResult,
)
from geobridge.pipeline import LocationPipeline
from geobridge.probe import HealthProbe
from geobridge.router import EventRouter
from geobridge.supervisor import ConnectionSupervisor

__all__ = [
    "__version__",
    "AcquisitionFailedError",
    "AcquisitionFailure",
    "AlwaysGranted",
    "BusyError",
    "ChannelError",
    "ConnectionState",
    "ConnectionSupervisor",
    "DecodeError",
    "DeliveryClient",
    "DeliveryFailedError",
    "DeliveryRecord",
    "DeviceEvent",
    "DeviceTransportError",
    "DeviceUnreachableError",
    "EventRouter",
    "Fix",
    "GeoBridgeClient",
    "GeoBridgeConfig",
    "GeoBridgeConfigError",
    "GeoBridgeError",
    "HealthProbe",
    "LocationPipeline",
    "LocationRequestOptions",
    "LocationSource",
    "PermissionDeniedError",
    "PermissionProvider",
    "PipelineError",
    "PipelinePhase",
    "ProbeResult",
    "StaticLocationSource",
]
