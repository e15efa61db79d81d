"""Data models for geobridge."""

from geobridge.models.delivery import DeliveryRecord
from geobridge.models.events import DeviceEvent
from geobridge.models.fix import Fix, format_timestamp
from geobridge.models.options import LocationRequestOptions
from geobridge.models.state import AcquisitionFailure, ConnectionState, PipelinePhase, ProbeResult

__all__ = [
    "AcquisitionFailure",
    "ConnectionState",
    "DeliveryRecord",
    "DeviceEvent",
    "Fix",
    "LocationRequestOptions",
    "PipelinePhase",
    "ProbeResult",
    "format_timestamp",
]
