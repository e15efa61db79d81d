"""External location capabilities.

The platform GPS and permission prompts live outside this library; they are
reached through the two protocols below.  Two trivial implementations are
provided for hosts without a permission model and for fixed installations.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from geobridge.models.fix import Fix
from geobridge.models.options import LocationRequestOptions


class LocationSource(Protocol):
    """Produces one positioned fix per request.

    Implementations raise :class:`~geobridge.exceptions.PermissionDeniedError`
    or :class:`~geobridge.exceptions.AcquisitionFailedError` (with a
    ``TIMEOUT`` or ``UNAVAILABLE`` reason) when no fix can be produced.
    """

    async def request_fix(self, options: LocationRequestOptions) -> Fix:
        ...


class PermissionProvider(Protocol):
    """Asks the platform for permission to read the location."""

    async def request_grant(self) -> bool:
        ...


class AlwaysGranted:
    """Permission provider for platforms that have no runtime prompt."""

    async def request_grant(self) -> bool:
        return True


class StaticLocationSource:
    """Location source that always reports the same coordinates."""

    def __init__(
        self,
        latitude: float,
        longitude: float,
        accuracy: float = 0.0,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        # Reject an invalid position up front.
        Fix(latitude=latitude, longitude=longitude, accuracy=accuracy, captured_at=clock())
        self._latitude = latitude
        self._longitude = longitude
        self._accuracy = accuracy
        self._clock = clock

    async def request_fix(self, options: LocationRequestOptions) -> Fix:
        return Fix(
            latitude=self._latitude,
            longitude=self._longitude,
            accuracy=self._accuracy,
            captured_at=self._clock(),
        )
