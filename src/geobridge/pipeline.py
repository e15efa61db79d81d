"""Single-flight acquire-then-deliver pipeline.

State machine::

    IDLE --acquire--> ACQUIRING --fix--> SENDING --settled--> IDLE
                          |                  (deliver only)
                          +--failure------------------------> IDLE

Only one sequence may be in flight.  A request that arrives while the
phase is not ``IDLE`` is rejected with :class:`BusyError`; it is never
queued.  The phase check and the transition to ``ACQUIRING`` happen
before the first suspension point, so under a single event loop no two
callers can both pass the guard.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from geobridge._signal import Signal
from geobridge.delivery import DeliveryClient
from geobridge.exceptions import (
    AcquisitionFailedError,
    BusyError,
    DeliveryFailedError,
    PermissionDeniedError,
)
from geobridge.location import LocationSource, PermissionProvider
from geobridge.models.delivery import DeliveryRecord
from geobridge.models.fix import Fix
from geobridge.models.options import LocationRequestOptions
from geobridge.models.state import AcquisitionFailure, PipelinePhase

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LocationPipeline:
    """Acquire a fix and optionally deliver it to the Device.

    The pipeline exclusively owns the current phase, the most recent fix
    and the most recent delivery record.  Observers read them through the
    properties or subscribe to the signals; nothing else writes them.
    """

    def __init__(
        self,
        *,
        source: LocationSource,
        permissions: PermissionProvider,
        delivery: DeliveryClient,
        options: LocationRequestOptions | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._permissions = permissions
        self._delivery = delivery
        self._options = options or LocationRequestOptions()
        self._clock = clock

        self._phase = PipelinePhase.IDLE
        self._fix: Fix | None = None
        self._last_delivery: DeliveryRecord | None = None

        self.phase_changed: Signal[PipelinePhase] = Signal("pipeline.phase_changed")
        self.fix_changed: Signal[Fix] = Signal("pipeline.fix_changed")
        self.delivered: Signal[DeliveryRecord] = Signal("pipeline.delivered")
        self.status_changed: Signal[str] = Signal("pipeline.status_changed")

    # ------------------------------------------------------------------
    # Observer views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> PipelinePhase:
        return self._phase

    @property
    def fix(self) -> Fix | None:
        """Most recently acquired fix, kept until a newer one replaces it."""
        return self._fix

    @property
    def last_delivery(self) -> DeliveryRecord | None:
        """Most recent successful delivery; failures never clear it."""
        return self._last_delivery

    @property
    def is_busy(self) -> bool:
        return self._phase is not PipelinePhase.IDLE

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def acquire_only(self) -> Fix:
        """Acquire and store a fix without delivering it.

        Raises
        ------
        BusyError
            Another operation is in flight.
        PermissionDeniedError
            Location permission was not granted.
        AcquisitionFailedError
            The source produced no fix.
        """
        self._begin()
        try:
            return await self._acquire()
        finally:
            self._set_phase(PipelinePhase.IDLE)

    async def acquire_and_deliver(self) -> DeliveryRecord:
        """Acquire a fix and deliver it to the Device.

        On delivery failure the new fix stays stored and the previous
        delivery record is kept.

        Raises
        ------
        BusyError
            Another operation is in flight.
        PermissionDeniedError, AcquisitionFailedError
            Acquisition failed; no delivery was attempted.
        DeliveryFailedError
            The Device did not acknowledge the fix.
        """
        self._begin()
        try:
            fix = await self._acquire()
            self._set_phase(PipelinePhase.SENDING)
            record = await self._deliver(fix)
        finally:
            self._set_phase(PipelinePhase.IDLE)
        return record

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _begin(self) -> None:
        if self._phase is not PipelinePhase.IDLE:
            _logger.debug("Pipeline request rejected, phase=%s", self._phase)
            raise BusyError(f"Location pipeline is busy ({self._phase})")
        self._set_phase(PipelinePhase.ACQUIRING)

    def _set_phase(self, phase: PipelinePhase) -> None:
        if phase is self._phase:
            return
        _logger.debug("Pipeline phase %s -> %s", self._phase, phase)
        self._phase = phase
        self.phase_changed.emit(phase)

    def _status(self, message: str) -> None:
        _logger.debug("Pipeline status: %s", message)
        self.status_changed.emit(message)

    async def _acquire(self) -> Fix:
        try:
            granted = await self._permissions.request_grant()
        except Exception as exc:
            self._status("Location permission is required")
            raise PermissionDeniedError(f"Permission request failed: {exc}") from exc
        if not granted:
            self._status("Location permission is required")
            raise PermissionDeniedError("Location permission is required")

        self._status("Getting location...")
        try:
            fix = await self._source.request_fix(self._options)
        except (PermissionDeniedError, AcquisitionFailedError) as exc:
            self._status(f"Location error: {exc}")
            raise
        except Exception as exc:
            self._status(f"Location error: {exc}")
            raise AcquisitionFailedError(str(exc), reason=AcquisitionFailure.UNAVAILABLE) from exc

        self._fix = fix
        self.fix_changed.emit(fix)
        self._status("Location acquired")
        return fix

    async def _deliver(self, fix: Fix) -> DeliveryRecord:
        self._status("Sending location to device...")
        try:
            await self._delivery.deliver(fix)
        except DeliveryFailedError as exc:
            if exc.status_code is not None:
                self._status("Failed to send location")
            else:
                self._status(f"Send error: {exc}")
            raise
        except Exception as exc:
            self._status(f"Send error: {exc}")
            raise DeliveryFailedError(f"Delivery failed: {exc}") from exc

        record = DeliveryRecord(sent_at=self._clock(), fix=fix)
        self._last_delivery = record
        self._status("Location sent successfully!")
        self.delivered.emit(record)
        return record
