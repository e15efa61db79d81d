"""Delivery of a single fix to the Device's ingest endpoint."""

from __future__ import annotations

import logging

from geobridge._transport import DeviceTransport
from geobridge.exceptions import DeliveryFailedError, DeviceTransportError
from geobridge.models.fix import Fix

_logger = logging.getLogger(__name__)


class DeliveryClient:
    """Send fixes to the Device.

    Exactly one attempt per call; retry policy belongs to the caller.
    """

    def __init__(self, transport: DeviceTransport, *, timeout: float) -> None:
        self._transport = transport
        self._timeout = timeout

    async def deliver(self, fix: Fix) -> None:
        """POST *fix* to the Device.

        Raises :class:`DeliveryFailedError` on transport error, timeout, or a
        non-acknowledging response.
        """
        try:
            status = await self._transport.post_location(fix.to_payload(), timeout=self._timeout)
        except DeviceTransportError as exc:
            raise DeliveryFailedError(
                str(exc),
                status_code=exc.status_code,
                endpoint=exc.endpoint,
            ) from exc
        _logger.debug("Delivery acknowledged with HTTP %s", status)
