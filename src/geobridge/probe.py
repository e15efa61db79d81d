"""One-shot reachability check against the Device's status endpoint."""

from __future__ import annotations

import logging

from geobridge._signal import Signal
from geobridge._transport import DeviceTransport
from geobridge.exceptions import DeviceTransportError
from geobridge.models.state import ProbeResult

_logger = logging.getLogger(__name__)


class HealthProbe:
    """Check whether the Device answers its status endpoint.

    Independent of the event channel: a probe may run at any time and has
    no effect on :class:`~geobridge.supervisor.ConnectionSupervisor`.
    """

    def __init__(self, transport: DeviceTransport, *, timeout: float) -> None:
        self._transport = transport
        self._timeout = timeout
        self._last_result: ProbeResult | None = None
        self.checked: Signal[ProbeResult] = Signal("probe.checked")

    @property
    def last_result(self) -> ProbeResult | None:
        """Outcome of the most recent :meth:`check`, ``None`` before the first."""
        return self._last_result

    async def check(self) -> ProbeResult:
        """Probe the Device.  Never raises; every failure is ``UNREACHABLE``."""
        try:
            await self._transport.get_status(timeout=self._timeout)
        except DeviceTransportError as exc:
            _logger.debug("Status probe failed: %s", exc)
            result = ProbeResult.UNREACHABLE
        except Exception:
            _logger.debug("Status probe raised unexpectedly", exc_info=True)
            result = ProbeResult.UNREACHABLE
        else:
            result = ProbeResult.REACHABLE

        self._last_result = result
        self.checked.emit(result)
        return result
