"""High-level async client that coordinates a session with the Device."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import aiohttp

from geobridge._channel import ChannelOpener, WebSocketOpener
from geobridge._signal import Signal
from geobridge._transport import DeviceTransport, HttpTransport
from geobridge.config import GeoBridgeConfig
from geobridge.delivery import DeliveryClient
from geobridge.exceptions import DeviceUnreachableError, GeoBridgeError
from geobridge.location import AlwaysGranted, LocationSource, PermissionProvider
from geobridge.models.delivery import DeliveryRecord
from geobridge.models.fix import Fix
from geobridge.models.state import ConnectionState, PipelinePhase, ProbeResult
from geobridge.pipeline import LocationPipeline
from geobridge.probe import HealthProbe
from geobridge.router import EventRouter
from geobridge.supervisor import ConnectionSupervisor

_logger = logging.getLogger(__name__)


class GeoBridgeClient:
    """Async coordinator for one Device.

    Usage::

        async with GeoBridgeClient(config, source=my_gps) as client:
            await client.start()
            ...
            record = await client.send_location()

    The client wires the health probe, delivery client, pipeline, event
    router and connection supervisor together, and republishes their
    state for a presentation layer.
    """

    def __init__(
        self,
        config: GeoBridgeConfig,
        *,
        source: LocationSource,
        permissions: PermissionProvider | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: DeviceTransport | None = None,
        opener: ChannelOpener | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._source = source
        self._permissions = permissions or AlwaysGranted()
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._opener = opener
        self._clock = clock

        self._probe: HealthProbe | None = None
        self._pipeline: LocationPipeline | None = None
        self._router: EventRouter | None = None
        self._supervisor: ConnectionSupervisor | None = None

        self._status_message = "Waiting for connection..."
        self.status_changed: Signal[str] = Signal("client.status_changed")

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GeoBridgeClient:
        if self._http_session is None and (self._transport is None or self._opener is None):
            self._http_session = aiohttp.ClientSession()

        transport = self._transport
        if transport is None:
            assert self._http_session is not None  # noqa: S101
            transport = HttpTransport(self._config, self._http_session)
        opener = self._opener
        if opener is None:
            assert self._http_session is not None  # noqa: S101
            opener = WebSocketOpener(
                self._http_session,
                self._config.ws_url,
                connect_timeout=self._config.ws_connect_timeout,
                heartbeat=self._config.ws_heartbeat,
            )

        self._probe = HealthProbe(transport, timeout=self._config.probe_timeout)
        pipeline_kwargs: dict[str, Any] = {}
        if self._clock is not None:
            pipeline_kwargs["clock"] = self._clock
        self._pipeline = LocationPipeline(
            source=self._source,
            permissions=self._permissions,
            delivery=DeliveryClient(transport, timeout=self._config.delivery_timeout),
            options=self._config.location,
            **pipeline_kwargs,
        )
        self._router = EventRouter(self._pipeline.acquire_and_deliver)
        self._supervisor = ConnectionSupervisor(
            opener,
            self._router.route,
            reconnect_delay=self._config.reconnect_delay,
        )

        self._pipeline.status_changed.connect(self._set_status)
        self._router.status_changed.connect(self._set_status)
        self._supervisor.status_changed.connect(self._set_status)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._supervisor is not None:
            await self._supervisor.stop()
        # In-flight acquisitions and deliveries run to completion.
        if self._router is not None:
            await self._router.wait_idle()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _not_initialized(self) -> GeoBridgeError:
        return GeoBridgeError("Client not initialized. Use 'async with GeoBridgeClient(...) as client:'")

    @property
    def probe(self) -> HealthProbe:
        if self._probe is None:
            raise self._not_initialized()
        return self._probe

    @property
    def pipeline(self) -> LocationPipeline:
        if self._pipeline is None:
            raise self._not_initialized()
        return self._pipeline

    @property
    def router(self) -> EventRouter:
        if self._router is None:
            raise self._not_initialized()
        return self._router

    @property
    def supervisor(self) -> ConnectionSupervisor:
        if self._supervisor is None:
            raise self._not_initialized()
        return self._supervisor

    def _set_status(self, message: str) -> None:
        self._status_message = message
        self.status_changed.emit(message)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> ProbeResult | None:
        """Start the session.

        With ``probe_before_connect`` the Device is probed first and the
        event channel is opened only when it answers.  Returns the probe
        result, or ``None`` when probing is disabled.
        """
        result: ProbeResult | None = None
        if self._config.probe_before_connect:
            result = await self.check_connection()
            if result is ProbeResult.UNREACHABLE:
                _logger.info("Device %s unreachable, event channel not started", self._config.device_host)
                return result
        self.supervisor.start()
        return result

    async def stop(self) -> None:
        """Close the event channel and stop reconnecting."""
        await self.supervisor.stop()

    async def check_connection(self) -> ProbeResult:
        """Probe the Device's status endpoint."""
        result = await self.probe.check()
        if result is ProbeResult.REACHABLE:
            self._set_status("Connected to device")
        else:
            self._set_status("Cannot reach device - Check WiFi")
        return result

    # ------------------------------------------------------------------
    # Manual operations
    # ------------------------------------------------------------------

    async def acquire_location(self) -> Fix:
        """Acquire and store a fix without sending it."""
        return await self.pipeline.acquire_only()

    async def send_location(self, *, check_connection: bool = True) -> DeliveryRecord:
        """Acquire a fix and deliver it to the Device.

        Parameters
        ----------
        check_connection
            Probe the Device first and raise :class:`DeviceUnreachableError`
            without acquiring when it does not answer.
        """
        if check_connection and await self.check_connection() is ProbeResult.UNREACHABLE:
            raise DeviceUnreachableError(f"Please connect to the device network ({self._config.device_host})")
        return await self.pipeline.acquire_and_deliver()

    # ------------------------------------------------------------------
    # Observer views
    # ------------------------------------------------------------------

    @property
    def config(self) -> GeoBridgeConfig:
        return self._config

    @property
    def connection_state(self) -> ConnectionState:
        if self._supervisor is None:
            return ConnectionState.DISCONNECTED
        return self._supervisor.state

    @property
    def phase(self) -> PipelinePhase:
        if self._pipeline is None:
            return PipelinePhase.IDLE
        return self._pipeline.phase

    @property
    def fix(self) -> Fix | None:
        return self._pipeline.fix if self._pipeline is not None else None

    @property
    def last_delivery(self) -> DeliveryRecord | None:
        return self._pipeline.last_delivery if self._pipeline is not None else None

    @property
    def reachable(self) -> bool | None:
        """Outcome of the last probe as a bool, ``None`` before the first probe."""
        if self._probe is None or self._probe.last_result is None:
            return None
        return self._probe.last_result is ProbeResult.REACHABLE

    @property
    def status_message(self) -> str:
        """Human-readable description of the latest activity."""
        return self._status_message
