from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from geobridge.client import GeoBridgeClient
from geobridge.config import GeoBridgeConfig
from geobridge.exceptions import DeviceUnreachableError, GeoBridgeError
from geobridge.location import StaticLocationSource
from geobridge.models import ConnectionState, Fix, PipelinePhase, ProbeResult


class FakeDevice:
    """HTTP + WebSocket side of the Device."""

    def __init__(self) -> None:
        self.sockets: list[web.WebSocketResponse] = []
        self.bodies: list[dict[str, Any]] = []
        self.connections = 0
        self.status_calls = 0
        self.delivered = asyncio.Event()

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/ws", self._ws)
        app.router.add_get("/api/status", self._status)
        app.router.add_post("/api/send_location", self._send_location)
        return app

    async def _ws(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self.connections += 1
        self.sockets.append(ws)
        async for _msg in ws:
            pass
        return ws

    async def _status(self, _request: web.Request) -> web.Response:
        self.status_calls += 1
        return web.json_response({"status": "ok"})

    async def _send_location(self, request: web.Request) -> web.Response:
        self.bodies.append(await request.json())
        self.delivered.set()
        return web.json_response({"status": "saved"})

    async def press_button(self) -> None:
        await self.sockets[-1].send_str('{"event":"buttonPressed"}')


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


def _config(server: TestServer, **kwargs: Any) -> GeoBridgeConfig:
    kwargs.setdefault("reconnect_delay", 0.05)
    return GeoBridgeConfig(device_host=f"{server.host}:{server.port}", **kwargs)


_NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


def _source() -> StaticLocationSource:
    return StaticLocationSource(12.34, 56.78, 5.0, clock=lambda: _NOW)


@pytest.mark.asyncio
async def test_button_press_delivers_location() -> None:
    device = FakeDevice()
    async with TestServer(device.app()) as server:
        async with GeoBridgeClient(_config(server), source=_source()) as client:
            phases: list[PipelinePhase] = []
            client.pipeline.phase_changed.connect(phases.append)

            assert await client.start() is ProbeResult.REACHABLE
            await _wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)

            await device.press_button()
            await asyncio.wait_for(device.delivered.wait(), 2.0)
            await client.router.wait_idle()

            assert phases == [PipelinePhase.ACQUIRING, PipelinePhase.SENDING, PipelinePhase.IDLE]
            assert client.phase is PipelinePhase.IDLE
            assert client.fix == Fix(latitude=12.34, longitude=56.78, accuracy=5.0, captured_at=_NOW)
            assert client.last_delivery is not None
            assert client.status_message == "Location sent successfully!"

    assert device.bodies == [
        {"latitude": 12.34, "longitude": 56.78, "accuracy": 5.0, "timestamp": "2026-05-01T12:00:00.000Z"}
    ]


@pytest.mark.asyncio
async def test_channel_reconnects_after_device_closes_it() -> None:
    device = FakeDevice()
    async with TestServer(device.app()) as server:
        async with GeoBridgeClient(_config(server), source=_source()) as client:
            states: list[ConnectionState] = []
            client.supervisor.state_changed.connect(states.append)
            await client.start()
            await _wait_until(lambda: device.connections == 1)

            await device.sockets[0].close()

            await _wait_until(lambda: device.connections == 2)
            await _wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)
            assert states == [ConnectionState.CONNECTED, ConnectionState.DISCONNECTED, ConnectionState.CONNECTED]


@pytest.mark.asyncio
async def test_start_skips_channel_when_device_unreachable() -> None:
    config = GeoBridgeConfig(device_host=f"127.0.0.1:{unused_port()}", probe_timeout=0.5)
    async with GeoBridgeClient(config, source=_source()) as client:
        assert await client.start() is ProbeResult.UNREACHABLE
        assert client.supervisor.attempts == 0
        assert client.reachable is False
        assert client.status_message == "Cannot reach device - Check WiFi"


@pytest.mark.asyncio
async def test_start_without_probe_connects_directly() -> None:
    device = FakeDevice()
    async with TestServer(device.app()) as server:
        async with GeoBridgeClient(_config(server, probe_before_connect=False), source=_source()) as client:
            assert await client.start() is None
            await _wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)
            assert device.status_calls == 0
            assert client.reachable is None


@pytest.mark.asyncio
async def test_manual_send_checks_connection_first() -> None:
    device = FakeDevice()
    async with TestServer(device.app()) as server:
        async with GeoBridgeClient(_config(server), source=_source()) as client:
            record = await client.send_location()

            assert device.status_calls == 1
            assert client.reachable is True
            assert client.last_delivery == record
            assert client.connection_state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_manual_send_to_unreachable_device_raises() -> None:
    config = GeoBridgeConfig(device_host=f"127.0.0.1:{unused_port()}", probe_timeout=0.5)
    async with GeoBridgeClient(config, source=_source()) as client:
        with pytest.raises(DeviceUnreachableError):
            await client.send_location()
        assert client.fix is None
        assert client.phase is PipelinePhase.IDLE


@pytest.mark.asyncio
async def test_acquire_location_does_not_touch_device() -> None:
    device = FakeDevice()
    async with TestServer(device.app()) as server:
        async with GeoBridgeClient(_config(server), source=_source()) as client:
            fix = await client.acquire_location()

    assert fix.latitude == 12.34
    assert device.bodies == []
    assert device.status_calls == 0


@pytest.mark.asyncio
async def test_external_session_is_not_closed() -> None:
    device = FakeDevice()
    async with TestServer(device.app()) as server, aiohttp.ClientSession() as session:
        async with GeoBridgeClient(_config(server), source=_source(), session=session) as client:
            await client.check_connection()
        assert not session.closed


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = GeoBridgeClient(GeoBridgeConfig(), source=_source())
    assert client.connection_state is ConnectionState.DISCONNECTED
    assert client.phase is PipelinePhase.IDLE
    with pytest.raises(GeoBridgeError):
        await client.send_location(check_connection=False)
