"""Event-channel runtime over an aiohttp WebSocket."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Protocol

import aiohttp

from geobridge.exceptions import ChannelError

_logger = logging.getLogger(__name__)


class EventChannel(Protocol):
    """An open event channel."""

    def messages(self) -> AsyncIterator[str | bytes]:
        """Yield inbound messages until the channel closes.

        Raises :class:`ChannelError` on a transport error.
        """
        ...

    async def close(self) -> None:
        ...


class ChannelOpener(Protocol):
    """Opens a fresh event channel; raises :class:`ChannelError` on failure."""

    async def open(self) -> EventChannel:
        ...


class WebSocketChannel:
    """Event channel backed by an aiohttp client WebSocket."""

    def __init__(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._ws = ws

    async def messages(self) -> AsyncIterator[str | bytes]:
        async for msg in self._ws:
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                yield msg.data
            elif msg.type is aiohttp.WSMsgType.ERROR:
                raise ChannelError(f"WebSocket transport error: {self._ws.exception()}")
        _logger.debug("WebSocket closed code=%s", self._ws.close_code)

    async def close(self) -> None:
        if not self._ws.closed:
            await self._ws.close()


class WebSocketOpener:
    """Open the Device's WebSocket endpoint on a shared aiohttp session."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        url: str,
        *,
        connect_timeout: float,
        heartbeat: float | None = None,
    ) -> None:
        self._http = http_session
        self._url = url
        self._connect_timeout = connect_timeout
        self._heartbeat = heartbeat

    async def open(self) -> WebSocketChannel:
        _logger.debug("WebSocket connect %s", self._url)
        try:
            async with asyncio.timeout(self._connect_timeout):
                ws = await self._http.ws_connect(self._url, heartbeat=self._heartbeat)
        except TimeoutError as exc:
            raise ChannelError(f"WebSocket connect to {self._url} timed out") from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise ChannelError(f"WebSocket connect to {self._url} failed: {exc}") from exc
        return WebSocketChannel(ws)
