"""HTTP transport for the Device's request/response endpoints."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from geobridge._constants import SEND_LOCATION_PATH, STATUS_PATH
from geobridge._redact import redact_for_log
from geobridge.config import GeoBridgeConfig
from geobridge.exceptions import DeviceTransportError

_logger = logging.getLogger(__name__)


class DeviceTransport(Protocol):
    """Structural transport interface used by the probe and delivery client.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_status(self, *, timeout: float) -> int:
        ...

    async def post_location(self, payload: Mapping[str, Any], *, timeout: float) -> int:
        ...


def _is_acknowledged(status: int) -> bool:
    return 200 <= status < 300


class HttpTransport:
    """aiohttp-backed transport that issues exactly one request per call.

    Each method returns the HTTP status of an acknowledging (2xx) response
    and raises :class:`DeviceTransportError` for anything else.
    """

    def __init__(self, config: GeoBridgeConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def get_status(self, *, timeout: float) -> int:
        return await self._request("GET", self._config.status_url, STATUS_PATH, timeout=timeout)

    async def post_location(self, payload: Mapping[str, Any], *, timeout: float) -> int:
        _logger.debug("Location payload %s", redact_for_log(dict(payload)))
        return await self._request(
            "POST",
            self._config.send_location_url,
            SEND_LOCATION_PATH,
            timeout=timeout,
            data=json.dumps(dict(payload)),
            headers={"content-type": "application/json"},
        )

    async def _request(
        self,
        method: str,
        url: str,
        endpoint: str,
        *,
        timeout: float,
        data: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> int:
        _logger.debug("%s %s", method, url)
        try:
            async with self._http.request(
                method,
                url,
                data=data,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                if not _is_acknowledged(resp.status):
                    text = await resp.text(errors="replace")
                    raise DeviceTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
                return resp.status
        except DeviceTransportError:
            raise
        except TimeoutError as exc:
            raise DeviceTransportError(
                f"Request to {endpoint} timed out after {timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise DeviceTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
