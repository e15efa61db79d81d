"""Decode event-channel messages and dispatch recognized events."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from geobridge._constants import BUTTON_PRESSED_EVENT
from geobridge._redact import redact_for_log
from geobridge._signal import Signal
from geobridge.exceptions import BusyError, DecodeError, GeoBridgeError
from geobridge.models.events import DeviceEvent

_logger = logging.getLogger(__name__)


def decode_device_event(raw: str | bytes) -> DeviceEvent:
    """Decode an inbound message into a :class:`DeviceEvent`.

    Raises :class:`DecodeError` when *raw* is not a JSON object carrying a
    non-empty string ``event`` field.
    """
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Message is not JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise DecodeError("Message is not a JSON object")

    event = parsed.get("event")
    if not isinstance(event, str) or not event:
        raise DecodeError("Message has no 'event' field")
    return DeviceEvent(event=event, payload=parsed)


class EventRouter:
    """Route inbound messages to the pipeline.

    Malformed and unrecognized messages are ignored.  A ``buttonPressed``
    event schedules *on_trigger* once per message without awaiting it;
    overlapping triggers are passed through and left to the pipeline's
    single-flight guard.
    """

    def __init__(self, on_trigger: Callable[[], Awaitable[Any]]) -> None:
        self._on_trigger = on_trigger
        self._tasks: set[asyncio.Task[Any]] = set()
        self.status_changed: Signal[str] = Signal("router.status_changed")

    @property
    def pending(self) -> int:
        """Number of dispatched triggers that have not settled yet."""
        return len(self._tasks)

    def route(self, raw: str | bytes) -> asyncio.Task[Any] | None:
        """Handle one inbound message; returns the dispatched task, if any."""
        try:
            event = decode_device_event(raw)
        except DecodeError as exc:
            _logger.debug("Ignoring event-channel message (%s): %s", exc, redact_for_log(raw))
            return None

        if event.event != BUTTON_PRESSED_EVENT:
            _logger.debug("Ignoring unrecognized event=%s", event.event)
            return None

        _logger.info("Button pressed on device, requesting location")
        self.status_changed.emit("Button pressed - fetching location...")
        task = asyncio.get_running_loop().create_task(self._run_trigger())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_trigger(self) -> None:
        try:
            await self._on_trigger()
        except BusyError:
            _logger.debug("Trigger dropped, pipeline busy")
        except GeoBridgeError as exc:
            _logger.warning("Triggered location delivery failed: %s", exc)
        except Exception:
            _logger.exception("Triggered location delivery raised unexpectedly")

    async def wait_idle(self) -> None:
        """Wait until every dispatched trigger has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
