"""Event-channel lifecycle: connect, detect closure, reconnect."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

from geobridge._channel import ChannelOpener, EventChannel
from geobridge._constants import DEFAULT_RECONNECT_DELAY
from geobridge._signal import Signal
from geobridge.exceptions import ChannelError
from geobridge.models.state import ConnectionState

_logger = logging.getLogger(__name__)


class ConnectionSupervisor:
    """Keep the event channel open.

    Every closure or transport error (including a failed open) moves the
    state to ``DISCONNECTED`` and is reported to observers, even when the
    state was already ``DISCONNECTED``.  Exactly one reconnection attempt is
    then scheduled after ``reconnect_delay`` seconds.  The delay never grows
    and attempts never stop until :meth:`stop` is called.

    Inbound messages are handed verbatim to *on_message*.
    """

    def __init__(
        self,
        opener: ChannelOpener,
        on_message: Callable[[str | bytes], Any],
        *,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
    ) -> None:
        self._opener = opener
        self._on_message = on_message
        self._reconnect_delay = reconnect_delay

        self._state = ConnectionState.DISCONNECTED
        self._running = False
        self._attempts = 0
        self._task: asyncio.Task[None] | None = None
        self._reconnect_handle: asyncio.TimerHandle | None = None
        self._channel: EventChannel | None = None

        self.state_changed: Signal[ConnectionState] = Signal("supervisor.state_changed")
        self.status_changed: Signal[str] = Signal("supervisor.status_changed")

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_running(self) -> bool:
        """Whether the supervisor is started and keeping the channel alive."""
        return self._running

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_handle is not None

    @property
    def attempts(self) -> int:
        """Number of connection attempts made since construction."""
        return self._attempts

    def start(self) -> None:
        """Open the event channel.

        No-op while connected, while an open is in progress, or while a
        reconnection is pending.
        """
        self._running = True
        if self._task is not None and not self._task.done():
            return
        if self._reconnect_handle is not None:
            return
        self._connect()

    async def stop(self) -> None:
        """Cancel any pending reconnection and close the channel."""
        self._running = False
        handle = self._reconnect_handle
        self._reconnect_handle = None
        if handle is not None:
            handle.cancel()

        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._set_state(ConnectionState.DISCONNECTED)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _connect(self) -> None:
        self._attempts += 1
        _logger.debug("Event channel connection attempt %d", self._attempts)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def _reconnect(self) -> None:
        self._reconnect_handle = None
        if self._running:
            self._connect()

    async def _run(self) -> None:
        try:
            channel = await self._opener.open()
        except ChannelError as exc:
            _logger.debug("Event channel open failed: %s", exc)
            self._on_closed()
            return
        except Exception:
            _logger.debug("Event channel open raised unexpectedly", exc_info=True)
            self._on_closed()
            return

        if not self._running:
            await channel.close()
            return

        self._channel = channel
        self._set_state(ConnectionState.CONNECTED)
        try:
            async for message in channel.messages():
                self._dispatch(message)
        except ChannelError as exc:
            _logger.debug("Event channel error: %s", exc)
        except Exception:
            _logger.debug("Event channel read raised unexpectedly", exc_info=True)
        finally:
            self._channel = None
            try:
                await channel.close()
            except Exception:
                _logger.debug("Event channel close failed", exc_info=True)
        self._on_closed()

    def _dispatch(self, message: str | bytes) -> None:
        try:
            self._on_message(message)
        except Exception:
            _logger.debug("Event channel message handler failed", exc_info=True)

    def _on_closed(self) -> None:
        # Every closure is reported, including a failed open while already disconnected.
        self._set_state(ConnectionState.DISCONNECTED, always_notify=True)
        if not self._running:
            return
        _logger.debug("Reconnecting event channel in %.1fs", self._reconnect_delay)
        self._reconnect_handle = asyncio.get_running_loop().call_later(self._reconnect_delay, self._reconnect)

    def _set_state(self, state: ConnectionState, *, always_notify: bool = False) -> None:
        changed = state is not self._state
        if not changed and not always_notify:
            return
        self._state = state
        if state is ConnectionState.CONNECTED:
            _logger.info("Event channel connected")
            self.status_changed.emit("WebSocket connected")
        else:
            if changed:
                _logger.info("Event channel disconnected")
            self.status_changed.emit("WebSocket disconnected")
        self.state_changed.emit(state)
