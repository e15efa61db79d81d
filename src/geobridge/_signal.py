"""Callback fan-out used to publish state changes to observers."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class Signal(Generic[T]):
    """A named list of callbacks invoked synchronously on :meth:`emit`.

    Callback failures are logged and never propagate into the publisher,
    so an observer cannot corrupt the state of the component it watches.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._callbacks: list[Callable[[T], None]] = []

    def connect(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def _disconnect() -> None:
            with contextlib.suppress(ValueError):
                self._callbacks.remove(callback)

        return _disconnect

    def emit(self, value: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                _logger.debug("%s callback failed", self._name, exc_info=True)

    def __len__(self) -> int:
        return len(self._callbacks)
