"""Client configuration for geobridge."""

from __future__ import annotations

import dataclasses
import math
import os
from typing import Any

from geobridge._constants import (
    DEFAULT_DELIVERY_TIMEOUT,
    DEFAULT_DEVICE_HOST,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_WS_CONNECT_TIMEOUT,
    SEND_LOCATION_PATH,
    STATUS_PATH,
    WS_PATH,
)
from geobridge.exceptions import GeoBridgeConfigError
from geobridge.models.options import LocationRequestOptions


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise GeoBridgeConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class GeoBridgeConfig:
    """Client configuration.

    Parameters
    ----------
    device_host : str
        Host (and optional ``:port``) of the Device.  The Device's address
        is fixed; it is never discovered.
    reconnect_delay : float
        Seconds between an event-channel closure and the next connection
        attempt.  The delay is constant and retries are unbounded.
    probe_timeout : float
        Upper bound in seconds for a status probe.
    delivery_timeout : float
        Upper bound in seconds for a location delivery.
    ws_connect_timeout : float
        Upper bound in seconds for opening the event channel.
    ws_heartbeat : float or None
        WebSocket ping interval in seconds, ``None`` to disable pings.
    probe_before_connect : bool
        Probe the Device before opening the event channel on start-up and
        skip the channel when the Device is unreachable.
    location : LocationRequestOptions
        Options handed to the location source on every acquisition.
    """

    device_host: str = DEFAULT_DEVICE_HOST
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    delivery_timeout: float = DEFAULT_DELIVERY_TIMEOUT
    ws_connect_timeout: float = DEFAULT_WS_CONNECT_TIMEOUT
    ws_heartbeat: float | None = None
    probe_before_connect: bool = True
    location: LocationRequestOptions = dataclasses.field(default_factory=LocationRequestOptions)

    def __post_init__(self) -> None:
        host = self.device_host.strip()
        if not host:
            raise GeoBridgeConfigError("device_host must be non-empty")
        if "://" in host or "/" in host:
            raise GeoBridgeConfigError(f"device_host must be a bare host[:port], got {self.device_host!r}")
        object.__setattr__(self, "device_host", host)
        if not math.isfinite(self.reconnect_delay) or self.reconnect_delay < 0:
            raise GeoBridgeConfigError("reconnect_delay must be a finite number >= 0")
        timeouts = (self.probe_timeout, self.delivery_timeout, self.ws_connect_timeout)
        if not all(math.isfinite(value) and value > 0 for value in timeouts):
            raise GeoBridgeConfigError("timeouts must be finite numbers > 0")
        if self.ws_heartbeat is not None and not (math.isfinite(self.ws_heartbeat) and self.ws_heartbeat > 0):
            raise GeoBridgeConfigError("ws_heartbeat must be a finite number > 0 or None")

    @property
    def ws_url(self) -> str:
        return f"ws://{self.device_host}{WS_PATH}"

    @property
    def status_url(self) -> str:
        return f"http://{self.device_host}{STATUS_PATH}"

    @property
    def send_location_url(self) -> str:
        return f"http://{self.device_host}{SEND_LOCATION_PATH}"

    @classmethod
    def from_env(cls, **overrides: Any) -> GeoBridgeConfig:
        """Create configuration from environment variables.

        Reads optional ``GEOBRIDGE_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        GeoBridgeConfig
            Populated configuration.
        """
        env = os.environ

        location_kwargs: dict[str, Any] = {}
        high_accuracy = env.get("GEOBRIDGE_HIGH_ACCURACY")
        if high_accuracy is not None:
            location_kwargs["high_accuracy"] = _env_bool(high_accuracy, True)
        _ENV_LOCATION_MAP = {
            "GEOBRIDGE_FIX_TIMEOUT": "timeout",
            "GEOBRIDGE_FIX_MAX_AGE": "max_cache_age",
        }
        for env_key, field_name in _ENV_LOCATION_MAP.items():
            val = env.get(env_key)
            if val is not None:
                location_kwargs[field_name] = _env_float(env_key, val)

        # Allow overriding location fields via a nested dict
        location_overrides = overrides.pop("location", None)
        if isinstance(location_overrides, dict):
            location_kwargs.update(location_overrides)
        elif isinstance(location_overrides, LocationRequestOptions):
            location_kwargs = location_overrides.model_dump()

        config_kwargs: dict[str, Any] = {"location": LocationRequestOptions(**location_kwargs)}

        host = env.get("GEOBRIDGE_DEVICE_HOST")
        if host is not None:
            config_kwargs["device_host"] = host

        _ENV_FLOAT_MAP = {
            "GEOBRIDGE_RECONNECT_DELAY": "reconnect_delay",
            "GEOBRIDGE_PROBE_TIMEOUT": "probe_timeout",
            "GEOBRIDGE_DELIVERY_TIMEOUT": "delivery_timeout",
            "GEOBRIDGE_WS_CONNECT_TIMEOUT": "ws_connect_timeout",
            "GEOBRIDGE_WS_HEARTBEAT": "ws_heartbeat",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "probe_before_connect" not in overrides:
            config_kwargs["probe_before_connect"] = _env_bool(env.get("GEOBRIDGE_PROBE_BEFORE_CONNECT"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
