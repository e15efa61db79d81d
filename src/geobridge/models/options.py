"""Options passed to a location source."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from geobridge._constants import DEFAULT_FIX_MAX_AGE, DEFAULT_FIX_TIMEOUT


class LocationRequestOptions(BaseModel):
    """How a fix should be acquired.

    Parameters
    ----------
    high_accuracy : bool
        Prefer satellite positioning over coarse network location.
    timeout : float
        Seconds the source may spend acquiring a fix.
    max_cache_age : float
        Maximum age in seconds of a cached fix the source may return.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    high_accuracy: bool = True
    timeout: float = Field(default=DEFAULT_FIX_TIMEOUT, gt=0)
    max_cache_age: float = Field(default=DEFAULT_FIX_MAX_AGE, ge=0)
