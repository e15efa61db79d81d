"""Delivery record model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from geobridge.models.fix import Fix


class DeliveryRecord(BaseModel):
    """Result of the most recent successful delivery."""

    model_config = ConfigDict(frozen=True)

    sent_at: datetime
    fix: Fix
