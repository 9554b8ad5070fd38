"""Pydantic schemas for the HTTP query API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SensorListResponse(BaseModel):
    """Canonical sensor names in column order."""

    sensors: List[str] = Field(default_factory=list)


class SensorRange(BaseModel):
    """Hourly span ingested for one sensor."""

    sensor: str
    first_hour: Optional[datetime] = None
    last_hour: Optional[datetime] = None
    reading_count: int = Field(..., ge=0)


class SensorCount(BaseModel):
    """Count recorded by one sensor during one hour."""

    sensor: str
    hour: datetime
    count: int = Field(..., ge=0)


class TotalCount(BaseModel):
    """Count summed over every sensor for one hour."""

    hour: datetime
    count: int = Field(..., ge=0)
    sensor_count: int = Field(..., ge=1)
