"""Pydantic schemas for the HTTP API layer and the document store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SensorSnapshot(BaseModel):
    """Latest reading of a device as returned by ``GET /snapshot/{deviceId}``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    timestamp: datetime = Field(..., description="When the reading was captured.")
    soil_humidity: Optional[float] = Field(default=None, alias="soilHumidity")
    temperature: Optional[float] = None
    air_humidity: Optional[float] = Field(default=None, alias="airHumidity")
    general_status: Optional[str] = Field(default=None, alias="generalStatus")
    last_watering: Optional[datetime] = Field(
        default=None,
        alias="lastWatering",
        description="Last irrigation event, null when the device never watered.",
    )

    @field_validator("timestamp", "last_watering")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class SnapshotDocument(SensorSnapshot):
    """Stored form of a snapshot, tagged with the device that produced it."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    device_id: str = Field(..., alias="deviceId")

    def to_snapshot(self) -> SensorSnapshot:
        public = self.model_dump(include=set(SensorSnapshot.model_fields))
        return SensorSnapshot.model_validate(public)
