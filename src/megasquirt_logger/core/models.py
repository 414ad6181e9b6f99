"""Data models for the Megasquirt logger."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChannelValue(BaseModel):
    """A single decoded channel value."""

    name: str = Field(..., min_length=1, description="Channel name")
    value: float = Field(..., description="Decoded, scaled value")
    unit: str = Field("", description="Display unit")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"example": {"name": "rpm", "value": 850.0, "unit": "RPM"}},
    )


class RecordSnapshot(BaseModel):
    """One realtime record: the raw payload and everything decoded from it."""

    timestamp: datetime = Field(default_factory=datetime.now, description="When the record was decoded")
    raw: bytes = Field(..., description="Raw realtime payload")
    values: dict[str, ChannelValue] = Field(default_factory=dict, description="Decoded values keyed by channel")
    errors: dict[str, str] = Field(default_factory=dict, description="Per-channel decode failures")

    model_config = ConfigDict(frozen=True)


# ============================================================================
# API Response Models
# ============================================================================


class RecordResponse(BaseModel):
    """Response model for GET /api/record."""

    timestamp: datetime = Field(..., description="When the record was decoded")
    values: dict[str, dict[str, Any]] = Field(..., description="Values keyed by channel name")
    errors: dict[str, str] = Field(default_factory=dict, description="Channels that failed to decode")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "timestamp": "2026-10-19T10:30:00",
                "values": {
                    "rpm": {"value": 850.0, "unit": "RPM"},
                    "coolant": {"value": 180.5, "unit": "°F"},
                },
                "errors": {},
            }
        }
    )


class ChannelsResponse(BaseModel):
    """Response model for GET /api/channels."""

    count: int = Field(..., ge=0, description="Number of compiled channels")
    channels: dict[str, dict[str, Any]] = Field(..., description="Channel descriptors keyed by name")


class DatalogResponse(BaseModel):
    """Response model for GET /api/datalog."""

    entries: list[str] = Field(..., description="Datalog entry descriptors from the schema")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status (healthy/degraded/unhealthy)")
    state: str = Field(..., description="Serial session state")
    records_count: int = Field(..., ge=0, description="Number of records decoded")
    last_update: datetime | None = Field(None, description="Last successful record timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "state": "polling",
                "records_count": 1786,
                "last_update": "2026-10-19T10:30:00",
            }
        }
    )
