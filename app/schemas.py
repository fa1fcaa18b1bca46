"""Pydantic schemas for the HTTP API layer and the persisted history log."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DAY_MS = 24 * 60 * 60 * 1000


class QueryWindow(str, Enum):
    """Recency windows offered when browsing the history log."""

    last_7_days = "7days"
    last_30_days = "30days"
    all = "all"

    @property
    def duration_ms(self) -> Optional[int]:
        if self is QueryWindow.last_7_days:
            return 7 * DAY_MS
        if self is QueryWindow.last_30_days:
            return 30 * DAY_MS
        return None


class QualityState(str, Enum):
    """Overall water quality verdict for a reading."""

    operational = "operational"
    warning = "warning"
    error = "error"


class DailyRecord(BaseModel):
    """Finalized aggregate for one calendar day of readings."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    timestamp: int = Field(..., description="Epoch milliseconds at which the day started.")
    date: str = Field(..., description="Calendar label, e.g. 'Jan 01, 2024'.")
    average_ph: float
    average_turbidity: float
    average_temperature: float
    max_water_level: float


class ReadingSnapshot(BaseModel):
    """Latest simulated sensor values."""

    ph: float
    turbidity: float
    temperature: float
    water_level: float
    timestamp: datetime
    quality: QualityState
    temperature_label: str


class ControlState(BaseModel):
    """Operator-controlled state of the harvesting system."""

    system_on: bool
    auto_mode: bool
    valves: Dict[str, bool] = Field(default_factory=dict)


class MonitorStatus(BaseModel):
    """Everything the dashboard needs to render the live view."""

    reading: Optional[ReadingSnapshot] = None
    controls: ControlState
    accumulated_readings: int = Field(..., ge=0)
    day_started_at: Optional[datetime] = None
    pending_records: int = Field(default=0, ge=0)


class PowerRequest(BaseModel):
    on: bool


class ModeRequest(BaseModel):
    auto: bool


class ValveRequest(BaseModel):
    open: bool
