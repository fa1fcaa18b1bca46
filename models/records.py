"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


@dataclass(slots=True, frozen=True)
class Reading:
    """One instantaneous observation from the tank sensors."""

    ph: float
    turbidity: float
    temperature: float
    water_level: float
    timestamp: datetime


@dataclass(slots=True)
class DayAccumulator:
    """Raw readings collected for the day in progress.

    The four value lists always have the same length; ``add`` is the only
    way readings enter the accumulator.
    """

    ph_values: List[float] = field(default_factory=list)
    turbidity_values: List[float] = field(default_factory=list)
    temperature_values: List[float] = field(default_factory=list)
    water_level_values: List[float] = field(default_factory=list)
    anchor: Optional[datetime] = None

    @property
    def anchor_date(self) -> Optional[date]:
        return self.anchor.date() if self.anchor is not None else None

    @property
    def reading_count(self) -> int:
        return len(self.ph_values)

    def is_empty(self) -> bool:
        return not self.ph_values

    def add(self, reading: Reading) -> None:
        if self.anchor is None:
            self.anchor = reading.timestamp
        self.ph_values.append(reading.ph)
        self.turbidity_values.append(reading.turbidity)
        self.temperature_values.append(reading.temperature)
        self.water_level_values.append(reading.water_level)
