"""Random-walk stand-in for the tank sensors."""

from __future__ import annotations

import random
from datetime import datetime
from typing import Optional

from models.records import Reading


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


class SensorSimulator:
    """Produces bounded, slowly drifting readings on every call to ``read``."""

    def __init__(
        self,
        seed: Optional[int] = None,
        ph: float = 7.2,
        turbidity: float = 4.3,
        temperature: float = 22.4,
        water_level: float = 78.0,
    ) -> None:
        self._random = random.Random(seed)
        self.ph = ph
        self.turbidity = turbidity
        self.temperature = temperature
        self.water_level = water_level

    def read(self, timestamp: datetime) -> Reading:
        self.ph = round(_clamp(self.ph + self._drift(0.1), 0.0, 14.0), 1)
        self.turbidity = round(max(0.0, self.turbidity + self._drift(0.2)), 1)
        self.temperature = round(self.temperature + self._drift(0.1), 1)
        self.water_level = _clamp(self.water_level + self._drift(1.0), 0.0, 100.0)
        return Reading(
            ph=self.ph,
            turbidity=self.turbidity,
            temperature=self.temperature,
            water_level=self.water_level,
            timestamp=timestamp,
        )

    def _drift(self, amplitude: float) -> float:
        return self._random.uniform(-amplitude, amplitude)
