"""Water quality thresholds used by the dashboard."""

from __future__ import annotations

from app.schemas import QualityState
from models.records import Reading

PH_CRITICAL_RANGE = (6.0, 8.5)
PH_IDEAL_RANGE = (6.5, 8.0)
TURBIDITY_CRITICAL_NTU = 10.0
TURBIDITY_IDEAL_NTU = 5.0


def classify_quality(reading: Reading) -> QualityState:
    ph_low, ph_high = PH_CRITICAL_RANGE
    if reading.ph < ph_low or reading.ph > ph_high or reading.turbidity > TURBIDITY_CRITICAL_NTU:
        return QualityState.error

    ph_low, ph_high = PH_IDEAL_RANGE
    if reading.ph < ph_low or reading.ph > ph_high or reading.turbidity > TURBIDITY_IDEAL_NTU:
        return QualityState.warning

    return QualityState.operational


def temperature_label(temperature: float) -> str:
    if temperature < 15:
        return "Cold"
    if temperature < 25:
        return "Normal"
    return "Warm"
