from __future__ import annotations

from datetime import datetime

import pytest

from app.schemas import QualityState
from models.records import Reading
from services.controls import ManualControlRequired, SystemControls
from services.quality import classify_quality, temperature_label
from services.simulator import SensorSimulator


def _reading(ph: float, turbidity: float) -> Reading:
    return Reading(
        ph=ph,
        turbidity=turbidity,
        temperature=22.0,
        water_level=75.0,
        timestamp=datetime(2024, 1, 1),
    )


@pytest.mark.parametrize(
    ("ph", "turbidity", "expected"),
    [
        (7.2, 4.3, QualityState.operational),
        (6.4, 1.0, QualityState.warning),
        (8.1, 1.0, QualityState.warning),
        (7.0, 5.5, QualityState.warning),
        (5.9, 1.0, QualityState.error),
        (8.6, 1.0, QualityState.error),
        (7.0, 10.5, QualityState.error),
    ],
)
def test_classify_quality(ph: float, turbidity: float, expected: QualityState) -> None:
    assert classify_quality(_reading(ph, turbidity)) == expected


def test_temperature_label() -> None:
    assert temperature_label(10.0) == "Cold"
    assert temperature_label(22.4) == "Normal"
    assert temperature_label(25.0) == "Warm"


def test_valves_locked_in_auto_mode() -> None:
    controls = SystemControls()

    with pytest.raises(ManualControlRequired):
        controls.set_valve("solenoidB", True)

    assert controls.snapshot().valves["solenoidB"] is False


def test_valves_switch_in_manual_mode() -> None:
    controls = SystemControls()
    controls.set_auto_mode(False)

    state = controls.set_valve("solenoidB", True)

    assert state.auto_mode is False
    assert state.valves == {"intake": True, "solenoidA": True, "solenoidB": True}


def test_unknown_valve_raises_key_error() -> None:
    controls = SystemControls(auto_mode=False)

    with pytest.raises(KeyError):
        controls.set_valve("overflow", True)


def test_snapshot_is_a_copy() -> None:
    controls = SystemControls()
    snapshot = controls.snapshot()
    snapshot.valves["intake"] = False

    assert controls.snapshot().valves["intake"] is True


def test_power_switch() -> None:
    controls = SystemControls()

    assert controls.set_power(False).system_on is False
    assert controls.system_on is False


def test_simulator_stays_within_sensor_ranges() -> None:
    simulator = SensorSimulator(seed=7, ph=13.95, turbidity=0.05, water_level=99.5)

    for _ in range(500):
        reading = simulator.read(datetime(2024, 1, 1))
        assert 0.0 <= reading.ph <= 14.0
        assert reading.turbidity >= 0.0
        assert 0.0 <= reading.water_level <= 100.0


def test_simulator_is_reproducible_with_seed() -> None:
    first = SensorSimulator(seed=42)
    second = SensorSimulator(seed=42)
    when = datetime(2024, 1, 1, 12)

    assert [first.read(when) for _ in range(10)] == [second.read(when) for _ in range(10)]
