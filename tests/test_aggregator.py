"""Unit tests for the daily aggregation logic."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from datastore.exceptions import PersistenceUnavailable
from datastore.history_store import HistoryStore
from models.records import DayAccumulator, Reading
from services.aggregator import DailyAggregator, summarize


def _reading(
    when: datetime,
    ph: float = 7.0,
    turbidity: float = 4.0,
    temperature: float = 20.0,
    water_level: float = 70.0,
) -> Reading:
    """Helper to build deterministic sensor readings."""

    return Reading(
        ph=ph,
        turbidity=turbidity,
        temperature=temperature,
        water_level=water_level,
        timestamp=when,
    )


def test_summarize_empty_accumulator_returns_none() -> None:
    assert summarize(DayAccumulator()) is None


def test_rollover_emits_daily_averages_and_max_level() -> None:
    store = HistoryStore()
    aggregator = DailyAggregator(store=store)
    day_start = datetime(2024, 1, 1, 9, 0)

    aggregator.ingest(_reading(day_start, 7.0, 4.0, 20.0, 70.0), system_powered=True)
    aggregator.ingest(
        _reading(datetime(2024, 1, 1, 18, 30), 7.4, 4.4, 22.0, 74.0), system_powered=True
    )
    record = aggregator.ingest(_reading(datetime(2024, 1, 2, 0, 0, 5)), system_powered=True)

    assert record is not None
    assert record.average_ph == pytest.approx(7.2)
    assert record.average_turbidity == pytest.approx(4.2)
    assert record.average_temperature == pytest.approx(21.0)
    assert record.max_water_level == 74.0
    assert record.date == "Jan 01, 2024"
    assert record.timestamp == int(day_start.timestamp() * 1000)
    assert store.load() == [record]


def test_same_day_readings_only_accumulate() -> None:
    store = HistoryStore()
    aggregator = DailyAggregator(store=store)

    for hour in range(3):
        result = aggregator.ingest(_reading(datetime(2024, 3, 5, hour)), system_powered=True)
        assert result is None

    accumulator = aggregator.accumulator
    assert accumulator.reading_count == 3
    assert len(accumulator.turbidity_values) == len(accumulator.temperature_values) == 3
    assert len(accumulator.water_level_values) == 3
    assert accumulator.anchor_date == datetime(2024, 3, 5).date()
    assert store.load() == []


def test_powered_off_reading_is_dropped() -> None:
    store = HistoryStore()
    aggregator = DailyAggregator(store=store)

    result = aggregator.ingest(_reading(datetime(2024, 1, 1, 9)), system_powered=False)

    assert result is None
    assert aggregator.accumulator.is_empty()
    assert aggregator.accumulator.anchor is None


def test_triggering_reading_starts_the_new_day() -> None:
    aggregator = DailyAggregator(store=HistoryStore())
    aggregator.ingest(_reading(datetime(2024, 1, 1, 9), ph=6.0), system_powered=True)

    trigger = _reading(datetime(2024, 1, 2, 7), ph=8.0)
    record = aggregator.ingest(trigger, system_powered=True)

    assert record is not None
    assert record.average_ph == 6.0
    assert aggregator.accumulator.ph_values == [8.0]
    assert aggregator.accumulator.anchor == trigger.timestamp


def test_partially_off_day_aggregates_only_powered_readings() -> None:
    aggregator = DailyAggregator(store=HistoryStore())

    aggregator.ingest(_reading(datetime(2024, 1, 1, 8), ph=7.0, water_level=60.0), True)
    aggregator.ingest(_reading(datetime(2024, 1, 1, 9), ph=1.0, water_level=99.0), False)
    aggregator.ingest(_reading(datetime(2024, 1, 1, 10), ph=8.0, water_level=65.0), True)
    record = aggregator.ingest(_reading(datetime(2024, 1, 2, 8)), True)

    assert record is not None
    assert record.average_ph == pytest.approx(7.5)
    assert record.max_water_level == 65.0


def test_day_without_powered_readings_produces_no_record() -> None:
    store = HistoryStore()
    aggregator = DailyAggregator(store=store)

    aggregator.ingest(_reading(datetime(2024, 1, 1, 8)), system_powered=False)
    aggregator.ingest(_reading(datetime(2024, 1, 1, 20)), system_powered=False)
    aggregator.ingest(_reading(datetime(2024, 1, 2, 8)), system_powered=True)

    assert store.load() == []
    assert aggregator.accumulator.reading_count == 1


def test_skipped_days_emit_only_the_tracked_day(caplog) -> None:
    store = HistoryStore()
    aggregator = DailyAggregator(store=store)
    aggregator.ingest(_reading(datetime(2024, 1, 1, 8)), system_powered=True)

    with caplog.at_level(logging.WARNING):
        aggregator.ingest(_reading(datetime(2024, 1, 4, 8)), system_powered=True)

    records = store.load()
    assert [record.date for record in records] == ["Jan 01, 2024"]
    warnings = [r for r in caplog.records if r.name == "services.aggregator"]
    assert any(getattr(r, "skipped_days", None) == 2 for r in warnings)
    assert any("without a powered reading" in r.getMessage() for r in warnings)


def test_out_of_range_values_are_aggregated_as_is() -> None:
    aggregator = DailyAggregator(store=HistoryStore())
    aggregator.ingest(_reading(datetime(2024, 1, 1, 8), turbidity=-2.0), True)
    aggregator.ingest(_reading(datetime(2024, 1, 1, 9), turbidity=-4.0), True)

    record = aggregator.ingest(_reading(datetime(2024, 1, 2, 8)), True)

    assert record is not None
    assert record.average_turbidity == pytest.approx(-3.0)


def test_identical_inputs_produce_identical_records() -> None:
    def run() -> list:
        store = HistoryStore()
        aggregator = DailyAggregator(store=store)
        for day in (1, 2, 3):
            for hour, ph in ((6, 6.9), (12, 7.3), (18, 7.1)):
                aggregator.ingest(_reading(datetime(2024, 5, day, hour), ph=ph), True)
        aggregator.ingest(_reading(datetime(2024, 5, 4, 0)), True)
        return store.load()

    assert run() == run()


def test_flush_finalises_the_current_day() -> None:
    store = HistoryStore()
    aggregator = DailyAggregator(store=store)
    aggregator.ingest(_reading(datetime(2024, 1, 1, 8), water_level=81.5), True)

    record = aggregator.flush()

    assert record is not None
    assert record.max_water_level == 81.5
    assert store.load() == [record]
    assert aggregator.accumulator.is_empty()
    assert aggregator.flush() is None


def test_failed_append_still_resets_the_accumulator() -> None:
    class BrokenStore(HistoryStore):
        def _write_slot(self, text: str) -> None:
            raise OSError("quota exceeded")

    aggregator = DailyAggregator(store=BrokenStore())
    aggregator.ingest(_reading(datetime(2024, 1, 1, 8), ph=6.8), True)

    with pytest.raises(PersistenceUnavailable) as excinfo:
        aggregator.ingest(_reading(datetime(2024, 1, 2, 8), ph=7.7), True)

    assert excinfo.value.record is not None
    assert excinfo.value.record.average_ph == 6.8
    assert aggregator.accumulator.ph_values == [7.7]


def test_sink_receives_records_instead_of_store() -> None:
    store = HistoryStore()
    received = []
    aggregator = DailyAggregator(store=store, sink=received.append)
    aggregator.ingest(_reading(datetime(2024, 1, 1, 8)), system_powered=True)

    record = aggregator.ingest(_reading(datetime(2024, 1, 2, 8)), system_powered=True)

    assert received == [record]
    assert store.load() == []
