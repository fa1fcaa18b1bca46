"""Daily aggregation of sensor readings."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from app.schemas import DailyRecord
from datastore.history_store import HistoryStore
from models.records import DayAccumulator, Reading

logger = logging.getLogger(__name__)

DATE_LABEL_FORMAT = "%b %d, %Y"


def summarize(accumulator: DayAccumulator) -> Optional[DailyRecord]:
    """Build the daily record for ``accumulator``, or ``None`` when it is empty."""

    if accumulator.is_empty() or accumulator.anchor is None:
        return None

    count = accumulator.reading_count
    return DailyRecord(
        timestamp=int(accumulator.anchor.timestamp() * 1000),
        date=accumulator.anchor.strftime(DATE_LABEL_FORMAT),
        average_ph=sum(accumulator.ph_values) / count,
        average_turbidity=sum(accumulator.turbidity_values) / count,
        average_temperature=sum(accumulator.temperature_values) / count,
        max_water_level=max(accumulator.water_level_values),
    )


class DailyAggregator:
    """Folds per-tick readings into one daily record per calendar day.

    Readings taken while the system is powered off are dropped. When a reading
    arrives for a new calendar day the previous day is summarised, the
    accumulator restarts with that reading, and the record is appended to the
    history store, or to ``sink`` when one is set. Days without a powered
    reading get no record and are not backfilled.
    """

    def __init__(
        self,
        store: HistoryStore,
        accumulator: Optional[DayAccumulator] = None,
        sink: Optional[Callable[[DailyRecord], None]] = None,
    ) -> None:
        self.store = store
        self.accumulator = accumulator or DayAccumulator()
        self.sink = sink

    def ingest(self, reading: Reading, system_powered: bool) -> Optional[DailyRecord]:
        if not system_powered:
            return None

        anchor_date = self.accumulator.anchor_date
        reading_date = reading.timestamp.date()
        if anchor_date is None or anchor_date == reading_date:
            self.accumulator.add(reading)
            return None

        skipped_days = (reading_date - anchor_date).days - 1
        if skipped_days > 0:
            logger.warning(
                "Days without a powered reading have no record",
                extra={"day": anchor_date.isoformat(), "skipped_days": skipped_days},
            )

        reading_count = self.accumulator.reading_count
        record = summarize(self.accumulator)
        self.accumulator = DayAccumulator(anchor=reading.timestamp)
        self.accumulator.add(reading)

        if record is not None:
            self._emit(record, reading_count)
        return record

    def flush(self) -> Optional[DailyRecord]:
        """Finalise the day in progress without waiting for a rollover."""

        reading_count = self.accumulator.reading_count
        record = summarize(self.accumulator)
        self.accumulator = DayAccumulator()
        if record is not None:
            self._emit(record, reading_count)
        return record

    def _emit(self, record: DailyRecord, reading_count: int) -> None:
        logger.info(
            "Finalised daily record",
            extra={"day": record.date, "reading_count": reading_count},
        )
        if self.sink is not None:
            self.sink(record)
        else:
            self.store.append(record)
