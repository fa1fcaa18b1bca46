"""Periodic sampling loop that drives the daily aggregator."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from threading import Event, Lock, Thread
from typing import Callable, List, Optional

from app.schemas import DailyRecord, MonitorStatus, ReadingSnapshot
from datastore.exceptions import HistoryStoreError
from datastore.history_store import HistoryStore, build_default_history_store
from models.records import Reading
from services.aggregator import DailyAggregator
from services.controls import SystemControls
from services.quality import classify_quality, temperature_label
from services.simulator import SensorSimulator
from settings import get_settings

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class MonitorService:
    """Samples the sensors on a fixed period and feeds the aggregator.

    A single background thread owns the ticking; ``tick`` can also be called
    directly, which is how the tests drive it.
    """

    def __init__(
        self,
        simulator: SensorSimulator,
        aggregator: DailyAggregator,
        controls: SystemControls,
        interval_seconds: float = 5.0,
        flush_on_shutdown: bool = True,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.simulator = simulator
        self.aggregator = aggregator
        self.controls = controls
        self.interval_seconds = interval_seconds
        self.flush_on_shutdown = flush_on_shutdown
        self._clock = clock
        self._latest: Optional[Reading] = None
        self._pending: List[DailyRecord] = []
        self._tick_lock = Lock()
        self._stop = Event()
        self._thread: Optional[Thread] = None
        self.aggregator.sink = self._enqueue

    @property
    def store(self) -> HistoryStore:
        return self.aggregator.store

    @property
    def pending_records(self) -> List[DailyRecord]:
        with self._tick_lock:
            return list(self._pending)

    def tick(self) -> Optional[DailyRecord]:
        """Take one reading and ingest it.

        Returns the record finalised on this tick, if any, whether or not it
        has been saved yet. Unsaved records stay queued in order and are
        retried on the following ticks.
        """
        with self._tick_lock:
            reading = self.simulator.read(self._clock())
            self._latest = reading
            self._drain_pending()
            return self.aggregator.ingest(reading, self.controls.system_on)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = Thread(target=self._run, name="rainwater-monitor", daemon=True)
        self._thread.start()

    def shutdown(self) -> None:
        """Stop the sampling loop and retry unsaved records.

        The day in progress is saved too when ``flush_on_shutdown`` is set.
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval_seconds + 1.0)
            self._thread = None

        with self._tick_lock:
            self._drain_pending()
            if self.flush_on_shutdown:
                self.aggregator.flush()
            if self._pending:
                logger.error(
                    "Shutting down with unsaved daily records",
                    extra={"pending": len(self._pending)},
                )

    def status(self) -> MonitorStatus:
        with self._tick_lock:
            reading = self._latest
            accumulator = self.aggregator.accumulator
            snapshot = None
            if reading is not None:
                snapshot = ReadingSnapshot(
                    ph=reading.ph,
                    turbidity=reading.turbidity,
                    temperature=reading.temperature,
                    water_level=reading.water_level,
                    timestamp=reading.timestamp,
                    quality=classify_quality(reading),
                    temperature_label=temperature_label(reading.temperature),
                )
            return MonitorStatus(
                reading=snapshot,
                controls=self.controls.snapshot(),
                accumulated_readings=accumulator.reading_count,
                day_started_at=accumulator.anchor,
                pending_records=len(self._pending),
            )

    def _run(self) -> None:
        logger.info("Monitor starting: sampling every %ss", self.interval_seconds)
        while not self._stop.wait(self.interval_seconds):
            try:
                self.tick()
            except Exception:  # pragma: no cover - keep the sampler alive
                logger.exception("Sampling tick failed")
        logger.info("Monitor stopped")

    def _enqueue(self, record: DailyRecord) -> None:
        self._pending.append(record)
        self._drain_pending()

    def _drain_pending(self) -> None:
        # Records are appended strictly in the order they were finalised.
        while self._pending:
            record = self._pending[0]
            try:
                self.store.append(record)
            except HistoryStoreError as exc:
                logger.error(
                    "Daily record not saved; will retry",
                    extra={"day": record.date, "reason": exc.message, "pending": len(self._pending)},
                )
                return
            self._pending.pop(0)


@lru_cache
def build_default_monitor() -> MonitorService:
    """Factory that wires the monitor with the configured history store."""
    settings = get_settings()
    store = build_default_history_store()
    return MonitorService(
        simulator=SensorSimulator(seed=settings.simulator_seed),
        aggregator=DailyAggregator(store=store),
        controls=SystemControls(),
        interval_seconds=settings.sample_interval_seconds,
        flush_on_shutdown=settings.flush_on_shutdown,
    )
