from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import List, Optional

from pydantic import ValidationError

from app.schemas import DailyRecord, QueryWindow
from datastore.exceptions import CorruptHistory, PersistenceUnavailable
from settings import get_settings

logger = logging.getLogger(__name__)


class HistoryStore:
    """Append-only log of daily records kept in a single JSON slot.

    With ``persistence_path`` unset the slot lives in memory, which keeps the
    same read/modify/write semantics for tests and throwaway sessions.
    """

    def __init__(
        self,
        persistence_path: Optional[Path] = None,
        max_records: Optional[int] = None,
    ) -> None:
        self.persistence_path = persistence_path
        self.max_records = max_records
        self._memory_slot: Optional[str] = None
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: DailyRecord) -> None:
        with self._lock:
            try:
                records = self._read_records()
            except CorruptHistory as exc:
                logger.error(
                    "Refusing to append to unreadable history",
                    extra={"path": self.persistence_path, "day": record.date},
                )
                exc.record = record
                raise
            records.append(record)
            if self.max_records is not None and len(records) > self.max_records:
                records = records[-self.max_records :]
            try:
                self._write_records(records)
            except OSError as exc:
                logger.error(
                    "Failed to persist daily record",
                    extra={"path": self.persistence_path, "day": record.date, "reason": str(exc)},
                )
                raise PersistenceUnavailable(
                    "History log could not be written.",
                    path=self.persistence_path,
                    source_error=exc,
                    record=record,
                ) from exc

        logger.info(
            "Saved daily record to history",
            extra={"day": record.date, "record_count": len(records)},
        )

    def load(self) -> List[DailyRecord]:
        """Return every stored record in insertion order."""

        with self._lock:
            return self._read_records()

    def query(
        self, window: QueryWindow, now: Optional[datetime] = None
    ) -> List[DailyRecord]:
        records = self.load()
        window = QueryWindow(window)
        duration_ms = window.duration_ms
        if duration_ms is not None:
            reference = now or datetime.now(timezone.utc)
            now_ms = int(reference.timestamp() * 1000)
            records = [
                record for record in records if now_ms - record.timestamp < duration_ms
            ]

        logger.debug(
            "History queried",
            extra={"window": window.value, "record_count": len(records)},
        )
        return records

    def reset(self) -> None:
        """Drop the stored log, including one that no longer parses."""

        with self._lock:
            try:
                self._write_records([])
            except OSError as exc:
                raise PersistenceUnavailable(
                    "History log could not be reset.",
                    path=self.persistence_path,
                    source_error=exc,
                ) from exc
        logger.warning("History log reset", extra={"path": self.persistence_path})

    def _read_records(self) -> List[DailyRecord]:
        raw = self._read_slot()
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptHistory(
                "History log is not valid JSON.",
                path=self.persistence_path,
                source_error=exc,
            ) from exc

        if not isinstance(data, list):
            raise CorruptHistory(
                "History log must hold a JSON array.", path=self.persistence_path
            )

        try:
            return [DailyRecord.model_validate(item) for item in data]
        except ValidationError as exc:
            raise CorruptHistory(
                "History log holds an invalid record.",
                path=self.persistence_path,
                source_error=exc,
            ) from exc

    def _write_records(self, records: List[DailyRecord]) -> None:
        payload = [record.model_dump(mode="json", by_alias=True) for record in records]
        self._write_slot(json.dumps(payload, indent=2))

    def _read_slot(self) -> Optional[str]:
        if not self.persistence_path:
            return self._memory_slot
        if not self.persistence_path.exists():
            return None
        try:
            return self.persistence_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CorruptHistory(
                "History log could not be read.",
                path=self.persistence_path,
                source_error=exc,
            ) from exc

    def _write_slot(self, text: str) -> None:
        if not self.persistence_path:
            self._memory_slot = text
            return

        # Replace the slot in one step so a failed write never leaves half a log.
        fd, tmp_name = tempfile.mkstemp(
            dir=self.persistence_path.parent,
            prefix=f".{self.persistence_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.persistence_path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise


@lru_cache
def build_default_history_store(
    path: Optional[str] = None,
    max_records: Optional[int] = None,
) -> HistoryStore:
    settings = get_settings()
    history_path = settings.history_path if path is None else path
    limit = settings.history_max_records if max_records is None else max_records
    persistence = Path(history_path) if history_path else None
    return HistoryStore(persistence_path=persistence, max_records=limit)
