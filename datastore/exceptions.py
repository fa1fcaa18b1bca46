"""Failures raised by the history log."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from app.schemas import DailyRecord


class HistoryStoreError(Exception):
    """Base exception for history log failures.

    ``record`` holds the daily record that was not saved, when the failure
    happened during an append, so the caller can re-issue it.
    """

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        source_error: Optional[Exception] = None,
        record: Optional["DailyRecord"] = None,
    ) -> None:
        self.message = message
        self.path = path
        self.source_error = source_error
        self.record = record
        super().__init__(message)


class CorruptHistory(HistoryStoreError):
    """Raised when the persisted log cannot be parsed back into records."""


class PersistenceUnavailable(HistoryStoreError):
    """Raised when the durable slot cannot be written."""
