from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas import DailyRecord, QueryWindow
from datastore.exceptions import CorruptHistory
from services.monitor import MonitorService, build_default_monitor


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

WINDOW_LABELS = {
    QueryWindow.last_7_days: "Last 7 Days",
    QueryWindow.last_30_days: "Last 30 Days",
    QueryWindow.all: "All History",
}


def get_monitor() -> MonitorService:
    return build_default_monitor()


def _newest_first(records: list[DailyRecord]) -> list[DailyRecord]:
    return sorted(records, key=lambda record: record.timestamp, reverse=True)


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    window: QueryWindow = Query(QueryWindow.last_7_days),
    monitor: MonitorService = Depends(get_monitor),
) -> HTMLResponse:
    history_error = None
    try:
        records = _newest_first(monitor.store.query(window))
    except CorruptHistory as exc:
        records = []
        history_error = exc.message

    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "status": monitor.status(),
            "records": records,
            "window": window,
            "window_labels": WINDOW_LABELS,
            "history_error": history_error,
        },
    )
