"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    ControlState,
    DailyRecord,
    ModeRequest,
    MonitorStatus,
    PowerRequest,
    QueryWindow,
    ValveRequest,
)
from datastore.exceptions import CorruptHistory
from services.controls import ManualControlRequired
from services.monitor import MonitorService, build_default_monitor

router = APIRouter()


def get_monitor() -> MonitorService:
    return build_default_monitor()


@router.get(
    "/status",
    response_model=MonitorStatus,
    summary="Latest reading, control state and progress of the current day.",
)
async def get_status(
    monitor: MonitorService = Depends(get_monitor),
) -> MonitorStatus:
    return monitor.status()


@router.post(
    "/system/power",
    response_model=ControlState,
    summary="Switch the harvesting system on or off.",
)
async def set_power(
    payload: PowerRequest,
    monitor: MonitorService = Depends(get_monitor),
) -> ControlState:
    return monitor.controls.set_power(payload.on)


@router.post(
    "/system/mode",
    response_model=ControlState,
    summary="Select automatic or manual valve control.",
)
async def set_mode(
    payload: ModeRequest,
    monitor: MonitorService = Depends(get_monitor),
) -> ControlState:
    return monitor.controls.set_auto_mode(payload.auto)


@router.post(
    "/valves/{valve}",
    response_model=ControlState,
    summary="Open or close a valve while in manual mode.",
)
async def set_valve(
    valve: str,
    payload: ValveRequest,
    monitor: MonitorService = Depends(get_monitor),
) -> ControlState:
    try:
        return monitor.controls.set_valve(valve, payload.open)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown valve {valve!r}.",
        ) from exc
    except ManualControlRequired as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc


@router.get(
    "/history",
    response_model=List[DailyRecord],
    summary="Daily aggregates within a recency window.",
)
async def get_history(
    window: QueryWindow = Query(QueryWindow.last_7_days, description="Recency window."),
    monitor: MonitorService = Depends(get_monitor),
) -> List[DailyRecord]:
    try:
        return monitor.store.query(window)
    except CorruptHistory as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"History log is unreadable: {exc.message}",
        ) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
