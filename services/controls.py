"""Operator controls for the harvesting system."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Optional

from app.schemas import ControlState

logger = logging.getLogger(__name__)

DEFAULT_VALVES: Dict[str, bool] = {
    "intake": True,
    "solenoidA": True,
    "solenoidB": False,
}


class ManualControlRequired(Exception):
    """Raised when a valve is switched while the system runs in auto mode."""

    def __init__(self, valve: str) -> None:
        self.valve = valve
        super().__init__(f"Valve {valve!r} can only be switched in manual mode.")


class SystemControls:
    """Power switch, auto/manual mode and valve positions.

    Read by the sampling thread and written from request handlers, so every
    access goes through one lock.
    """

    def __init__(
        self,
        system_on: bool = True,
        auto_mode: bool = True,
        valves: Optional[Dict[str, bool]] = None,
    ) -> None:
        self._system_on = system_on
        self._auto_mode = auto_mode
        self._valves = dict(DEFAULT_VALVES if valves is None else valves)
        self._lock = Lock()

    @property
    def system_on(self) -> bool:
        with self._lock:
            return self._system_on

    @property
    def auto_mode(self) -> bool:
        with self._lock:
            return self._auto_mode

    def set_power(self, on: bool) -> ControlState:
        with self._lock:
            self._system_on = on
        logger.info("System power %s", "on" if on else "off")
        return self.snapshot()

    def set_auto_mode(self, auto: bool) -> ControlState:
        with self._lock:
            self._auto_mode = auto
        logger.info("Control mode set to %s", "automatic" if auto else "manual")
        return self.snapshot()

    def set_valve(self, valve: str, open_: bool) -> ControlState:
        with self._lock:
            if valve not in self._valves:
                raise KeyError(f"Unknown valve {valve!r}.")
            if self._auto_mode:
                raise ManualControlRequired(valve)
            self._valves[valve] = open_
        logger.info("Valve switched %s", "open" if open_ else "closed", extra={"valve": valve})
        return self.snapshot()

    def snapshot(self) -> ControlState:
        with self._lock:
            return ControlState(
                system_on=self._system_on,
                auto_mode=self._auto_mode,
                valves=dict(self._valves),
            )
