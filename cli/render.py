from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_QUALITY_COLORS = {
    "operational": typer.colors.GREEN,
    "warning": typer.colors.YELLOW,
    "error": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_controls(controls: Dict[str, Any]) -> None:
    echo_heading("Controls")
    echo_key_values(
        [
            ("system", "ON" if controls.get("system_on") else "OFF"),
            ("mode", "automatic" if controls.get("auto_mode") else "manual"),
        ]
    )
    valves = controls.get("valves") or {}
    if valves:
        typer.echo("valves:")
        for name, is_open in valves.items():
            typer.echo(f"  - {name}: {'open' if is_open else 'closed'}")


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Current Reading")
    reading = payload.get("reading")
    if reading:
        echo_key_values(
            [
                ("timestamp", reading.get("timestamp")),
                ("ph", reading.get("ph")),
                ("turbidity", reading.get("turbidity")),
                ("temperature", f"{reading.get('temperature')} ({reading.get('temperature_label')})"),
                ("water_level", reading.get("water_level")),
            ]
        )
        quality = reading.get("quality")
        typer.secho(f"quality: {quality}", fg=_QUALITY_COLORS.get(quality))
    else:
        typer.echo("No reading taken yet.")

    typer.echo()
    render_controls(payload.get("controls") or {})

    typer.echo()
    echo_heading("Today")
    echo_key_values(
        [
            ("readings", payload.get("accumulated_readings")),
            ("started_at", payload.get("day_started_at")),
            ("unsaved_records", payload.get("pending_records")),
        ]
    )


def render_history(records: List[Dict[str, Any]], window: str) -> None:
    echo_heading(f"History ({window})")
    if not records:
        typer.echo("No historical data available for this time period.")
        return

    typer.echo(f"{'date':<14}{'avg pH':>8}{'avg NTU':>9}{'avg C':>8}{'max level':>11}")
    for record in records:
        typer.echo(
            f"{record.get('date', ''):<14}"
            f"{record.get('averagePh', 0.0):>8.2f}"
            f"{record.get('averageTurbidity', 0.0):>9.2f}"
            f"{record.get('averageTemperature', 0.0):>8.1f}"
            f"{record.get('maxWaterLevel', 0.0):>11.1f}"
        )
