from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_controls, render_history, render_status


class HistoryWindow(str, Enum):
    last_7_days = "7days"
    last_30_days = "30days"
    all = "all"


class PowerState(str, Enum):
    on = "on"
    off = "off"


class ControlMode(str, Enum):
    auto = "auto"
    manual = "manual"


class ValveAction(str, Enum):
    open = "open"
    close = "close"


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the rainwater monitor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Monitor API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show the latest reading, controls and today's progress."""
    state = _get_state(ctx)
    render_status(state.client.get_status())


@app.command("history")
def history_command(
    ctx: typer.Context,
    window: HistoryWindow = typer.Option(
        HistoryWindow.last_7_days,
        "--window",
        "-w",
        help="Recency window to display.",
    ),
) -> None:
    """List daily aggregates for a recency window."""
    state = _get_state(ctx)
    records = state.client.get_history(window.value)
    render_history(records, window.value)


@app.command("power")
def power_command(
    ctx: typer.Context,
    value: PowerState = typer.Argument(..., help="Switch the system on or off."),
) -> None:
    """Switch the harvesting system on or off."""
    state = _get_state(ctx)
    controls = state.client.set_power(value is PowerState.on)
    typer.secho(f"System switched {value.value}.", fg=typer.colors.GREEN)
    render_controls(controls)


@app.command("mode")
def mode_command(
    ctx: typer.Context,
    value: ControlMode = typer.Argument(..., help="Automatic or manual valve control."),
) -> None:
    """Select automatic or manual valve control."""
    state = _get_state(ctx)
    controls = state.client.set_mode(value is ControlMode.auto)
    typer.secho(f"Control mode set to {value.value}.", fg=typer.colors.GREEN)
    render_controls(controls)


@app.command("valve")
def valve_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Valve identifier, e.g. intake or solenoidA."),
    action: ValveAction = typer.Argument(..., help="Open or close the valve."),
) -> None:
    """Open or close a valve (manual mode only)."""
    state = _get_state(ctx)
    controls = state.client.set_valve(name, action is ValveAction.open)
    typer.secho(f"Valve {name} set to {action.value}.", fg=typer.colors.GREEN)
    render_controls(controls)
