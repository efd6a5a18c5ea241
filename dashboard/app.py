from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from dashboard.config import DATA_SOURCES, DashboardConfig, load_config
from dashboard.controller import DashboardController, DashboardState
from dashboard.irrigation import IrrigationCommandIssuer, build_irrigation_issuer
from dashboard.render import TerminalView
from dashboard.session import TOKEN_KEY, USER_KEY, JsonFileStorage, Session
from dashboard.sources import SnapshotSource, build_snapshot_source
from logging_config import configure_logging


@dataclass
class CLIState:
    config: DashboardConfig
    storage: JsonFileStorage
    source: SnapshotSource
    issuer: IrrigationCommandIssuer
    session: Session


app = typer.Typer(
    help="Terminal dashboard for the latest irrigation sensor snapshot.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _build_controller(state: CLIState, assume_yes: bool = False) -> DashboardController:
    return DashboardController(
        session=state.session,
        source=state.source,
        issuer=state.issuer,
        view=TerminalView(assume_yes=assume_yes),
        device_id=state.config.device_id,
        date_format=state.config.date_format,
    )


def _exit_for(state: Optional[DashboardState]) -> None:
    if state is not DashboardState.loaded:
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Snapshot service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    device_id: Optional[str] = typer.Option(
        None, "--device", "-d", help="Device whose snapshot is displayed."
    ),
    data_source: Optional[str] = typer.Option(
        None,
        "--source",
        help=f"Snapshot source, one of: {', '.join(DATA_SOURCES)}.",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds before a request is abandoned."
    ),
    session_file: Optional[str] = typer.Option(
        None, "--session-file", help="Where the session token is stored."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    """Entry point for the dashboard."""
    if verbose:
        configure_logging("DEBUG")
    if data_source is not None and data_source.lower() not in DATA_SOURCES:
        raise typer.BadParameter(f"Unknown source {data_source!r}.", param_hint="--source")
    config = load_config(
        base_url=base_url,
        device_id=device_id,
        data_source=data_source,
        request_timeout=timeout,
        session_path=session_file,
    )
    source = build_snapshot_source(config)
    storage = JsonFileStorage(Path(config.session_path).expanduser())
    session = Session(storage)
    issuer = build_irrigation_issuer(config, session)
    ctx.obj = CLIState(
        config=config, storage=storage, source=source, issuer=issuer, session=session
    )
    ctx.call_on_close(source.close)
    ctx.call_on_close(issuer.close)


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Load the dashboard once."""
    state = _get_state(ctx)
    controller = _build_controller(state)
    _exit_for(controller.load())


@app.command("water")
def water_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Trigger manual watering, then reload the dashboard."""
    state = _get_state(ctx)
    controller = _build_controller(state, assume_yes=yes)
    if controller.load() is DashboardState.unauthenticated:
        raise typer.Exit(code=1)
    typer.echo()
    _exit_for(controller.trigger_manual_watering())


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: float = typer.Option(30.0, "--interval", min=0.0, help="Seconds between refreshes."),
    count: int = typer.Option(0, "--count", min=0, help="Stop after N refreshes (0 runs forever)."),
) -> None:
    """Refresh the dashboard periodically."""
    state = _get_state(ctx)
    controller = _build_controller(state)
    result = controller.load()
    refreshes = 1
    try:
        while result is not DashboardState.unauthenticated and (count == 0 or refreshes < count):
            time.sleep(interval)
            typer.echo()
            result = controller.refresh()
            refreshes += 1
    except KeyboardInterrupt:
        typer.echo()
    _exit_for(result)


@app.command("login")
def login_command(
    ctx: typer.Context,
    token: str = typer.Option(..., "--token", prompt=True, hide_input=True, help="Pre-issued auth token."),
    user: Optional[str] = typer.Option(None, "--user", help="User identifier to store alongside."),
) -> None:
    """Store a pre-issued token in the session file."""
    state = _get_state(ctx)
    state.storage[TOKEN_KEY] = token.strip()
    if user:
        state.storage[USER_KEY] = user
    typer.secho("Session stored.", fg=typer.colors.GREEN)


@app.command("logout")
def logout_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Clear the stored session."""
    state = _get_state(ctx)
    controller = _build_controller(state, assume_yes=yes)
    if controller.logout() is not DashboardState.unauthenticated:
        typer.echo("Logout cancelled.")
