from __future__ import annotations

from typing import Any, Iterable

import typer

from dashboard.formatting import DashboardFields

LOGIN_HINT = "Not logged in. Run `irrigation-dashboard login --token <token>` first."


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_fields(fields: DashboardFields) -> None:
    echo_heading("Garden Status")
    typer.echo(fields.general_status)
    typer.echo()
    echo_heading("Readings")
    echo_key_values(
        [
            ("Soil humidity", fields.soil_humidity),
            ("Temperature", fields.temperature),
            ("Air humidity", fields.air_humidity),
            ("Last watering", fields.last_watering),
            ("Last reading", fields.last_reading),
        ]
    )


class TerminalView:
    """Renders the dashboard to the terminal through Typer."""

    def __init__(self, assume_yes: bool = False) -> None:
        self.assume_yes = assume_yes
        self.redirected = False

    def render(self, fields: DashboardFields) -> None:
        render_fields(fields)

    def notify(self, message: str) -> None:
        typer.secho(message, fg=typer.colors.YELLOW, err=True)

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        return typer.confirm(message, default=False)

    def redirect_to_login(self) -> None:
        self.redirected = True
        typer.secho(LOGIN_HINT, fg=typer.colors.RED, err=True)
