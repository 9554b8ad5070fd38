from __future__ import annotations

from typing import Any, Iterable

import typer

from datastore.sensor_registry import SensorRegistry
from models.records import format_hour


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def echo_error(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)


def render_summary(registry: SensorRegistry) -> None:
    echo_heading("Dataset")
    echo_key_values(
        [
            ("sensors", len(registry)),
            ("readings", registry.reading_count()),
        ]
    )

    typer.echo()
    echo_heading("Sensors")
    for series in registry:
        if not len(series):
            typer.echo(f"  - {series.name}: no readings")
            continue
        typer.echo(
            f"  - {series.name}: {len(series)} readings "
            f"({format_hour(series.first_hour)} .. {format_hour(series.last_hour)})"
        )
