from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional

import typer

from cli.render import echo_error, render_summary
from logging_config import configure_logging
from models.errors import FootTrafficError
from services.pipeline import FootTrafficPipeline
from services.source_client import SourceClient
from settings import Settings, get_settings
from storage.csv_directory import CsvDirectory

HOUR_FORMATS = ["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"]


@dataclass
class CLIState:
    settings: Settings
    pipeline: FootTrafficPipeline


app = typer.Typer(
    help="Download, validate and merge City of Melbourne foot traffic counts.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fail(exc: FootTrafficError) -> NoReturn:
    echo_error(str(exc))
    raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        "-d",
        file_okay=False,
        help="Folder of dd-mm-yyyy.csv files (defaults to FOOT_TRAFFIC_DATA_DIR or ./output).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    settings = get_settings()
    directory = CsvDirectory(data_dir or Path(settings.data_dir))
    source = SourceClient(
        directory=directory,
        url_prefix=settings.source_url,
        timeout=settings.http_timeout,
    )
    pipeline = FootTrafficPipeline(directory=directory, source=source)
    ctx.obj = CLIState(settings=settings, pipeline=pipeline)
    ctx.call_on_close(pipeline.close)


@app.command("update")
def update_command(ctx: typer.Context) -> None:
    """Download every daily file newer than the latest one on disk."""
    state = _get_state(ctx)
    try:
        added = state.pipeline.update()
    except FootTrafficError as exc:
        _fail(exc)
    typer.secho(f"Added {added} new days.", fg=typer.colors.GREEN)


@app.command("convert")
def convert_command(
    ctx: typer.Context,
    destination: Optional[Path] = typer.Argument(
        None, file_okay=False, help="Output folder (defaults to FOOT_TRAFFIC_CONVERTED_DIR)."
    ),
) -> None:
    """Trim every daily file to its headings and sensor rows."""
    state = _get_state(ctx)
    target = destination or Path(state.settings.converted_dir)
    try:
        converted = state.pipeline.convert_directory(target)
    except FootTrafficError as exc:
        _fail(exc)
    typer.secho(f"Converted {converted} files into {target}.", fg=typer.colors.GREEN)


@app.command("merge")
def merge_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Argument(
        None, dir_okay=False, help="Wide table CSV path (defaults to FOOT_TRAFFIC_MERGED_PATH)."
    ),
) -> None:
    """Ingest every daily file and write one row per hour, one column per sensor."""
    state = _get_state(ctx)
    target = output or Path(state.settings.merged_path)
    try:
        registry = state.pipeline.build_dataset()
        rows = state.pipeline.write_dataset(registry, target)
    except FootTrafficError as exc:
        _fail(exc)
    typer.secho(f"Wrote {rows} hourly rows to {target}.", fg=typer.colors.GREEN)


@app.command("summary")
def summary_command(ctx: typer.Context) -> None:
    """Show the hourly range ingested for every sensor."""
    state = _get_state(ctx)
    try:
        registry = state.pipeline.build_dataset()
    except FootTrafficError as exc:
        _fail(exc)
    render_summary(registry)


@app.command("count")
def count_command(
    ctx: typer.Context,
    hour: datetime = typer.Argument(..., formats=HOUR_FORMATS, help="Hour to query, e.g. 2015-03-17T07:00."),
    sensor: Optional[str] = typer.Option(
        None, "--sensor", "-s", help="Sensor name; omit for the total over all sensors."
    ),
) -> None:
    """Print the count of one sensor, or of all sensors, at an hour."""
    state = _get_state(ctx)
    try:
        registry = state.pipeline.build_dataset()
        if sensor is None:
            count = registry.total_count_at_hour(hour)
        else:
            count = registry.series(sensor).get(hour)
    except FootTrafficError as exc:
        _fail(exc)
    typer.echo(count)
