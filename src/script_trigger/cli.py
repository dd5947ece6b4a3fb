# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Main CLI entry point for script-trigger.

Loads a trigger config and fires it once, or keeps firing it on its cron schedule.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

import typer

from script_trigger import __version__
from script_trigger.config import ConfigError, load_trigger
from script_trigger.host import LocalScheduler
from script_trigger.schedule import next_fire_time, next_fire_times
from script_trigger.schemas import FiringState
from script_trigger.trigger import ScriptTrigger

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="script-trigger",
    help="Run a script on a cron schedule and schedule a build when it succeeds",
    no_args_is_help=True,
)

CONFIG_HELP = "Path to config file (default: $SCRIPT_TRIGGER_CONFIG or ./script-trigger.yaml)"


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(config_path: Optional[str]):
    try:
        return load_trigger(config_path)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def fire(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Fire the trigger once, now."""
    config, job = _load(config_path)
    result = ScriptTrigger(config).fire(job, LocalScheduler())

    typer.echo(f"Firing: {result.state.value}")
    if result.cause is not None:
        typer.echo(f"Cause: {result.cause.short_description}")
    if result.state == FiringState.ABORTED:
        raise typer.Exit(1)


@app.command()
def watch(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    max_firings: Optional[int] = typer.Option(None, "--max-firings", help="Stop after N firings"),
):
    """Fire the trigger on its schedule until interrupted."""
    config, job = _load(config_path)
    trigger = ScriptTrigger(config)
    scheduler = LocalScheduler()

    typer.echo(f"Watching {job.name} with schedule: {config.schedule.strip()}")
    firings = 0
    try:
        while max_firings is None or firings < max_firings:
            due = next_fire_time(config.schedule, hash_id=job.name)
            delay = (due - datetime.now(timezone.utc)).total_seconds()
            logger.debug(f"Next firing at {due.isoformat()}")
            if delay > 0:
                time.sleep(delay)

            result = trigger.fire(job, scheduler)
            firings += 1
            typer.echo(f"[{due.isoformat()}] {result.state.value}")
    except KeyboardInterrupt:
        typer.echo("Stopped")


@app.command("next")
def next_command(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    count: int = typer.Option(5, "--count", "-n", help="Number of fire times to show"),
):
    """Show the next fire times of the schedule."""
    config, job = _load(config_path)
    for when in next_fire_times(config.schedule, count, hash_id=job.name):
        typer.echo(when.isoformat())


@app.command()
def validate(
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Validate the configuration file."""
    config, job = _load(config_path)
    typer.echo("Configuration is valid")
    typer.echo(f"Job: {job.name}")
    typer.echo(f"Workspace: {job.workspace}")
    typer.echo(f"Capture mode: {config.capture_mode.value}")
    typer.echo(f"Wrapping: {config.wrapping.value}")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"script-trigger version {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
