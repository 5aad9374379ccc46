# src/docmirror/cli.py
"""docmirror Command Line Interface.

Entry point for the docmirror CLI tool.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from docmirror import __version__
from docmirror.contracts import ConfigurationError, RunStatus, RunSummary
from docmirror.core.config import DocmirrorSettings, load_settings

app = typer.Typer(
    name="docmirror",
    help="docmirror: Mirror document tabs into folders of rendered PDFs.",
    no_args_is_help=True,
)

SETTINGS_OPTION = typer.Option(
    ...,
    "--settings",
    "-s",
    help="Path to settings YAML file.",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"docmirror version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    # load_dotenv searches current dir and parents by default
    return load_dotenv(override=False)  # Don't override existing env vars


def _load_config(settings: str) -> DocmirrorSettings:
    """Load and validate settings, printing readable errors.

    Raises:
        typer.Exit: With code 1 on any configuration problem
    """
    try:
        return load_settings(Path(settings).expanduser())
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _report(summary: RunSummary) -> None:
    if summary.status is RunStatus.SKIPPED:
        typer.echo("Another run holds the lock; nothing to do.")
        return
    if summary.status is RunStatus.FAILED:
        typer.secho(f"Run failed: {summary.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.echo(f"Run completed in {summary.duration_seconds:.1f}s: {summary.exports} export(s), {summary.reaped} orphan(s) removed")
    if summary.retained_orphans:
        typer.secho(
            f"{len(summary.retained_orphans)} orphan(s) kept for a later run (non-empty folder or remote error)",
            fg=typer.colors.YELLOW,
        )


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """docmirror: Mirror document tabs into folders of rendered PDFs."""
    # Configure logging before any subcommand runs
    from docmirror.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


@app.command()
def run(settings: str = SETTINGS_OPTION) -> None:
    """Reconcile the destination folders with the document once."""
    from docmirror.cli_helpers import open_orchestrator

    config = _load_config(settings)
    try:
        with open_orchestrator(config) as orchestrator:
            summary = orchestrator.reconcile()
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    _report(summary)


@app.command()
def resync(
    settings: str = SETTINGS_OPTION,
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt.",
    ),
) -> None:
    """Forget all persisted state and re-export every tab."""
    from docmirror.cli_helpers import open_orchestrator

    config = _load_config(settings)
    if not yes:
        typer.confirm(
            "This clears all sync state and re-exports every tab. Continue?",
            abort=True,
        )
    try:
        with open_orchestrator(config) as orchestrator:
            summary = orchestrator.force_full_resync()
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    _report(summary)


@app.command()
def schedule(
    settings: str = SETTINGS_OPTION,
    interval: int | None = typer.Option(
        None,
        "--interval",
        "-i",
        min=1,
        help="Seconds between runs (default: schedule.interval_seconds).",
    ),
) -> None:
    """Run reconcile on a fixed interval until interrupted."""
    from docmirror.cli_helpers import open_orchestrator
    from docmirror.engine.scheduler import IntervalScheduler, setup_schedule

    config = _load_config(settings)
    interval_seconds = interval if interval is not None else config.schedule.interval_seconds
    stop_event = threading.Event()
    try:
        with open_orchestrator(config) as orchestrator:
            scheduler = IntervalScheduler()
            setup_schedule(scheduler, orchestrator, interval_seconds)
            typer.echo(f"Reconciling every {interval_seconds}s. Press Ctrl+C to stop.")
            try:
                scheduler.run_forever(stop_event)
            except KeyboardInterrupt:
                stop_event.set()
                typer.echo("Stopped.")
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def status(
    settings: str = SETTINGS_OPTION,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print status as JSON.",
    ),
) -> None:
    """Show tracked entries, lock holder age and the last run time."""
    from docmirror.contracts.config import RuntimeLockConfig
    from docmirror.core.database import StateDB
    from docmirror.core.properties import SqlPropertyStore
    from docmirror.engine.lock import RunLock
    from docmirror.engine.orchestrator import read_status

    config = _load_config(settings)
    with StateDB.from_url(config.state.url) as state_db:
        properties = SqlPropertyStore(state_db)
        report = read_status(properties, lock=RunLock(properties, RuntimeLockConfig.from_settings(config.lock)))

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "tracked_entries": report.tracked_entries,
                    "fingerprints": report.fingerprints,
                    "lock_age_seconds": report.lock_age_seconds,
                    "last_run_at": report.last_run_at,
                }
            )
        )
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title="docmirror status", show_header=False)
    table.add_row("Tracked entries", str(report.tracked_entries))
    table.add_row("Fingerprints", str(report.fingerprints))
    table.add_row(
        "Run lock",
        "free" if report.lock_age_seconds is None else f"held for {report.lock_age_seconds:.0f}s",
    )
    table.add_row("Last run", report.last_run_at or "never")
    Console().print(table)


if __name__ == "__main__":
    app()
