#!/usr/bin/env python3
'''
uritrack CLI
Track bathroom sessions, record symptoms, and turn the history into weekly
numbers, health insights and a summary for your doctor.
'''
import logging
from typing import Optional

import typer
from dateutil import tz
from rich.console import Console

import uritrack.config.config_manager as cf
from uritrack import __version__
from uritrack.commands import report, session_module
from uritrack.utils import log_utils
from uritrack.utils.db import database_manager

app = typer.Typer(
    help="🚽 uritrack: track urinary health sessions and review insights.")

console = Console()
logger = logging.getLogger(__name__)

app.add_typer(session_module.app, name="session",
              help="Start, stop and manage sessions.")
app.add_typer(report.app, name="report",
              help="View weekly numbers, insights and summaries.")


def ensure_app_initialized():
    """
    Make sure logging, the config file and the database schema exist.
    Safe to call before every command.
    """
    log_utils.setup_logging(cf.get_log_level())
    if not database_manager.is_initialized():
        logger.info("Database not initialized; creating schema")
        database_manager.initialize_schema()


def _version_callback(value: bool):
    if value:
        console.print(f"uritrack {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit."),
):
    try:
        ensure_app_initialized()
    except Exception as e:
        logger.error(f"Initialization failed: {e}", exc_info=True)
        console.print(f"[red]Initialization error: {e}[/red]")
        raise typer.Exit(1)


@app.command("setup")
def setup_command(
    timezone: Optional[str] = typer.Option(
        None, "--timezone", "-t", help="IANA timezone, e.g. America/New_York."),
    period: Optional[str] = typer.Option(
        None, "--period", help="Default summary period: week, month or three_months."),
):
    """Create the config file and database, and set your timezone."""
    cf.BASE_DIR.mkdir(parents=True, exist_ok=True)

    if not database_manager.is_initialized():
        database_manager.initialize_schema()
    console.print("[dim]• Database ready[/dim]")

    config = cf.load_config()
    if not config:
        console.print("[red]⚠️ Could not load configuration.[/red]")
        raise typer.Exit(1)

    if timezone is None:
        timezone = typer.prompt(
            "Timezone (IANA name, blank for system local)",
            default=cf.get_timezone_name(), show_default=False)
    timezone = (timezone or "").strip()
    if timezone and tz.gettz(timezone) is None:
        console.print(f"[red]Unknown timezone '{timezone}'.[/red]")
        raise typer.Exit(1)
    config.setdefault("location", {})["timezone"] = timezone

    if period is not None:
        period = period.strip().lower().replace("-", "_")
        if period not in cf.REPORT_PERIODS:
            console.print(
                f"[red]Unknown period '{period}'. Use week, month or three_months.[/red]")
            raise typer.Exit(1)
        config.setdefault("reports", {})["default_period"] = period

    if not cf.save_config(config):
        logger.error("Failed to save config after setup")
        console.print("[red]⚠️ Configuration save failed after setup.[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Setup completed successfully![/green]")
    console.print(f"[dim]Config: {cf.USER_CONFIG}[/dim]")


if __name__ == "__main__":
    app()
