"""
Command Line Interface (CLI) with Click
"""

import logging
import sys
import time

import click
import schedule
from rich.console import Console

from prunarr import __version__
from prunarr.cli_config import load_config_from_args, setup_context
from prunarr.commands import test_command, tv_command
from prunarr.config import Config
from prunarr.sonarr import SonarrClient
from prunarr.utils import parse_duration, setup_logging
from prunarr.watch_tracker import WatchTracker

logger = logging.getLogger(__name__)
console = Console()


class DurationType(click.ParamType):
    """A human-readable time span such as "12 days" """

    name = "duration"

    def convert(self, value, param, ctx):
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


DURATION = DurationType()


@click.group()
@click.version_option(__version__, prog_name="prunarr")
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="YAML configuration file"
)
@click.option("--sonarr-url", envvar="SONARR_URL", help="Sonarr URL")
@click.option("--sonarr-api-key", envvar="SONARR_API_KEY", help="Sonarr API key")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
)
@click.pass_context
def cli(ctx, config, sonarr_url, sonarr_api_key, log_level):
    """PrunArr - Delete fully watched TV seasons from Sonarr"""

    # Load and validate configuration
    cfg = load_config_from_args(config, sonarr_url, sonarr_api_key, log_level)

    # Setup logging
    setup_logging(cfg.log_level)

    # Setup context
    ctx.ensure_object(dict)
    ctx.obj.update(setup_context(cfg))


def _run_tv(ctx, delete_files, retain_for) -> bool:
    """Run one cleanup pass; returns False if anything failed"""
    config: Config = ctx.obj["config"]
    sonarr: SonarrClient = ctx.obj["sonarr"]
    watch_tracker: WatchTracker = ctx.obj["watch_tracker"]

    try:
        report = tv_command(
            config,
            sonarr,
            watch_tracker,
            delete_files=delete_files,
            retain_for=retain_for,
        )
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Error during cleanup")
        return False

    return not report.failed


@cli.command()
@click.option(
    "--delete-files", "-f", is_flag=True, help="Actually delete files (default: dry run)"
)
@click.option(
    "--retain-for",
    type=DURATION,
    help="How long to keep a fully watched season after it aired, e.g. '14 days'",
)
@click.pass_context
def tv(ctx, delete_files, retain_for):
    """Delete fully watched, fully aired TV seasons"""
    if not _run_tv(ctx, delete_files, retain_for):
        sys.exit(1)


@cli.command()
@click.pass_context
def test(ctx):
    """Test connection to Sonarr and the media server"""
    config: Config = ctx.obj["config"]
    sonarr: SonarrClient = ctx.obj["sonarr"]
    watch_tracker: WatchTracker = ctx.obj["watch_tracker"]
    test_command(config, sonarr, watch_tracker)


@cli.command()
@click.option(
    "--delete-files", "-f", is_flag=True, help="Actually delete files (default: dry run)"
)
@click.option(
    "--retain-for",
    type=DURATION,
    help="How long to keep a fully watched season after it aired, e.g. '14 days'",
)
@click.option(
    "--interval",
    type=int,
    help="Override schedule interval from config",
)
@click.option(
    "--unit",
    type=click.Choice(["minutes", "hours", "days", "weeks"]),
    help="Override schedule unit from config",
)
@click.pass_context
def schedule_mode(ctx, delete_files, retain_for, interval, unit):
    """Run the TV cleanup on a schedule"""

    config: Config = ctx.obj["config"]

    # Use command-line args if provided, otherwise use config
    schedule_interval = interval if interval is not None else config.schedule_interval
    schedule_unit = unit if unit is not None else config.schedule_unit

    # Validate schedule unit
    valid_units = ["minutes", "hours", "days", "weeks"]
    if schedule_unit not in valid_units:
        console.print(f"[red]Invalid schedule unit:[/red] {schedule_unit}")
        console.print(f"Valid units: {', '.join(valid_units)}")
        sys.exit(1)

    console.print("[bold cyan]PrunArr - Schedule Mode[/bold cyan]")
    console.print(f"Running cleanup every {schedule_interval} {schedule_unit}")
    console.print("Press Ctrl+C to stop\n")

    def run_cleanup():
        """Run the tv command logic"""
        console.print(f"\n[bold blue]{'=' * 60}[/bold blue]")
        console.print(
            f"[bold blue]Running scheduled cleanup at {time.strftime('%Y-%m-%d %H:%M:%S')}[/bold blue]"
        )
        console.print(f"[bold blue]{'=' * 60}[/bold blue]\n")

        if not _run_tv(ctx, delete_files, retain_for):
            console.print("[red]Scheduled cleanup finished with errors[/red]")

        console.print(f"\n[dim]Next run in {schedule_interval} {schedule_unit}[/dim]")

    getattr(schedule.every(schedule_interval), schedule_unit).do(run_cleanup)

    # Run immediately on start
    console.print("[yellow]Running initial cleanup...[/yellow]")
    run_cleanup()

    # Keep running
    try:
        while True:
            schedule.run_pending()
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Schedule mode stopped by user[/yellow]")
        sys.exit(0)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
