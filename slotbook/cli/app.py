"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import get_default_config_path, load_config
from ..domain.exceptions import SlotbookError
from ..services.availability import AvailabilityReport, AvailabilityService

app = typer.Typer(
    name="slotbook",
    help="Compute bookable appointment slots for a practitioner's day",
    add_completion=False
)

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _render_report(report: AvailabilityReport, columns: int = 8) -> None:
    """Print booked and available slots as tables."""
    console.print(f"\n[bold cyan]Day:[/bold cyan] {report.date.to_date_string()}\n")

    if report.booked_slots:
        booked = Table(title="Booked", show_header=True, header_style="bold cyan")
        booked.add_column("Start", style="bold yellow")
        booked.add_column("Duration (min)", justify="right")
        for slot in report.booked_slots:
            booked.add_row(slot.time, str(slot.duration_minutes))
        console.print(booked)
    else:
        console.print("[dim]No bookings on this day.[/dim]")

    if not report.available_slots:
        console.print("\n[yellow]⚠ Fully booked - no free slots.[/yellow]\n")
        return

    free = Table(
        title=f"Available ({len(report.available_slots)})",
        show_header=False
    )
    for _ in range(columns):
        free.add_column(style="green")
    for i in range(0, len(report.available_slots), columns):
        row = report.available_slots[i:i + columns]
        free.add_row(*row, *[""] * (columns - len(row)))

    console.print()
    console.print(free)
    console.print()


@app.command()
def slots(
    day: Annotated[str, typer.Argument(help="Day to inspect (YYYY-MM-DD)")],
    user_id: Annotated[str, typer.Argument(help="Practitioner user id")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", min=1, help="Only show slots where an appointment of this length fits")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock bookings instead of the hosted backend.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Show booked and available slots of a day.

    Examples:

        slotbook slots 2024-11-25 practitioner-1 --mock

        slotbook slots 2024-11-25 practitioner-1 --duration 90
    """
    _setup_logging(verbose)

    try:
        config = load_config(config_file)

        if mock:
            console.print("[yellow]⚠  MOCK MODE: using bundled test bookings[/yellow]")

        service = AvailabilityService(
            booking_store=config.build_booking_store(mock=mock),
            slot_calculator=config.build_slot_calculator(),
        )
        report = asyncio.run(
            service.get_availability(
                user_id=user_id,
                day=day,
                requested_duration_minutes=duration,
            )
        )
    except (FileNotFoundError, SlotbookError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _render_report(report)


@app.command()
def serve(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address (defaults to server.host)")] = None,
    port: Annotated[Optional[int], typer.Option("--port", help="Bind port (defaults to server.port)")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Serve bundled mock bookings.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Run the availability HTTP API.
    """
    import uvicorn

    from ..api.app import create_app

    _setup_logging(verbose)

    try:
        config = load_config(config_file)
        api = create_app(config=config, mock=mock)
    except (FileNotFoundError, SlotbookError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    uvicorn.run(
        api,
        host=host or config.server.host,
        port=port or config.server.port,
        log_config=None,
    )


@app.command()
def show_config(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
):
    """
    Show the effective slot configuration.
    """
    try:
        config = load_config(config_file)
    except (FileNotFoundError, SlotbookError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold yellow")
    table.add_column("Value")

    table.add_row("config file", str(config_file or get_default_config_path()))
    table.add_row("timezone", config.timezone)
    table.add_row("slots.granularity_minutes", str(config.slots.granularity_minutes))
    table.add_row("slots.default_duration_minutes", str(config.slots.default_duration_minutes))
    table.add_row("storage.url", config.storage.url or "[dim](not set)[/dim]")
    table.add_row("storage.table", config.storage.table)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
