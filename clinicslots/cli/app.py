"""
Main CLI application using Typer.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.booking_store import JsonFileBookingStore
from ..adapters.directory_client import DirectoryClient
from ..adapters.mock_directory_client import MockDirectoryClient
from ..config import AppConfig, get_default_config_path
from ..domain.civil_time import parse_civil_time
from ..domain.exceptions import ClinicSlotsError
from ..domain.formatting import format_booking, format_slot_date, format_time_slot
from ..domain.slot_calculator import SlotCalculator, ordered_days, week_start
from ..services.booking_service import BookingService

app = typer.Typer(
    name="clinicslots",
    help="Browse doctor availability and book appointment slots",
    add_completion=False
)

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load the given config file, or the default one when it exists."""
    if config_file:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()


def _resolve_week(week: Optional[str], next_week: bool):
    """
    Resolve the Monday anchor of the requested week.

    ``week`` may be any date within the week (YYYY-MM-DD).
    """
    if week and next_week:
        console.print("[red]Error: --week and --next-week cannot be used together.[/red]")
        raise typer.Exit(1)

    if week:
        try:
            return week_start(pendulum.from_format(week, "YYYY-MM-DD"))
        except ValueError as e:
            console.print(f"[red]Error parsing week date: {e}[/red]")
            raise typer.Exit(1)

    anchor = week_start()
    if next_week:
        anchor = anchor + timedelta(days=7)
    return anchor


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled sample availability instead of the live feed.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Browse doctor availability and book 30-minute appointment slots.
    """
    try:
        config = _load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _configure_logging("DEBUG" if verbose else config.log_level)

    if mock:
        directory = MockDirectoryClient()
    else:
        directory = DirectoryClient(
            url=config.directory.url,
            timeout_seconds=config.directory.timeout_seconds
        )

    ctx.obj = {
        "config": config,
        "service": BookingService(
            directory=directory,
            store=JsonFileBookingStore(config.bookings_file),
            slot_calculator=SlotCalculator(
                slot_duration_minutes=config.slot_duration_minutes,
                reference_timezone=config.reference_timezone
            ),
        ),
    }


@app.command()
def doctors(ctx: typer.Context):
    """
    List all doctors and the weekdays they are available.
    """
    service: BookingService = ctx.obj["service"]

    try:
        doctor_list = service.list_doctors()
    except ClinicSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not doctor_list:
        console.print("[yellow]No doctors found.[/yellow]")
        return

    table = Table(
        title="Doctors",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name", style="bold yellow")
    table.add_column("Timezone", style="dim")
    table.add_column("Available on")

    for doctor in doctor_list:
        days = ", ".join(record.day_of_week for record in doctor.availability)
        table.add_row(doctor.name, doctor.timezone, days)

    console.print()
    console.print(table)
    console.print()


@app.command()
def slots(
    ctx: typer.Context,
    doctor_name: Annotated[str, typer.Argument(help="Doctor name as listed by 'doctors'")],
    week: Annotated[Optional[str], typer.Option("--week", help="Any date in the target week (YYYY-MM-DD)")] = None,
    next_week: Annotated[bool, typer.Option("--next-week", help="Show the coming week.")] = False,
):
    """
    Show a doctor's slots for one week.

    Examples:

        clinicslots slots "Christy Schumm"
        clinicslots slots "Christy Schumm" --next-week
        clinicslots --mock slots "Christy Schumm" --week 2025-01-08
    """
    config: AppConfig = ctx.obj["config"]
    service: BookingService = ctx.obj["service"]
    anchor = _resolve_week(week, next_week)

    try:
        doctor = service.find_doctor(doctor_name)
        schedule = service.weekly_schedule(doctor, anchor)
    except ClinicSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    timezone = config.display_timezone or doctor.timezone
    console.print(f"\n[bold cyan]{doctor.name}[/bold cyan] - week of {anchor.isoformat()} ({timezone})\n")

    if not schedule:
        console.print("[yellow]No availability this week.[/yellow]\n")
        return

    for day, day_slots in ordered_days(schedule):
        console.print(f"[bold]{format_slot_date(day_slots[0], timezone)}[/bold]")
        for slot in day_slots:
            label = format_time_slot(slot, timezone)
            if slot.is_available:
                console.print(f"  [green]●[/green] {label}")
            else:
                console.print(f"  [dim]○ {label} (booked)[/dim]")
        console.print()


@app.command()
def book(
    ctx: typer.Context,
    doctor_name: Annotated[str, typer.Argument(help="Doctor name as listed by 'doctors'")],
    day: Annotated[str, typer.Argument(help="Weekday, e.g. Monday")],
    time: Annotated[str, typer.Argument(help="Slot start in the doctor's timezone, e.g. 9:30AM")],
    week: Annotated[Optional[str], typer.Option("--week", help="Any date in the target week (YYYY-MM-DD)")] = None,
    next_week: Annotated[bool, typer.Option("--next-week", help="Book in the coming week.")] = False,
):
    """
    Book the slot starting at TIME on DAY.
    """
    service: BookingService = ctx.obj["service"]
    anchor = _resolve_week(week, next_week)

    try:
        wanted = parse_civil_time(time)
        doctor = service.find_doctor(doctor_name)
        schedule = service.weekly_schedule(doctor, anchor)

        match = None
        for slot in schedule.get(day.strip().capitalize(), []):
            local_start = slot.start.in_timezone(slot.timezone)
            if (local_start.hour, local_start.minute) == (wanted.hour, wanted.minute):
                match = slot
                break

        if match is None:
            console.print(f"[yellow]No slot for {doctor.name} on {day} at {time} in the week of {anchor.isoformat()}.[/yellow]")
            raise typer.Exit(1)

        booking = service.book(doctor, match)
    except ClinicSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]✓ Booking confirmed[/bold green]\n\n"
        f"[bold]Doctor:[/bold] {booking.doctor_name}\n"
        f"[bold]When:[/bold] {format_booking(booking)}\n"
        f"[bold]Booking id:[/bold] {booking.id}",
        title="Appointment"
    ))


@app.command()
def bookings(ctx: typer.Context):
    """
    List stored bookings.
    """
    config: AppConfig = ctx.obj["config"]
    service: BookingService = ctx.obj["service"]
    booking_list = service.bookings()

    if not booking_list:
        console.print("[yellow]No bookings yet.[/yellow]")
        return

    table = Table(
        title="My bookings",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Id", style="dim")
    table.add_column("Doctor", style="bold yellow")
    table.add_column("When")

    for booking in booking_list:
        try:
            when = format_booking(booking, config.display_timezone)
        except ClinicSlotsError as e:
            logger.warning("Could not format booking %s: %s", booking.id, e)
            when = f"{booking.start_time} - {booking.end_time}"
        table.add_row(booking.id, booking.doctor_name, when)

    console.print()
    console.print(table)
    console.print()


@app.command()
def cancel(
    ctx: typer.Context,
    booking_id: Annotated[str, typer.Argument(help="Booking id as listed by 'bookings'")],
):
    """
    Cancel a booking.
    """
    service: BookingService = ctx.obj["service"]

    try:
        cancelled = service.cancel(booking_id)
    except ClinicSlotsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not cancelled:
        console.print(f"[bold red]Error:[/bold red] Failed to cancel booking {booking_id}")
        raise typer.Exit(1)

    console.print(f"\n[green]✓ Booking {booking_id} cancelled.[/green]\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
