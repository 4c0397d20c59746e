"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig
from ..domain.constants import WEEKDAY_CATALOG, Weekday, format_time_slot_label, weekday_of
from ..domain.exceptions import TimewiseError
from ..domain.models import format_calendar_date, to_calendar_date
from ..domain.resolver import DateDisplayState
from ..adapters.file_store import JsonFileSettingsStore
from ..adapters.http_store import HttpSettingsStore
from ..services.settings_controller import (
    Notification,
    NotificationLevel,
    SettingsController,
    SettingsStoreProtocol,
    ToggleKind,
)

app = typer.Typer(
    name="timewise",
    help="Configure when bookings may be taken",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]

STATE_STYLES = {
    DateDisplayState.CLOSED_BY_WEEKDAY: "dim",
    DateDisplayState.OPEN_AVAILABLE: "bold green",
    DateDisplayState.OPEN_BUT_EXCEPTED: "bold red",
}


def build_store(config: AppConfig) -> SettingsStoreProtocol:
    """Create the settings store selected in the configuration."""
    catalog = config.catalog.build()

    if config.store.backend == "http":
        return HttpSettingsStore(
            base_url=config.store.url,
            timeout=config.store.timeout_seconds,
            catalog=catalog
        )

    return JsonFileSettingsStore(path=config.store.path, catalog=catalog)


def _print_notification(notification: Notification) -> None:
    style = "green" if notification.level == NotificationLevel.SUCCESS else "red"
    console.print(f"[bold {style}]{notification.title}:[/bold {style}] {notification.message}")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True
    )


def _open_session(config_file: Optional[Path]) -> SettingsController:
    """Load configuration and hydrate a controller, exiting on failure."""
    try:
        config = AppConfig.load_or_default(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _configure_logging(config.log_level)

    controller = SettingsController(
        store=build_store(config),
        notifier=_print_notification,
        preview_url=config.preview_url
    )

    if asyncio.run(controller.load()) is None:
        if controller.last_error is not None:
            console.print(f"[dim]{controller.last_error}[/dim]")
        raise typer.Exit(1)

    return controller


def _parse_weekday(value: str) -> int:
    """Accept a weekday number (0=Sunday) or an English name."""
    if value.isdigit():
        return int(value)
    try:
        return int(Weekday[value.upper()])
    except KeyError:
        raise typer.BadParameter(f"Unknown weekday: {value}")


def _toggle_and_save(controller: SettingsController, kind: ToggleKind, value) -> None:
    try:
        controller.apply_toggle(kind, value)
    except TimewiseError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not asyncio.run(controller.save()):
        raise typer.Exit(1)


@app.command()
def show(config_file: ConfigOption = None):
    """
    Show the current availability settings.
    """
    controller = _open_session(config_file)
    settings = controller.draft

    table = Table(title="Available Weekdays", show_header=True, header_style="bold cyan")
    table.add_column("Weekday", style="bold yellow")
    table.add_column("Open")
    for day in WEEKDAY_CATALOG:
        is_open = day in settings.available_weekdays
        table.add_row(day.label, "[green]✓[/green]" if is_open else "[dim]–[/dim]")

    console.print()
    console.print(table)

    slots = settings.sorted_time_slots()
    console.print("\n[bold]Available Time Slots:[/bold]")
    if slots:
        console.print("  " + ", ".join(format_time_slot_label(slot) for slot in slots))
    else:
        console.print("  [yellow]None – nothing is bookable[/yellow]")

    console.print("\n[bold]Holidays / Disabled Dates:[/bold]")
    redundant = set(settings.redundant_disabled_dates())
    if not settings.disabled_dates:
        console.print("  [dim]None[/dim]")
    for day in settings.sorted_disabled_dates():
        note = " [dim](weekday closed)[/dim]" if day in redundant else ""
        console.print(f"  {format_calendar_date(day)} {weekday_of(day).label}{note}")

    console.print(f"\n[bold]Preview Booking Page:[/bold] {controller.preview_url}\n")


@app.command()
def catalog(config_file: ConfigOption = None):
    """
    List the selectable weekdays and time slots.
    """
    try:
        config = AppConfig.load_or_default(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Time Slot Catalog", show_header=True, header_style="bold cyan")
    table.add_column("Token", style="bold yellow")
    table.add_column("Label", style="dim")
    for slot in config.catalog.build():
        table.add_row(slot, format_time_slot_label(slot))

    console.print()
    console.print(table)
    console.print(
        "\n[bold]Weekdays:[/bold] "
        + ", ".join(f"{day.label} ({int(day)})" for day in WEEKDAY_CATALOG)
        + "\n"
    )


@app.command()
def toggle_weekday(
    weekday: Annotated[str, typer.Argument(help="Weekday number (0=Sunday) or name")],
    config_file: ConfigOption = None,
):
    """
    Open or close a weekday and save.
    """
    day = _parse_weekday(weekday)
    controller = _open_session(config_file)
    _toggle_and_save(controller, ToggleKind.WEEKDAY, day)


@app.command()
def toggle_slot(
    slot: Annotated[str, typer.Argument(help="Time slot in HH:mm form")],
    config_file: ConfigOption = None,
):
    """
    Offer or withdraw a time slot and save.
    """
    controller = _open_session(config_file)
    _toggle_and_save(controller, ToggleKind.TIME_SLOT, slot)


@app.command()
def toggle_date(
    date: Annotated[str, typer.Argument(help="Exception date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    force: Annotated[bool, typer.Option("--force", help="Also toggle dates on closed weekdays.")] = False,
):
    """
    Mark a date as a holiday, or clear it again, and save.
    """
    controller = _open_session(config_file)

    try:
        toggleable = controller.resolver.is_exception_toggleable(date)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid date {date!r}: {e}")
        raise typer.Exit(1)

    if not toggleable and not force:
        console.print(
            f"[yellow]{date} falls on a closed weekday. Use --force to toggle it anyway.[/yellow]"
        )
        raise typer.Exit(1)

    _toggle_and_save(controller, ToggleKind.DISABLED_DATE, date)


@app.command()
def check(
    date: Annotated[str, typer.Argument(help="Date to check (YYYY-MM-DD)")],
    slot: Annotated[Optional[str], typer.Argument(help="Optional time slot (HH:mm)")] = None,
    config_file: ConfigOption = None,
):
    """
    Check whether a date, or a date and time, can be booked.
    """
    controller = _open_session(config_file)
    resolver = controller.resolver

    try:
        state = resolver.classify_date(date)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid date {date!r}: {e}")
        raise typer.Exit(1)

    day = to_calendar_date(date)
    console.print(
        f"{format_calendar_date(day)} ({weekday_of(day).label}): "
        f"[{STATE_STYLES[state]}]{state.value}[/{STATE_STYLES[state]}]"
    )

    if slot is None:
        slots = resolver.bookable_slots(day)
        if slots:
            console.print("Bookable: " + ", ".join(slots))
        else:
            console.print("[yellow]No bookable slots.[/yellow]")
        return

    if resolver.is_bookable(day, slot):
        console.print(f"[bold green]✓ {slot} is bookable[/bold green]")
    else:
        console.print(f"[bold red]✗ {slot} is not bookable[/bold red]")
        raise typer.Exit(1)


@app.command()
def calendar(
    year: Annotated[Optional[int], typer.Option("--year", "-y", help="Year to show")] = None,
    month: Annotated[Optional[int], typer.Option("--month", "-m", help="Month to show (1-12)")] = None,
    config_file: ConfigOption = None,
):
    """
    Render a month calendar. Green means available, red means it's a holiday.
    """
    today = pendulum.today()
    year = today.year if year is None else year
    month = today.month if month is None else month

    if not 1 <= year <= 9999:
        console.print(f"[bold red]Error:[/bold red] Year must be between 1 and 9999, got {year}")
        raise typer.Exit(1)

    if not 1 <= month <= 12:
        console.print(f"[bold red]Error:[/bold red] Month must be between 1 and 12, got {month}")
        raise typer.Exit(1)

    controller = _open_session(config_file)
    view = controller.resolver.month_view(year, month)

    table = Table(
        title=pendulum.date(year, month, 1).format("MMMM YYYY"),
        show_header=True,
        header_style="bold cyan"
    )
    for day in WEEKDAY_CATALOG:
        table.add_column(day.label[:3], justify="right")

    week = [""] * len(WEEKDAY_CATALOG)
    for day, state in view:
        column = WEEKDAY_CATALOG.index(weekday_of(day))
        week[column] = f"[{STATE_STYLES[state]}]{day.day}[/{STATE_STYLES[state]}]"
        if column == len(WEEKDAY_CATALOG) - 1:
            table.add_row(*week)
            week = [""] * len(WEEKDAY_CATALOG)
    if any(week):
        table.add_row(*week)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]timewise[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
