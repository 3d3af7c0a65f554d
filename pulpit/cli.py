"""Command-line interface for managing a document's presentations.

Records live in the database configured by ``PULPIT_DATABASE_URL``.
"""

from __future__ import annotations

from datetime import datetime

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from pulpit.config.settings import settings
from pulpit.core.logger import setup_logger
from pulpit.db.repository import SqlPresentationRepository
from pulpit.db.session import init_db
from pulpit.presentations.errors import PersistenceError
from pulpit.presentations.models import PresentationRecord
from pulpit.presentations.repository import PresentationRepository
from pulpit.presentations.store import PresentationStore
from pulpit.scheduling.recurrence import Monthly, Once, Weekly, Yearly
from pulpit.scheduling.schedule_entry import ServiceLabel

console = Console()

app = typer.Typer(
    name="pulpit",
    help="Schedule, record and reschedule document presentations",
    add_completion=False,
)

DATETIME_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]


def _repository() -> PresentationRepository:
    init_db()
    return SqlPresentationRepository()


def _open_store(document_id: str) -> PresentationStore:
    try:
        return PresentationStore(document_id, _repository())
    except PersistenceError as e:
        console.print(f"[red]Could not load presentations: {e.message}[/red]")
        raise typer.Exit(1) from e


def _build_recurrence(weekly: str | None, monthly: int | None, yearly: str | None) -> Once | Weekly | Monthly | Yearly | None:
    chosen = [option for option in (weekly, monthly, yearly) if option is not None]
    if len(chosen) > 1:
        raise typer.BadParameter("Use only one of --weekly, --monthly or --yearly")

    try:
        if weekly is not None:
            days = {int(part) for part in weekly.split(",") if part.strip()}
            return Weekly(days_of_week=frozenset(days))
        if monthly is not None:
            return Monthly(day_of_month=monthly)
        if yearly is not None:
            month, day = (int(part) for part in yearly.split("-", 1))
            return Yearly(month=month, day=day)
    except (ValueError, ValidationError) as e:
        raise typer.BadParameter(f"Invalid recurrence: {e}") from e
    return None


def _describe_recurrence(rule: Once | Weekly | Monthly | Yearly | None) -> str:
    if rule is None or not rule.is_recurring:
        return ""
    if isinstance(rule, Weekly):
        return "weekly on " + ",".join(str(d) for d in sorted(rule.days_of_week))
    if isinstance(rule, Monthly):
        return f"monthly on day {rule.day_of_month}"
    return f"yearly on {rule.month:02d}-{rule.day:02d}"


def _render(title: str, records: list[PresentationRecord]) -> None:
    if not records:
        console.print(f"[dim]{title}: none[/dim]")
        return
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("When")
    table.add_column("Status")
    table.add_column("Service")
    table.add_column("Location")
    table.add_column("Repeats")
    for record in records:
        table.add_row(
            record.id,
            record.datetime.strftime("%Y-%m-%d %H:%M"),
            f"[{record.status.color}]{record.status.value}[/]",
            record.service_label.value if record.service_label else "",
            record.location or "",
            _describe_recurrence(record.recurrence),
        )
    console.print(table)


def _persisted(action: str, func, *args):
    try:
        return func(*args)
    except PersistenceError as e:
        console.print(f"[red]{action} failed: {e.message}[/red]")
        raise typer.Exit(1) from e


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    """Configure logging before any command runs."""
    setup_logger(level="DEBUG" if verbose else settings.log_level, log_file=settings.log_file)


@app.command()
def record(
    document_id: str = typer.Argument(..., help="Document ID"),
    when: datetime = typer.Argument(..., formats=DATETIME_FORMATS, help="When it was presented"),
    location: str | None = typer.Option(None, "--location", "-l", help="Where it was presented"),
    notes: str | None = typer.Option(None, "--notes", help="Free-text notes"),
) -> None:
    """Record a presentation that already happened."""
    store = _open_store(document_id)
    created = _persisted("Record", store.record_presentation, when, location, notes)
    console.print(f"[green]Recorded presentation {created.id}[/green]")


@app.command()
def schedule(
    document_id: str = typer.Argument(..., help="Document ID"),
    when: datetime = typer.Argument(..., formats=DATETIME_FORMATS, help="When it will be presented"),
    location: str | None = typer.Option(None, "--location", "-l", help="Where it will be presented"),
    service: ServiceLabel | None = typer.Option(None, "--service", "-s", help="Service label"),
    weekly: str | None = typer.Option(None, "--weekly", help="Comma-separated weekdays, 1 = Sunday"),
    monthly: int | None = typer.Option(None, "--monthly", help="Day of month"),
    yearly: str | None = typer.Option(None, "--yearly", help="Month and day as MM-DD"),
    notes: str | None = typer.Option(None, "--notes", help="Free-text notes"),
) -> None:
    """Schedule a future presentation, optionally repeating."""
    recurrence = _build_recurrence(weekly, monthly, yearly)
    store = _open_store(document_id)
    created = _persisted("Schedule", store.schedule_presentation, when, location, service, recurrence, notes)
    console.print(f"[green]Scheduled presentation {created.id}[/green]")


@app.command()
def cancel(
    document_id: str = typer.Argument(..., help="Document ID"),
    presentation_id: str = typer.Argument(..., help="Presentation ID"),
) -> None:
    """Cancel a scheduled presentation."""
    store = _open_store(document_id)
    if not _persisted("Cancel", store.cancel_presentation, presentation_id):
        console.print(f"[yellow]No scheduled presentation {presentation_id}, nothing changed[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]Canceled presentation {presentation_id}[/green]")


@app.command()
def done(
    document_id: str = typer.Argument(..., help="Document ID"),
    presentation_id: str = typer.Argument(..., help="Presentation ID"),
) -> None:
    """Mark a scheduled presentation as presented."""
    store = _open_store(document_id)
    if not _persisted("Update", store.mark_presented, presentation_id):
        console.print(f"[yellow]No scheduled presentation {presentation_id}, nothing changed[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]Marked presentation {presentation_id} as presented[/green]")


@app.command()
def reschedule(
    document_id: str = typer.Argument(..., help="Document ID"),
    presentation_id: str = typer.Argument(..., help="Presentation ID"),
    when: datetime = typer.Argument(..., formats=DATETIME_FORMATS, help="New date and time"),
) -> None:
    """Move a scheduled presentation to a new date."""
    store = _open_store(document_id)
    replacement = _persisted("Reschedule", store.reschedule_presentation, presentation_id, when)
    if replacement is None:
        console.print(f"[yellow]No scheduled presentation {presentation_id}, nothing changed[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]Rescheduled {presentation_id} as {replacement.id}[/green]")


@app.command(name="list")
def list_presentations(document_id: str = typer.Argument(..., help="Document ID")) -> None:
    """Show upcoming and past presentations."""
    store = _open_store(document_id)
    _render("Upcoming", store.future_presentations)
    _render("Past", store.past_presentations)


@app.command()
def on(
    document_id: str = typer.Argument(..., help="Document ID"),
    day: datetime = typer.Argument(..., formats=["%Y-%m-%d"], help="Calendar day"),
) -> None:
    """Show presentations on one calendar day."""
    store = _open_store(document_id)
    _render(day.strftime("%Y-%m-%d"), store.presentations_for(day))


@app.command()
def occurrences(
    document_id: str = typer.Argument(..., help="Document ID"),
    presentation_id: str = typer.Argument(..., help="Presentation ID"),
    until: datetime = typer.Argument(..., formats=["%Y-%m-%d"], help="Last calendar day to include"),
) -> None:
    """Expand a presentation's recurrence up to a day."""
    store = _open_store(document_id)
    if store.get(presentation_id) is None:
        console.print(f"[yellow]No presentation {presentation_id}[/yellow]")
        raise typer.Exit(1)
    dates = store.generate_occurrences(presentation_id, until.date())
    logger.debug(f"Expanded {presentation_id} into {len(dates)} occurrences")
    for occurrence in dates:
        console.print(occurrence.strftime("%Y-%m-%d %H:%M"))


if __name__ == "__main__":
    app()
