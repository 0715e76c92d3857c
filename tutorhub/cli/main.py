"""
Command-line interface for the tutoring schedule.

Reads class records from a JSON session file and renders the day view,
the upcoming window and month markers, and deletes single or recurring
classes.
"""
import calendar
import pathlib
from datetime import date
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer import Argument, Option
from typing_extensions import Annotated

from tutorhub.application.exceptions import ApplicationError
from tutorhub.application.schedule_service import ScheduleService
from tutorhub.domain.class_ids import is_valid_class_id
from tutorhub.domain.dates import DateParseError, normalize_date
from tutorhub.domain.durations import format_time_12h
from tutorhub.domain.entities import ClassSession, WEEKDAY_NAMES
from tutorhub.domain.recurrence import describe_recurrence
from tutorhub.domain.repositories import SessionRepository
from tutorhub.infrastructure import log_utils
from tutorhub.infrastructure.di_container import build_container
from tutorhub.infrastructure.json_store import JsonSessionStore

console = Console()

app = typer.Typer(
    name="tutorhub",
    help="Inspect and maintain the tutoring class schedule.",
    add_completion=False,
)

RecordsOption = Annotated[
    Optional[pathlib.Path],
    Option("--records", "-r", help="JSON file of class records. Defaults to SESSIONS_FILE."),
]
TodayOption = Annotated[
    Optional[str],
    Option("--today", help="Treat this date as today (any supported date format)."),
]


def _build_service(records: Optional[pathlib.Path]) -> ScheduleService:
    overrides = {SessionRepository: JsonSessionStore(records)} if records else None
    return build_container(overrides).resolve(ScheduleService)


def _load(records: Optional[pathlib.Path], today: Optional[date] = None) -> ScheduleService:
    service = _build_service(records)
    try:
        service.load(today=today)
    except ApplicationError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    return service


def _parse_day(value: Optional[str], label: str) -> Optional[date]:
    if not value:
        return None
    try:
        return normalize_date(value)
    except DateParseError:
        console.print(f"[red]Invalid {label}: {escape(value)}. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(code=1)


def _time_range(session: ClassSession) -> str:
    if not session.start_time:
        return ""
    if not session.end_time:
        return format_time_12h(session.start_time)
    return f"{format_time_12h(session.start_time)} - {format_time_12h(session.end_time)}"


def _render_sessions(title: str, sessions: List[ClassSession], *, show_date: bool) -> None:
    if not sessions:
        console.print(f"[yellow]{escape(title)}: no classes.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    if show_date:
        table.add_column("Date")
    for column in ("Time", "Class", "Tutor", "Student", "Status", "Repeats"):
        table.add_column(column)

    for session in sessions:
        status = f"[red]{session.status}[/red]" if session.is_error else session.status
        row = [
            _time_range(session),
            escape(session.title),
            escape(session.tutor_name),
            escape(session.student_name),
            status,
            describe_recurrence(session),
        ]
        if show_date:
            row.insert(0, f"{session.weekday[:3]} {session.date.isoformat()}")
        table.add_row(*row)
    console.print(table)


@app.command()
def day(
    on: Annotated[Optional[str], Argument(help="Date to show. Defaults to today.")] = None,
    records: RecordsOption = None,
    today: TodayOption = None,
    recurring_weekdays: Annotated[
        bool,
        Option("--recurring-weekdays", help="Also place recurring classes on their listed weekdays."),
    ] = False,
) -> None:
    """Show the classes scheduled on one date."""
    reference = _parse_day(today, "--today") or date.today()
    target = _parse_day(on, "date") or reference
    service = _load(records, reference)

    sessions = service.day_view(target, include_recurring_weekdays=recurring_weekdays)
    _render_sessions(f"Classes on {target.strftime('%A %d %B %Y')}", sessions, show_date=False)


@app.command()
def upcoming(
    days: Annotated[
        Optional[int],
        Option("--days", "-d", min=1, help="Window length in days. Defaults to UPCOMING_DAYS."),
    ] = None,
    records: RecordsOption = None,
    today: TodayOption = None,
) -> None:
    """List the classes in the next few days, soonest first."""
    reference = _parse_day(today, "--today") or date.today()
    service = _load(records, reference)

    sessions = service.upcoming(days, today=reference)
    _render_sessions("Upcoming classes", sessions, show_date=True)


@app.command()
def month(
    year: Annotated[int, Argument(help="Calendar year, e.g. 2025.")],
    month_number: Annotated[int, Argument(metavar="MONTH", min=1, max=12, help="Month number 1-12.")],
    records: RecordsOption = None,
) -> None:
    """Print a month calendar marking the days that have classes."""
    service = _load(records)
    markers = service.month_markers(year, month_number)

    table = Table(
        title=f"{calendar.month_name[month_number]} {year}",
        show_header=True,
        header_style="bold cyan",
    )
    for name in WEEKDAY_NAMES:
        table.add_column(name[:3], justify="right")
    for week in calendar.Calendar().monthdatescalendar(year, month_number):
        cells = []
        for day_value in week:
            if day_value.month != month_number:
                cells.append("")
            elif markers.get(day_value):
                cells.append(f"[bold green]{day_value.day}*[/bold green]")
            else:
                cells.append(str(day_value.day))
        table.add_row(*cells)
    console.print(table)

    busy = [day_value.isoformat() for day_value, has_classes in markers.items() if has_classes]
    typer.echo(f"Days with classes: {', '.join(busy) if busy else 'none'}")


@app.command()
def delete(
    session_id: Annotated[str, Argument(help="Id of the class to delete.")],
    recurring: Annotated[
        bool,
        Option("--recurring", help="Delete every occurrence of the class's recurring series."),
    ] = False,
    records: RecordsOption = None,
) -> None:
    """Delete one class, or all of its recurring occurrences."""
    service = _load(records)
    try:
        removed = service.delete(session_id, is_recurring=recurring)
    except ApplicationError as exc:
        log_utils.log_message(f"Delete of {session_id!r} failed: {exc}", "ERROR", tag="CLI")
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    typer.echo(f"Deleted {len(removed)} class(es): {', '.join(removed)}")


@app.command(name="validate-file")
def validate_file(
    records: RecordsOption = None,
    today: TodayOption = None,
) -> None:
    """Check that every record in the session file can be read."""
    reference = _parse_day(today, "--today") or date.today()
    service = _load(records, reference)
    sessions = service.sessions

    unreadable = [session.id for session in sessions if session.is_error]
    bad_codes = [
        session.id
        for session in sessions
        if session.class_code and not is_valid_class_id(session.class_code)
    ]

    typer.echo(f"Checked {len(sessions)} record(s).")
    for session_id in unreadable:
        typer.echo(f"Unreadable record: {session_id}")
    for session_id in bad_codes:
        typer.echo(f"Malformed class code on record: {session_id}")

    if unreadable:
        raise typer.Exit(code=1)
    typer.echo("All records readable.")


if __name__ == "__main__":
    app()
