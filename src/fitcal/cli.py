"""fitcal CLI - personal trainer booking assistant."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .adapters.log_notifier import LogNotifier
from .config import load_config, local_now
from .core.calendar import (
    CellKind,
    client_history,
    client_schedule,
    day_schedule,
    days_with_sessions,
    month_grid,
)
from .core.errors import SchedulingError
from .core.models import Session
from .workflows import book_session, create_client, get_engine, open_store, run_tick


def _session_json(s: Session) -> dict:
    return {
        "id": s.id,
        "client_id": s.client_id,
        "start": s.start.isoformat(),
        "end": s.end.isoformat(),
        "duration": s.duration,
        "lead_minutes": s.lead_minutes,
        "completed": s.completed,
        "module_deducted": s.module_deducted,
        "notification_sent": s.notification_sent,
    }


def _fail(e: Exception):
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _parse_start(day: str, time_str: str) -> datetime:
    try:
        return datetime.strptime(f"{day} {time_str}", "%Y-%m-%d %H:%M")
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD HH:MM, got {day} {time_str}")


@click.group()
@click.version_option(package_name="fitcal")
@click.option("-v", "--verbose", is_flag=True, help="Log core activity")
def main(verbose: bool):
    """fitcal - Personal trainer booking assistant."""
    if verbose:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.INFO,
        )


# ============== Clients ==============


@main.group()
def client():
    """Manage clients."""
    pass


@client.command("add")
@click.argument("name")
@click.option("--phone", default="", help="Contact phone")
@click.option("--goals", default="", help="Training goals")
@click.option("--notes", default="", help="Free-text notes")
@click.option("--module", "module_count", type=int, default=None, help="Prepaid sessions (module plan)")
def client_add(name: str, phone: str, goals: str, notes: str, module_count: int | None):
    """Add a client."""
    store = open_store(load_config())
    try:
        new = create_client(store, name, phone, goals, notes, module_count)
    except SchedulingError as e:
        _fail(e)
    click.echo(new.id)


@client.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def client_list(as_json: bool):
    """List clients."""
    store = open_store(load_config())
    clients = store.list_clients()

    if as_json:
        click.echo(json.dumps([c.to_record() for c in clients], indent=2))
        return

    if not clients:
        click.echo("No clients yet.")
        return

    for c in clients:
        plan = f"module, {c.module_count} left" if c.is_module else "single"
        click.echo(f"{c.id}  {c.name:20} {c.phone:16} [{plan}]")


@client.command("show")
@click.argument("client_id")
def client_show(client_id: str):
    """Show a client with their history and schedule."""
    config = load_config()
    store = open_store(config)
    try:
        c = store.get_client(client_id)
    except SchedulingError as e:
        _fail(e)

    now = local_now(config)
    sessions = store.sessions_for_client(c.id)

    click.echo(f"### {c.name}")
    click.echo(f"Phone: {c.phone}")
    click.echo(f"Plan: {'module' if c.is_module else 'single'}")
    if c.is_module:
        click.echo(f"Sessions left: {c.module_count}")
    click.echo(f"Goals: {c.goals}")
    click.echo(f"Notes: {c.notes}")

    click.echo()
    click.echo("### History")
    history = client_history(sessions, now)
    if not history:
        click.echo("  No past sessions.")
    for s in history:
        click.echo(f"  {s.start.strftime('%Y-%m-%d %H:%M')}  {s.duration} min")

    click.echo()
    click.echo("### Schedule")
    entries = client_schedule(sessions, now)
    if not entries:
        click.echo("  No sessions booked.")
    for entry in entries:
        s = entry.session
        click.echo(f"  {s.start.strftime('%Y-%m-%d %H:%M')}  {s.duration} min  {entry.status}")


# ============== Calendar ==============


@main.command()
@click.argument("day", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def day(day: str | None, as_json: bool):
    """Show the schedule for DAY (YYYY-MM-DD, default today)."""
    config = load_config()
    try:
        target = date.fromisoformat(day) if day else local_now(config).date()
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {day}")
    store = open_store(config)
    cells = day_schedule(store, get_engine(store, config), target)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "start": cell.start.isoformat(),
                        "kind": cell.kind.value,
                        "session_id": cell.session.id if cell.session else None,
                        "client": cell.client_name or None,
                        "span": cell.span,
                        "durations": cell.durations,
                    }
                    for cell in cells
                ],
                indent=2,
            )
        )
        return

    click.echo(f"### {target.strftime('%A, %B %d')}")
    for cell in cells:
        if cell.kind != CellKind.CONTINUATION:
            click.echo(f"  {cell.format()}")


@main.command()
@click.argument("month", required=False)
def month(month: str | None):
    """Show a month (YYYY-MM, default current); * marks days with sessions."""
    config = load_config()
    if month:
        try:
            year, mon = map(int, month.split("-"))
            date(year, mon, 1)
        except ValueError:
            raise click.BadParameter(f"expected YYYY-MM, got {month}")
    else:
        today = local_now(config).date()
        year, mon = today.year, today.month

    store = open_store(config)
    busy = days_with_sessions(store.list_sessions(), year, mon)

    click.echo(f"### {date(year, mon, 1).strftime('%B %Y')}")
    click.echo(" Mo  Tu  We  Th  Fr  Sa  Su")
    for week in month_grid(year, mon):
        cells = []
        for d in week:
            if d is None:
                cells.append("    ")
            else:
                cells.append(f"{d.day:3}{'*' if d in busy else ' '}")
        click.echo("".join(cells).rstrip())


@main.command()
@click.argument("day")
@click.argument("start_time")
def slots(day: str, start_time: str):
    """Show durations bookable at DAY START_TIME."""
    start = _parse_start(day, start_time)
    config = load_config()
    store = open_store(config)
    durations = get_engine(store, config).available_durations(start)
    if durations:
        click.echo(f"Available: {', '.join(str(d) for d in durations)} min")
    else:
        click.echo("Nothing available.")


@main.command()
@click.argument("client_id")
@click.argument("day")
@click.argument("start_time")
@click.option("--duration", type=int, default=60, show_default=True, help="Minutes")
@click.option("--lead", type=int, default=None, help="Reminder lead time in minutes")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def book(client_id: str, day: str, start_time: str, duration: int, lead: int | None, as_json: bool):
    """Book a session for CLIENT_ID at DAY START_TIME."""
    start = _parse_start(day, start_time)
    config = load_config()
    store = open_store(config)
    lead = lead if lead is not None else config.default_lead_minutes

    try:
        result = book_session(store, get_engine(store, config), client_id, start, duration, lead)
    except SchedulingError as e:
        _fail(e)

    if result.booked:
        if as_json:
            click.echo(json.dumps(_session_json(result.session), indent=2))
        else:
            click.echo(f"Booked {result.session.interval.format()} ({result.session.id})")
        return

    click.echo(f"Not booked: {result.status.value.replace('_', ' ')}", err=True)
    for s in result.conflicts:
        click.echo(f"  overlaps {s.interval.format()} ({s.id})", err=True)
    sys.exit(1)


# ============== Ticking ==============


@main.command()
@click.option("--now", "now_str", default=None, help="Pretend it is this ISO datetime")
def tick(now_str: str | None):
    """Run one ledger and reminder tick."""
    config = load_config()
    try:
        now = datetime.fromisoformat(now_str) if now_str else local_now(config)
    except ValueError:
        raise click.BadParameter(f"expected an ISO datetime, got {now_str}")
    store = open_store(config)
    report = run_tick(store, LogNotifier(), config, now)
    click.echo(f"Deducted: {len(report.ledger.deducted)}")
    click.echo(f"Reminders: {len(report.reminded)}")
    for s in report.reminded:
        click.echo(f"  {s.start.strftime('%Y-%m-%d %H:%M')} ({s.id})")


@main.command()
def run():
    """Run the ticking driver, logging reminders."""
    from .ticker import run_ticker

    run_ticker(LogNotifier())


@main.command()
def bot():
    """Start the Telegram bot."""
    from .telegram_bot import run_bot

    try:
        run_bot()
    except ValueError as e:
        _fail(e)


if __name__ == "__main__":
    main()
