"""Days CLI - calendar day annotations for a journal graph."""

import json
import logging
import sys
from datetime import date, timedelta

import click

from .config import load_config
from .core.targets import extract_custom_query, parse_target
from .core.dates import from_day_key
from .core.daymap import DayMap
from .ports.document_store import StoreError
from .workflows import events_to_sync, month_days, year_days


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--graph", "graph_file", default=None, type=click.Path(dir_okay=False),
              help="Read a JSON graph export instead of the Logseq HTTP API")
@click.pass_context
def main(ctx, debug: bool, graph_file: str | None):
    """Days - calendar day annotations for a journal graph."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.obj = {"config": load_config(), "graph_file": graph_file}


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _read_query(query: str | None, query_file) -> str | None:
    """Inline query, or the body of a fenced query block read from a file."""
    if query_file is None:
        return query
    return extract_custom_query(query_file.read())


def _show_days(days: DayMap, context, as_json: bool, empty_msg: str) -> None:
    """Shared day map display logic."""
    if as_json:
        click.echo(json.dumps(days.to_dict(), indent=2))
        return

    if not len(days):
        click.echo(empty_msg)
        return

    current_week = None
    for key, entry in days.items():
        day = from_day_key(key)
        week = context.week_page_name(day) if context else None
        if week and week != current_week:
            if current_week is not None:
                click.echo()
            click.echo(f"### {week}")
            current_week = week

        flags = []
        if entry.is_current:
            flags.append("current")
        if entry.is_contentful:
            flags.append(f"journal: {context.journal_page_name(day)}" if context else "journal")
        if entry.has_task:
            flags.append("task")
        if entry.linked_entry_id:
            flags.append(f"-> {entry.linked_entry_id}")
        flag_str = f" [{', '.join(flags)}]" if flags else ""
        click.echo(f"{day.strftime('%Y-%m-%d %a')}{flag_str}")
        for annotation in entry.annotations:
            click.echo(f"    {annotation.color} {annotation.display_name} ({annotation.jump_target})")


@main.command()
@click.argument("target", required=False, default="")
@click.option("--year", "-y", type=int, default=None, help="Year, defaults to this year")
@click.option("--month", "-m", type=click.IntRange(1, 12), default=None, help="Month 1-12, defaults to this month")
@click.option("--all", "with_all", is_flag=True, help="Scan date properties across the whole graph")
@click.option("--journal", "with_journal", is_flag=True, help="Mark journal, task and scheduled days")
@click.option("--query", default=None, help="Raw query, used when TARGET is @")
@click.option("--query-file", type=click.File("r"), default=None,
              help="File holding a fenced query block, used when TARGET is @")
@click.option("--current", default=None, help="Page on screen, used when TARGET is *")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def month(obj, target: str, year: int | None, month: int | None, with_all: bool,
          with_journal: bool, query: str | None, query_file, current: str | None, as_json: bool):
    """Show annotated days of a month for TARGET (page, ((uuid)), * or @)."""
    today = date.today()
    custom_query = _read_query(query, query_file)
    query_target = parse_target(target, custom_query=custom_query, current_name=current)
    try:
        days, context = month_days(
            obj["config"],
            query_target,
            year or today.year,
            month or today.month,
            with_all=with_all,
            with_journal=with_journal,
            graph_file=obj["graph_file"],
        )
    except StoreError as e:
        _fail(e)
        return
    _show_days(days, context, as_json, "No annotated days this month.")


@main.command()
@click.argument("target")
@click.option("--year", "-y", type=int, default=None, help="Year, defaults to this year")
@click.option("--query", default=None, help="Raw query, used when TARGET is @")
@click.option("--query-file", type=click.File("r"), default=None,
              help="File holding a fenced query block, used when TARGET is @")
@click.option("--title", default=None, help="Title shown for a raw query")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def year(obj, target: str, year: int | None, query: str | None, query_file, title: str | None,
         as_json: bool):
    """Show the journal days linked to TARGET over a year."""
    query_target = parse_target(target, custom_query=_read_query(query, query_file), title=title)
    try:
        days, view_title = year_days(
            obj["config"], query_target, year or date.today().year, graph_file=obj["graph_file"]
        )
    except StoreError as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps({"title": view_title, "days": days.to_dict()}, indent=2))
        return
    if view_title:
        click.echo(f"{view_title}\n")
    _show_days(days, None, False, "No linked journal days this year.")


@main.command()
@click.option("--from", "start", default=None, help="First day (YYYY-MM-DD), defaults to today")
@click.option("--to", "end", default=None, help="Last day (YYYY-MM-DD), defaults to 30 days out")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def events(obj, start: str | None, end: str | None, as_json: bool):
    """List scheduled and deadline blocks to sync to a calendar."""
    try:
        start_date = date.fromisoformat(start) if start else date.today()
        end_date = date.fromisoformat(end) if end else start_date + timedelta(days=30)
        synced = events_to_sync(obj["config"], start_date, end_date, graph_file=obj["graph_file"])
    except (StoreError, ValueError) as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps({k: e.to_dict() for k, e in synced.items()}, indent=2))
        return
    if not synced:
        click.echo("No scheduled or deadline blocks in range.")
        return
    for event in synced.values():
        when = event.start.strftime("%Y-%m-%d") + ("" if event.all_day else event.start.strftime(" %H:%M"))
        click.echo(f"{when:16} {event.title}")


@main.command()
@click.pass_obj
def slots(obj):
    """List the configured date property slots."""
    active = obj["config"].to_context().active_slots()
    if not active:
        click.echo("No date properties configured.")
        return
    for slot in active:
        repeat = ""
        if slot.repeat:
            limit = "" if slot.repeat_count < 0 else f", {slot.repeat_count} times"
            until = f", until {slot.repeat_end_at}" if slot.repeat_end_at else ""
            repeat = f" every {slot.repeat}{limit}{until}"
        click.echo(f"{slot.name:20} {slot.color}{repeat}")
