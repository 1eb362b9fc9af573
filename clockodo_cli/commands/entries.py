from typing import Optional

import click

from clockodo_cli.aggregate import (
    GroupField,
    compute_duration,
    group_entries,
    group_to_dict,
    total_seconds,
)
from clockodo_cli.clockodo import parse_entry
from clockodo_cli.commands.common import (
    DefaultCommandGroup,
    confirm_delete,
    drop_none,
    filter_options,
    output_mode,
    output_options,
    resolve_tracking_ids,
)
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.dates import (
    end_of_day,
    format_date,
    format_decimal_hours,
    format_duration,
    format_time,
    now_local,
    parse_since,
    parse_until,
    to_api_datetime,
)
from clockodo_cli.errors import POSITIVE_INT, parse_id
from clockodo_cli.output import (
    OutputMode,
    bold,
    command_result,
    dim,
    print_detail,
    print_lines,
    print_result,
    print_success,
    print_table,
)
from clockodo_cli.report import ReportFilter
from clockodo_cli.types import Billability, DateRange, JsonDict


@click.group(cls=DefaultCommandGroup, help="Manage time entries")
def entries() -> None:
    pass


def _total_line(seconds: int, count: int) -> str:
    return (
        f"  {bold('Total')}: {format_duration(seconds)} "
        f"({format_decimal_hours(seconds)}) across {count} entries"
    )


@entries.command(name="list", help="List time entries")
@click.option("--since", default="today", show_default=True, help="Start date")
@click.option("--until", help="End date (default: end of today)")
@filter_options
@click.option("--text", help="Filter by description text")
@click.option(
    "-g",
    "--group",
    help="Group by: customer, project, service, text (shows summary table instead)",
)
@output_options
@pass_app
def list_entries(
    app: AppContext,
    since: str,
    until: Optional[str],
    customer: Optional[int],
    project: Optional[int],
    service: Optional[int],
    text: Optional[str],
    group: Optional[str],
) -> None:
    now = now_local()
    group_by = GroupField.from_alias(group) if group else None
    time_since = parse_since(since, now=now)
    time_until = parse_until(until, now=now) if until else end_of_day(now)
    period = DateRange(since=time_since, until=time_until)

    report_filter = ReportFilter(
        customers_id=customer, projects_id=project, services_id=service, text=text
    )
    raw_entries = app.client.get_entries(
        time_since=to_api_datetime(period.since),
        time_until=to_api_datetime(period.until),
        filter=report_filter.to_params(),
    )

    mode = output_mode(app)
    if not raw_entries:
        if mode is OutputMode.HUMAN:
            print_lines([dim("  No entries found for the given period.")], app.options)
        else:
            print_result(
                command_result([], meta={"count": 0, "total_seconds": 0}), app.options
            )
        return

    parsed = [parse_entry(raw) for raw in raw_entries]
    total = total_seconds(parsed, now)

    if group_by is not None:
        groups = group_entries(parsed, group_by, now)
        if mode is not OutputMode.HUMAN:
            data = {
                "groups": [group_to_dict(g) for g in groups],
                "total": {"seconds": total, "formatted": format_duration(total)},
            }
            print_result(
                command_result(data, meta={"count": len(parsed)}), app.options
            )
            return

        rows = [
            [
                g.key,
                str(g.count),
                format_duration(g.seconds),
                format_decimal_hours(g.seconds),
            ]
            for g in groups
        ]
        print_table(["Group", "Entries", "Duration", "Hours"], rows, app.options)
        print_lines(["", _total_line(total, len(parsed)), ""], app.options)
        return

    if mode is not OutputMode.HUMAN:
        meta = {"count": len(parsed), "total_seconds": total}
        print_result(command_result(raw_entries, meta=meta), app.options)
        return

    rows = [
        [
            str(entry.id),
            format_date(entry.since),
            format_time(entry.since),
            "running" if entry.until is None else format_time(entry.until),
            format_duration(compute_duration(entry, now)),
            entry.text or "—",
        ]
        for entry in parsed
    ]
    print_table(
        ["ID", "Date", "Start", "End", "Duration", "Description"], rows, app.options
    )
    print_lines(["", _total_line(total, len(parsed)), ""], app.options)


@entries.command(name="get", help="Get details of a specific entry")
@click.argument("entry_id")
@output_options
@pass_app
def get_entry(app: AppContext, entry_id: str) -> None:
    raw = app.client.get_entry(id=parse_id(entry_id))

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(raw), app.options)
        return

    entry = parse_entry(raw)
    now = now_local()
    print_detail(
        [
            ("ID", entry.id),
            ("Date", format_date(entry.since)),
            ("Start", format_time(entry.since)),
            ("End", "running" if entry.until is None else format_time(entry.until)),
            ("Duration", format_duration(compute_duration(entry, now))),
            ("Description", entry.text),
            ("Customer ID", entry.customers_id),
            ("Project ID", entry.projects_id),
            ("Service ID", entry.services_id),
            ("Billable", entry.billable.label),
        ],
        app.options,
    )


@entries.command(name="create", help="Create a time entry")
@click.option(
    "--from",
    "time_from",
    required=True,
    help="Start time (e.g. '2024-01-15 09:00' or '09:00')",
)
@click.option(
    "--to", "time_to", required=True, help="End time (e.g. '2024-01-15 17:00')"
)
@click.option("-c", "--customer", type=POSITIVE_INT, help="Customer ID")
@click.option("-p", "--project", type=POSITIVE_INT, help="Project ID")
@click.option("-s", "--service", type=POSITIVE_INT, help="Service ID")
@click.option("-t", "--text", help="Entry description")
@click.option("-b", "--billable", is_flag=True, help="Mark as billable")
@output_options
@pass_app
def create_entry(
    app: AppContext,
    time_from: str,
    time_to: str,
    customer: Optional[int],
    project: Optional[int],
    service: Optional[int],
    text: Optional[str],
    billable: bool,
) -> None:
    now = now_local()
    time_since = to_api_datetime(parse_since(time_from, now=now))
    time_until = to_api_datetime(parse_since(time_to, now=now))

    selection = resolve_tracking_ids(
        app, customer, service, project, "Customer ID and Service ID are required."
    )
    params = drop_none(
        {
            "customers_id": selection.customers_id,
            "services_id": selection.services_id,
            "projects_id": selection.projects_id,
            "billable": int(Billability.from_flag(billable)),
            "time_since": time_since,
            "time_until": time_until,
            "text": text or None,
        }
    )
    raw = app.client.add_entry(params)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(raw), app.options)
        return

    entry = parse_entry(raw)
    until = "?" if entry.until is None else format_time(entry.until)
    duration = format_duration(compute_duration(entry, now))
    print_success(f"Entry created (ID: {entry.id})")
    print_lines([f"  {format_time(entry.since)} — {until} ({duration})"], app.options)


@entries.command(name="update", help="Update a time entry")
@click.argument("entry_id")
@click.option("--from", "time_from", help="New start time")
@click.option("--to", "time_to", help="New end time")
@click.option("-t", "--text", help="New description")
@click.option(
    "-b", "--billable/--no-billable", default=None, help="Mark as (not) billable"
)
@output_options
@pass_app
def update_entry(
    app: AppContext,
    entry_id: str,
    time_from: Optional[str],
    time_to: Optional[str],
    text: Optional[str],
    billable: Optional[bool],
) -> None:
    id = parse_id(entry_id)
    params: JsonDict = {}
    if time_from:
        params["time_since"] = to_api_datetime(parse_since(time_from))
    if time_to:
        params["time_until"] = to_api_datetime(parse_since(time_to))
    if text is not None:
        params["text"] = text
    if billable is not None:
        params["billable"] = int(Billability.from_flag(billable))

    raw = app.client.edit_entry(id, params)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(raw), app.options)
        return

    print_success(f"Entry {id} updated")


@entries.command(name="delete", help="Delete a time entry")
@click.argument("entry_id")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation")
@output_options
@pass_app
def delete_entry(app: AppContext, entry_id: str, force: bool) -> None:
    id = parse_id(entry_id)
    if not confirm_delete(f"entry {id}", force):
        return

    app.client.delete_entry(id)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result({"success": True, "id": id}), app.options)
        return

    print_success(f"Entry {id} deleted")
