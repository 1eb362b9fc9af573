from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import click

from clockodo_cli.aggregate import compute_duration
from clockodo_cli.clockodo import parse_entry
from clockodo_cli.commands.common import (
    drop_none,
    output_mode,
    output_options,
    resolve_tracking_ids,
)
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.dates import (
    end_of_day,
    format_duration,
    format_time,
    now_local,
    start_of_day,
    to_api_datetime,
)
from clockodo_cli.errors import POSITIVE_INT, CliError, ExitCode
from clockodo_cli.output import (
    OutputMode,
    bold,
    command_result,
    dim,
    print_lines,
    print_result,
    print_success,
)
from clockodo_cli.types import Billability


@click.command(help="Start time tracking")
@click.option("-c", "--customer", type=POSITIVE_INT, help="Customer ID")
@click.option("-p", "--project", type=POSITIVE_INT, help="Project ID")
@click.option("-s", "--service", type=POSITIVE_INT, help="Service ID")
@click.option("-t", "--text", help="Entry description")
@click.option(
    "-b", "--billable/--no-billable", default=None, help="Mark as (not) billable"
)
@output_options
@pass_app
def start(
    app: AppContext,
    customer: Optional[int],
    project: Optional[int],
    service: Optional[int],
    text: Optional[str],
    billable: Optional[bool],
) -> None:
    selection = resolve_tracking_ids(
        app,
        customer,
        service,
        project,
        "Customer ID and Service ID are required to start tracking.",
    )
    params = drop_none(
        {
            "customers_id": selection.customers_id,
            "services_id": selection.services_id,
            "projects_id": selection.projects_id,
            "text": text or None,
        }
    )
    if billable is not None:
        params["billable"] = int(Billability.from_flag(billable))

    running = app.client.start_clock(params)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(running), app.options)
        return

    print_success("Clock started")
    lines = []
    if running.get("text"):
        lines.append(f"  Description: {running['text']}")
    lines.append(f"  Started at: {format_time(running['time_since'])}")
    print_lines(lines, app.options)


@click.command(help="Stop time tracking")
@output_options
@pass_app
def stop(app: AppContext) -> None:
    clock = app.client.get_clock()
    running = clock.get("running")
    if not running:
        raise CliError("No clock is currently running.", ExitCode.EMPTY_RESULTS)

    stopped = app.client.stop_clock(entries_id=running["id"])

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(stopped), app.options)
        return

    duration = compute_duration(parse_entry(stopped), now_local())
    print_success(f"Clock stopped ({format_duration(duration)})")
    if stopped.get("text"):
        print_lines([f"  Description: {stopped['text']}"], app.options)


@click.command(help="Show running clock and today's summary")
@output_options
@pass_app
def status(app: AppContext) -> None:
    client = app.client
    now = now_local()

    # Both reads are independent
    with ThreadPoolExecutor(max_workers=2) as executor:
        clock_future = executor.submit(client.get_clock)
        entries_future = executor.submit(
            client.get_entries,
            time_since=to_api_datetime(start_of_day(now)),
            time_until=to_api_datetime(end_of_day(now)),
        )
        clock = clock_future.result()
        raw_entries = entries_future.result()

    entries = [parse_entry(raw) for raw in raw_entries]
    raw_running = clock.get("running")
    running = parse_entry(raw_running) if raw_running else None

    # The running entry is counted through the clock, not twice
    closed_seconds = sum(
        compute_duration(entry, now) for entry in entries if not entry.running
    )
    running_seconds = compute_duration(running, now) if running else 0
    total = closed_seconds + running_seconds

    if output_mode(app) is not OutputMode.HUMAN:
        running_data = None
        if running is not None:
            running_data = {
                "id": running.id,
                "text": running.text,
                "customers_id": running.customers_id,
                "projects_id": running.projects_id,
                "services_id": running.services_id,
                "time_since": raw_running["time_since"],
                "elapsed": running_seconds,
            }
        data = {
            "running": running_data,
            "today": {
                "entries": len(entries),
                "total_seconds": total,
                "total_formatted": format_duration(total),
            },
        }
        print_result(command_result(data), app.options)
        return

    lines = [""]
    if running is not None:
        description = bold(running.text) if running.text else dim("(no description)")
        elapsed = format_duration(running_seconds)
        lines.append(
            f"  {click.style('●', fg='green')} Running: {description} ({elapsed})"
        )
        lines.append(f"    Started at {format_time(running.since)}")
    else:
        lines.append(f"  {dim('○')} No clock running")

    lines += [
        "",
        f"  Today: {bold(format_duration(total))} tracked across "
        f"{len(entries)} entries",
        "",
    ]
    print_lines(lines, app.options)
