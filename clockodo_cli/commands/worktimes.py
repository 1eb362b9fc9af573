from typing import Optional

import click

from clockodo_cli.commands.common import output_mode, output_options
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.dates import (
    end_of_week,
    format_date,
    format_duration,
    format_time,
    now_local,
    parse_since,
    parse_until,
    start_of_week,
)
from clockodo_cli.errors import POSITIVE_INT
from clockodo_cli.output import (
    OutputMode,
    bold,
    command_result,
    dim,
    print_lines,
    print_result,
    print_table,
)
from clockodo_cli.worktimes import compute_day_stats


@click.command(help="Show work time intervals")
@click.option("--since", help="Start date (default: Monday of current week)")
@click.option("--until", help="End date (default: Sunday of current week)")
@click.option("--user", type=POSITIVE_INT, help="Filter by user ID")
@output_options
@pass_app
def worktimes(
    app: AppContext, since: Optional[str], until: Optional[str], user: Optional[int]
) -> None:
    now = now_local()
    # The endpoint takes local calendar days
    first_day = parse_since(since, now=now) if since else start_of_week(now)
    last_day = parse_until(until, now=now) if until else end_of_week(now)
    date_since = format_date(first_day)
    date_until = format_date(last_day)

    days = app.client.get_work_times(
        date_since=date_since, date_until=date_until, users_id=user
    )
    days_with_stats = [
        {**day, "stats": compute_day_stats(day, now).to_json()} for day in days
    ]
    total = sum(day["stats"]["total_seconds"] for day in days_with_stats)

    if output_mode(app) is not OutputMode.HUMAN:
        meta = {"count": len(days_with_stats), "total_seconds": total}
        print_result(command_result(days_with_stats, meta=meta), app.options)
        return

    print_lines(
        ["", f"  {bold('Work Times')}: {date_since} — {date_until}", ""], app.options
    )
    if not days_with_stats:
        print_lines([dim("  No work time data found for this period.")], app.options)
        return

    rows = []
    for day in days_with_stats:
        stats = day["stats"]
        rows.append(
            [
                str(day.get("date")),
                format_time(stats["start_time"]) if stats["start_time"] else "-",
                format_time(stats["end_time"]) if stats["end_time"] else "-",
                format_duration(stats["total_seconds"]),
                format_duration(stats["break_seconds"])
                if stats["break_seconds"] > 0
                else "-",
                str(stats["interval_count"]),
            ]
        )

    print_table(
        ["Date", "Start", "End", "Hours", "Break", "Intervals"], rows, app.options
    )
    print_lines(["", f"  {bold('Total')}: {format_duration(total)}", ""], app.options)
