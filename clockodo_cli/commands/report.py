from typing import Any, Callable, List, Optional

import click

from clockodo_cli.aggregate import GroupField
from clockodo_cli.commands.common import (
    DefaultCommandGroup,
    filter_options,
    output_mode,
    output_options,
)
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.dates import (
    format_date,
    format_decimal_hours,
    format_duration,
    format_time,
    now_local,
    resolve_named_period,
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
from clockodo_cli.report import (
    DEFAULT_GROUP,
    Report,
    ReportFilter,
    build_report,
    custom_range,
)
from clockodo_cli.types import DateRange

GROUP_HELP = "Group by: customer, project, service, text"


@click.group(cls=DefaultCommandGroup, default_command="today")
def report() -> None:
    """Aggregated time reports"""


def report_options(command: Callable[..., Any]) -> Callable[..., Any]:
    command = output_options(command)
    command = click.option("--user", type=POSITIVE_INT, help="Filter by user ID")(
        command
    )
    command = click.option("--text", help="Filter by description text")(command)
    command = filter_options(command)
    command = click.option(
        "-g", "--group", default=DEFAULT_GROUP, show_default=True, help=GROUP_HELP
    )(command)
    return command


def _print_report(app: AppContext, result: Report) -> None:
    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(result.to_dict()), app.options)
        return

    since = format_date(result.period.since)
    until = format_date(result.period.until)
    print_lines(["", f"  {bold('Report')}: {since} — {until}", ""], app.options)

    if not result.groups:
        print_lines([dim("  No entries found for this period.")], app.options)
        return

    rows: List[List[str]] = []
    if result.group_by.is_structured:
        headers = ["Name", "Duration", "Hours"]
        for g in result.groups:
            rows.append(
                [g.label, format_duration(g.seconds), format_decimal_hours(g.seconds)]
            )
    else:
        headers = ["Description", "Duration", "Hours", "Time Ranges"]
        for g in result.groups:
            ranges = ", ".join(
                f"{format_time(r.since)}–{format_time(r.until)}"
                for r in g.time_ranges or []
            )
            duration = format_duration(g.seconds)
            rows.append([g.key, duration, format_decimal_hours(g.seconds), ranges])

    print_table(headers, rows, app.options)

    total = result.total_seconds
    print_lines(
        [
            "",
            f"  {bold('Total')}: {format_duration(total)} "
            f"({format_decimal_hours(total)})",
            "",
        ],
        app.options,
    )


def _run(
    app: AppContext,
    period: DateRange,
    group: str,
    customer: Optional[int],
    project: Optional[int],
    service: Optional[int],
    text: Optional[str],
    user: Optional[int],
) -> None:
    group_by = GroupField.from_alias(group)
    report_filter = ReportFilter(
        customers_id=customer,
        projects_id=project,
        services_id=service,
        users_id=user,
        text=text,
    )
    result = build_report(app.client, period, group_by, report_filter)
    _print_report(app, result)


@report.command(help="Today's summary")
@report_options
@pass_app
def today(app: AppContext, **kwargs: Any) -> None:
    _run(app, resolve_named_period("today", now_local()), **kwargs)


@report.command(help="This week's summary (Mon-Sun)")
@report_options
@pass_app
def week(app: AppContext, **kwargs: Any) -> None:
    _run(app, resolve_named_period("week", now_local()), **kwargs)


@report.command(help="This month's summary")
@report_options
@pass_app
def month(app: AppContext, **kwargs: Any) -> None:
    _run(app, resolve_named_period("month", now_local()), **kwargs)


@report.command(help="Custom date range report")
@click.option("--since", required=True, help="Start date")
@click.option("--until", required=True, help="End date (a bare date includes the day)")
@report_options
@pass_app
def custom(app: AppContext, since: str, until: str, **kwargs: Any) -> None:
    _run(app, custom_range(since, until), **kwargs)
