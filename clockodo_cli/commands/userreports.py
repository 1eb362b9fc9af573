import datetime
import enum
from typing import Optional

import click

from clockodo_cli.commands.common import output_mode, output_options
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.dates import format_duration
from clockodo_cli.errors import POSITIVE_INT, CliError, ExitCode
from clockodo_cli.output import (
    OutputMode,
    bold,
    command_result,
    dim,
    print_detail,
    print_lines,
    print_result,
    print_table,
)
from clockodo_cli.types import JsonDict


class UserReportType(enum.IntEnum):
    YEAR = 0
    YEAR_AND_MONTHS = 1
    YEAR_MONTHS_AND_WEEKS = 2
    YEAR_MONTHS_WEEKS_AND_DAYS = 3


DETAIL_LEVELS = {
    "months": UserReportType.YEAR_AND_MONTHS,
    "weeks": UserReportType.YEAR_MONTHS_AND_WEEKS,
    "days": UserReportType.YEAR_MONTHS_WEEKS_AND_DAYS,
}


def holidays_remaining(report: JsonDict) -> int:
    used = (report.get("sum_absence") or {}).get("regular_holidays") or 0
    return report.get("holidays_quota", 0) + report.get("holidays_carry", 0) - used


@click.command(help="Show user report (overtime, holidays, absences) for a year")
@click.option("-u", "--user", type=POSITIVE_INT, help="User ID (default: you)")
@click.option("-y", "--year", type=POSITIVE_INT, help="Year (default: current year)")
@click.option("-d", "--detail", help="Detail level: months, weeks, or days")
@output_options
@pass_app
def userreport(
    app: AppContext, user: Optional[int], year: Optional[int], detail: Optional[str]
) -> None:
    report_type = None
    if detail:
        if detail not in DETAIL_LEVELS:
            raise CliError(
                f'Unknown detail level: "{detail}". Valid options: months, weeks, days',
                ExitCode.INVALID_ARGS,
            )
        report_type = int(DETAIL_LEVELS[detail])

    client = app.client
    users_id = user or client.get_me()["id"]
    year = year or datetime.date.today().year

    report = client.get_user_report(users_id=users_id, year=year, type=report_type)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(report), app.options)
        return

    absences = report.get("sum_absence") or {}
    name = report.get("users_name")
    print_lines(["", f"  {bold('User Report')}: {name} ({year})", ""], app.options)
    print_detail(
        [
            ("Name", name),
            ("Year", year),
            ("Target hours", format_duration(report.get("sum_target") or 0)),
            ("Worked hours", format_duration(report.get("sum_hours") or 0)),
            ("Overtime", format_duration(report.get("diff") or 0)),
            (
                "Holidays",
                f"{holidays_remaining(report)} remaining "
                f"({report.get('holidays_quota', 0)} quota + "
                f"{report.get('holidays_carry', 0)} carry - "
                f"{absences.get('regular_holidays', 0)} used)",
            ),
            ("Sick days", absences.get("sick_self", 0)),
            ("Home office days", absences.get("home_office", 0)),
        ],
        app.options,
    )
    print_lines([""], app.options)


@click.command(help="Show user reports for all users in a year")
@click.option("-y", "--year", type=POSITIVE_INT, help="Year (default: current year)")
@output_options
@pass_app
def userreports(app: AppContext, year: Optional[int]) -> None:
    year = year or datetime.date.today().year
    reports = app.client.get_user_reports(year=year)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(
            command_result(reports, meta={"count": len(reports)}), app.options
        )
        return

    print_lines(
        ["", f"  {bold('User Reports')} ({year}): {len(reports)} users", ""],
        app.options,
    )
    if not reports:
        print_lines([dim("  No reports found.")], app.options)
        return

    rows = [
        [
            str(r.get("users_name")),
            format_duration(r.get("sum_target") or 0),
            format_duration(r.get("sum_hours") or 0),
            format_duration(r.get("diff") or 0),
            str(holidays_remaining(r)),
            str((r.get("sum_absence") or {}).get("sick_self", 0)),
        ]
        for r in reports
    ]
    print_table(
        ["Name", "Target", "Worked", "Overtime", "Holidays Remaining", "Sick Days"],
        rows,
        app.options,
    )
    print_lines([""], app.options)
