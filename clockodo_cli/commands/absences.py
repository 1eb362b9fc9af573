import datetime
import enum
from typing import Optional, Type

import click

from clockodo_cli.commands.common import (
    DefaultCommandGroup,
    confirm_delete,
    drop_none,
    output_mode,
    output_options,
)
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.errors import POSITIVE_INT, parse_id
from clockodo_cli.output import (
    OutputMode,
    command_result,
    dim,
    print_detail,
    print_lines,
    print_result,
    print_success,
    print_table,
)
from clockodo_cli.types import JsonDict


class AbsenceType(enum.IntEnum):
    REGULAR_HOLIDAY = 1
    SPECIAL_LEAVE = 2
    REDUCTION_OF_OVERTIME = 3
    SICK_DAY = 4
    SICK_DAY_OF_CHILD = 5
    SCHOOL_FURTHER_EDUCATION = 6
    MATERNITY_PROTECTION = 7
    HOME_OFFICE = 8
    WORK_OUT_OF_OFFICE = 9
    SPECIAL_LEAVE_UNPAID = 10


class AbsenceStatus(enum.IntEnum):
    REQUESTED = 0
    APPROVED = 1
    DECLINED = 2
    APPROVAL_CANCELLED = 3
    REQUEST_CANCELLED = 4


def format_enum(enum_class: Type[enum.IntEnum], value: Optional[int]) -> str:
    """REGULAR_HOLIDAY -> Regular Holiday, unknown values are shown as numbers"""
    if value is None:
        return "—"
    try:
        name = enum_class(value).name
    except ValueError:
        return str(value)
    return name.replace("_", " ").title()


def format_days_or_hours(absence: JsonDict) -> str:
    if absence.get("count_hours") is not None:
        return f"{absence['count_hours']}h"
    if absence.get("count_days") is not None:
        return f"{absence['count_days']}d"
    return "—"


@click.group(cls=DefaultCommandGroup, help="Manage absences")
def absences() -> None:
    pass


@absences.command(name="list", help="List absences")
@click.option("--year", type=POSITIVE_INT, help="Year (default: current year)")
@click.option("--user", type=POSITIVE_INT, help="Filter by user ID")
@click.option("--type", "absence_type", type=int, help="Filter by absence type")
@click.option("--status", type=int, help="Filter by absence status")
@output_options
@pass_app
def list_absences(
    app: AppContext,
    year: Optional[int],
    user: Optional[int],
    absence_type: Optional[int],
    status: Optional[int],
) -> None:
    filter: JsonDict = {"year": [year or datetime.date.today().year]}
    if user:
        filter["users_id"] = [user]
    if absence_type is not None:
        filter["type"] = [absence_type]
    if status is not None:
        filter["status"] = [status]

    items = app.client.get_absences(filter=filter)

    mode = output_mode(app)
    if mode is not OutputMode.HUMAN:
        print_result(command_result(items, meta={"count": len(items)}), app.options)
        return

    if not items:
        print_lines([dim("  No absences found.")], app.options)
        return

    rows = [
        [
            str(a["id"]),
            str(a.get("users_id")),
            str(a.get("date_since")),
            str(a.get("date_until")),
            format_enum(AbsenceType, a.get("type")),
            format_enum(AbsenceStatus, a.get("status")),
            format_days_or_hours(a),
        ]
        for a in items
    ]
    print_table(
        ["ID", "User", "Since", "Until", "Type", "Status", "Days/Hours"],
        rows,
        app.options,
    )


@absences.command(name="get", help="Get details of a specific absence")
@click.argument("absence_id")
@output_options
@pass_app
def get_absence(app: AppContext, absence_id: str) -> None:
    absence = app.client.get_absence(id=parse_id(absence_id))

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(absence), app.options)
        return

    print_detail(
        [
            ("ID", absence["id"]),
            ("User ID", absence.get("users_id")),
            ("Since", absence.get("date_since")),
            ("Until", absence.get("date_until")),
            ("Type", format_enum(AbsenceType, absence.get("type"))),
            ("Status", format_enum(AbsenceStatus, absence.get("status"))),
            ("Days/Hours", format_days_or_hours(absence)),
            ("Note", absence.get("note")),
            ("Public Note", absence.get("public_note")),
            ("Date Enquired", absence.get("date_enquired")),
            ("Date Approved", absence.get("date_approved")),
        ],
        app.options,
    )


@absences.command(name="create", help="Create an absence")
@click.option("--since", required=True, help="Start date (YYYY-MM-DD)")
@click.option("--type", "absence_type", type=POSITIVE_INT, required=True)
@click.option("--until", help="End date (YYYY-MM-DD)")
@click.option("--half-day", is_flag=True, help="Half-day absence")
@click.option("--sick-note", is_flag=True, help="Has sick note")
@click.option("--note", help="Private note")
@click.option("--public-note", help="Public note")
@output_options
@pass_app
def create_absence(
    app: AppContext,
    since: str,
    absence_type: int,
    until: Optional[str],
    half_day: bool,
    sick_note: bool,
    note: Optional[str],
    public_note: Optional[str],
) -> None:
    params = drop_none(
        {
            "date_since": since,
            "date_until": until,
            "type": absence_type,
            "half_day": True if half_day else None,
            "sick_note": True if sick_note else None,
            "note": note,
            "public_note": public_note,
        }
    )
    absence = app.client.add_absence(params)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(absence), app.options)
        return

    print_success(f"Absence created (ID: {absence['id']})")
    date_until = absence.get("date_until") or absence.get("date_since")
    kind = format_enum(AbsenceType, absence.get("type"))
    date_since = absence.get("date_since")
    print_lines([f"  {date_since} — {date_until} ({kind})"], app.options)


@absences.command(name="update", help="Update an absence")
@click.argument("absence_id")
@click.option("--since", help="New start date (YYYY-MM-DD)")
@click.option("--until", help="New end date (YYYY-MM-DD)")
@click.option("--type", "absence_type", type=POSITIVE_INT, help="New absence type")
@click.option("--half-day/--no-half-day", default=None)
@click.option("--sick-note/--no-sick-note", default=None)
@click.option("--note", help="New private note")
@click.option("--public-note", help="New public note")
@output_options
@pass_app
def update_absence(
    app: AppContext,
    absence_id: str,
    since: Optional[str],
    until: Optional[str],
    absence_type: Optional[int],
    half_day: Optional[bool],
    sick_note: Optional[bool],
    note: Optional[str],
    public_note: Optional[str],
) -> None:
    id = parse_id(absence_id)
    params = drop_none(
        {
            "date_since": since,
            "date_until": until,
            "type": absence_type,
            "half_day": half_day,
            "sick_note": sick_note,
            "note": note,
            "public_note": public_note,
        }
    )
    absence = app.client.edit_absence(id, params)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(absence), app.options)
        return

    print_success(f"Absence {id} updated")


@absences.command(name="delete", help="Delete an absence")
@click.argument("absence_id")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation")
@output_options
@pass_app
def delete_absence(app: AppContext, absence_id: str, force: bool) -> None:
    id = parse_id(absence_id)
    if not confirm_delete(f"absence {id}", force):
        return

    app.client.delete_absence(id)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result({"success": True, "id": id}), app.options)
        return

    print_success(f"Absence {id} deleted")
