"""Date and time helpers shared by every command.

User input is read in the local timezone of the process, while everything sent
to the Clockodo API is an UTC instant without sub-second precision.

Two entry points turn user strings into instants:

* ``parse_since`` resolves to the *start* of the period the string names.
* ``parse_until`` resolves keywords and bare dates to the *end* of that day, so
  ``--since 2026-02-25 --until 2026-02-25`` covers the whole day, while
  ``--until "2026-02-25 14:30"`` still means exactly 14:30.
"""
import datetime
import logging
import re
from typing import Optional, Union

import pendulum

from clockodo_cli.errors import CliError, DateParseError, ExitCode
from clockodo_cli.types import DateRange

logger = logging.getLogger(__name__)

API_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DATE_FORMAT = "YYYY-MM-DD"
TIME_FORMAT = "HH:mm"

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATE_TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}\s\d{2}:\d{2}$")
TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")

DAY_KEYWORDS = {"yesterday": -1, "today": 0, "tomorrow": 1}
NAMED_PERIODS = ("today", "week", "month")


def now_local() -> pendulum.DateTime:
    return pendulum.now("local")


def _as_local(moment: datetime.datetime) -> pendulum.DateTime:
    # Naive datetimes are read as local wall-clock time
    return pendulum.instance(moment, tz="local").in_tz("local")


def start_of_day(moment: datetime.datetime) -> pendulum.DateTime:
    return _as_local(moment).start_of("day")


def end_of_day(moment: datetime.datetime) -> pendulum.DateTime:
    return _as_local(moment).end_of("day")


def start_of_week(moment: datetime.datetime) -> pendulum.DateTime:
    """Monday 00:00 of the local week containing ``moment``"""
    return _as_local(moment).start_of("week")


def end_of_week(moment: datetime.datetime) -> pendulum.DateTime:
    """Sunday 23:59:59.999999 of the local week containing ``moment``"""
    return _as_local(moment).end_of("week")


def start_of_month(moment: datetime.datetime) -> pendulum.DateTime:
    return _as_local(moment).start_of("month")


def end_of_month(moment: datetime.datetime) -> pendulum.DateTime:
    return _as_local(moment).end_of("month")


def resolve_named_period(
    period: str, reference: Optional[datetime.datetime] = None
) -> DateRange:
    reference = reference or now_local()
    if period == "today":
        return DateRange(since=start_of_day(reference), until=end_of_day(reference))
    if period == "week":
        return DateRange(since=start_of_week(reference), until=end_of_week(reference))
    if period == "month":
        return DateRange(
            since=start_of_month(reference), until=end_of_month(reference)
        )

    valid = ", ".join(NAMED_PERIODS)
    raise CliError(
        f'Unknown period: "{period}". Valid options: {valid}', ExitCode.INVALID_ARGS
    )


def to_utc(moment: datetime.datetime) -> pendulum.DateTime:
    return _as_local(moment).in_tz("UTC").set(microsecond=0)


def _parse_literal(value: str) -> pendulum.DateTime:
    try:
        parsed = pendulum.parse(value, tz="local")
    except (ValueError, TypeError):
        raise DateParseError(value)

    # Durations, bare times and the like are not instants
    if not isinstance(parsed, pendulum.DateTime):
        raise DateParseError(value)
    return parsed


def _resolve(
    value: str, now: Optional[datetime.datetime], day_end: bool
) -> pendulum.DateTime:
    text = value.strip()
    today = _as_local(now or now_local())

    def resolve_day(day: pendulum.DateTime) -> pendulum.DateTime:
        return day.end_of("day") if day_end else day.start_of("day")

    offset = DAY_KEYWORDS.get(text.lower())
    if offset is not None:
        return to_utc(resolve_day(today.add(days=offset)))

    try:
        if DATE_PATTERN.match(text):
            day = pendulum.from_format(text, DATE_FORMAT, tz="local")
            return to_utc(resolve_day(day))

        if DATE_TIME_PATTERN.match(text):
            date_part, time_part = text.split()
            moment = pendulum.from_format(
                f"{date_part} {time_part}", f"{DATE_FORMAT} {TIME_FORMAT}", tz="local"
            )
            return to_utc(moment)

        match = TIME_PATTERN.match(text)
        if match:
            hour, minute = (int(part) for part in match.groups())
            moment = today.set(hour=hour, minute=minute, second=0, microsecond=0)
            return to_utc(moment)
    except ValueError:
        # Right shape, impossible value: 2026-02-30, 25:00, ...
        raise DateParseError(value)

    return to_utc(_parse_literal(text))


def parse_since(
    value: str, now: Optional[datetime.datetime] = None
) -> pendulum.DateTime:
    resolved = _resolve(value, now=now, day_end=False)
    logger.debug(f"since {value!r} resolved to {resolved}")
    return resolved


def parse_until(
    value: str, now: Optional[datetime.datetime] = None
) -> pendulum.DateTime:
    resolved = _resolve(value, now=now, day_end=True)
    logger.debug(f"until {value!r} resolved to {resolved}")
    return resolved


def to_api_datetime(moment: datetime.datetime) -> str:
    return to_utc(moment).strftime(API_DATETIME_FORMAT)


def parse_api_datetime(value: str) -> datetime.datetime:
    iso = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.datetime.fromisoformat(iso)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


Moment = Union[datetime.datetime, str]


def _as_datetime(moment: Moment) -> datetime.datetime:
    if isinstance(moment, str):
        return parse_api_datetime(moment)
    return moment


def format_date(moment: Moment) -> str:
    return _as_local(_as_datetime(moment)).format(DATE_FORMAT)


def format_time(moment: Moment) -> str:
    return _as_local(_as_datetime(moment)).format(TIME_FORMAT)


def format_duration(seconds: float) -> str:
    """Render seconds as ``1h 30m``, ``45m`` or ``2h``"""
    total = int(seconds)
    if total < 0:
        return f"-{format_duration(-total)}"

    hours = total // 3600
    minutes = (total % 3600) // 60

    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def format_decimal_hours(seconds: float) -> str:
    return f"{seconds / 3600:.1f}h"
