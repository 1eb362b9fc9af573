import datetime

import pendulum
import pytest

from clockodo_cli.dates import (
    format_decimal_hours,
    format_duration,
    parse_api_datetime,
    parse_since,
    parse_until,
    resolve_named_period,
    start_of_day,
    to_api_datetime,
    to_utc,
)
from clockodo_cli.errors import CliError, DateParseError, ExitCode

# Wednesday
NOW = datetime.datetime(2026, 2, 25, 12, 0).astimezone()


def test_bare_date_until_covers_the_whole_day():
    since = parse_since("2026-02-25", now=NOW)
    until = parse_until("2026-02-25", now=NOW)

    assert (until - since).total_seconds() == 86399


@pytest.fixture
def berlin():
    pendulum.set_local_timezone(pendulum.timezone("Europe/Berlin"))
    yield
    pendulum.set_local_timezone()


@pytest.mark.parametrize(
    "day, since_utc, seconds",
    [
        ("2026-03-29", "2026-03-28T23:00:00Z", 82799),
        ("2026-10-25", "2026-10-24T22:00:00Z", 89999),
    ],
)
def test_day_length_follows_daylight_saving_changes(berlin, day, since_utc, seconds):
    since = parse_since(day)
    until = parse_until(day)

    assert to_api_datetime(since) == since_utc
    assert (until - since).total_seconds() == seconds


def test_date_and_time_until_is_not_shifted_to_end_of_day():
    assert parse_until("2026-02-25 14:30", now=NOW) == parse_since(
        "2026-02-25 14:30", now=NOW
    )
    local = parse_until("2026-02-25 14:30", now=NOW).astimezone()
    assert (local.hour, local.minute) == (14, 30)


def test_day_keywords_resolve_relative_to_now():
    yesterday = parse_since("yesterday", now=NOW).astimezone()
    tomorrow = parse_until("Tomorrow", now=NOW).astimezone()

    assert yesterday.date() == datetime.date(2026, 2, 24)
    assert (yesterday.hour, yesterday.minute) == (0, 0)
    assert tomorrow.date() == datetime.date(2026, 2, 26)
    assert (tomorrow.hour, tomorrow.minute, tomorrow.second) == (23, 59, 59)


def test_today_keyword_starts_at_local_midnight():
    assert parse_since("today", now=NOW) == to_utc(start_of_day(NOW))


def test_bare_time_is_today_at_that_time():
    since = parse_since("09:15", now=NOW).astimezone()
    until = parse_until("09:15", now=NOW).astimezone()

    assert since == until
    assert since.date() == NOW.date()
    assert (since.hour, since.minute) == (9, 15)


def test_iso_datetime_with_zulu_suffix_is_utc():
    parsed = parse_since("2026-02-25T10:00:00Z", now=NOW)
    assert parsed == datetime.datetime(2026, 2, 25, 10, tzinfo=datetime.timezone.utc)


def test_resolved_instants_have_no_microseconds():
    assert parse_until("today", now=NOW).microsecond == 0


@pytest.mark.parametrize("value", ["not a date", "2026-02-30", "25:61", "", "P1D"])
def test_unparseable_dates_are_invalid_arguments(value):
    with pytest.raises(DateParseError) as excinfo:
        parse_since(value, now=NOW)

    assert excinfo.value.exit_code == ExitCode.INVALID_ARGS
    assert value in excinfo.value.message


def test_week_runs_from_monday_to_sunday():
    week = resolve_named_period("week", NOW)

    assert week.since.date() == datetime.date(2026, 2, 23)
    assert week.until.date() == datetime.date(2026, 3, 1)
    assert (week.since.hour, week.since.minute) == (0, 0)
    assert (week.until.hour, week.until.minute) == (23, 59)


def test_month_ends_on_the_last_day_of_the_month():
    month = resolve_named_period("month", NOW)

    assert month.since.date() == datetime.date(2026, 2, 1)
    assert month.until.date() == datetime.date(2026, 2, 28)


def test_unknown_period_is_rejected():
    with pytest.raises(CliError) as excinfo:
        resolve_named_period("fortnight", NOW)

    assert excinfo.value.exit_code == ExitCode.INVALID_ARGS


def test_api_datetime_format():
    moment = datetime.datetime(
        2026, 2, 25, 10, 30, 15, 123456, tzinfo=datetime.timezone.utc
    )
    assert to_api_datetime(moment) == "2026-02-25T10:30:15Z"
    assert parse_api_datetime("2026-02-25T10:30:15Z") == moment.replace(microsecond=0)


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0m"),
        (45 * 60, "45m"),
        (7200, "2h"),
        (5400, "1h 30m"),
        (5459, "1h 30m"),
        (-5400, "-1h 30m"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_decimal_hours():
    assert format_decimal_hours(5400) == "1.5h"
