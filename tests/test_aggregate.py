import datetime
from typing import Optional

import pytest

from clockodo_cli.aggregate import (
    NO_DESCRIPTION,
    NO_VALUE,
    GroupField,
    compute_duration,
    group_entries,
    group_to_dict,
    total_seconds,
)
from clockodo_cli.errors import CliError, ExitCode
from clockodo_cli.types import ClosedInterval, RunningInterval, TimeEntry, TimeRange

NOW = datetime.datetime(2026, 2, 20, 15, 0, tzinfo=datetime.timezone.utc)


def at(hour: int, minute: int = 0) -> datetime.datetime:
    return datetime.datetime(2026, 2, 20, hour, minute, tzinfo=datetime.timezone.utc)


def closed_entry(
    id: int,
    since: datetime.datetime,
    until: datetime.datetime,
    text: Optional[str] = None,
    projects_id: Optional[int] = None,
) -> TimeEntry:
    duration = int((until - since).total_seconds())
    return TimeEntry(
        id=id,
        customers_id=10,
        projects_id=projects_id,
        text=text,
        interval=ClosedInterval(since=since, until=until, duration=duration),
    )


def running_entry(id: int, since: datetime.datetime, text: str) -> TimeEntry:
    return TimeEntry(
        id=id, customers_id=10, text=text, interval=RunningInterval(since=since)
    )


def test_group_by_text_sums_counts_and_sorts_by_duration():
    entries = [
        closed_entry(1, at(9), at(10), text="A"),
        closed_entry(2, at(10), at(11, 30), text="A"),
        closed_entry(3, at(12), at(13), text="B"),
        closed_entry(4, at(13), at(13, 30)),
    ]

    groups = group_entries(entries, GroupField.TEXT, NOW)

    assert [(g.key, g.count, g.seconds) for g in groups] == [
        ("A", 2, 9000),
        ("B", 1, 3600),
        (NO_DESCRIPTION, 1, 1800),
    ]
    assert sum(g.seconds for g in groups) == total_seconds(entries, NOW) == 14400


def test_group_by_text_keeps_time_ranges_in_input_order():
    entries = [
        closed_entry(1, at(10), at(11, 30), text="A"),
        closed_entry(2, at(9), at(10), text="A"),
    ]

    [group] = group_entries(entries, GroupField.TEXT, NOW)

    assert group.time_ranges == [
        TimeRange(since=at(10), until=at(11, 30)),
        TimeRange(since=at(9), until=at(10)),
    ]


def test_running_entries_are_measured_until_now():
    entries = [
        running_entry(1, at(14), text="A"),
        closed_entry(2, at(9), at(9, 30), text="B"),
    ]

    groups = group_entries(entries, GroupField.TEXT, NOW)

    assert [(g.key, g.seconds) for g in groups] == [("A", 3600), ("B", 1800)]
    assert groups[0].time_ranges == [TimeRange(since=at(14), until=NOW)]


def test_ties_keep_first_occurrence_order():
    entries = [
        closed_entry(1, at(9), at(10), text="second"),
        closed_entry(2, at(10), at(11), text="first"),
    ]

    groups = group_entries(entries, GroupField.TEXT, NOW)

    assert [g.key for g in groups] == ["second", "first"]


def test_group_by_project_uses_placeholder_for_missing_values():
    entries = [
        closed_entry(1, at(9), at(10), projects_id=20),
        closed_entry(2, at(10), at(12)),
    ]

    groups = group_entries(entries, GroupField.PROJECT, NOW)

    assert [(g.key, g.seconds) for g in groups] == [(NO_VALUE, 7200), ("20", 3600)]
    assert all(g.time_ranges is None for g in groups)


def test_group_nothing():
    assert group_entries([], GroupField.TEXT, NOW) == []
    assert total_seconds([], NOW) == 0


def test_compute_duration_of_closed_entry_uses_recorded_duration():
    entry = TimeEntry(
        id=1,
        customers_id=10,
        interval=ClosedInterval(since=at(9), until=at(10), duration=3000),
    )
    assert compute_duration(entry, NOW) == 3000


def test_group_to_dict():
    entries = [closed_entry(1, at(9), at(10), text="A")]
    [group] = group_entries(entries, GroupField.TEXT, NOW)

    assert group_to_dict(group) == {
        "key": "A",
        "count": 1,
        "seconds": 3600,
        "time_ranges": [
            {"since": "2026-02-20T09:00:00Z", "until": "2026-02-20T10:00:00Z"}
        ],
    }


@pytest.mark.parametrize(
    "alias, expected",
    [
        ("customer", GroupField.CUSTOMER),
        ("Project", GroupField.PROJECT),
        ("services_id", GroupField.SERVICE),
        ("description", GroupField.TEXT),
    ],
)
def test_group_field_aliases(alias, expected):
    assert GroupField.from_alias(alias) is expected


def test_unknown_group_field_lists_valid_options():
    with pytest.raises(CliError) as excinfo:
        GroupField.from_alias("weekday")

    assert excinfo.value.exit_code == ExitCode.INVALID_ARGS
    assert "customer, project, service, text" in excinfo.value.message


def test_running_entries_share_one_reference_instant():
    entries = [running_entry(1, at(13), text="A"), running_entry(2, at(14), text="B")]

    assert [compute_duration(e, NOW) for e in entries] == [7200, 3600]
    assert total_seconds(entries, NOW) == 10800


def test_empty_descriptions_merge_into_one_group():
    entries = [
        closed_entry(1, at(9), at(10), text=""),
        closed_entry(2, at(10), at(11)),
    ]

    [group] = group_entries(entries, GroupField.TEXT, NOW)

    assert (group.key, group.count, group.seconds) == (NO_DESCRIPTION, 2, 7200)


@pytest.mark.parametrize("group_by", list(GroupField))
def test_groups_add_up_to_total_and_are_sorted(group_by):
    entries = [
        closed_entry(1, at(8), at(9), text="A", projects_id=20),
        closed_entry(2, at(9), at(9, 15), text="B", projects_id=21),
        running_entry(3, at(14, 20), text="C"),
        closed_entry(4, at(10), at(12), text="A"),
    ]

    groups = group_entries(entries, group_by, NOW)

    assert sum(g.seconds for g in groups) == total_seconds(entries, NOW)
    seconds = [g.seconds for g in groups]
    assert seconds == sorted(seconds, reverse=True)
