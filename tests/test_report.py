import datetime
from unittest.mock import create_autospec

import pytest

from clockodo_cli.aggregate import GroupField
from clockodo_cli.clockodo import ClockodoClient
from clockodo_cli.errors import CliError, ExitCode
from clockodo_cli.report import ReportFilter, build_report, custom_range
from clockodo_cli.types import DateRange

UTC = datetime.timezone.utc
PERIOD = DateRange(
    since=datetime.datetime(2026, 2, 20, 0, 0, tzinfo=UTC),
    until=datetime.datetime(2026, 2, 20, 23, 59, 59, tzinfo=UTC),
)
NOW = datetime.datetime(2026, 2, 20, 15, 0, tzinfo=UTC)


@pytest.fixture
def client():
    return create_autospec(ClockodoClient, instance=True)


def test_empty_filter_is_not_sent():
    assert ReportFilter().to_params() is None
    assert ReportFilter(customers_id=10, text="review").to_params() == {
        "customers_id": 10,
        "text": "review",
    }


def test_structured_grouping_is_done_by_the_server(client):
    client.get_entry_groups.return_value = [
        {"group": "20", "name": "Website", "duration": 7200},
        {"group": "21", "name": "Backend", "duration": 3600},
    ]

    report = build_report(client, PERIOD, GroupField.PROJECT, ReportFilter())

    client.get_entry_groups.assert_called_once_with(
        time_since="2026-02-20T00:00:00Z",
        time_until="2026-02-20T23:59:59Z",
        grouping=["projects_id"],
        filter=None,
    )
    client.get_entries.assert_not_called()
    assert [(g.key, g.label, g.seconds) for g in report.groups] == [
        ("20", "Website", 7200),
        ("21", "Backend", 3600),
    ]
    assert report.total_seconds == 10800


def test_filters_are_forwarded_to_the_server(client):
    client.get_entry_groups.return_value = []

    build_report(client, PERIOD, GroupField.CUSTOMER, ReportFilter(users_id=7))

    _, kwargs = client.get_entry_groups.call_args
    assert kwargs["filter"] == {"users_id": 7}
    assert kwargs["grouping"] == ["customers_id"]


def test_text_grouping_is_done_locally(client):
    client.get_entries.return_value = [
        {
            "id": 1,
            "customers_id": 10,
            "text": "Review",
            "time_since": "2026-02-20T09:00:00Z",
            "time_until": "2026-02-20T10:00:00Z",
            "duration": 3600,
        },
        {
            "id": 2,
            "customers_id": 10,
            "text": "Review",
            "time_since": "2026-02-20T14:30:00Z",
            "time_until": None,
            "duration": None,
        },
    ]

    report = build_report(client, PERIOD, GroupField.TEXT, now=NOW)

    client.get_entry_groups.assert_not_called()
    [group] = report.groups
    assert (group.key, group.count, group.seconds) == ("Review", 2, 5400)

    data = report.to_dict()
    assert data["total"] == {"seconds": 5400, "formatted": "1h 30m"}
    assert data["groups"][0]["time_ranges"][1] == {
        "since": "2026-02-20T14:30:00Z",
        "until": "2026-02-20T15:00:00Z",
    }


def test_inverted_custom_range_fails_before_any_request(client):
    with pytest.raises(CliError) as excinfo:
        custom_range("2026-02-28", "2026-02-01")

    assert excinfo.value.exit_code == ExitCode.INVALID_ARGS
    client.get_entry_groups.assert_not_called()


def test_custom_range_on_a_single_day_includes_the_whole_day():
    period = custom_range("2026-02-20", "2026-02-20")
    assert (period.until - period.since).total_seconds() == 86399


def test_filters_are_forwarded_when_grouping_by_text(client):
    client.get_entries.return_value = []

    report = build_report(
        client, PERIOD, GroupField.TEXT, ReportFilter(users_id=7, text="x"), now=NOW
    )

    client.get_entries.assert_called_once_with(
        time_since="2026-02-20T00:00:00Z",
        time_until="2026-02-20T23:59:59Z",
        filter={"text": "x", "users_id": 7},
    )
    assert report.groups == []
