from __future__ import annotations

import datetime
import enum
import logging
from typing import Dict, Iterable, List

from clockodo_cli.dates import to_api_datetime
from clockodo_cli.errors import CliError, ExitCode
from clockodo_cli.types import (
    ClosedInterval,
    DurationInSeconds,
    Group,
    JsonDict,
    TimeEntry,
    TimeRange,
)

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "(no description)"
NO_VALUE = "(none)"


class GroupField(enum.Enum):
    CUSTOMER = "customers_id"
    PROJECT = "projects_id"
    SERVICE = "services_id"
    TEXT = "text"

    @property
    def is_structured(self) -> bool:
        return self is not GroupField.TEXT

    @classmethod
    def from_alias(cls, alias: str) -> GroupField:
        try:
            return GROUP_ALIASES[alias.lower()]
        except KeyError:
            raise CliError(
                f'Unknown group field: "{alias}". '
                "Valid options: customer, project, service, text",
                ExitCode.INVALID_ARGS,
            )


GROUP_ALIASES: Dict[str, GroupField] = {
    "customer": GroupField.CUSTOMER,
    "customers": GroupField.CUSTOMER,
    "customers_id": GroupField.CUSTOMER,
    "project": GroupField.PROJECT,
    "projects": GroupField.PROJECT,
    "projects_id": GroupField.PROJECT,
    "service": GroupField.SERVICE,
    "services": GroupField.SERVICE,
    "services_id": GroupField.SERVICE,
    "text": GroupField.TEXT,
    "description": GroupField.TEXT,
}


def compute_duration(entry: TimeEntry, now: datetime.datetime) -> DurationInSeconds:
    """Return the seconds tracked by ``entry``, measuring running ones up to ``now``

    Callers capture ``now`` once per operation so that every running entry in it is
    measured against the same instant.
    """
    interval = entry.interval
    if isinstance(interval, ClosedInterval):
        return interval.duration

    return int((now - interval.since).total_seconds())


def total_seconds(
    entries: Iterable[TimeEntry], now: datetime.datetime
) -> DurationInSeconds:
    return sum(compute_duration(entry, now) for entry in entries)


def _group_key(entry: TimeEntry, group_by: GroupField) -> str:
    if group_by is GroupField.TEXT:
        return entry.text or NO_DESCRIPTION

    value = getattr(entry, group_by.value)
    if value is None:
        return NO_VALUE
    return str(value)


def group_entries(
    entries: Iterable[TimeEntry],
    group_by: GroupField,
    now: datetime.datetime,
) -> List[Group]:
    """Bucket entries by ``group_by``, biggest total first

    Grouping by text also records the time range of every entry in the group, in the
    order the entries were received. Running entries end at ``now``.
    """
    groups: Dict[str, Group] = {}
    track_ranges = group_by is GroupField.TEXT

    for entry in entries:
        key = _group_key(entry, group_by)
        if key in groups:
            group = groups[key]
        else:
            group = Group(key=key, count=0, time_ranges=[] if track_ranges else None)
            groups[key] = group

        group.count = (group.count or 0) + 1
        group.seconds += compute_duration(entry, now)

        if group.time_ranges is not None:
            until = entry.until or now
            group.time_ranges.append(TimeRange(since=entry.since, until=until))

    logger.debug(f"{len(groups)} groups built grouping by {group_by.value}")

    # sorted() is stable, so ties keep first-occurrence order
    return sorted(groups.values(), key=lambda g: g.seconds, reverse=True)


def group_to_dict(group: Group) -> JsonDict:
    data: JsonDict = {"key": group.key}
    if group.name is not None:
        data["name"] = group.name
    if group.count is not None:
        data["count"] = group.count
    data["seconds"] = group.seconds

    if group.time_ranges is not None:
        data["time_ranges"] = [
            {"since": to_api_datetime(r.since), "until": to_api_datetime(r.until)}
            for r in group.time_ranges
        ]
    return data
