"""Grouped time reports over a period.

Clockodo groups entries server side, but only by foreign keys (customer, project,
service). Reports grouped by description fetch the raw entries instead and group
them locally.
"""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from clockodo_cli.aggregate import GroupField, group_entries, group_to_dict
from clockodo_cli.clockodo import ClockodoClient, parse_entry
from clockodo_cli.dates import (
    format_date,
    format_duration,
    now_local,
    parse_since,
    parse_until,
    to_api_datetime,
)
from clockodo_cli.types import (
    CustomerId,
    DateRange,
    Group,
    JsonDict,
    ProjectId,
    ServiceId,
    UserId,
)

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "project"


@dataclass
class ReportFilter:
    customers_id: Optional[CustomerId] = None
    projects_id: Optional[ProjectId] = None
    services_id: Optional[ServiceId] = None
    users_id: Optional[UserId] = None
    text: Optional[str] = None

    def to_params(self) -> Optional[JsonDict]:
        """Return the API filter, or None when no criterion is set"""
        params = {
            key: value
            for key, value in (
                ("customers_id", self.customers_id),
                ("projects_id", self.projects_id),
                ("services_id", self.services_id),
                ("text", self.text),
                ("users_id", self.users_id),
            )
            if value is not None
        }
        return params or None


@dataclass
class Report:
    period: DateRange
    group_by: GroupField
    groups: List[Group] = field(default_factory=list)

    @property
    def total_seconds(self) -> int:
        return sum(group.seconds for group in self.groups)

    def to_dict(self) -> JsonDict:
        total = self.total_seconds
        return {
            "period": {
                "since": format_date(self.period.since),
                "until": format_date(self.period.until),
            },
            "groups": [group_to_dict(group) for group in self.groups],
            "total": {"seconds": total, "formatted": format_duration(total)},
        }


def custom_range(
    since: str, until: str, now: Optional[datetime.datetime] = None
) -> DateRange:
    """Resolve user supplied bounds, failing before any API call if they are inverted"""
    return DateRange(
        since=parse_since(since, now=now),
        until=parse_until(until, now=now),
    )


def _remote_group(raw: JsonDict) -> Group:
    """
    {"group": "20", "name": "Website", "duration": 7200}
    """
    raw_key = raw.get("group")
    return Group(
        key="" if raw_key is None else str(raw_key),
        name=raw.get("name"),
        seconds=raw.get("duration") or 0,
    )


def build_report(
    client: ClockodoClient,
    period: DateRange,
    group_by: GroupField,
    report_filter: Optional[ReportFilter] = None,
    now: Optional[datetime.datetime] = None,
) -> Report:
    time_since = to_api_datetime(period.since)
    time_until = to_api_datetime(period.until)
    filter_params = report_filter.to_params() if report_filter else None

    if group_by.is_structured:
        logger.debug(f"Grouping by {group_by.value} on the server")
        raw_groups = client.get_entry_groups(
            time_since=time_since,
            time_until=time_until,
            grouping=[group_by.value],
            filter=filter_params,
        )
        groups = [_remote_group(raw) for raw in raw_groups]
        return Report(period=period, group_by=group_by, groups=groups)

    # Clockodo cannot group by free text
    logger.debug("Grouping by text locally")
    now = now or now_local()
    raw_entries = client.get_entries(
        time_since=time_since, time_until=time_until, filter=filter_params
    )
    entries = [parse_entry(raw) for raw in raw_entries]
    groups = group_entries(entries, GroupField.TEXT, now)
    return Report(period=period, group_by=group_by, groups=groups)
