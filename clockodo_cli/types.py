from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from clockodo_cli.errors import CliError, ExitCode

JsonDict = Dict[str, Any]
EntryId = int
CustomerId = int
ProjectId = int
ServiceId = int
UserId = int
EntryDescription = str
DurationInSeconds = int


class Billability(enum.IntEnum):
    NOT_BILLABLE = 0
    BILLABLE = 1
    BILLED = 2

    @classmethod
    def from_flag(cls, billable: bool) -> Billability:
        return cls.BILLABLE if billable else cls.NOT_BILLABLE

    @property
    def label(self) -> str:
        if self is Billability.BILLABLE:
            return "Yes"
        if self is Billability.BILLED:
            return "Billed"
        return "No"


class EntryType(enum.IntEnum):
    TIME = 1
    LUMP_SUM_VALUE = 2
    LUMP_SUM_SERVICE = 3


@dataclass(frozen=True)
class ClosedInterval:
    since: datetime.datetime
    until: datetime.datetime
    duration: DurationInSeconds


@dataclass(frozen=True)
class RunningInterval:
    since: datetime.datetime


Interval = Union[ClosedInterval, RunningInterval]


@dataclass
class TimeEntry:
    id: EntryId
    customers_id: CustomerId
    interval: Interval
    projects_id: Optional[ProjectId] = None
    services_id: Optional[ServiceId] = None
    users_id: Optional[UserId] = None
    text: Optional[EntryDescription] = None
    billable: Billability = Billability.NOT_BILLABLE

    @property
    def running(self) -> bool:
        return isinstance(self.interval, RunningInterval)

    @property
    def since(self) -> datetime.datetime:
        return self.interval.since

    @property
    def until(self) -> Optional[datetime.datetime]:
        if isinstance(self.interval, ClosedInterval):
            return self.interval.until
        return None


@dataclass
class DateRange:
    since: datetime.datetime
    until: datetime.datetime

    def __post_init__(self) -> None:
        if self.since >= self.until:
            raise CliError("--since must be before --until", ExitCode.INVALID_ARGS)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.since} - {self.until})"


@dataclass(frozen=True)
class TimeRange:
    since: datetime.datetime
    until: datetime.datetime


@dataclass
class Group:
    key: str
    seconds: DurationInSeconds = 0
    count: Optional[int] = None
    name: Optional[str] = None
    time_ranges: Optional[List[TimeRange]] = None

    @property
    def label(self) -> str:
        return self.name or self.key or "Unknown"
