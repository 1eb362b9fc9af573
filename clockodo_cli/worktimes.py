from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional

from clockodo_cli.dates import parse_api_datetime
from clockodo_cli.types import JsonDict


@dataclass
class DayStats:
    start_time: Optional[str]
    end_time: Optional[str]
    total_seconds: int
    break_seconds: int
    interval_count: int

    def to_json(self) -> JsonDict:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "total_seconds": self.total_seconds,
            "break_seconds": self.break_seconds,
            "interval_count": self.interval_count,
        }


def compute_day_stats(day: JsonDict, now: datetime.datetime) -> DayStats:
    """Summarise the work intervals of one day

    {
        "date": "2026-02-20",
        "users_id": 7,
        "intervals": [
            {"time_since": "2026-02-20T08:00:00Z", "time_until": "2026-02-20T12:00:00Z"},
            {"time_since": "2026-02-20T12:30:00Z", "time_until": null}
        ]
    }

    Breaks are the gaps between consecutive intervals. An open interval counts until
    ``now``.
    """
    intervals = day.get("intervals") or []
    if not intervals:
        return DayStats(
            start_time=None,
            end_time=None,
            total_seconds=0,
            break_seconds=0,
            interval_count=0,
        )

    total = 0
    breaks = 0
    previous_end: Optional[datetime.datetime] = None
    for interval in intervals:
        start = parse_api_datetime(interval["time_since"])
        raw_end = interval.get("time_until")
        end = parse_api_datetime(raw_end) if raw_end else now

        total += int((end - start).total_seconds())
        if previous_end is not None:
            breaks += int((start - previous_end).total_seconds())
        previous_end = end

    return DayStats(
        start_time=intervals[0]["time_since"],
        end_time=intervals[-1].get("time_until"),
        total_seconds=total,
        break_seconds=breaks,
        interval_count=len(intervals),
    )
