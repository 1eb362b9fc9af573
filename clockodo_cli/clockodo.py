from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests

from clockodo_cli import __version__
from clockodo_cli.dates import parse_api_datetime
from clockodo_cli.errors import ClockodoApiError
from clockodo_cli.types import (
    Billability,
    ClosedInterval,
    EntryType,
    Interval,
    JsonDict,
    RunningInterval,
    TimeEntry,
)

logger = logging.getLogger(__name__)

API_URL = "https://my.clockodo.com/api/"
APPLICATION_NAME = "clockodo-cli"

QueryParams = Dict[str, Any]


def encode_params(
    params: Optional[JsonDict] = None, filter: Optional[JsonDict] = None
) -> QueryParams:
    """Flatten nested parameters the way the Clockodo API expects them

    {"grouping": ["projects_id"], "filter": {"year": [2026]}}
    becomes
    {"grouping[]": ["projects_id"], "filter[year][]": [2026]}
    """
    encoded: QueryParams = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            encoded[f"{key}[]"] = list(value)
        else:
            encoded[key] = value

    for key, value in (filter or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            encoded[f"filter[{key}][]"] = list(value)
        else:
            encoded[f"filter[{key}]"] = value

    return encoded


def _error_detail(response: requests.Response) -> Optional[str]:
    """
    Clockodo answers errors with:
    {"error": {"message": "Entry not found"}}
    """
    try:
        data = response.json()
    except ValueError:
        return response.text or None

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or error.get("description") or error)
        if data.get("message"):
            return str(data["message"])
    return str(data)


class ClockodoClient:
    _email: str
    _api_key: str

    def __init__(
        self,
        email: str,
        api_key: str,
        base_url: str = API_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._email = email
        self._api_key = api_key
        self._base_url = base_url
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "X-ClockodoApiUser": email,
                "X-ClockodoApiKey": api_key,
                "X-Clockodo-External-Application": f"{APPLICATION_NAME};{email}",
                "Accept-Language": "en",
                "User-Agent": f"{APPLICATION_NAME}/{__version__}",
            }
        )

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[QueryParams] = None,
        json: Optional[JsonDict] = None,
    ) -> JsonDict:
        url = self._base_url + path
        logger.debug(f"{method} {url} params={params}")
        try:
            result = self._session.request(method, url, params=params, json=json)
            result.raise_for_status()
        except requests.HTTPError as error:
            response = error.response
            status = response.status_code if response is not None else 0
            detail = _error_detail(response) if response is not None else None
            logger.debug(f"{method} {url} failed with HTTP {status}")
            raise ClockodoApiError(status, detail) from error
        except requests.RequestException as error:
            raise ClockodoApiError(0, str(error)) from error

        if not result.content:
            return {}
        return result.json()

    def _get(self, path: str, params: Optional[QueryParams] = None) -> JsonDict:
        return self._request("GET", path, params=params)

    def _get_all_pages(
        self, path: str, key: str, params: Optional[QueryParams] = None
    ) -> Iterator[JsonDict]:
        page = 1
        while True:
            data = self._get(path, {**(params or {}), "page": page})
            yield from data.get(key) or []

            paging = data.get("paging") or {}
            count_pages = paging.get("count_pages") or 1
            if page >= count_pages:
                return
            page += 1

    # Clock

    def get_clock(self) -> JsonDict:
        return self._get("v2/clock")

    def start_clock(self, params: JsonDict) -> JsonDict:
        return self._request("POST", "v2/clock", json=params)["running"]

    def stop_clock(self, entries_id: int) -> JsonDict:
        return self._request("DELETE", f"v2/clock/{entries_id}")["stopped"]

    # Entries

    def get_entries(
        self,
        time_since: str,
        time_until: str,
        filter: Optional[JsonDict] = None,
    ) -> List[JsonDict]:
        params = encode_params(
            {"time_since": time_since, "time_until": time_until}, filter=filter
        )
        return list(self._get_all_pages("v2/entries", "entries", params))

    def get_entry(self, id: int) -> JsonDict:
        return self._get(f"v2/entries/{id}")["entry"]

    def add_entry(self, params: JsonDict) -> JsonDict:
        return self._request("POST", "v2/entries", json=params)["entry"]

    def edit_entry(self, id: int, params: JsonDict) -> JsonDict:
        return self._request("PUT", f"v2/entries/{id}", json=params)["entry"]

    def delete_entry(self, id: int) -> None:
        self._request("DELETE", f"v2/entries/{id}")

    def get_entry_groups(
        self,
        time_since: str,
        time_until: str,
        grouping: Sequence[str],
        filter: Optional[JsonDict] = None,
    ) -> List[JsonDict]:
        params = encode_params(
            {"time_since": time_since, "time_until": time_until, "grouping": grouping},
            filter=filter,
        )
        return self._get("v2/entrygroups", params).get("groups") or []

    # Customers, projects, services

    def _list(self, path: str, filter: Optional[JsonDict] = None) -> List[JsonDict]:
        return list(self._get_all_pages(path, "data", encode_params(filter=filter)))

    def get_customers(self, filter: Optional[JsonDict] = None) -> List[JsonDict]:
        return self._list("v3/customers", filter)

    def get_customer(self, id: int) -> JsonDict:
        return self._get(f"v3/customers/{id}")["data"]

    def add_customer(self, params: JsonDict) -> JsonDict:
        return self._request("POST", "v3/customers", json=params)["data"]

    def edit_customer(self, id: int, params: JsonDict) -> JsonDict:
        return self._request("PUT", f"v3/customers/{id}", json=params)["data"]

    def delete_customer(self, id: int) -> None:
        self._request("DELETE", f"v3/customers/{id}")

    def get_projects(self, filter: Optional[JsonDict] = None) -> List[JsonDict]:
        return self._list("v4/projects", filter)

    def get_project(self, id: int) -> JsonDict:
        return self._get(f"v4/projects/{id}")["data"]

    def add_project(self, params: JsonDict) -> JsonDict:
        return self._request("POST", "v4/projects", json=params)["data"]

    def edit_project(self, id: int, params: JsonDict) -> JsonDict:
        return self._request("PUT", f"v4/projects/{id}", json=params)["data"]

    def delete_project(self, id: int) -> None:
        self._request("DELETE", f"v4/projects/{id}")

    def get_services(self, filter: Optional[JsonDict] = None) -> List[JsonDict]:
        return self._list("v4/services", filter)

    def get_service(self, id: int) -> JsonDict:
        return self._get(f"v4/services/{id}")["data"]

    # Users

    def get_me(self) -> JsonDict:
        return self._get("v3/users/me")["data"]

    def get_users(self) -> List[JsonDict]:
        return self._list("v3/users")

    # Absences

    def get_absences(self, filter: Optional[JsonDict] = None) -> List[JsonDict]:
        return self._list("v4/absences", filter)

    def get_absence(self, id: int) -> JsonDict:
        return self._get(f"v4/absences/{id}")["data"]

    def add_absence(self, params: JsonDict) -> JsonDict:
        return self._request("POST", "v4/absences", json=params)["data"]

    def edit_absence(self, id: int, params: JsonDict) -> JsonDict:
        return self._request("PUT", f"v4/absences/{id}", json=params)["data"]

    def delete_absence(self, id: int) -> None:
        self._request("DELETE", f"v4/absences/{id}")

    # Work times and user reports

    def get_work_times(
        self, date_since: str, date_until: str, users_id: Optional[int] = None
    ) -> List[JsonDict]:
        params = encode_params(
            {"date_since": date_since, "date_until": date_until, "users_id": users_id}
        )
        return self._get("v2/workTimes", params).get("work_time_days") or []

    def get_user_report(
        self, users_id: int, year: int, type: Optional[int] = None
    ) -> JsonDict:
        params = encode_params({"year": year, "type": type})
        return self._get(f"userreports/{users_id}", params)["userreport"]

    def get_user_reports(self, year: int) -> List[JsonDict]:
        return self._get("userreports", {"year": year}).get("userreports") or []


def parse_entry(raw_entry: JsonDict) -> TimeEntry:
    """
    {
        "id": 100,
        "customers_id": 10,
        "projects_id": 20,
        "services_id": 30,
        "users_id": 7,
        "type": 1,
        "billable": 1,
        "text": "Meeting with the client",
        "time_since": "2026-02-20T09:00:00Z",
        "time_until": "2026-02-20T10:00:00Z",
        "duration": 3600
    }
    """
    since = parse_api_datetime(raw_entry["time_since"])
    raw_until = raw_entry.get("time_until")
    raw_duration = raw_entry.get("duration")
    entry_type = raw_entry.get("type", EntryType.TIME)

    if raw_until is None and entry_type == EntryType.TIME:
        interval: Interval = RunningInterval(since=since)
    elif raw_until is None:
        # Lump sums carry no time span of their own
        interval = ClosedInterval(since=since, until=since, duration=raw_duration or 0)
    else:
        until = parse_api_datetime(raw_until)
        if raw_duration is None:
            raw_duration = int((until - since).total_seconds())
        interval = ClosedInterval(since=since, until=until, duration=raw_duration)

    entry = TimeEntry(
        id=raw_entry["id"],
        customers_id=raw_entry["customers_id"],
        projects_id=raw_entry.get("projects_id"),
        services_id=raw_entry.get("services_id"),
        users_id=raw_entry.get("users_id"),
        text=raw_entry.get("text"),
        billable=Billability(raw_entry.get("billable") or 0),
        interval=interval,
    )
    return entry
