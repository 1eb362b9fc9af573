from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import click

from clockodo_cli.clockodo import ClockodoClient
from clockodo_cli.config import AppConfig
from clockodo_cli.context import GlobalOptions
from clockodo_cli.errors import CliError, ExitCode
from clockodo_cli.output import OutputMode
from clockodo_cli.types import CustomerId, ProjectId, ServiceId

NO_PROJECT = 0

Choice = Tuple[int, str]


@dataclass
class Selection:
    customers_id: CustomerId
    services_id: ServiceId
    projects_id: Optional[ProjectId] = None


def should_prompt(options: GlobalOptions, mode: OutputMode) -> bool:
    if not options.input:
        return False
    if mode is not OutputMode.HUMAN:
        return False
    return sys.stdout.isatty()


def pick(message: str, choices: Sequence[Choice], default: Optional[int] = None) -> int:
    """Show a numbered list and return the value of the chosen item"""
    if not choices:
        raise CliError(f"Nothing to choose from: {message}", ExitCode.EMPTY_RESULTS)

    click.echo(message, err=True)
    for number, (_, label) in enumerate(choices, start=1):
        click.echo(f"  {number}) {label}", err=True)

    values: List[int] = [value for value, _ in choices]
    default_number = values.index(default) + 1 if default in values else None
    number = click.prompt(
        "Number",
        type=click.IntRange(1, len(choices)),
        default=default_number,
        err=True,
    )
    return values[number - 1]


def select_customer_project_service(
    client: ClockodoClient, config: AppConfig
) -> Selection:
    customers = client.get_customers(filter={"active": True})
    customers_id = pick(
        "Select a customer",
        [(c["id"], c["name"]) for c in customers],
        default=config.default_customer_id,
    )

    projects = client.get_projects(
        filter={"customers_id": customers_id, "active": True}
    )
    project_choices = [(NO_PROJECT, "(no project)")]
    project_choices += [(p["id"], p["name"]) for p in projects]
    projects_id = pick(
        "Select a project", project_choices, default=config.default_project_id
    )

    services = client.get_services(filter={"active": True})
    services_id = pick(
        "Select a service",
        [(s["id"], s["name"]) for s in services],
        default=config.default_service_id,
    )

    return Selection(
        customers_id=customers_id,
        services_id=services_id,
        projects_id=projects_id or None,
    )
