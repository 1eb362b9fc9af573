from __future__ import annotations

import sys
from typing import Any, Callable, List, Optional, TypeVar

import click

from clockodo_cli.context import AppContext
from clockodo_cli.errors import POSITIVE_INT, CliError, ExitCode
from clockodo_cli.output import OutputMode, resolve_output_mode
from clockodo_cli.prompts import (
    Selection,
    select_customer_project_service,
    should_prompt,
)
from clockodo_cli.types import JsonDict

F = TypeVar("F", bound=Callable[..., Any])


class DefaultCommandGroup(click.Group):
    """Group that runs ``default_command`` when no subcommand is given

    ``clockodo entries --since yesterday`` behaves as
    ``clockodo entries list --since yesterday``.
    """

    def __init__(self, *args: Any, default_command: str = "list", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.default_command = default_command

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        first = args[0] if args else None
        if first is None or (first.startswith("-") and first not in ("--help", "-h")):
            args.insert(0, self.default_command)
        return super().parse_args(ctx, args)


def _enable(option_name: str) -> Callable[[click.Context, click.Parameter, bool], None]:
    def callback(ctx: click.Context, param: click.Parameter, value: bool) -> None:
        if not value:
            return
        app = ctx.find_object(AppContext)
        if app is not None:
            setattr(app.options, option_name, True)

    return callback


def output_options(command: F) -> F:
    """Accept --json/--plain after the subcommand as well as before it"""
    command = click.option(
        "-j",
        "--json",
        "json_output",
        is_flag=True,
        expose_value=False,
        callback=_enable("json"),
        help="Output as JSON",
    )(command)
    command = click.option(
        "--plain",
        is_flag=True,
        expose_value=False,
        callback=_enable("plain"),
        help="Output as plain text (no colors)",
    )(command)
    return command


def filter_options(command: F) -> F:
    for name, help_text in reversed(
        (
            ("--customer", "Filter by customer ID"),
            ("--project", "Filter by project ID"),
            ("--service", "Filter by service ID"),
        )
    ):
        command = click.option(name, type=POSITIVE_INT, help=help_text)(command)
    return command


def output_mode(app: AppContext) -> OutputMode:
    return resolve_output_mode(app.options)


def confirm_delete(what: str, force: bool) -> bool:
    """Ask before deleting, unless forced or not attached to a terminal"""
    if force or not sys.stdout.isatty():
        return True
    return click.confirm(f"Delete {what}?", default=False, err=True)


def resolve_tracking_ids(
    app: AppContext,
    customer: Optional[int],
    service: Optional[int],
    project: Optional[int],
    error_message: str,
) -> Selection:
    """Customer, service and project from flags, config defaults or the picker"""
    config = app.config
    customers_id = customer or config.default_customer_id
    services_id = service or config.default_service_id
    projects_id = project or config.default_project_id

    if (not customers_id or not services_id) and should_prompt(
        app.options, output_mode(app)
    ):
        selection = select_customer_project_service(app.client, config)
        customers_id = customers_id or selection.customers_id
        services_id = services_id or selection.services_id
        projects_id = projects_id or selection.projects_id

    if not customers_id or not services_id:
        raise CliError(
            error_message,
            ExitCode.INVALID_ARGS,
            "Use --customer and --service flags, or set defaults with: "
            "clockodo config set",
        )

    return Selection(
        customers_id=customers_id, services_id=services_id, projects_id=projects_id
    )


def drop_none(params: JsonDict) -> JsonDict:
    return {key: value for key, value in params.items() if value is not None}
