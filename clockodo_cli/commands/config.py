import dataclasses
import logging
from typing import Optional

import click

from clockodo_cli.commands.common import output_mode, output_options
from clockodo_cli.config import mask_secret
from clockodo_cli.context import AppContext, pass_app
from clockodo_cli.errors import POSITIVE_INT, CliError, ExitCode
from clockodo_cli.output import (
    OutputMode,
    command_result,
    print_detail,
    print_result,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)


@click.group(name="config", help="Manage CLI configuration")
def config_group() -> None:
    pass


@config_group.command(name="set", help="Set API credentials and defaults")
@click.option("--email", help="Clockodo account email")
@click.option("--api-key", help="Clockodo API key")
@click.option("--timezone", help="Timezone name, e.g. Europe/Berlin")
@click.option("--default-customer", type=POSITIVE_INT, help="Default customer ID")
@click.option("--default-service", type=POSITIVE_INT, help="Default service ID")
@click.option("--default-project", type=POSITIVE_INT, help="Default project ID")
@output_options
@pass_app
def set_config(
    app: AppContext,
    email: Optional[str],
    api_key: Optional[str],
    timezone: Optional[str],
    default_customer: Optional[int],
    default_service: Optional[int],
    default_project: Optional[int],
) -> None:
    current = app.config
    email = email or current.email
    api_key = api_key or current.api_key

    if (not email or not api_key) and not app.options.input:
        raise CliError(
            "Email and API key are required.",
            ExitCode.INVALID_ARGS,
            "Pass --email and --api-key when running with --no-input.",
        )

    if not email:
        email = click.prompt("Clockodo email", err=True)
    if not api_key:
        api_key = click.prompt("Clockodo API key", hide_input=True, err=True)

    changes = {
        "email": email,
        "api_key": api_key,
        "timezone": timezone,
        "default_customer_id": default_customer,
        "default_service_id": default_service,
        "default_project_id": default_project,
    }
    changed = {key: value for key, value in changes.items() if value is not None}
    logger.debug(f"Updating config keys: {sorted(changed)}")
    updated = dataclasses.replace(current, **changed)
    app.config_store.save(updated)

    if output_mode(app) is not OutputMode.HUMAN:
        data = {"path": str(app.config_store.path), "email": updated.email}
        print_result(command_result(data), app.options)
        return

    print_success(f"Configuration saved to {app.config_store.path}")


@config_group.command(name="show", help="Show current configuration")
@output_options
@pass_app
def show_config(app: AppContext) -> None:
    config = app.config
    data = config.to_json()
    if config.api_key:
        data["api_key"] = mask_secret(config.api_key)

    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result(data), app.options)
        return

    if not config.email or not config.api_key:
        print_warning("Credentials are not configured. Run: clockodo config set")
    print_detail(
        [
            ("Email", config.email),
            ("API Key", data.get("api_key")),
            ("Timezone", config.timezone),
            ("Default Customer", config.default_customer_id),
            ("Default Service", config.default_service_id),
            ("Default Project", config.default_project_id),
            ("Config File", app.config_store.path),
        ],
        app.options,
    )


@config_group.command(name="path", help="Print the config file location")
@output_options
@pass_app
def config_path(app: AppContext) -> None:
    path = str(app.config_store.path)
    if output_mode(app) is not OutputMode.HUMAN:
        print_result(command_result({"path": path}), app.options)
        return
    click.echo(path)
