import logging
import os
import sys
from typing import Any

import click

from clockodo_cli import __version__
from clockodo_cli.commands.absences import absences
from clockodo_cli.commands.clock import start, status, stop
from clockodo_cli.commands.config import config_group
from clockodo_cli.commands.entries import entries
from clockodo_cli.commands.report import report
from clockodo_cli.commands.resources import customers, projects, services, users
from clockodo_cli.commands.userreports import userreport, userreports
from clockodo_cli.commands.worktimes import worktimes
from clockodo_cli.config import ConfigStore
from clockodo_cli.context import AppContext, GlobalOptions
from clockodo_cli.errors import CliError, ClockodoApiError, handle_error

LOG_FORMAT = "%(asctime)s:%(levelname)s:%(filename)s:%(lineno)d:%(message)s"

logger = logging.getLogger(__name__)


class ClockodoGroup(click.Group):
    """Turns known errors into a message on stderr and a stable exit code"""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except (CliError, ClockodoApiError) as error:
            app = ctx.find_object(AppContext)
            options = app.options if app is not None else GlobalOptions()
            ctx.exit(handle_error(error, options))


@click.group(
    cls=ClockodoGroup, context_settings={"help_option_names": ["-h", "--help"]}
)
@click.option("-j", "--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("-p", "--plain", is_flag=True, help="Output as plain text")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--no-input", is_flag=True, help="Never prompt for input")
@click.option("-v", "--verbose", is_flag=True, help="Log debug information")
@click.version_option(__version__, prog_name="clockodo")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    plain: bool,
    no_color: bool,
    no_input: bool,
    verbose: bool,
) -> None:
    """Command line client for the Clockodo time tracking API"""
    if ctx.obj is None:
        ctx.obj = AppContext(config_store=ConfigStore())

    options = ctx.obj.options
    options.json = options.json or json_output
    options.plain = options.plain or plain
    options.color = not (no_color or plain or "NO_COLOR" in os.environ)
    options.input = not no_input
    options.verbose = verbose
    if not options.color:
        ctx.color = False

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.debug(f"clockodo {__version__}, command: {ctx.invoked_subcommand}")


cli.add_command(config_group)
cli.add_command(status)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(entries)
cli.add_command(report)
cli.add_command(customers)
cli.add_command(projects)
cli.add_command(services)
cli.add_command(users)
cli.add_command(absences)
cli.add_command(worktimes)
cli.add_command(userreport)
cli.add_command(userreports)


def main() -> None:
    app = AppContext(config_store=ConfigStore())
    try:
        cli.main(prog_name="clockodo", obj=app)
    except Exception as error:
        sys.exit(handle_error(error, app.options))


if __name__ == "__main__":
    main()
