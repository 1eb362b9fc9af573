import enum
import json
import os
import sys
from typing import Any, List, Optional, Sequence, Tuple

import click
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from clockodo_cli.context import GlobalOptions
from clockodo_cli.types import JsonDict

AUTO_JSON_ENV_VAR = "CLOCKODO_AUTO_JSON"
EMPTY_CELL = "—"

DetailValue = Any
DetailPairs = Sequence[Tuple[str, DetailValue]]


class OutputMode(enum.Enum):
    HUMAN = "human"
    JSON = "json"
    PLAIN = "plain"


def resolve_output_mode(options: GlobalOptions) -> OutputMode:
    if options.json:
        return OutputMode.JSON
    if options.plain:
        return OutputMode.PLAIN

    # Piped output is meant for another program
    if not sys.stdout.isatty() and os.environ.get(AUTO_JSON_ENV_VAR) != "0":
        return OutputMode.JSON

    return OutputMode.HUMAN


def command_result(data: Any, meta: Optional[JsonDict] = None) -> JsonDict:
    result: JsonDict = {"data": data}
    if meta is not None:
        result["meta"] = meta
    return result


def _dumps(value: Any, indent: Optional[int]) -> str:
    return json.dumps(value, indent=indent, default=str, ensure_ascii=False)


def print_result(result: JsonDict, options: GlobalOptions) -> None:
    mode = resolve_output_mode(options)
    if mode is OutputMode.JSON:
        click.echo(_dumps(result, indent=2))
    elif mode is OutputMode.PLAIN:
        click.echo(_dumps(result["data"], indent=None))
    else:
        click.echo(result["data"])


def _console(options: GlobalOptions) -> Console:
    return Console(no_color=not options.color, highlight=False)


def print_table(
    headers: Sequence[str], rows: Sequence[Sequence[str]], options: GlobalOptions
) -> None:
    mode = resolve_output_mode(options)
    if mode is not OutputMode.HUMAN:
        data = [dict(zip(headers, row)) for row in rows]
        if mode is OutputMode.JSON:
            click.echo(_dumps({"data": data}, indent=2))
        else:
            click.echo(_dumps(data, indent=None))
        return

    table = Table(box=box.SIMPLE)
    for header in headers:
        table.add_column(header, header_style="bold")
    for row in rows:
        table.add_row(*(Text(cell) for cell in row))

    _console(options).print(table)


def print_detail(pairs: DetailPairs, options: GlobalOptions) -> None:
    mode = resolve_output_mode(options)
    if mode is not OutputMode.HUMAN:
        data = {key: value for key, value in pairs}
        if mode is OutputMode.JSON:
            click.echo(_dumps({"data": data}, indent=2))
        else:
            click.echo(_dumps(data, indent=None))
        return

    color = None if options.color else False
    width = max(len(key) for key, _ in pairs)
    for key, value in pairs:
        label = click.style(key.ljust(width), bold=True)
        shown = EMPTY_CELL if value is None else value
        click.echo(f"  {label}  {shown}", color=color)


def print_lines(lines: List[str], options: GlobalOptions) -> None:
    color = None if options.color else False
    for line in lines:
        click.echo(line, color=color)


def print_success(message: str) -> None:
    # stderr, so stdout stays clean for pipes
    click.secho(f"✓ {message}", fg="green", err=True)


def print_warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow", err=True)


def print_info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="cyan", err=True)


def dim(text: str) -> str:
    return click.style(text, dim=True)


def bold(text: str) -> str:
    return click.style(text, bold=True)
