from __future__ import annotations

import enum
import json
import logging
import re
from typing import TYPE_CHECKING, Optional

import click

if TYPE_CHECKING:
    from clockodo_cli.context import GlobalOptions

logger = logging.getLogger(__name__)


class ExitCode(enum.IntEnum):
    """Stable exit codes, meant to be consumed by scripts"""

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_ARGS = 2
    EMPTY_RESULTS = 3
    AUTH_FAILURE = 4
    NOT_FOUND = 5
    FORBIDDEN = 6
    RATE_LIMITED = 7
    SERVER_ERROR = 8
    CONFIG_ERROR = 10


class CliError(Exception):
    def __init__(
        self,
        message: str,
        exit_code: ExitCode = ExitCode.GENERAL_ERROR,
        suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.suggestion = suggestion


class DateParseError(CliError):
    def __init__(self, value: str) -> None:
        super().__init__(f'Cannot parse date: "{value}"', ExitCode.INVALID_ARGS)
        self.value = value


class ClockodoApiError(Exception):
    def __init__(self, status_code: int, detail: Optional[str] = None) -> None:
        if status_code:
            message = f"API error (HTTP {status_code})"
        else:
            message = "API error (no response)"
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = sanitize(detail) if detail else None


def map_http_error(status_code: int) -> ExitCode:
    if status_code == 401:
        return ExitCode.AUTH_FAILURE
    if status_code == 403:
        return ExitCode.FORBIDDEN
    if status_code == 404:
        return ExitCode.NOT_FOUND
    if status_code == 429:
        return ExitCode.RATE_LIMITED
    if status_code >= 500:
        return ExitCode.SERVER_ERROR
    return ExitCode.GENERAL_ERROR


_SECRET_PAIR = re.compile(
    r"([a-zA-Z_]*(?:key|token|secret|password|auth|credential)[a-zA-Z_]*)"
    r"[\"']?\s*[:=]\s*[\"']?[^\s\"',}]+",
    flags=re.IGNORECASE,
)
MAX_DETAIL_LENGTH = 500


def sanitize(text: str) -> str:
    """Mask anything that looks like a credential and cap the length"""
    return _SECRET_PAIR.sub(r"\1=***", text)[:MAX_DETAIL_LENGTH]


def parse_id(value: str, label: str = "ID") -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 0

    if number <= 0:
        raise CliError(
            f'Invalid {label}: "{value}". Must be a positive integer.',
            ExitCode.INVALID_ARGS,
        )
    return number


class PositiveInt(click.ParamType):
    name = "id"

    def convert(self, value, param, ctx):  # type: ignore[no-untyped-def]
        if isinstance(value, int) and value > 0:
            return value
        try:
            return parse_id(value)
        except CliError:
            self.fail(f'"{value}" is not a valid positive integer.', param, ctx)


POSITIVE_INT = PositiveInt()


def _echo_json_error(payload: dict) -> None:
    click.echo(json.dumps({"success": False, "error": payload}), err=True)


def handle_error(error: Exception, options: GlobalOptions) -> ExitCode:
    """Report ``error`` on stderr and return the exit code the process must use"""
    as_json = options.json
    color = None if options.color else False

    if isinstance(error, CliError):
        if as_json:
            _echo_json_error(
                {
                    "code": int(error.exit_code),
                    "message": error.message,
                    "suggestion": error.suggestion,
                }
            )
        else:
            click.secho(f"Error: {error.message}", fg="red", err=True, color=color)
            if error.suggestion:
                click.secho(
                    f"Hint: {error.suggestion}", fg="yellow", err=True, color=color
                )
        return error.exit_code

    if isinstance(error, ClockodoApiError):
        exit_code = map_http_error(error.status_code)
        if as_json:
            _echo_json_error(
                {
                    "code": int(exit_code),
                    "http_status": error.status_code,
                    "message": error.message,
                    "detail": error.detail,
                }
            )
        else:
            click.secho(f"Error: {error.message}", fg="red", err=True, color=color)
            if error.detail:
                click.secho(
                    f"Detail: {error.detail}", fg="yellow", err=True, color=color
                )
        return exit_code

    logger.debug("Unexpected error", exc_info=error)
    if as_json:
        _echo_json_error({"code": int(ExitCode.GENERAL_ERROR), "message": str(error)})
    else:
        click.secho(f"Unexpected error: {error}", fg="red", err=True, color=color)
    return ExitCode.GENERAL_ERROR
