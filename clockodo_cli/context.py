from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import click

from clockodo_cli.clockodo import ClockodoClient
from clockodo_cli.config import AppConfig, ConfigStore

logger = logging.getLogger(__name__)


@dataclass
class GlobalOptions:
    json: bool = False
    plain: bool = False
    color: bool = True
    input: bool = True
    verbose: bool = False


@dataclass
class AppContext:
    """Everything a command needs, built once by the entry point

    The API client is only created the first time a command asks for it, so that
    commands such as ``config set`` work before any credential exists.
    """

    config_store: ConfigStore
    options: GlobalOptions = field(default_factory=GlobalOptions)
    api_client: Optional[ClockodoClient] = None

    @property
    def config(self) -> AppConfig:
        return self.config_store.load()

    @property
    def client(self) -> ClockodoClient:
        if self.api_client is None:
            email, api_key = self.config_store.require_auth()
            logger.debug(f"Creating Clockodo client for {email}")
            self.api_client = ClockodoClient(email=email, api_key=api_key)
        return self.api_client


pass_app = click.make_pass_decorator(AppContext)
