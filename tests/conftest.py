from typing import Callable
from unittest.mock import create_autospec

import pytest
from click.testing import CliRunner, Result

from clockodo_cli.cli import cli
from clockodo_cli.clockodo import ClockodoClient
from clockodo_cli.config import API_KEY_ENV_VAR, EMAIL_ENV_VAR, ConfigStore
from clockodo_cli.context import AppContext


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (EMAIL_ENV_VAR, API_KEY_ENV_VAR, "CLOCKODO_AUTO_JSON", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client():
    return create_autospec(ClockodoClient, instance=True)


@pytest.fixture
def config_store(tmp_path):
    return ConfigStore(tmp_path)


@pytest.fixture
def app(config_store, client):
    return AppContext(config_store=config_store, api_client=client)


@pytest.fixture
def run(app) -> Callable[..., Result]:
    runner = CliRunner()

    def invoke(*args: str, input=None) -> Result:
        return runner.invoke(cli, list(args), obj=app, input=input)

    return invoke
