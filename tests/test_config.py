import json
import stat

import pytest

from clockodo_cli.config import (
    API_KEY_ENV_VAR,
    CONFIG_DIR_ENV_VAR,
    EMAIL_ENV_VAR,
    AppConfig,
    ConfigStore,
    default_config_dir,
    mask_secret,
    parse_config,
)
from clockodo_cli.errors import CliError, ExitCode


def test_missing_config_file_gives_defaults(tmp_path):
    config = ConfigStore(tmp_path).load()
    assert config == AppConfig()
    assert config.timezone == "Europe/Berlin"


def test_saved_config_is_private_and_reloadable(tmp_path):
    config = AppConfig(
        email="me@example.com", api_key="abcd1234", default_customer_id=10
    )

    ConfigStore(tmp_path).save(config)

    store = ConfigStore(tmp_path)
    assert store.load() == config
    assert stat.S_IMODE(store.path.stat().st_mode) == 0o600
    assert "default_service_id" not in json.loads(store.path.read_text())


def test_unknown_keys_are_ignored():
    config = parse_config({"email": "me@example.com", "theme": "dark"})
    assert config == AppConfig(email="me@example.com")


def test_invalid_json_is_a_config_error(tmp_path):
    (tmp_path / "config.json").write_text("{not json")

    with pytest.raises(CliError) as excinfo:
        ConfigStore(tmp_path).load()

    assert excinfo.value.exit_code == ExitCode.CONFIG_ERROR


def test_require_auth_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(EMAIL_ENV_VAR, "env@example.com")
    monkeypatch.setenv(API_KEY_ENV_VAR, "env-key")

    assert ConfigStore(tmp_path).require_auth() == ("env@example.com", "env-key")


def test_require_auth_prefers_config_file(tmp_path, monkeypatch):
    monkeypatch.setenv(EMAIL_ENV_VAR, "env@example.com")
    monkeypatch.setenv(API_KEY_ENV_VAR, "env-key")
    store = ConfigStore(tmp_path)
    store.save(AppConfig(email="file@example.com", api_key="file-key"))

    assert store.require_auth() == ("file@example.com", "file-key")


def test_require_auth_without_credentials(tmp_path):
    with pytest.raises(CliError) as excinfo:
        ConfigStore(tmp_path).require_auth()

    assert excinfo.value.exit_code == ExitCode.CONFIG_ERROR
    assert "clockodo config set" in excinfo.value.suggestion


def test_config_dir_can_be_overridden(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(tmp_path))
    assert default_config_dir() == tmp_path


def test_mask_secret():
    assert mask_secret("abcdef123456") == "****3456"
    assert mask_secret("abc") == "****"
