import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Tuple

from clockodo_cli.errors import CliError, ExitCode
from clockodo_cli.types import CustomerId, JsonDict, ProjectId, ServiceId

DOTFILES_DIR = Path("~/.config/clockodo-cli").expanduser()
CONFIG_FILE_NAME = "config.json"
DEFAULT_TIMEZONE = "Europe/Berlin"

CONFIG_DIR_ENV_VAR = "CLOCKODO_CONFIG_DIR"
EMAIL_ENV_VAR = "CLOCKODO_EMAIL"
API_KEY_ENV_VAR = "CLOCKODO_API_KEY"

logger = logging.getLogger(__name__)

ClockodoApiKey = str


@dataclass
class AppConfig:
    email: Optional[str] = None
    api_key: Optional[ClockodoApiKey] = None
    timezone: str = DEFAULT_TIMEZONE
    default_customer_id: Optional[CustomerId] = None
    default_service_id: Optional[ServiceId] = None
    default_project_id: Optional[ProjectId] = None

    def to_json(self) -> JsonDict:
        return {key: value for key, value in asdict(self).items() if value is not None}


def parse_config(raw: JsonDict) -> AppConfig:
    """
    {
      "email": "you@example.com",
      "api_key": "1234abcd",
      "timezone": "Europe/Berlin",
      "default_customer_id": 10,
      "default_service_id": 30
    }
    """
    known = {field.name for field in fields(AppConfig)}
    unknown = set(raw) - known
    if unknown:
        logger.debug(f"Ignoring unknown config keys: {sorted(unknown)}")

    return AppConfig(**{key: value for key, value in raw.items() if key in known})


def default_config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DOTFILES_DIR


class ConfigStore:
    """JSON file holding credentials and defaults, readable only by its owner"""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.path = (directory or default_config_dir()) / CONFIG_FILE_NAME
        self._config: Optional[AppConfig] = None

    def load(self) -> AppConfig:
        if self._config is not None:
            return self._config

        if not self.path.exists():
            logger.debug(f"No config file at {self.path}, using defaults")
            self._config = AppConfig()
            return self._config

        try:
            raw = json.loads(self.path.read_text())
        except ValueError:
            raise CliError(
                f"Config file is not valid JSON: {self.path}",
                ExitCode.CONFIG_ERROR,
                "Fix or delete the file and run: clockodo config set",
            )

        self._config = parse_config(raw)
        return self._config

    def save(self, config: AppConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(config.to_json(), indent=2) + "\n")
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.warning(f"Could not restrict permissions of {self.path}")

        logger.debug(f"Config saved to {self.path}")
        self._config = config

    def require_auth(self) -> Tuple[str, ClockodoApiKey]:
        config = self.load()
        email = config.email or os.environ.get(EMAIL_ENV_VAR)
        api_key = config.api_key or os.environ.get(API_KEY_ENV_VAR)

        if not email or not api_key:
            raise CliError(
                "Authentication not configured.",
                ExitCode.CONFIG_ERROR,
                'Run "clockodo config set" to configure your API credentials, or '
                f"set {EMAIL_ENV_VAR} and {API_KEY_ENV_VAR} environment variables.",
            )

        return email, api_key


def mask_secret(secret: str) -> str:
    """Show only the last 4 characters of ``secret``"""
    if len(secret) <= 4:
        return "****"
    return f"****{secret[-4:]}"
