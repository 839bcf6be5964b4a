"""Connector configuration.

Configuration is an explicit value: it is loaded once per invocation and
handed to the connector/client constructors. There is no module-level config
object.

File format (JSON):
    {
        "baseUrl": "https://cmdb.example.com/webservices/rest.php",
        "apiVersion": "1.3",
        "auth_token": "...",            # or "username" + "password"
        "verifyTls": true,              # optional
        "defaultOrgId": 1,              # optional
        "timeoutSeconds": 30            # optional
    }

Lookup order for the file: explicit path, $CMDB_BRIDGE_CONFIG, ./config.json.
A .env file in the working directory is loaded first; the variables
CMDB_BRIDGE_AUTH_TOKEN, CMDB_BRIDGE_USERNAME and CMDB_BRIDGE_PASSWORD
override the credentials found in the file.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from core.errors import ConfigurationError

CONFIG_PATH_ENV = "CMDB_BRIDGE_CONFIG"
DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_ORG_ID = 1

_CREDENTIAL_ENV = {
    "auth_token": "CMDB_BRIDGE_AUTH_TOKEN",
    "username": "CMDB_BRIDGE_USERNAME",
    "password": "CMDB_BRIDGE_PASSWORD",
}


@dataclass(frozen=True)
class ConnectorConfig:
    """Settings for one backend REST endpoint."""
    base_url: str
    api_version: str
    auth_token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    verify_tls: bool = True
    default_org_id: Union[int, str] = DEFAULT_ORG_ID
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    @property
    def uses_token_auth(self) -> bool:
        return bool(self.auth_token)

    @property
    def has_password_auth(self) -> bool:
        return bool(self.username) and bool(self.password)

    def validate_auth(self) -> None:
        """Raise ConfigurationError unless token or username+password is usable."""
        if not self.uses_token_auth and not self.has_password_auth:
            raise ConfigurationError(
                "Either auth_token or both username and password must be provided in config"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectorConfig":
        """Build a config from the parsed JSON object.

        Raises:
            ConfigurationError: If required keys are missing or mistyped
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        missing = [key for key in ("baseUrl", "apiVersion") if not data.get(key)]
        if missing:
            raise ConfigurationError(f"Missing required configuration keys: {', '.join(missing)}")

        for key in ("baseUrl", "apiVersion", "auth_token", "username", "password"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(f"Configuration key '{key}' must be a string")

        verify_tls = data.get("verifyTls", True)
        if not isinstance(verify_tls, bool):
            raise ConfigurationError("Configuration key 'verifyTls' must be a boolean")

        timeout = data.get("timeoutSeconds", DEFAULT_TIMEOUT_SECONDS)
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ConfigurationError("Configuration key 'timeoutSeconds' must be a positive integer")

        config = cls(
            base_url=data["baseUrl"],
            api_version=data["apiVersion"],
            auth_token=data.get("auth_token") or None,
            username=data.get("username") or None,
            password=data.get("password") or None,
            verify_tls=verify_tls,
            default_org_id=data.get("defaultOrgId", DEFAULT_ORG_ID),
            timeout_seconds=timeout,
        )
        config.validate_auth()
        return config


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Work out which file to read."""
    if path:
        return Path(path)
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_FILE


def load_config(path: Optional[Union[str, Path]] = None) -> ConnectorConfig:
    """Load connector configuration.

    Args:
        path: Config file path (optional, see module docstring for lookup)

    Returns:
        Validated ConnectorConfig

    Raises:
        ConfigurationError: File missing, unreadable, not JSON, or incomplete
    """
    env_file = Path.cwd() / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    config_path = resolve_config_path(path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file {config_path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}") from e

    if isinstance(data, dict):
        for key, env_name in _CREDENTIAL_ENV.items():
            value = os.getenv(env_name)
            if value:
                data[key] = value

    return ConnectorConfig.from_dict(data)
