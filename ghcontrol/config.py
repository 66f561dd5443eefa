"""
Configuration loading for gh-control.

"Configuration is just organized secrets. Keep them that way."

Token precedence: explicit value (flag or GH_ACCESS_TOKEN), then
./.github_token, then ./.env, then the `token` key of
~/.config/gh-control/config.yaml.
"""

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

from .models import DEFAULT_API_HOST, DEFAULT_TIMEOUT, Config
from .rich_utils import log_event
from .validation import validate_github_token

TOKEN_ENV_VAR = "GH_ACCESS_TOKEN"
TOKEN_FILES = (".github_token", ".env")


class ConfigError(Exception):
    """Raised when configuration cannot be resolved."""

    pass


class ConfigManager:
    """
    Resolves the access token and defaults for a single invocation.

    "A good manager knows where everything is. Even your configs."
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "gh-control"
    CONFIG_FILE = "config.yaml"

    def __init__(
        self,
        config_dir: Path | None = None,
        work_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the configuration manager."""
        self.config_dir = config_dir or self.DEFAULT_CONFIG_DIR
        self.config_path = self.config_dir / self.CONFIG_FILE
        self.work_dir = work_dir or Path.cwd()
        self.environ = os.environ if environ is None else environ

    def load_settings(self) -> dict[str, Any]:
        """Load settings from the YAML config file, if there is one."""
        if not self.config_path.exists():
            return {}

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")
        return data

    def resolve_token(self, explicit: str | None = None, settings: Mapping[str, Any] | None = None) -> tuple[str, str]:
        """
        Find the access token.

        Returns:
            Tuple of (token, source description)

        Raises:
            ConfigError: If no token is found anywhere
        """
        if explicit:
            return explicit, "command line or environment"

        env_token = self.environ.get(TOKEN_ENV_VAR)
        if env_token:
            return env_token, "environment variable"

        for filename in TOKEN_FILES:
            path = self.work_dir / filename
            if not path.is_file():
                continue
            token = dotenv_values(path).get(TOKEN_ENV_VAR)
            if token:
                return token, f"{filename} file"

        settings = self.load_settings() if settings is None else settings
        if settings.get("token"):
            return str(settings["token"]), f"config file {self.config_path}"

        raise ConfigError(
            f"No GitHub token found. Set {TOKEN_ENV_VAR} environment variable or create .github_token file"
        )

    def build_config(
        self,
        token: str | None = None,
        dry_run: bool = False,
        force: bool = False,
        api_host: str | None = None,
        timeout: float | None = None,
    ) -> Config:
        """
        Build the immutable Config for this invocation.

        Flags win over the config file; the config file can only switch
        dry-run and force mode on, never off.
        """
        settings = self.load_settings()

        resolved_token, source = self.resolve_token(token, settings)
        validate_github_token(resolved_token)
        log_event(f"Using GitHub token from {source}")

        if timeout is None:
            try:
                timeout = float(settings.get("timeout", DEFAULT_TIMEOUT))
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid timeout in {self.config_path}: {settings.get('timeout')!r}") from e

        return Config(
            token=resolved_token,
            dry_run=dry_run or self._setting_flag(settings, "dry_run"),
            force=force or self._setting_flag(settings, "force"),
            api_host=api_host or settings.get("api_host") or DEFAULT_API_HOST,
            timeout=timeout,
        )

    def _setting_flag(self, settings: Mapping[str, Any], key: str) -> bool:
        """Read an on/off setting; only real YAML booleans are accepted."""
        value = settings.get(key)
        if value is None:
            return False
        if not isinstance(value, bool):
            raise ConfigError(f"Invalid {key} in {self.config_path}: {value!r} (expected true or false)")
        return value
