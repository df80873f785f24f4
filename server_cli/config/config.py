import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from server_cli.models import Configuration


logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """The server configuration could not be loaded."""


class Config:
    """Configuration Manager for server-cli."""

    # Paths
    server_cli_config = None

    # Behaviour
    server_cli_always_show_categories = "false"
    server_cli_shell = "bash"

    # Logging
    server_cli_log_file = None
    server_cli_log_level = "INFO"

    # Config file override (set via --config CLI arg)
    _config_file_override: Path | None = None
    _FALLBACK_FILE = "server-cli-config.json"
    _YAML_SUFFIXES = (".yaml", ".yml")

    @classmethod
    def _tracked_names(cls) -> list[str]:
        return [
            k
            for k, v in vars(cls).items()
            if not k.startswith("_") and k[0].islower() and (v is None or isinstance(v, str))
        ]

    @classmethod
    def tracked_vars(cls) -> list[str]:
        return [name.upper() for name in cls._tracked_names()]

    @classmethod
    def get(cls, name: str) -> str | None:
        env_name = name.upper()
        default = getattr(cls, name, None)
        return os.getenv(env_name, default)

    @classmethod
    def get_flag(cls, name: str) -> bool:
        return (cls.get(name) or "").strip().lower() in _TRUTHY

    @classmethod
    def set_config_file_override(cls, path: str | Path | None) -> None:
        cls._config_file_override = Path(path).expanduser() if path else None

    @classmethod
    def config_dir(cls) -> Path:
        return Path.home() / ".config" / "server-cli"

    @classmethod
    def config_file(cls) -> Path:
        if cls._config_file_override is not None:
            return cls._config_file_override
        env_path = cls.get("server_cli_config")
        if env_path:
            return Path(env_path).expanduser()
        try:
            return cls.config_dir() / "config.json"
        except RuntimeError:
            # Path.home() raises when no home directory can be resolved
            return Path(".") / cls._FALLBACK_FILE

    @classmethod
    def load_document(cls, path: Path | None = None) -> Any:
        path = path or cls.config_file()
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"could not read config file: {exc}") from exc

        try:
            if path.suffix.lower() in cls._YAML_SUFFIXES:
                return yaml.safe_load(raw)
            return json.loads(raw)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigError(f"could not parse config file: {exc}") from exc

    @classmethod
    def load_configuration(cls, path: Path | None = None) -> Configuration:
        path = path or cls.config_file()
        document = cls.load_document(path)
        try:
            configuration = Configuration.from_document(document)
        except (ValidationError, ValueError) as exc:
            raise ConfigError(f"could not parse config file: {exc}") from exc

        if not configuration.categories:
            raise ConfigError("No categories defined in configuration")
        if configuration.server_count() == 0:
            raise ConfigError("No servers defined in configuration")

        logger.info(
            "Loaded %d categories / %d servers from %s",
            len(configuration.categories),
            configuration.server_count(),
            path,
        )
        return configuration


def load_configuration(path: Path | None = None) -> Configuration:
    return Config.load_configuration(path)
