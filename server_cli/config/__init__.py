from server_cli.config.config import Config, ConfigError, load_configuration


__all__ = ["Config", "ConfigError", "load_configuration"]
