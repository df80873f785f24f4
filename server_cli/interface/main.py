#!/usr/bin/env python3
"""
server-cli

Pick a server from the configured list and run its script with VAULT_TOKEN
and SERVER_REGION exported.

Config is read from $SERVER_CLI_CONFIG, --config, or
~/.config/server-cli/config.json.
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from server_cli.config import Config, ConfigError
from server_cli.core.state import failed_state, initial_state
from server_cli.interface.app import run_app


logging.getLogger().setLevel(logging.ERROR)

logger = logging.getLogger(__name__)


def configure_logging(log_file: str | None = None) -> None:
    """Send server_cli logs to a file; the terminal belongs to the UI."""
    log_file = log_file or Config.get("server_cli_log_file")
    if not log_file:
        return

    level_name = (Config.get("server_cli_log_level") or "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    app_logger = logging.getLogger("server_cli")
    app_logger.setLevel(level)

    resolved_path = str(Path(log_file).expanduser().resolve())
    for handler in app_logger.handlers:
        if (
            isinstance(handler, logging.FileHandler)
            and getattr(handler, "baseFilename", None) == resolved_path
        ):
            return

    try:
        file_handler = logging.FileHandler(resolved_path, encoding="utf-8")
    except OSError:
        logger.exception("Failed to attach log handler at %s", resolved_path)
        return

    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    )
    app_logger.addHandler(file_handler)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="server-cli",
        description="Run a configured script against a selected server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keys:
  up/down, j/k       Move the cursor
  enter              Select
  b, esc, backspace  Go back
  ctrl+v             Paste the token from the clipboard
  q, ctrl+c          Quit

Environment:
  VAULT_TOKEN                        Skip the token prompt
  SERVER_CLI_CONFIG                  Path to the config file (JSON or YAML)
  SERVER_CLI_ALWAYS_SHOW_CATEGORIES  Show the category screen even for one category
  SERVER_CLI_SHELL                   Shell used for inline scripts (default: bash)
  SERVER_CLI_LOG_FILE                Write logs to this file
        """,
    )
    parser.add_argument("--config", type=str, help="Path to the config file")
    parser.add_argument(
        "--always-show-categories",
        action="store_true",
        help="Show the category screen even when only one category is configured",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to this file")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_arguments(argv)
    configure_logging(args.log_file)

    if args.config:
        Config.set_config_file_override(args.config)

    always_show = args.always_show_categories or Config.get_flag(
        "server_cli_always_show_categories"
    )

    try:
        configuration = Config.load_configuration()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        state, effect = failed_state(str(exc)), None
    else:
        state, effect = initial_state(
            configuration,
            always_show_categories=always_show,
            shell=Config.get("server_cli_shell") or "bash",
        )

    try:
        exit_code = run_app(state, effect)
    except Exception as exc:
        logger.exception("Interface loop failed")
        Console(stderr=True).print(f"[red]Error running program: {escape(str(exc))}[/]")
        sys.exit(1)

    sys.exit(1 if exit_code else 0)


if __name__ == "__main__":
    main()
