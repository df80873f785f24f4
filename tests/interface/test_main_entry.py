import json
import logging
from unittest.mock import patch

import pytest

from server_cli.config import Config
from server_cli.core.state import CheckAmbientToken, Screen
from server_cli.interface import main as main_module


@pytest.fixture(autouse=True)
def _reset_override(monkeypatch):
    monkeypatch.setattr(Config, "_config_file_override", None)
    monkeypatch.delenv("SERVER_CLI_CONFIG", raising=False)
    monkeypatch.delenv("SERVER_CLI_ALWAYS_SHOW_CATEGORIES", raising=False)
    monkeypatch.delenv("SERVER_CLI_LOG_FILE", raising=False)


def _write_config(tmp_path, document) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)


def test_parse_arguments_defaults() -> None:
    args = main_module.parse_arguments([])

    assert args.config is None
    assert args.always_show_categories is False
    assert args.log_file is None


def test_main_starts_app_with_loaded_config(tmp_path) -> None:
    config_path = _write_config(tmp_path, {"servers": {"east": {"script": "echo hi"}}})

    with patch.object(main_module, "run_app", return_value=0) as run_app:
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--config", config_path])

    assert exc_info.value.code == 0
    state, effect = run_app.call_args.args
    assert state.fatal_error is None
    assert state.category_names == ("default",)
    assert effect == CheckAmbientToken()


def test_main_passes_policy_flag(tmp_path) -> None:
    config_path = _write_config(tmp_path, {"prod": {"servers": {"east": {}}}})

    with patch.object(main_module, "run_app", return_value=0) as run_app:
        with pytest.raises(SystemExit):
            main_module.main(["--config", config_path, "--always-show-categories"])

    state, _ = run_app.call_args.args
    assert state.always_show_categories is True


def test_main_shows_config_error_in_app(tmp_path) -> None:
    with patch.object(main_module, "run_app", return_value=0) as run_app:
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--config", str(tmp_path / "missing.json")])

    assert exc_info.value.code == 0
    state, effect = run_app.call_args.args
    assert state.fatal_error.startswith("could not read config file")
    assert state.screen is Screen.loading
    assert effect is None


def test_main_exits_1_when_interface_fails(tmp_path, capsys) -> None:
    config_path = _write_config(tmp_path, {"east": {"script": "true"}})

    with patch.object(main_module, "run_app", side_effect=RuntimeError("no tty")):
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--config", config_path])

    assert exc_info.value.code == 1
    assert "Error running program: no tty" in capsys.readouterr().err


def test_main_exits_1_on_nonzero_app_return_code(tmp_path) -> None:
    config_path = _write_config(tmp_path, {"east": {"script": "true"}})

    with patch.object(main_module, "run_app", return_value=1):
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--config", config_path])

    assert exc_info.value.code == 1


def test_configure_logging_attaches_single_file_handler(tmp_path) -> None:
    log_file = tmp_path / "server-cli.log"
    app_logger = logging.getLogger("server_cli")
    before = list(app_logger.handlers)

    try:
        main_module.configure_logging(str(log_file))
        main_module.configure_logging(str(log_file))

        added = [h for h in app_logger.handlers if h not in before]
        assert len(added) == 1
        assert isinstance(added[0], logging.FileHandler)

        logging.getLogger("server_cli.runner").info("hello from test")
        added[0].flush()
        assert "hello from test" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in app_logger.handlers[:]:
            if handler not in before:
                app_logger.removeHandler(handler)
                handler.close()


def test_configure_logging_without_file_is_noop() -> None:
    app_logger = logging.getLogger("server_cli")
    before = list(app_logger.handlers)

    main_module.configure_logging(None)

    assert app_logger.handlers == before
