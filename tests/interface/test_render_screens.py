from dataclasses import replace

from server_cli.auth.credentials import TokenAvailable, TokenMissing
from server_cli.core.state import KeyPressed, Screen, failed_state, initial_state, update
from server_cli.interface.render import render
from server_cli.models import Configuration


def _config() -> Configuration:
    return Configuration.from_document(
        {
            "prod": {
                "description": "Production",
                "servers": {"east": {"script": "echo hi", "description": "US East"}, "west": {}},
            },
            "dev": {"servers": {"box": {"script": "true"}}},
        }
    )


def test_token_screen_masks_input() -> None:
    state, _ = initial_state(_config())
    state, _ = update(state, TokenMissing())
    for char in "hunter2":
        state, _ = update(state, KeyPressed(char, char))

    plain = render(state).plain

    assert "Vault Authentication" in plain
    assert "> *******" in plain
    assert "hunter2" not in plain


def test_token_screen_shows_paste_error() -> None:
    state, _ = initial_state(_config())
    state, _ = update(state, TokenMissing())
    state = replace(state, paste_error="Failed to paste: nope")

    assert "Failed to paste: nope" in render(state).plain


def test_category_screen_lists_sorted_names_with_cursor() -> None:
    state, _ = initial_state(_config())
    state, _ = update(state, TokenAvailable("abc"))

    lines = render(state).plain.splitlines()

    assert "> dev" in lines
    assert "  prod - Production" in lines
    assert lines.index("> dev") < lines.index("  prod - Production")


def test_server_screen_shows_descriptions() -> None:
    state, _ = initial_state(_config())
    state, _ = update(state, TokenAvailable("abc"))
    state, _ = update(state, KeyPressed("down"))
    state, _ = update(state, KeyPressed("enter"))

    plain = render(state).plain

    assert state.screen is Screen.server_selection
    assert "> east - US East" in plain
    assert "  west" in plain


def test_output_screen_states() -> None:
    state, _ = initial_state(_config())
    state, _ = update(state, TokenAvailable("abc"))
    state, _ = update(state, KeyPressed("down"))
    state, _ = update(state, KeyPressed("enter"))
    state, _ = update(state, KeyPressed("enter"))

    assert "Running script..." in render(state).plain

    done = replace(state, running=False, output="hi\n")
    assert "hi" in render(done).plain

    failed = replace(state, running=False, output="exit status 3\n", output_is_error=True)
    assert "Error: exit status 3" in render(failed).plain


def test_fatal_error_overrides_everything() -> None:
    plain = render(failed_state("No servers defined in configuration")).plain

    assert plain.startswith("Configuration Error: No servers defined in configuration")
