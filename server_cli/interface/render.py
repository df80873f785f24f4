from rich.style import Style
from rich.text import Text

from server_cli.auth.credentials import TOKEN_ENV_VAR, mask
from server_cli.core.state import Screen, SessionState


ACCENT = "#7D56F4"

TITLE_STYLE = Style(color="#FAFAFA", bgcolor=ACCENT, bold=True)
ITEM_STYLE = Style(color="#c0c0c0")
SELECTED_STYLE = Style(color=ACCENT, bold=True)
HINT_STYLE = Style(color="#666666", italic=True)
ERROR_STYLE = Style(color="#FF0000")
PROMPT_STYLE = Style(color="#4CAF50")
INPUT_STYLE = Style(color="#2196F3")

LIST_HINT = "up/down or j/k to navigate  enter to select  q to quit"


def render(state: SessionState) -> Text:
    """Build the full screen text for ``state``."""
    if state.fatal_error is not None:
        text = Text(f"Configuration Error: {state.fatal_error}", style=ERROR_STYLE)
        text.append("\n\n")
        text.append("press q to quit", style=HINT_STYLE)
        return text

    if state.screen is Screen.token_input:
        return _render_token_input(state)
    if state.screen is Screen.category_selection:
        return _render_categories(state)
    if state.screen is Screen.server_selection:
        return _render_servers(state)
    if state.screen is Screen.script_output:
        return _render_output(state)
    return Text("Checking credentials...", style=HINT_STYLE)


def _title(label: str) -> Text:
    text = Text(f" {label} ", style=TITLE_STYLE)
    text.append("\n\n")
    return text


def _render_token_input(state: SessionState) -> Text:
    text = _title("Vault Authentication")
    text.append(f"{TOKEN_ENV_VAR} environment variable is not set.\n", style=PROMPT_STYLE)
    text.append("Please enter your Vault token:\n\n", style=PROMPT_STYLE)
    text.append("> " + mask(state.token_input), style=INPUT_STYLE)
    text.append("\n\n")
    text.append("Type or press Ctrl+V to paste your token, then press Enter", style=HINT_STYLE)
    if state.paste_error:
        text.append("\n")
        text.append(state.paste_error, style=ERROR_STYLE)
    return text


def _append_menu(text: Text, entries: list[tuple[str, str]], cursor: int) -> None:
    for idx, (label, hint) in enumerate(entries):
        is_selected = idx == cursor
        prefix = "> " if is_selected else "  "
        line = f"{prefix}{label} - {hint}" if hint else f"{prefix}{label}"
        text.append(line, style=SELECTED_STYLE if is_selected else ITEM_STYLE)
        text.append("\n")


def _render_categories(state: SessionState) -> Text:
    text = _title("Category Selection")
    text.append("Select a category:\n\n")
    entries = [
        (name, state.config.categories[name].description) for name in state.category_names
    ]
    _append_menu(text, entries, state.category_cursor)
    text.append("\n")
    text.append(LIST_HINT, style=HINT_STYLE)
    return text


def _render_servers(state: SessionState) -> Text:
    text = _title("Server Selection")
    if state.skips_category_screen:
        text.append("Select a server region to run script:\n\n")
    else:
        text.append(f"Select a server in {state.selected_category} to run script:\n\n")

    entries = []
    for name in state.server_names:
        spec = state.config.server(state.selected_category or "", name)
        entries.append((name, spec.description if spec else ""))
    _append_menu(text, entries, state.server_cursor)

    text.append("\n")
    hint = LIST_HINT
    if not state.skips_category_screen:
        hint = "up/down or j/k to navigate  enter to select  b/esc to go back  q to quit"
    text.append(hint, style=HINT_STYLE)
    if state.running:
        text.append("\n")
        text.append("A previous script is still running...", style=ERROR_STYLE)
    return text


def _render_output(state: SessionState) -> Text:
    text = _title("Script Output")
    text.append(f"Running script for region: {state.selected_server}\n\n")

    if state.output:
        if state.output_is_error:
            text.append("Error: " + state.output, style=ERROR_STYLE)
        else:
            text.append(state.output)
    elif state.running:
        text.append("Running script...")
    elif state.output_is_error:
        text.append("Error: script failed without output", style=ERROR_STYLE)
    else:
        text.append("(no output)", style=HINT_STYLE)

    text.append("\n\n")
    text.append("Press 'b' to go back to server selection, q to quit", style=HINT_STYLE)
    return text
