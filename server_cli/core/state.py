"""Navigation state machine for the server menu.

``update(state, event)`` is the only place ``SessionState`` changes. It never
blocks: anything slow (clipboard, subprocess) comes back as an *effect* for the
caller to run, and the outcome re-enters as another event.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from server_cli.auth.credentials import (
    ClipboardFailed,
    ClipboardPasted,
    CredentialContext,
    TokenAvailable,
    TokenMissing,
)
from server_cli.models import Configuration
from server_cli.runner.script_runner import DEFAULT_SHELL, RunRequest, RunResult


QUIT_KEYS = frozenset({"q", "ctrl+c"})
TOKEN_QUIT_KEYS = frozenset({"ctrl+c"})  # q is a valid token character
UP_KEYS = frozenset({"up", "k"})
DOWN_KEYS = frozenset({"down", "j"})
CONFIRM_KEYS = frozenset({"enter"})
BACK_KEYS = frozenset({"backspace", "escape", "b"})
PASTE_KEYS = frozenset({"ctrl+v"})
DELETE_KEYS = frozenset({"backspace"})


class Screen(str, Enum):
    loading = "loading"
    token_input = "token_input"
    category_selection = "category_selection"
    server_selection = "server_selection"
    script_output = "script_output"


# ── Events ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class KeyPressed:
    key: str
    character: str | None = None


@dataclass(frozen=True, slots=True)
class ScriptFinished:
    target: str
    result: RunResult


@dataclass(frozen=True, slots=True)
class ConfigFailed:
    message: str


Event = Union[
    KeyPressed,
    ScriptFinished,
    ConfigFailed,
    TokenAvailable,
    TokenMissing,
    ClipboardPasted,
    ClipboardFailed,
]


# ── Effects ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CheckAmbientToken:
    pass


@dataclass(frozen=True, slots=True)
class ReadClipboard:
    pass


@dataclass(frozen=True, slots=True)
class PublishToken:
    token: str

    def __repr__(self) -> str:
        return f"PublishToken(<{len(self.token)} chars>)"


@dataclass(frozen=True, slots=True)
class RunScript:
    request: RunRequest


@dataclass(frozen=True, slots=True)
class Quit:
    pass


Effect = Union[CheckAmbientToken, ReadClipboard, PublishToken, RunScript, Quit]


@dataclass(frozen=True, slots=True)
class SessionState:
    screen: Screen = Screen.loading
    config: Configuration = field(default_factory=Configuration)
    category_names: tuple[str, ...] = ()
    server_names: tuple[str, ...] = ()
    category_cursor: int = 0
    server_cursor: int = 0
    selected_category: str | None = None
    selected_server: str | None = None
    token: str = field(default="", repr=False)
    token_input: str = field(default="", repr=False)
    paste_error: str = ""
    output: str = ""
    output_is_error: bool = False
    running: bool = False
    fatal_error: str | None = None
    always_show_categories: bool = False
    shell: str = DEFAULT_SHELL

    @property
    def skips_category_screen(self) -> bool:
        return not self.always_show_categories and len(self.category_names) == 1


def initial_state(
    config: Configuration,
    always_show_categories: bool = False,
    shell: str = DEFAULT_SHELL,
) -> tuple[SessionState, Effect]:
    state = SessionState(
        config=config,
        category_names=config.category_names(),
        always_show_categories=always_show_categories,
        shell=shell,
    )
    return state, CheckAmbientToken()


def failed_state(message: str) -> SessionState:
    return SessionState(fatal_error=message)


def update(state: SessionState, event: Event) -> tuple[SessionState, Effect | None]:  # noqa: PLR0911
    if isinstance(event, ConfigFailed):
        return replace(state, fatal_error=event.message), None

    if state.fatal_error is not None:
        if isinstance(event, KeyPressed) and event.key in QUIT_KEYS:
            return state, Quit()
        return state, None

    if isinstance(event, KeyPressed):
        return _on_key(state, event)

    if isinstance(event, TokenAvailable):
        if state.screen in (Screen.loading, Screen.token_input):
            return _enter_lists(replace(state, token=event.token, token_input="")), None
        return state, None

    if isinstance(event, TokenMissing):
        if state.screen is Screen.loading:
            return replace(state, screen=Screen.token_input), None
        return state, None

    if isinstance(event, ClipboardPasted):
        if state.screen is Screen.token_input:
            return replace(state, token_input=state.token_input + event.text), None
        return state, None

    if isinstance(event, ClipboardFailed):
        if state.screen is Screen.token_input:
            return replace(state, paste_error=event.error), None
        return state, None

    if isinstance(event, ScriptFinished):
        state = replace(state, running=False)
        if state.screen is not Screen.script_output:
            return state, None
        return (
            replace(state, output=event.result.output, output_is_error=not event.result.success),
            None,
        )

    return state, None


# ── Key handling ──────────────────────────────────────────────────────


def _on_key(state: SessionState, event: KeyPressed) -> tuple[SessionState, Effect | None]:
    if state.screen is Screen.token_input:
        return _on_token_key(state, event)

    if event.key in QUIT_KEYS:
        return state, Quit()

    if state.screen is Screen.category_selection:
        return _on_category_key(state, event.key)
    if state.screen is Screen.server_selection:
        return _on_server_key(state, event.key)
    if state.screen is Screen.script_output:
        return _on_output_key(state, event.key)
    return state, None


def _on_token_key(state: SessionState, event: KeyPressed) -> tuple[SessionState, Effect | None]:
    state = replace(state, paste_error="")
    key = event.key

    if key in TOKEN_QUIT_KEYS:
        return state, Quit()

    if key in CONFIRM_KEYS:
        if not state.token_input:
            return state, None
        token = state.token_input
        return _enter_lists(replace(state, token=token, token_input="")), PublishToken(token)

    if key in PASTE_KEYS:
        return state, ReadClipboard()

    if key in DELETE_KEYS:
        return replace(state, token_input=state.token_input[:-1]), None

    char = event.character
    if char is not None and len(char) == 1 and char.isprintable():
        return replace(state, token_input=state.token_input + char), None

    return state, None


def _on_category_key(state: SessionState, key: str) -> tuple[SessionState, Effect | None]:
    if key in UP_KEYS or key in DOWN_KEYS:
        delta = -1 if key in UP_KEYS else 1
        cursor = _clamp(state.category_cursor + delta, len(state.category_names))
        return replace(state, category_cursor=cursor), None

    if key in CONFIRM_KEYS and state.category_names:
        return _select_category(state, state.category_names[state.category_cursor]), None

    return state, None


def _on_server_key(state: SessionState, key: str) -> tuple[SessionState, Effect | None]:
    if key in UP_KEYS or key in DOWN_KEYS:
        delta = -1 if key in UP_KEYS else 1
        cursor = _clamp(state.server_cursor + delta, len(state.server_names))
        return replace(state, server_cursor=cursor), None

    if key in CONFIRM_KEYS:
        return _launch(state)

    if key in BACK_KEYS and not state.skips_category_screen:
        return (
            replace(
                state,
                screen=Screen.category_selection,
                selected_category=None,
                server_names=(),
                server_cursor=0,
            ),
            None,
        )

    return state, None


def _on_output_key(state: SessionState, key: str) -> tuple[SessionState, Effect | None]:
    if key in BACK_KEYS and state.selected_category is not None:
        state = replace(state, output="", output_is_error=False, selected_server=None)
        return _select_category(state, state.selected_category), None
    return state, None


# ── Transitions ───────────────────────────────────────────────────────


def _clamp(cursor: int, length: int) -> int:
    return max(0, min(cursor, length - 1))


def _enter_lists(state: SessionState) -> SessionState:
    if state.skips_category_screen:
        return _select_category(state, state.category_names[0])
    return replace(state, screen=Screen.category_selection)


def _select_category(state: SessionState, category: str) -> SessionState:
    return replace(
        state,
        screen=Screen.server_selection,
        selected_category=category,
        server_names=state.config.server_names(category),
        server_cursor=0,
    )


def _launch(state: SessionState) -> tuple[SessionState, Effect | None]:
    # one script in flight at a time
    if state.running or not state.server_names or state.selected_category is None:
        return state, None

    name = state.server_names[state.server_cursor]
    spec = state.config.server(state.selected_category, name)
    if spec is None:
        return state, None

    request = RunRequest(
        target=name,
        spec=spec,
        credentials=CredentialContext(state.token),
        shell=state.shell,
    )
    new_state = replace(
        state,
        screen=Screen.script_output,
        selected_server=name,
        output="",
        output_is_error=False,
        running=True,
    )
    return new_state, RunScript(request)
