import logging
import threading
from collections.abc import Callable
from functools import partial
from typing import Any, ClassVar

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Static

from server_cli.auth.credentials import (
    ClipboardPasted,
    check_ambient_token,
    publish_token,
    read_clipboard,
)
from server_cli.core.state import (
    CheckAmbientToken,
    Effect,
    Event,
    KeyPressed,
    PublishToken,
    Quit,
    ReadClipboard,
    RunScript,
    ScriptFinished,
    SessionState,
    update,
)
from server_cli.interface.render import render
from server_cli.runner.script_runner import RunRequest, RunResult, run_script


logger = logging.getLogger(__name__)


class ServerMenuApp(App[int]):  # type: ignore[misc]
    CSS_PATH = "assets/app_styles.tcss"

    # Keys textual would otherwise consume itself are routed through bindings;
    # everything else reaches on_key.
    BINDINGS: ClassVar[list[Binding]] = [  # type: ignore[assignment]
        Binding("up", "press('up')", "Up", show=False, priority=True),
        Binding("down", "press('down')", "Down", show=False, priority=True),
        Binding("enter", "press('enter')", "Select", show=False, priority=True),
        Binding("escape", "press('escape')", "Back", show=False, priority=True),
        Binding("backspace", "press('backspace')", "Delete", show=False, priority=True),
        Binding("ctrl+v", "press('ctrl+v')", "Paste", show=False, priority=True),
        Binding("ctrl+c", "press('ctrl+c')", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        state: SessionState,
        startup_effect: Effect | None = None,
        runner: Callable[[RunRequest], RunResult] = run_script,
        clipboard: Callable[[], Event] = read_clipboard,
        token_check: Callable[[], Event] = check_ambient_token,
    ) -> None:
        super().__init__()
        self._state = state
        self._startup_effect = startup_effect
        self._runner = runner
        self._clipboard = clipboard
        self._token_check = token_check
        self._threads: list[threading.Thread] = []
        self._quitting = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def has_pending_tasks(self) -> bool:
        """True while a background task has not yet reported back."""
        self._threads = [thread for thread in self._threads if thread.is_alive()]
        return bool(self._threads)

    def compose(self) -> ComposeResult:
        yield Vertical(Static("", id="menu_body"), id="menu_root")

    def on_mount(self) -> None:
        self.title = "server-cli"
        self._render_state()
        effect, self._startup_effect = self._startup_effect, None
        self._run_effect(effect)

    def dispatch(self, event: Event) -> None:
        self._state, effect = update(self._state, event)
        self._render_state()
        self._run_effect(effect)

    def _render_state(self) -> None:
        self.query_one("#menu_body", Static).update(render(self._state))

    # ── Input ─────────────────────────────────────────────────────────

    def action_press(self, key: str) -> None:
        self.dispatch(KeyPressed(key))

    def on_key(self, event: events.Key) -> None:
        event.stop()
        character = event.character if event.is_printable else None
        self.dispatch(KeyPressed(event.key, character))

    def on_paste(self, event: events.Paste) -> None:
        event.stop()
        text = event.text.replace("\r", "").replace("\n", "")
        if text:
            self.dispatch(ClipboardPasted(text))

    # ── Effects ───────────────────────────────────────────────────────

    def _run_effect(self, effect: Effect | None) -> None:
        if effect is None:
            return
        if isinstance(effect, Quit):
            self._quitting = True
            self.exit(0)
        elif isinstance(effect, PublishToken):
            publish_token(effect.token)
        elif isinstance(effect, CheckAmbientToken):
            self._start_background(self._check_token, "token-check")
        elif isinstance(effect, ReadClipboard):
            self._start_background(self._read_clipboard, "clipboard")
        elif isinstance(effect, RunScript):
            self._start_background(
                partial(self._run_script, effect.request),
                f"script:{effect.request.target}",
            )
        else:
            logger.warning("Unhandled effect: %r", effect)

    def _start_background(self, target: Callable[[], None], name: str) -> None:
        # Daemon threads: quitting must not wait on a script that is still running.
        thread = threading.Thread(target=target, name=name, daemon=True)
        self._threads.append(thread)
        thread.start()

    def _report(self, event: Event) -> None:
        try:
            self.call_from_thread(self._deliver, event)
        except RuntimeError:
            logger.debug("App closed before %s was delivered", type(event).__name__)

    def _deliver(self, event: Event) -> None:
        if not self._quitting:
            self.dispatch(event)

    def _check_token(self) -> None:
        self._report(self._token_check())

    def _read_clipboard(self) -> None:
        self._report(self._clipboard())

    def _run_script(self, request: RunRequest) -> None:
        try:
            result = self._runner(request)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Script runner crashed for %s", request.target)
            result = RunResult(f"{exc}\n", success=False)
        self._report(ScriptFinished(request.target, result))


def run_app(state: SessionState, startup_effect: Effect | None = None, **kwargs: Any) -> int:
    app = ServerMenuApp(state, startup_effect, **kwargs)
    result = app.run()
    if app.return_code:
        return app.return_code
    return result or 0
