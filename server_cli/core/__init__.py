from server_cli.core.state import (
    CheckAmbientToken,
    ConfigFailed,
    Effect,
    Event,
    KeyPressed,
    PublishToken,
    Quit,
    ReadClipboard,
    RunScript,
    Screen,
    ScriptFinished,
    SessionState,
    failed_state,
    initial_state,
    update,
)


__all__ = [
    "CheckAmbientToken",
    "ConfigFailed",
    "Effect",
    "Event",
    "KeyPressed",
    "PublishToken",
    "Quit",
    "ReadClipboard",
    "RunScript",
    "Screen",
    "ScriptFinished",
    "SessionState",
    "failed_state",
    "initial_state",
    "update",
]
