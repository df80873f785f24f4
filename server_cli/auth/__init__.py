from server_cli.auth.credentials import (
    TOKEN_ENV_VAR,
    ClipboardFailed,
    ClipboardPasted,
    CredentialContext,
    TokenAvailable,
    TokenMissing,
    check_ambient_token,
    mask,
    publish_token,
    read_clipboard,
)


__all__ = [
    "TOKEN_ENV_VAR",
    "ClipboardFailed",
    "ClipboardPasted",
    "CredentialContext",
    "TokenAvailable",
    "TokenMissing",
    "check_ambient_token",
    "mask",
    "publish_token",
    "read_clipboard",
]
