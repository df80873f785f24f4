"""
Secret token capture for server-cli.

The token comes from ``VAULT_TOKEN`` when it is already set, otherwise the
operator types or pastes it on the token entry screen. Once committed it is
published back into ``os.environ`` so any process started later inherits it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping
from dataclasses import dataclass

import pyperclip


logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "VAULT_TOKEN"
MASK_CHAR = "*"


@dataclass(frozen=True, slots=True)
class TokenAvailable:
    token: str


@dataclass(frozen=True, slots=True)
class TokenMissing:
    pass


@dataclass(frozen=True, slots=True)
class ClipboardPasted:
    text: str


@dataclass(frozen=True, slots=True)
class ClipboardFailed:
    error: str


@dataclass(frozen=True, slots=True)
class CredentialContext:
    """Token handed to the script runner, plus the variable it is exposed as."""

    token: str
    env_var: str = TOKEN_ENV_VAR

    def as_env(self) -> dict[str, str]:
        return {self.env_var: self.token}

    def __repr__(self) -> str:
        return f"CredentialContext(env_var={self.env_var!r}, token=<{len(self.token)} chars>)"


def check_ambient_token(
    environ: MutableMapping[str, str] | None = None,
) -> TokenAvailable | TokenMissing:
    env = os.environ if environ is None else environ
    token = env.get(TOKEN_ENV_VAR, "")
    if token:
        logger.info("Using %s from the environment", TOKEN_ENV_VAR)
        return TokenAvailable(token)
    return TokenMissing()


def read_clipboard() -> ClipboardPasted | ClipboardFailed:
    try:
        text = pyperclip.paste()
    except pyperclip.PyperclipException as exc:
        logger.warning("Clipboard read failed: %s", exc)
        return ClipboardFailed(f"Failed to paste: {exc}")
    return ClipboardPasted(text or "")


def publish_token(token: str, environ: MutableMapping[str, str] | None = None) -> None:
    """Expose a committed token to child processes. Never cleared afterwards."""
    env = os.environ if environ is None else environ
    env[TOKEN_ENV_VAR] = token
    logger.info("Published %s (%d chars)", TOKEN_ENV_VAR, len(token))


def mask(buffer: str) -> str:
    return MASK_CHAR * len(buffer)
