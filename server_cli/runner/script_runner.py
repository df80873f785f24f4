"""Runs the script configured for a server and captures its combined output."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from server_cli.auth.credentials import CredentialContext
from server_cli.models import ServerSpec


logger = logging.getLogger(__name__)

TARGET_ENV_VAR = "SERVER_REGION"
DEFAULT_SHELL = "bash"
NO_SCRIPT_MESSAGE = "No script or script_path defined for this server"

Spawn = Callable[..., "subprocess.CompletedProcess[bytes]"]


@dataclass(frozen=True, slots=True)
class RunRequest:
    target: str
    spec: ServerSpec
    credentials: CredentialContext
    shell: str = DEFAULT_SHELL


@dataclass(frozen=True, slots=True)
class RunResult:
    output: str
    success: bool


def build_shell_invocation(
    target: str,
    spec: ServerSpec,
    credentials: CredentialContext,
    shell: str = DEFAULT_SHELL,
) -> list[str]:
    """Return argv that exports the target, token and env_vars, then runs the script.

    Values are pasted into the command line as-is. They come from the
    operator's own config file, so quoting is left to whoever writes it.
    """
    exports = [f"export {TARGET_ENV_VAR}={target}; "]
    exports.extend(f"export {key}={value}; " for key, value in credentials.as_env().items())
    exports.extend(f"export {key}={value}; " for key, value in spec.env_vars.items())
    return [shell, "-c", "".join(exports) + spec.script]


def build_exec_env(
    target: str,
    spec: ServerSpec,
    credentials: CredentialContext,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    env = dict(os.environ if base_env is None else base_env)
    env[TARGET_ENV_VAR] = target
    env.update(credentials.as_env())
    env.update(spec.env_vars)
    return env


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def run_script(request: RunRequest, spawn: Spawn = subprocess.run) -> RunResult:
    """Run one script to completion. Blocks; call it from a worker thread."""
    spec = request.spec
    kwargs: dict[str, Any] = {
        "stdout": subprocess.PIPE,
        "stderr": subprocess.STDOUT,
        "check": False,
    }

    if spec.has_inline_script:
        argv = build_shell_invocation(request.target, spec, request.credentials, request.shell)
    elif spec.has_executable:
        argv = [spec.script_path, *spec.script_args]
        kwargs["env"] = build_exec_env(request.target, spec, request.credentials)
    else:
        logger.warning("No script configured for %s", request.target)
        return RunResult(NO_SCRIPT_MESSAGE, success=False)

    logger.info("Running script for %s", request.target)
    try:
        completed = spawn(argv, **kwargs)
    except OSError as exc:
        logger.warning("Script for %s failed to start: %s", request.target, exc)
        return RunResult(f"{exc}\n", success=False)

    output = _decode(completed.stdout)
    if completed.returncode != 0:
        logger.info("Script for %s exited with status %d", request.target, completed.returncode)
        return RunResult(f"{_describe_exit(completed.returncode)}\n{output}", success=False)
    return RunResult(output, success=True)


def _describe_exit(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status {returncode}"
