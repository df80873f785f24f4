from server_cli.runner.script_runner import (
    NO_SCRIPT_MESSAGE,
    TARGET_ENV_VAR,
    RunRequest,
    RunResult,
    build_exec_env,
    build_shell_invocation,
    run_script,
)


__all__ = [
    "NO_SCRIPT_MESSAGE",
    "TARGET_ENV_VAR",
    "RunRequest",
    "RunResult",
    "build_exec_env",
    "build_shell_invocation",
    "run_script",
]
