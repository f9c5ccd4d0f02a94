"""
Centralized git command runner with dubious ownership handling.

Every git invocation made by git-churn goes through ``run_git_command`` so
that the "dubious ownership" error (repository owned by another user, e.g.
under sudo, Docker or CI) never masquerades as a missing repository.
"""

import os
import subprocess
from pathlib import Path
from typing import List, Dict, Optional


def get_git_environment(repo_dir: Path) -> Dict[str, str]:
    """
    Get environment variables for git commands to handle dubious ownership.

    ``safe.directory`` is injected as ``GIT_CONFIG_KEY_0``. Entries the caller
    already passes through ``GIT_CONFIG_COUNT`` (CI credentials, extra HTTP
    headers) are moved up one index so none of them is lost.

    Args:
        repo_dir: Path to the repository directory

    Returns:
        Dictionary of environment variables for git commands
    """
    env = os.environ.copy()

    try:
        inherited = int(os.environ.get("GIT_CONFIG_COUNT", "0"))
    except ValueError:
        inherited = 0

    for idx in range(inherited - 1, -1, -1):
        key = os.environ.get(f"GIT_CONFIG_KEY_{idx}")
        if key is None:
            env.pop(f"GIT_CONFIG_KEY_{idx + 1}", None)
            env.pop(f"GIT_CONFIG_VALUE_{idx + 1}", None)
            continue
        env[f"GIT_CONFIG_KEY_{idx + 1}"] = key
        env[f"GIT_CONFIG_VALUE_{idx + 1}"] = os.environ.get(
            f"GIT_CONFIG_VALUE_{idx}", ""
        )

    env["GIT_CONFIG_KEY_0"] = "safe.directory"
    env["GIT_CONFIG_VALUE_0"] = str(repo_dir.resolve())
    env["GIT_CONFIG_COUNT"] = str(inherited + 1)

    return env


def run_git_command(
    cmd: List[str],
    cwd: Path,
    check: bool = True,
    capture_output: bool = True,
    text: bool = True,
    timeout: Optional[float] = None,
    **kwargs,
) -> subprocess.CompletedProcess:
    """
    Run a git command with proper environment handling for dubious ownership.

    Args:
        cmd: Git command as a list (e.g., ["git", "status"])
        cwd: Working directory for the command
        check: Whether to raise CalledProcessError on non-zero exit
        capture_output: Whether to capture stdout and stderr
        text: Whether to decode output as text
        timeout: Optional timeout in seconds
        **kwargs: Additional arguments to pass to subprocess.run

    Returns:
        CompletedProcess instance with the command result

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
        subprocess.TimeoutExpired: If timeout is exceeded
        FileNotFoundError: If the git executable is not installed
    """
    if not cmd or cmd[0] != "git":
        raise ValueError("Command must start with 'git'")

    env = get_git_environment(cwd)

    if "env" in kwargs:
        env.update(kwargs.pop("env"))

    return subprocess.run(
        cmd,
        cwd=cwd,
        check=check,
        capture_output=capture_output,
        text=text,
        timeout=timeout,
        env=env,
        **kwargs,
    )
