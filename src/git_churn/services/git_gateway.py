"""
Git gateway for the activity loop.

All repository state (working tree, index, refs) is mutated through this
one object. Calls are synchronous and strictly sequential: each method
blocks until its git process exits.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ..utils.exception_logger import ExceptionLogger
from ..utils.git_runner import run_git_command

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """Exception raised when a git invocation exits non-zero or cannot start."""

    def __init__(
        self,
        message: str,
        command: List[str],
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class GitGateway:
    """Thin wrapper exposing the git CLI contract used by the activity loop."""

    def __init__(self, repo_dir: Path, timeout: Optional[float] = None):
        """Initialize the gateway.

        Args:
            repo_dir: Directory every git command runs in
            timeout: Optional per-command timeout in seconds
        """
        self.repo_dir = Path(repo_dir)
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        """Run ``git <args>`` and return its stripped stdout.

        Raises:
            GitCommandError: On non-zero exit, timeout, or missing git binary
        """
        cmd = ["git", *args]
        logger.debug("Running %s in %s", " ".join(cmd), self.repo_dir)
        try:
            return self._invoke(cmd)
        except GitCommandError as error:
            self._record_failure(error)
            raise

    def _invoke(self, cmd: List[str]) -> str:
        try:
            result = run_git_command(
                cmd, cwd=self.repo_dir, check=True, timeout=self.timeout
            )
        except subprocess.CalledProcessError as e:
            raise GitCommandError(
                f"{' '.join(cmd)} exited with status {e.returncode}",
                command=cmd,
                returncode=e.returncode,
                stderr=(e.stderr or "").strip(),
            ) from e
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(
                f"{' '.join(cmd)} timed out after {self.timeout}s", command=cmd
            ) from e
        except OSError as e:
            # git not installed, or repo_dir vanished
            raise GitCommandError(
                f"Could not run {' '.join(cmd)}: {e}", command=cmd
            ) from e
        return str(result.stdout).strip()

    def _record_failure(self, error: GitCommandError) -> None:
        exception_logger = ExceptionLogger.get_instance()
        if exception_logger is None:
            return
        exception_logger.log_exception(
            error,
            context={
                "git_command": " ".join(error.command),
                "cwd": str(self.repo_dir),
                "returncode": error.returncode,
                "stderr": error.stderr,
                "cause": type(error.__cause__).__name__,
            },
        )

    def is_inside_work_tree(self) -> bool:
        """Return True if the gateway directory is inside a git working tree."""
        try:
            return self._run("rev-parse", "--is-inside-work-tree") == "true"
        except GitCommandError:
            return False

    def remote_url(self, remote: str) -> str:
        """Return the URL registered for ``remote``.

        Raises:
            GitCommandError: If the remote is not registered
        """
        return self._run("remote", "get-url", remote)

    def add(self, path: str) -> None:
        self._run("add", path)

    def commit(self, message: str) -> None:
        self._run("commit", "-m", message)

    def current_branch(self) -> str:
        """Return the current branch name, or "" on a detached HEAD."""
        return self._run("branch", "--show-current")

    def push(self, remote: str, branch: str) -> None:
        self._run("push", remote, branch)

    def tag(self, name: str) -> None:
        self._run("tag", name)

    def push_tags(self, remote: str) -> None:
        self._run("push", remote, "--tags")

    def status_porcelain(self) -> str:
        return self._run("status", "--porcelain")
