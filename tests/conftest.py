"""
Shared pytest fixtures for git-churn tests.

Provides real git repositories wired to a local bare remote for the
end-to-end tests, and resets the error log singleton between tests.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Generator, Tuple

import pytest

from git_churn.utils.exception_logger import ExceptionLogger


def git(*args: str, cwd: Path) -> str:
    """Run a git command for test setup and return stripped stdout."""
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


@pytest.fixture(autouse=True)
def reset_exception_logger() -> Generator[None, None, None]:
    """Make sure every test starts without a global error log."""
    ExceptionLogger._instance = None
    yield
    ExceptionLogger._instance = None


@pytest.fixture
def git_available() -> None:
    if shutil.which("git") is None:
        pytest.skip("git executable not available")


@pytest.fixture
def repo_with_remote(tmp_path: Path, git_available) -> Tuple[Path, Path]:
    """A work tree on branch 'main' with a bare remote registered as 'origin'.

    Returns:
        Tuple of (work tree path, bare remote path)
    """
    remote_dir = tmp_path / "remote.git"
    repo_dir = tmp_path / "work"
    remote_dir.mkdir()
    repo_dir.mkdir()

    git("init", "--bare", cwd=remote_dir)
    git("init", cwd=repo_dir)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=repo_dir)
    git("config", "user.name", "Test", cwd=repo_dir)
    git("config", "user.email", "test@test.com", cwd=repo_dir)
    git("config", "commit.gpgsign", "false", cwd=repo_dir)
    git("config", "tag.gpgsign", "false", cwd=repo_dir)
    git("remote", "add", "origin", str(remote_dir), cwd=repo_dir)

    (repo_dir / "README.md").write_text("seed\n")
    git("add", "README.md", cwd=repo_dir)
    git("commit", "-m", "Initial commit", cwd=repo_dir)
    git("push", "origin", "main", cwd=repo_dir)

    return repo_dir, remote_dir
