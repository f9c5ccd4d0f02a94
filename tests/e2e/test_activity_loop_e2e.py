"""End-to-end tests running the activity loop against real git.

Each test uses a fresh work tree on branch 'main' whose 'origin' remote is
a local bare repository, so pushes never leave the machine.
"""

import io
import re
import subprocess

import pytest
from click.testing import CliRunner
from rich.console import Console

from git_churn.cli import cli
from git_churn.config import ChurnConfig
from git_churn.services.activity_loop import (
    ActivityLoop,
    IterationOutcome,
    PreflightError,
)
from git_churn.services.git_gateway import GitGateway

pytestmark = pytest.mark.e2e

HEX64 = re.compile(r"^[0-9a-f]{64}$")
HEX128 = re.compile(r"^[0-9a-f]{128}$")


def git(*args, cwd):
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout.strip()


def make_loop(repo_dir, **overrides) -> ActivityLoop:
    return ActivityLoop(
        ChurnConfig(**overrides),
        GitGateway(repo_dir),
        console=Console(file=io.StringIO(), width=400),
    )


class TestActivityLoopE2E:
    def test_single_iteration_reaches_remote(self, repo_with_remote):
        repo_dir, remote_dir = repo_with_remote
        remote_commits_before = int(git("rev-list", "--count", "main", cwd=remote_dir))

        loop = make_loop(repo_dir)
        loop.preflight()
        report = loop.run_iteration()

        assert report.outcome is IterationOutcome.CONTINUE
        assert report.branch == "main"

        files = sorted((repo_dir / "assets").iterdir())
        assert 1 <= len(files) <= 11
        assert len(files) == report.files_created
        for path in files:
            assert 24576 <= path.stat().st_size <= 49152

        head_message = git("log", "-1", "--format=%s", cwd=repo_dir)
        assert head_message == report.commit_message
        assert HEX64.match(head_message)

        remote_commits_after = int(git("rev-list", "--count", "main", cwd=remote_dir))
        assert remote_commits_after == remote_commits_before + 1
        assert git("rev-parse", "main", cwd=remote_dir) == git(
            "rev-parse", "HEAD", cwd=repo_dir
        )

        assert 1 <= report.tags_created <= 7
        remote_tags = set(git("tag", cwd=remote_dir).split())
        assert remote_tags == set(report.tags)
        assert all(HEX128.match(tag) for tag in remote_tags)
        assert report.tags_pushed

    def test_preflight_rejects_missing_remote(self, repo_with_remote):
        repo_dir, _ = repo_with_remote
        with pytest.raises(PreflightError):
            make_loop(repo_dir, remote_name="upstream").preflight()

    def test_detached_head_stops_loop(self, repo_with_remote):
        repo_dir, remote_dir = repo_with_remote
        git("checkout", "--detach", cwd=repo_dir)

        loop = make_loop(repo_dir)
        iterations = loop.run(max_iterations=3)

        assert iterations == 1
        assert git("tag", cwd=remote_dir) == ""

    def test_push_failure_is_recoverable(self, repo_with_remote, tmp_path):
        repo_dir, _ = repo_with_remote
        git("remote", "set-url", "origin", str(tmp_path / "gone.git"), cwd=repo_dir)

        loop = make_loop(repo_dir)
        report = loop.run_iteration()

        assert report.outcome is IterationOutcome.CONTINUE
        assert not report.commit_pushed
        assert git("tag", cwd=repo_dir) == ""

    def test_cli_runs_bounded_loop(self, repo_with_remote):
        repo_dir, remote_dir = repo_with_remote

        result = CliRunner().invoke(
            cli, ["--path", str(repo_dir), "--max-iterations", "2"]
        )

        assert result.exit_code == 0, result.output
        assert result.output.count("Starting new iteration") == 2
        assert int(git("rev-list", "--count", "main", cwd=remote_dir)) == 3
        assert (repo_dir / ".git-churn").is_dir()
