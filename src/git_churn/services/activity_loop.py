"""
Activity loop: the endless generate / commit / push / tag cycle.

Each iteration is a best-effort unit of work. Any failure other than a
missing branch is reported and the loop simply starts the next iteration,
which doubles as the retry mechanism. A missing branch (detached HEAD) is
fatal because nothing can be pushed without one.
"""

import logging
import os
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape

from ..config import ChurnConfig
from . import naming
from .filler_generator import FillerGenerator, GeneratedFile
from .git_gateway import GitCommandError, GitGateway

logger = logging.getLogger(__name__)


class IterationOutcome(Enum):
    """What the loop should do after an iteration."""

    CONTINUE = "continue"
    FATAL = "fatal"


@dataclass
class IterationReport:
    """Record of what a single iteration accomplished."""

    outcome: IterationOutcome = IterationOutcome.CONTINUE
    reason: str = ""
    files: List[GeneratedFile] = field(default_factory=list)
    commit_message: Optional[str] = None
    branch: Optional[str] = None
    commit_pushed: bool = False
    tags_requested: int = 0
    tags: List[str] = field(default_factory=list)
    tags_pushed: bool = False

    @property
    def files_created(self) -> int:
        return len(self.files)

    @property
    def tags_created(self) -> int:
        return len(self.tags)

    def stop(self, outcome: IterationOutcome, reason: str) -> "IterationReport":
        self.outcome = outcome
        self.reason = reason
        return self


class PreflightError(Exception):
    """Exception raised when the loop cannot start in the given directory."""


class ActivityLoop:
    """Drives the activity cycle against a single repository."""

    def __init__(
        self,
        config: ChurnConfig,
        gateway: GitGateway,
        generator: Optional[FillerGenerator] = None,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
        digit_source: Callable[[int], bytes] = os.urandom,
        clock: Callable[[], int] = time.time_ns,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the loop.

        Args:
            config: Loop configuration
            gateway: Git gateway bound to the repository
            generator: Filler generator (built from ``config`` when omitted)
            console: Console receiving progress lines
            rng: Random source for tag counts
            digit_source: Random byte source for tag seeds
            clock: Nanosecond clock used for commit timestamps
            sleep: Sleep function used for ``iteration_delay``
        """
        self.config = config
        self.gateway = gateway
        self.rng = rng or random.Random()
        if generator is None:
            assets_dir = Path(config.assets_dir)
            if not assets_dir.is_absolute():
                assets_dir = gateway.repo_dir / assets_dir
            generator = FillerGenerator(
                assets_dir,
                min_files=config.min_files,
                max_files=config.max_files,
                min_file_kb=config.min_file_kb,
                max_file_kb=config.max_file_kb,
            )
        self.generator = generator
        self.console = console or Console()
        self.digit_source = digit_source
        self.clock = clock
        self.sleep = sleep

    @property
    def remote(self) -> str:
        return self.config.remote_name

    def preflight(self) -> None:
        """Verify the repository and remote before the first iteration.

        Raises:
            PreflightError: Outside a git working tree, or remote not registered
        """
        if not self.gateway.is_inside_work_tree():
            raise PreflightError(
                "Not inside a Git work tree. Please run git-churn in a Git repository."
            )
        try:
            url = self.gateway.remote_url(self.remote)
        except GitCommandError:
            raise PreflightError(
                f"Remote '{self.remote}' not found. "
                f"Please add a remote named '{self.remote}'."
            )
        logger.debug("Remote %s -> %s", self.remote, url)

    def run(self, max_iterations: Optional[int] = None) -> int:
        """Run iterations until a fatal outcome or ``max_iterations``.

        Returns:
            Number of iterations executed
        """
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            iterations += 1
            report = self.run_iteration()
            if report.outcome is IterationOutcome.FATAL:
                logger.error("Stopping after fatal iteration: %s", report.reason)
                break
            if self.config.iteration_delay:
                self.sleep(self.config.iteration_delay)
        return iterations

    def run_iteration(self) -> IterationReport:
        """Execute one generate / commit / push / tag cycle."""
        report = IterationReport()
        self.console.print(
            f"--- {time.strftime('%a %b %d %H:%M:%S %Z %Y')} - Starting new iteration ---"
        )

        try:
            self.generator.ensure_directory()
        except OSError as e:
            self.console.print(
                "Error: Could not create directory "
                f"{escape(str(self.generator.assets_dir))}: {escape(str(e))}. "
                "Skipping iteration.",
                style="red",
            )
            return report.stop(IterationOutcome.CONTINUE, "directory creation failed")

        report.files = self._create_files()
        if not report.files:
            self.console.print(
                "No files were successfully created. Skipping commit and push.",
                style="yellow",
            )
            return report.stop(IterationOutcome.CONTINUE, "no files created")

        self.console.print("Adding files to git...")
        try:
            self.gateway.add(f"{self.config.assets_dir}/")
        except GitCommandError as e:
            self.console.print(
                f"Error: git add failed ({escape(str(e))}). Skipping commit and push.",
                style="red",
            )
            return report.stop(IterationOutcome.CONTINUE, "staging failed")

        report.commit_message = naming.commit_message(
            naming.millisecond_timestamp(self.clock)
        )
        self.console.print(f"Committing with message: {report.commit_message}")
        try:
            self.gateway.commit(report.commit_message)
        except GitCommandError as e:
            self.console.print(
                f"Warning: git commit failed ({escape(str(e))}). Skipping push.",
                style="yellow",
            )
            self._diagnose_commit_failure()
            return report.stop(IterationOutcome.CONTINUE, "commit failed")

        try:
            report.branch = self.gateway.current_branch() or None
        except GitCommandError as e:
            logger.error("Branch query failed: %s", e)
        if not report.branch:
            self.console.print(
                "Error: Not on a branch. Cannot push commits or tags. Breaking loop.",
                style="bold red",
            )
            return report.stop(IterationOutcome.FATAL, "not on a branch")

        self.console.print(
            f"Pushing commit to {escape(self.remote)}/{escape(report.branch)}..."
        )
        try:
            self.gateway.push(self.remote, report.branch)
        except GitCommandError as e:
            self.console.print(
                f"Error: git push failed ({escape(str(e))}). Check network, permissions, "
                "conflicts, etc. Continuing loop.",
                style="red",
            )
            return report.stop(IterationOutcome.CONTINUE, "push failed")
        report.commit_pushed = True

        report.tags_requested = self.rng.randint(self.config.min_tags, self.config.max_tags)
        report.tags = self._create_tags(report.tags_requested)
        report.tags_pushed = self._push_tags(report.tags)

        self.console.print("--- Iteration finished ---")
        return report

    def _create_files(self) -> List[GeneratedFile]:
        count = self.generator.draw_file_count()
        self.console.print(f"Creating {count} random files...")

        created: List[GeneratedFile] = []
        for _ in range(count):
            size = self.generator.draw_file_size()
            try:
                generated = self.generator.write_file(size)
            except OSError as e:
                self.console.print(
                    f"  Warning: Could not create file: {escape(str(e))}. Skipping it.",
                    style="yellow",
                )
                continue
            self.console.print(
                f"  Created {escape(str(generated.path))} ({generated.size_kb} KB)"
            )
            created.append(generated)
        return created

    def _diagnose_commit_failure(self) -> None:
        try:
            status = self.gateway.status_porcelain()
        except GitCommandError as e:
            logger.warning("Could not inspect git status: %s", e)
            return
        if status:
            self.console.print(
                "  ... git status indicates changes, but commit failed. "
                "Investigate manually."
            )
        else:
            self.console.print(
                "  ... git status indicates nothing to commit. "
                "This shouldn't happen if files were created."
            )

    def _create_tags(self, count: int) -> List[str]:
        self.console.print(f"Creating {count} random tags...")

        created: List[str] = []
        for _ in range(count):
            seed = naming.random_digits(self.config.tag_digits, self.digit_source)
            if not seed:
                self.console.print(
                    "Warning: Could not generate random digits for tag name. "
                    "Skipping tag creation.",
                    style="yellow",
                )
                continue
            name = naming.tag_name(seed)
            self.console.print(f"  Creating tag: {name}")
            try:
                self.gateway.tag(name)
            except GitCommandError as e:
                self.console.print(
                    f"  Warning: Could not create local tag {name} "
                    f"(maybe already exists?): {escape(str(e))}. Skipping.",
                    style="yellow",
                )
                continue
            created.append(name)
        return created

    def _push_tags(self, tags: List[str]) -> bool:
        if not tags:
            self.console.print(
                "No new tags were successfully created locally this iteration to push."
            )
            return False

        self.console.print("Pushing tags...")
        try:
            self.gateway.push_tags(self.remote)
        except GitCommandError as e:
            self.console.print(
                f"Error: git push --tags failed ({escape(str(e))}). Check network, permissions, "
                "conflicts, etc. Continuing loop.",
                style="red",
            )
            return False
        self.console.print("Tags pushed successfully.", style="green")
        return True
