"""Services driving the activity loop."""

from .activity_loop import (
    ActivityLoop,
    IterationOutcome,
    IterationReport,
    PreflightError,
)
from .filler_generator import FillerGenerator, GeneratedFile
from .git_gateway import GitCommandError, GitGateway

__all__ = [
    "ActivityLoop",
    "IterationOutcome",
    "IterationReport",
    "PreflightError",
    "FillerGenerator",
    "GeneratedFile",
    "GitCommandError",
    "GitGateway",
]
