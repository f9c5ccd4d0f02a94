"""Error log for git-churn.

Recoverable failures never stop the activity loop, so the console line is
the only trace an operator sees unless the failure is also written here.
Each entry is a JSON document with:
- Timestamp
- Exception type, message and stack trace
- Command context (git command line, return code, stderr)
"""

import json
import os
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from ..config import CONFIG_DIR_NAME

ENTRY_SEPARATOR = "\n---\n"


class ExceptionLogger:
    """Process-wide error log writer.

    Log files live in ``<repo>/.git-churn/error_<timestamp>_<pid>.log``.
    """

    _instance: Optional["ExceptionLogger"] = None
    log_file_path: Optional[Path] = None

    def __init__(self, log_file_path: Path):
        self.log_file_path = log_file_path

    @classmethod
    def initialize(cls, repo_dir: Path) -> "ExceptionLogger":
        """Initialize the global error log (idempotent singleton).

        WARNING: If already initialized, the existing instance is returned.
        Tests should reset ``cls._instance = None`` when they need a fresh one.

        Args:
            repo_dir: Root of the repository the loop runs in

        Returns:
            Initialized ExceptionLogger instance
        """
        if cls._instance is not None:
            return cls._instance

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        pid = os.getpid()

        log_dir = repo_dir / CONFIG_DIR_NAME
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file_path = log_dir / f"error_{timestamp}_{pid}.log"
        instance = cls(log_file_path)
        cls._instance = instance

        log_file_path.touch()

        return instance

    @classmethod
    def get_instance(cls) -> Optional["ExceptionLogger"]:
        """Return the current instance, or None if not initialized."""
        return cls._instance

    def log_exception(
        self,
        exception: BaseException,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an exception with its context to the log file.

        Args:
            exception: The exception to log
            context: Additional context data to include in the entry
        """
        if not self.log_file_path:
            return

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "exception_type": type(exception).__name__,
            "exception_message": str(exception),
            "stack_trace": "".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            ),
            "context": context or {},
        }

        with open(self.log_file_path, "a") as f:
            f.write(json.dumps(log_entry, indent=2))
            f.write(ENTRY_SEPARATOR)
