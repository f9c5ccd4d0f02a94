"""Configuration management for git-churn."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".git-churn"


class ChurnConfig(BaseModel):
    """Main configuration for the activity loop.

    Defaults reproduce the fixed behaviour of the loop: filler files go to
    ``./assets`` and everything is pushed to ``origin``.
    """

    assets_dir: Path = Field(
        default=Path("assets"),
        description="Directory (relative to the repository) where filler files are written",
    )
    remote_name: str = Field(
        default="origin", description="Name of the remote commits and tags are pushed to"
    )

    # Filler file generation
    min_files: int = Field(default=1, description="Minimum files created per iteration")
    max_files: int = Field(default=11, description="Maximum files created per iteration")
    min_file_kb: int = Field(default=24, description="Minimum filler file size in KiB")
    max_file_kb: int = Field(default=48, description="Maximum filler file size in KiB")

    # Tag generation
    min_tags: int = Field(default=1, description="Minimum tags created per iteration")
    max_tags: int = Field(default=7, description="Maximum tags created per iteration")
    tag_digits: int = Field(
        default=24, description="Length of the random numeric seed hashed into a tag name"
    )

    # Pacing
    iteration_delay: float = Field(
        default=0.0, description="Seconds to sleep between iterations (0 = no delay)"
    )
    git_timeout: Optional[float] = Field(
        default=None,
        description="Timeout in seconds for a single git invocation (None = wait forever)",
    )

    @field_validator("assets_dir", mode="before")
    @classmethod
    def convert_path(cls, v: Any) -> Path:
        """Convert string paths to Path objects."""
        if isinstance(v, str):
            return Path(v)
        if isinstance(v, Path):
            return v
        raise ValueError(f"Expected str or Path, got {type(v)}")

    @field_validator("remote_name")
    @classmethod
    def validate_remote_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("remote_name must not be empty")
        return v

    @field_validator(
        "min_files", "max_files", "min_file_kb", "max_file_kb", "min_tags", "max_tags", "tag_digits"
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be at least 1, got {v}")
        return v

    @field_validator("iteration_delay")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"iteration_delay must not be negative, got {v}")
        return v

    @model_validator(mode="after")
    def validate_ranges(self) -> "ChurnConfig":
        """Ensure every min/max pair describes a non-empty range."""
        for low, high in (
            ("min_files", "max_files"),
            ("min_file_kb", "max_file_kb"),
            ("min_tags", "max_tags"),
        ):
            if getattr(self, low) > getattr(self, high):
                raise ValueError(
                    f"{low} ({getattr(self, low)}) exceeds {high} ({getattr(self, high)})"
                )
        return self


class ConfigManager:
    """Manages configuration loading, saving, and validation."""

    DEFAULT_CONFIG_PATH = Path(CONFIG_DIR_NAME) / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[ChurnConfig] = None

    @classmethod
    def for_repository(cls, repo_dir: Path) -> "ConfigManager":
        """Create a ConfigManager pointing at ``<repo_dir>/.git-churn/config.json``."""
        return cls(repo_dir / CONFIG_DIR_NAME / "config.json")

    def load(self) -> ChurnConfig:
        """Load configuration from file, or fall back to defaults if it does not exist."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                self._config = ChurnConfig(**data)
            except Exception as e:
                raise ValueError(f"Failed to load config from {self.config_path}: {e}")
            logger.debug("Loaded configuration from %s", self.config_path)
        else:
            logger.debug("No config at %s, using defaults", self.config_path)
            self._config = ChurnConfig()

        return self._config

    def save(self, config: Optional[ChurnConfig] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump()
        config_dict["assets_dir"] = str(config.assets_dir)

        with open(self.config_path, "w") as f:
            json.dump(config_dict, f, indent=2)

    def create_default_config(self) -> ChurnConfig:
        """Write a default configuration file and return it."""
        config = ChurnConfig()
        self._config = config
        self.save()
        return config
