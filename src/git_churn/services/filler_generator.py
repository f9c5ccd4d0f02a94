"""
Filler file generation.

Writes a random number of files of random size and random content into the
asset directory. File names combine a nanosecond timestamp with a random
token, which makes collisions within a run practically impossible without
checking for them.
"""

import logging
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

KIB = 1024
MAX_TOKEN = 32767


@dataclass
class GeneratedFile:
    """A filler file written during one iteration."""

    path: Path
    size: int

    @property
    def size_kb(self) -> int:
        return self.size // KIB


class FillerGenerator:
    """Creates batches of random filler files."""

    def __init__(
        self,
        assets_dir: Path,
        min_files: int = 1,
        max_files: int = 11,
        min_file_kb: int = 24,
        max_file_kb: int = 48,
        rng: Optional[random.Random] = None,
        byte_source: Callable[[int], bytes] = os.urandom,
        clock: Callable[[], int] = time.time_ns,
    ):
        self.assets_dir = Path(assets_dir)
        self.min_files = min_files
        self.max_files = max_files
        self.min_file_kb = min_file_kb
        self.max_file_kb = max_file_kb
        self.rng = rng or random.Random()
        self.byte_source = byte_source
        self.clock = clock

    def ensure_directory(self) -> None:
        """Create the asset directory (and parents) if missing.

        Raises:
            OSError: If the directory cannot be created
        """
        self.assets_dir.mkdir(parents=True, exist_ok=True)

    def draw_file_count(self) -> int:
        return self.rng.randint(self.min_files, self.max_files)

    def draw_file_size(self) -> int:
        """Draw a file size in bytes, a whole number of KiB."""
        return self.rng.randint(self.min_file_kb, self.max_file_kb) * KIB

    def make_filename(self) -> Path:
        token = self.rng.randint(0, MAX_TOKEN)
        return self.assets_dir / f"file_{self.clock()}_{token}.txt"

    def write_file(self, size: int) -> GeneratedFile:
        """Write one file of ``size`` random bytes.

        Raises:
            OSError: If the file cannot be written
        """
        path = self.make_filename()
        with open(path, "wb") as f:
            f.write(self.byte_source(size))
        logger.debug("Wrote %d bytes to %s", size, path)
        return GeneratedFile(path=path, size=size)
