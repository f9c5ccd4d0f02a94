"""Commit message and tag name derivation."""

import hashlib
import logging
import os
import time
from typing import Callable

logger = logging.getLogger(__name__)

DIGITS = b"0123456789"
# Ten urandom "lines" worth of bytes; roughly 4% of random bytes are ASCII digits
RANDOM_CHUNK_SIZE = 4096


def millisecond_timestamp(clock: Callable[[], int] = time.time_ns) -> str:
    """Return the current Unix time in milliseconds as a decimal string.

    Falls back to whole seconds if the high resolution clock is unavailable.
    """
    try:
        return str(clock() // 1_000_000)
    except (OSError, OverflowError) as e:
        logger.warning(
            "Could not get millisecond timestamp (%s). Using second timestamp.", e
        )
        return str(int(time.time()))


def commit_message(timestamp: str) -> str:
    """SHA-256 hex digest of ``timestamp``: always 64 lowercase hex chars."""
    return hashlib.sha256(timestamp.encode("ascii")).hexdigest()


def random_digits(
    length: int = 24, source: Callable[[int], bytes] = os.urandom
) -> str:
    """Extract up to ``length`` decimal digits from a chunk of random bytes.

    Non-digit bytes are discarded, so the result may be shorter than
    ``length`` (or empty) when the chunk holds too few digits.
    """
    chunk = source(RANDOM_CHUNK_SIZE)
    digits = bytes(b for b in chunk if b in DIGITS)
    return digits[:length].decode("ascii")


def tag_name(seed: str) -> str:
    """SHA-512 hex digest of ``seed``: always 128 lowercase hex chars."""
    return hashlib.sha512(seed.encode("ascii")).hexdigest()
