"""Buffer trim policy: keep the newest half once the buffer reaches its ceiling."""

import logging

from logferry.models import BufferedLog

logger = logging.getLogger(__name__)


def estimate_size(serialized: str) -> int:
    """Approximate on-disk size in bytes of a serialized buffer."""
    return len(serialized.encode("utf-8"))


def needs_trim(serialized: str, ceiling: int) -> bool:
    return estimate_size(serialized) >= ceiling


def trim(buffer: BufferedLog) -> BufferedLog:
    """Drop the oldest entries, keeping the newest ceil(N/2) in order.

    No exceptions by age or severity.
    """
    keep = (len(buffer) + 1) // 2
    trimmed = buffer.newest(keep)
    logger.info("Trimmed local buffer from %d to %d entries", len(buffer), len(trimmed))
    return trimmed
