"""Logger setup.

One stdout sink, restricted to omnitea's own modules so that library chatter
(discord.py, httpx, ...) stays out of the log.
"""

import sys

from loguru import logger

LOG_FORMAT = "[{time:YYYY-MM-DD}][{time:HH:mm:ss}][{name}][{level}] {message}"

LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level: str = "DEBUG", sink=None) -> int:
    """Replace loguru's default handler with omnitea's and return the handler id."""
    logger.remove()
    return logger.add(
        sink or sys.stdout,
        format=LOG_FORMAT,
        level=level.upper(),
        filter="omnitea",
        colorize=False,
    )
