"""Logging configuration."""

import sys

from loguru import logger

from agent_gateway.config import Settings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | {name}:{function} - {message}"


def setup_logger(settings: Settings | None = None) -> None:
    """Configure the application logger.

    Console output goes to stderr so NDJSON written to stdout stays parseable.
    Provider calls run in worker threads, hence ``enqueue`` on the file sink
    and the thread name in its format.
    """
    settings = settings or get_settings()

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=settings.log_level)

    if settings.log_file:
        logger.add(
            settings.log_file,
            format=FILE_FORMAT,
            level=settings.log_level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,
        )
