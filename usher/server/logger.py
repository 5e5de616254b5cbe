"""
Logging setup

loguru based, configured once on import:
- one log format for the whole server
- level, console and file output driven by environment variables
"""
import os
import sys
from pathlib import Path
from loguru import logger

# drop loguru's default handler
logger.remove()

LOG_LEVEL = os.getenv("USHER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("USHER_LOG_FORMAT",
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
LOG_TO_CONSOLE = os.getenv("USHER_LOG_TO_CONSOLE", "true").lower() == "true"
LOG_TO_FILE = os.getenv("USHER_LOG_TO_FILE", "false").lower() == "true"
LOG_FILE_PATH = os.getenv("USHER_LOG_FILE_PATH", "logs/usher-server.log")

logger.configure(extra={"name": "usher"})


def setup_logger():
    """Attach the console and file sinks"""

    if LOG_TO_CONSOLE:
        logger.add(
            sys.stdout,
            format=LOG_FORMAT,
            level=LOG_LEVEL,
            colorize=True,
            backtrace=True,
            diagnose=False
        )

    if LOG_TO_FILE:
        log_file = Path(LOG_FILE_PATH)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            LOG_FILE_PATH,
            format=LOG_FORMAT,
            level=LOG_LEVEL,
            rotation="10 MB",
            retention="30 days",
            compression="zip",
            backtrace=True,
            diagnose=False
        )

    logger.debug(f"Logging ready - level: {LOG_LEVEL}, console: {LOG_TO_CONSOLE}, file: {LOG_TO_FILE}")


def get_logger(name: str = None):
    """
    Get a logger bound to a component name

    Args:
        name: component name shown in every record

    Returns:
        loguru.Logger: the bound logger
    """
    if name:
        return logger.bind(name=name)
    return logger


setup_logger()

__all__ = ["logger", "get_logger", "setup_logger"]
