"""
Logger setup using loguru.

Logs go to stderr so that search results printed on stdout can be piped.
An optional rotating file sink mirrors them.
"""

import sys
from pathlib import Path
from typing import List, Optional
from loguru import logger

from rules_engine.config import settings
from rules_engine.exceptions import ConfigurationError

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def resolve_level(level: str) -> str:
    """Normalize a level name, rejecting names loguru does not know"""
    name = level.strip().upper()
    try:
        logger.level(name)
    except ValueError as e:
        raise ConfigurationError(f"Unknown log level: {level!r}") from e
    return name


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    rotation: str = "10 MB",
    retention: str = "1 week"
) -> List[int]:
    """
    Replace every loguru sink with the engine's console (and file) sinks.

    Args:
        level: Log level name, defaults to settings.log_level
        log_file: Optional log file, defaults to settings.log_file
        rotation: File rotation policy
        retention: File retention policy

    Returns:
        Ids of the added handlers

    Raises:
        ConfigurationError: If the level name is unknown
    """
    level = resolve_level(level or settings.log_level)
    log_file = log_file or settings.log_file

    logger.remove()
    handler_ids = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(logger.add(
            str(log_file),
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip"
        ))
        logger.debug(f"Logging to file: {log_file}")

    return handler_ids
