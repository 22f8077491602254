"""Logger configuration for the harvest planner board.

Board modules log through loguru with structured keyword context
(``plan_id``, ``dest_day_key`` ...). Nothing is configured on import; the
host application calls ``setup_logger`` once at startup.
"""

import sys
from pathlib import Path

from loguru import logger

from harvest_board.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> {extra}"
)


def setup_logger(
    level: str | None = None,
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> list[int]:
    """Configure loguru with console output and an optional JSON-lines file.

    Args:
        level: Logging level. Defaults to LOG_LEVEL from settings.
        log_file: Path of the file sink. Defaults to HARVEST_BOARD_LOG_FILE; empty disables it.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")

    Returns:
        Handler ids of the sinks that were added
    """
    level = (level or settings.log_level).upper()
    log_file = settings.log_file if log_file is None else log_file

    logger.remove()
    handler_ids = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # Structured context travels in record["extra"]; serialize keeps it queryable
        handler_ids.append(
            logger.add(
                log_path,
                level=level,
                serialize=True,
                rotation=rotation,
                retention=retention,
            )
        )

    logger.info("Logger initialized", level=level, log_file=log_file or None)
    return handler_ids
