# mlshelf/core/log_config.py
import os
import sys

from loguru import logger

from .config import Settings


def configure_logging(settings: Settings) -> None:
    """Route loguru to stderr and, when LOG_DIR is set, to LOG_DIR/app.log."""
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)

    if settings.LOG_DIR:
        log_dir = os.path.abspath(settings.LOG_DIR)
        os.makedirs(log_dir, exist_ok=True)
        logger.add(
            os.path.join(log_dir, "app.log"),
            level=settings.LOG_LEVEL,
            rotation="10 MB",
            retention="10 days",
        )
