"""
Logging setup.

Configures loguru sinks for the API and worker processes.
"""

import sys
from pathlib import Path

from loguru import logger

from app.config.settings import settings


def setup_logging(component: str = "api") -> None:
    """
    Configure logger with stderr output and a rotating file sink.

    Args:
        component: Process name used for the log file (api, worker)
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / f"{component}.log",
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
    )

    logger.info(f"Logging configured for {component} ({settings.environment})")
