"""
Logging Setup - Root logger configuration for the CLI and host applications.

Library modules only create module-level loggers; handlers are installed
here, once, by whoever owns the process.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from mediahub.core.config_schemas import LoggingSettings


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_NOISY_LOGGERS = ("aiohttp", "urllib3", "asyncio")


def setup_logging(settings: Optional[LoggingSettings] = None, debug: bool = False) -> None:
    """
    Set up application logging.

    Args:
        settings: Level and optional rotating log file; defaults apply when omitted
        debug: Force DEBUG level and keep third-party loggers verbose
    """
    settings = settings or LoggingSettings()
    level = logging.DEBUG if debug else getattr(logging, settings.level)

    handlers = [logging.StreamHandler(sys.stderr)]
    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_path,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        ))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    # Reduce noise from third-party libraries
    if not debug:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["setup_logging", "LOG_FORMAT"]
