# medintake/core/logging_config.py
"""Logging configuration shared by the API and the workflow engine"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from medintake.core.config import Settings, settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = 'medintake.log'

# Third-party loggers that only matter at WARNING and above
QUIET_LOGGERS = ("uvicorn.access", "asyncio", "httpx")


def _has_console_handler(root_logger: logging.Logger) -> bool:
    return any(
        type(h) is logging.StreamHandler for h in root_logger.handlers
    )


def _has_file_handler(root_logger: logging.Logger, log_file: Path) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == target
        for h in root_logger.handlers
    )


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    """
    Configure the root logger from settings: LOG_LEVEL sets the level,
    records go to the console and to a rotating file under LOG_DIR.
    Safe to call more than once; handlers are only attached once.
    """
    config = config or settings
    log_dir = Path(config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(config.LOG_LEVEL)
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    if not _has_console_handler(root_logger):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # 5 MB per file, 5 backups
    log_file = log_dir / LOG_FILE_NAME
    if not _has_file_handler(root_logger, log_file):
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured at {config.LOG_LEVEL}, writing to {log_file}")
    return root_logger
