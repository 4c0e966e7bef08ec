"""Process-wide logging setup for SyncDev client entry points."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from .configuration import LoggingConfig


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Install file and console handlers on the root logger.

    File handler: everything at ``config.level`` into a rotating log file
    (only when ``config.log_file`` is set).
    Console handler: ``config.console_level`` and above.

    Returns:
        The root logger
    """
    file_level = getattr(logging, config.level)
    console_level = getattr(logging, config.console_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(file_level, console_level))

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if config.log_file:
        log_path = Path(config.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S"
    ))
    root_logger.addHandler(console_handler)

    # Notification fan-out is chatty at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    root_logger.debug(f"Logging configured: file={config.log_file}, console={config.console_level}+")
    return root_logger
