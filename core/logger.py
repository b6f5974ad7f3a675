"""
Service Logger Setup

Configures stdlib logging for a microservice process.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("credit_service", level="INFO")
"""

import logging
import sys
from typing import Optional

from .config import LoggingConfig

_configured = False


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure root logging once per process and return the service logger.

    Args:
        service_name: Logger name for the service
        level: Log level override (defaults to LoggingConfig.log_level)
        config: Optional LoggingConfig (loaded from env if omitted)

    Returns:
        Logger for the service
    """
    global _configured

    config = config or LoggingConfig.from_env()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)

    if not _configured:
        formatter = logging.Formatter(config.log_format)
        root = logging.getLogger()
        root.setLevel(log_level)

        if config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        # Quiet noisy libraries
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("apscheduler").setLevel(logging.WARNING)
        _configured = True

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)
    return logger


__all__ = ["setup_service_logger"]
