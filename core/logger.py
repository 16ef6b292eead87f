#!/usr/bin/env python3
"""
Service Logger Setup

Configures the named service logger from LoggingConfig. Modules keep using
logging.getLogger(__name__); records propagate to the root handlers set here.
"""

import logging
import sys
from typing import Optional

from .config.logging_config import LoggingConfig


def setup_service_logger(
    service_name: str,
    config: Optional[LoggingConfig] = None
) -> logging.Logger:
    """
    Configure logging for a service process

    Args:
        service_name: Logger name for service-level messages
        config: Logging configuration (defaults to LoggingConfig.from_env())

    Returns:
        The configured service logger
    """
    config = config or LoggingConfig.from_env()
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(config.log_format)

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid stacking handlers when the app module is imported more than once
    for handler in list(root.handlers):
        if getattr(handler, "_service_handler", False):
            root.removeHandler(handler)

    handlers = []
    if config.enable_console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._service_handler = True
        root.addHandler(handler)

    service_logger = logging.getLogger(service_name)
    service_logger.setLevel(level)
    return service_logger


__all__ = ["setup_service_logger"]
