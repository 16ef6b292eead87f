#!/usr/bin/env python3
"""
Core Module

Shared infrastructure for the order management API.

COMPONENTS:
    - config/: dataclass-based settings loaded from environment / env files
    - logger.py: service logger setup
    - auth_dependencies.py: FastAPI bearer-token dependency

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    settings = get_settings()
    logger = setup_service_logger(settings.service_name)
"""

__version__ = "1.0.0"
