#!/usr/bin/env python3
"""
Core Module for the Club Microservices

Shared infrastructure used by every service.

COMPONENTS:
    - config/: Configuration dataclasses (infra, service, logging)
    - config_manager.py: Per-service configuration access
    - logger.py: Service logger setup
    - postgres_client.py: asyncpg pool wrapper
    - nats_client.py: NATS JetStream event bus
    - clock.py: Injectable clock

USAGE:
    from core.config_manager import ConfigManager

    config = ConfigManager("credit_service")
"""

from .clock import Clock, SystemClock
from .config_manager import ConfigManager, Environment, create_config

__all__ = [
    "Clock",
    "SystemClock",
    "ConfigManager",
    "Environment",
    "create_config",
]

__version__ = "1.0.0"
