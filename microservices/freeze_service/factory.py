"""
Freeze Service Factory

Builds FreezeService with its concrete repository.
"""

import logging
from typing import Optional

from core.clock import SystemClock
from core.config_manager import ConfigManager

from .freeze_repository import FreezeRepository
from .freeze_service import FreezeService

logger = logging.getLogger(__name__)


def create_freeze_service(
    config: Optional[ConfigManager] = None,
    event_bus=None,
) -> FreezeService:
    """
    Create FreezeService with real dependencies

    Args:
        config: Optional config manager (creates default if not provided)
        event_bus: Optional event bus for event publishing
    """
    if config is None:
        config = ConfigManager("freeze_service")

    repository = FreezeRepository(config=config)

    logger.info("FreezeService created with real dependencies")

    return FreezeService(
        repository=repository,
        event_bus=event_bus,
        clock=SystemClock(),
    )


__all__ = ["create_freeze_service"]
