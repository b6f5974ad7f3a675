"""
Waitlist Service Factory

Builds WaitlistService with its repository and HTTP clients.
"""

import logging
from typing import Optional

from core.clock import SystemClock
from core.config_manager import ConfigManager

from .clients import AccountClient, NotificationClient
from .waitlist_repository import WaitlistRepository
from .waitlist_service import WaitlistService

logger = logging.getLogger(__name__)


def create_waitlist_service(
    config: Optional[ConfigManager] = None,
    event_bus=None,
) -> WaitlistService:
    """
    Create WaitlistService with all real dependencies

    Args:
        config: Optional config manager (creates default if not provided)
        event_bus: Optional event bus for event publishing
    """
    if config is None:
        config = ConfigManager("waitlist_service")

    repository = WaitlistRepository(config=config)
    account_client = AccountClient(config=config)
    notification_client = NotificationClient(config=config)

    logger.info("WaitlistService created with real dependencies")

    return WaitlistService(
        repository=repository,
        account_client=account_client,
        notification_client=notification_client,
        event_bus=event_bus,
        clock=SystemClock(),
    )


__all__ = ["create_waitlist_service"]
