"""
Credit Service Factory

Factory for creating CreditService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.clock import SystemClock
from core.config_manager import ConfigManager

from .credit_repository import CreditRepository
from .credit_service import CreditService

logger = logging.getLogger(__name__)


def create_credit_service(
    config: Optional[ConfigManager] = None,
    event_bus=None,
) -> CreditService:
    """
    Create CreditService with all real dependencies

    Args:
        config: Optional config manager (creates default if not provided)
        event_bus: Optional event bus for event publishing

    Returns:
        Fully initialized CreditService instance
    """
    if config is None:
        config = ConfigManager("credit_service")

    repository = CreditRepository(config=config)

    return CreditService(
        repository=repository,
        event_bus=event_bus,
        clock=SystemClock(),
    )


__all__ = ["create_credit_service"]
