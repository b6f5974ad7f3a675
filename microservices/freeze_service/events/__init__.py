"""
Freeze Service Events
"""

from .handlers import get_event_handlers
from .models import FreezeEventType, FreezeSubscribedEventType

__all__ = [
    "get_event_handlers",
    "FreezeEventType",
    "FreezeSubscribedEventType",
]
