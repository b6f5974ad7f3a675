"""
Waitlist Service Events
"""

from .handlers import get_event_handlers
from .models import WaitlistEventType, WaitlistSubscribedEventType

__all__ = ["get_event_handlers", "WaitlistEventType", "WaitlistSubscribedEventType"]
