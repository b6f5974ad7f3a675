"""
Membership Service Events

Publishers for member lifecycle events and handlers for billing and freeze events.
"""

from .handlers import MembershipEventHandlers, get_event_handlers
from .models import MembershipEventType, MembershipSubscribedEventType

__all__ = [
    "MembershipEventHandlers",
    "get_event_handlers",
    "MembershipEventType",
    "MembershipSubscribedEventType",
]
