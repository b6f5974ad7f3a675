"""
Waitlist Service Clients
"""

from .account_client import AccountClient
from .notification_client import NotificationClient

__all__ = ["AccountClient", "NotificationClient"]
