"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (NATS, HTTP collaborators, time).
"""

from .client_mocks import MockAccountClient, MockNotificationClient
from .clock_mock import FixedClock
from .nats_mock import MockEventBus

__all__ = [
    'MockEventBus',
    'FixedClock',
    'MockAccountClient',
    'MockNotificationClient',
]
