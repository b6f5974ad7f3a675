"""
Component Test Layer Configuration

Services run against in-memory repositories and the mocks in
tests/component/mocks; no database, NATS or HTTP.

Usage:
    pytest tests/component -v
    pytest tests/component/freeze -v
"""
import os
import sys
from datetime import datetime, timezone

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ["NATS_ENABLED"] = "false"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tests.component.mocks import (
    FixedClock,
    MockAccountClient,
    MockEventBus,
    MockNotificationClient,
)


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# Event Bus Mocks
# =============================================================================

@pytest.fixture
def mock_event_bus() -> MockEventBus:
    """Mock NATS event bus"""
    return MockEventBus()


# =============================================================================
# Clock
# =============================================================================

@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock pinned to 2025-03-15 09:00 UTC"""
    return FixedClock(datetime(2025, 3, 15, 9, 0, tzinfo=timezone.utc))


# =============================================================================
# HTTP Collaborator Mocks
# =============================================================================

@pytest.fixture
def mock_account_client() -> MockAccountClient:
    return MockAccountClient()


@pytest.fixture
def mock_notification_client() -> MockNotificationClient:
    return MockNotificationClient()
