"""
Root conftest.py - Global configuration for all test layers.

Test Layers:
    - component/  : Service tests (in-memory repositories, mocked NATS and HTTP)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)


# =============================================================================
# Test Configuration
# =============================================================================

class TestConfig:
    """Centralized test configuration"""

    __test__ = False

    # Service port registry
    SERVICES = {
        "credit_service": 8260,
        "membership_service": 8261,
        "freeze_service": 8262,
        "waitlist_service": 8263,
    }

    BASE_URL = os.getenv("TEST_BASE_URL", "http://localhost")

    @classmethod
    def get_service_url(cls, service_name: str) -> str:
        return f"{cls.BASE_URL}:{cls.SERVICES[service_name]}"


@pytest.fixture(scope="session")
def test_config() -> TestConfig:
    return TestConfig()


def pytest_configure(config):
    """Register markers shared by every layer"""
    config.addinivalue_line("markers", "component: Component tests")
    config.addinivalue_line("markers", "unit: Unit tests")
