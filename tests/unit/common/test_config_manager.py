"""
ConfigManager helpers - Unit Tests

Integer settings and env-first service discovery.
"""

import pytest

from core.config_manager import ConfigManager

pytestmark = [pytest.mark.unit]


class TestConfigManager:

    def test_get_int(self, monkeypatch):
        monkeypatch.setenv("FREEZE_EXPIRATION_HOUR", "3")
        assert ConfigManager("freeze_service").get_int("FREEZE_EXPIRATION_HOUR", 1) == 3

    def test_get_int_bad_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("FREEZE_EXPIRATION_HOUR", "three")
        assert ConfigManager("freeze_service").get_int("FREEZE_EXPIRATION_HOUR", 1) == 1

    def test_discover_service_env_wins(self, monkeypatch):
        monkeypatch.setenv("ACCOUNT_SERVICE_HOST", "accounts.internal")
        monkeypatch.setenv("ACCOUNT_SERVICE_PORT", "9000")

        host, port = ConfigManager("waitlist_service").discover_service(
            "account_service", "localhost", 8202, "ACCOUNT_SERVICE_HOST", "ACCOUNT_SERVICE_PORT"
        )

        assert (host, port) == ("accounts.internal", 9000)

    def test_discover_service_defaults(self, monkeypatch):
        monkeypatch.delenv("ACCOUNT_SERVICE_HOST", raising=False)
        monkeypatch.delenv("ACCOUNT_SERVICE_PORT", raising=False)

        host, port = ConfigManager("waitlist_service").discover_service(
            "account_service", "localhost", 8202, "ACCOUNT_SERVICE_HOST", "ACCOUNT_SERVICE_PORT"
        )

        assert (host, port) == ("localhost", 8202)
