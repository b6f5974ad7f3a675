"""
Account Service HTTP Client

Resolves a user's contact email from account_service.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class AccountClient:
    """Async HTTP client for account_service"""

    def __init__(self, config: Optional[ConfigManager] = None, base_url: Optional[str] = None):
        if base_url is None:
            if config is None:
                config = ConfigManager("waitlist_service")
            base_url = config.get("ACCOUNT_SERVICE_URL")
            if not base_url:
                host, port = config.discover_service(
                    service_name='account_service',
                    default_host='localhost',
                    default_port=8202,
                    env_host_key='ACCOUNT_SERVICE_HOST',
                    env_port_key='ACCOUNT_SERVICE_PORT',
                )
                base_url = f"http://{host}:{port}"
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=10.0)
        logger.info(f"AccountClient initialized with base_url: {self.base_url}")

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """User record, or None if missing or unreachable"""
        try:
            response = await self.client.get(
                f"{self.base_url}/api/v1/users/{user_id}",
                headers={"X-Internal-Call": "true"}
            )
            if response.status_code == 404:
                logger.info(f"User not found: {user_id}")
                return None
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error getting user {user_id}: {e.response.status_code}")
            return None
        except httpx.RequestError as e:
            logger.error(f"Request error getting user {user_id}: {e}")
            return None

    async def get_user_email(self, user_id: str) -> Optional[str]:
        user = await self.get_user(user_id)
        if not user:
            return None
        return user.get("email") or None

    async def close(self):
        await self.client.aclose()
        logger.info("AccountClient connection closed")


__all__ = ["AccountClient"]
