"""
Notification Service Client

Sends templated emails through notification_service.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class NotificationClient:
    """Client for notification_service"""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if base_url is None:
            if config is None:
                config = ConfigManager("waitlist_service")
            host, port = config.discover_service(
                service_name='notification_service',
                default_host='localhost',
                default_port=8270,
                env_host_key='NOTIFICATION_SERVICE_HOST',
                env_port_key='NOTIFICATION_SERVICE_PORT'
            )
            base_url = f"http://{host}:{port}"
        self.base_url = base_url.rstrip("/")
        self.timeout = 30.0
        # One short-lived AsyncClient per send; transport overrides the network layer
        self.transport = transport

    async def send(self, notification_type: str, to: str, data: Dict[str, Any]) -> bool:
        """
        Send one email.

        Args:
            notification_type: Template type, e.g. waitlist_notification
            to: Recipient address
            data: Template data

        Returns:
            True when notification_service accepted the message
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/api/v1/notifications/send",
                    json={"type": notification_type, "to": to, "data": data},
                )
                response.raise_for_status()
                return True

        except httpx.HTTPStatusError as e:
            logger.error(f"Error sending {notification_type}: {e.response.status_code} {e.response.text}")
            return False

        except httpx.RequestError as e:
            logger.error(f"Error sending {notification_type}: {e}")
            return False


__all__ = ["NotificationClient"]
